"""
Defines `Cursor`, an immutable position over a (possibly single-pass) stream of symbols.
"""
from __future__ import annotations

import logging
import threading
from typing import Generic, Iterable, Iterator, Optional, TypeVar

S = TypeVar("S")

logger = logging.getLogger(__name__)


class _Source(Generic[S]):
    """
    The underlying producer shared by every cursor of one chain.
    Reads are serialized by `lock`.
    """

    def __init__(self, symbols: Iterable[S]):
        self.iterator: Iterator[S] = iter(symbols)
        self.lock = threading.Lock()

    def read(self, position: int) -> "Cursor[S]":
        try:
            symbol = next(self.iterator)
        except StopIteration:
            logger.debug("source exhausted at position %d", position)
            return Cursor(self, None, exhausted=True, position=position)
        logger.debug("read %r at position %d", symbol, position)
        return Cursor(self, symbol, exhausted=False, position=position)


class Cursor(Generic[S]):
    """
    A position in the input. The symbol at the position is fixed on construction;
    the successor is computed on first use of `advance` and memoized, so that
    every branch advancing past this point sees the very same remaining stream.

    >>> c = Cursor.make("ab")
    >>> c.current
    'a'
    >>> c.advance() is c.advance()
    True
    >>> c.advance().current
    'b'
    >>> c.advance().advance().exhausted
    True
    >>> print(c.advance().advance().advance())
    None
    >>> list(c.remaining())
    ['a', 'b']
    """

    def __init__(
        self, source: _Source[S], current: Optional[S], exhausted: bool, position: int
    ):
        self._source = source
        self._current = current
        self._exhausted = exhausted
        self._position = position
        self._resolved = exhausted
        self._next: "Optional[Cursor[S]]" = None

    def __repr__(self) -> str:
        if self._exhausted:
            return f"Cursor(position={self._position}, exhausted)"
        return f"Cursor(position={self._position}, current={self._current!r})"

    @classmethod
    def make(cls, symbols: Iterable[S]) -> "Cursor[S]":
        """
        Wraps `symbols` and reads the first symbol. `symbols` may be a single-pass
        iterator: each symbol is pulled from it exactly once.
        """
        return _Source(symbols).read(position=0)

    @property
    def current(self) -> Optional[S]:
        """
        The symbol at this position, or `None` if exhausted.
        Use `exhausted` to tell a `None` symbol apart from end of input.
        """
        return self._current

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def position(self) -> int:
        return self._position

    def advance(self) -> "Optional[Cursor[S]]":
        """
        The cursor one symbol later, or `None` if this cursor is exhausted.
        """
        if not self._resolved:
            with self._source.lock:
                if not self._resolved:
                    self._next = self._source.read(self._position + 1)
                    self._resolved = True
        return self._next

    def remaining(self) -> Iterator[S]:
        cursor: Optional[Cursor[S]] = self
        while cursor is not None and not cursor.exhausted:
            yield cursor.current  # type: ignore[misc]
            cursor = cursor.advance()
