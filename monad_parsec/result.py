"""
Defines the `Result` dataclass, the lazy sequence of outcomes output by parsers.
An empty `Result` means that the input did not match; more than one outcome means that it matched ambiguously.
"""
from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterable, Iterator, Type, TypeVar

from pytypeclass import Monad, MonadPlus

from monad_parsec.error import AmbiguousParseError, NoParseError, describe

A_co = TypeVar("A_co", covariant=True)
A = TypeVar("A")
B = TypeVar("B")


@dataclass(eq=False)
class Result(MonadPlus[A_co]):
    """
    `get` is a recipe: it is called each time the `Result` is iterated, and never before.

    >>> r = Result.return_(1) | Result.return_(2)
    >>> list(r)
    [1, 2]
    >>> list(r >= (lambda x: Result.return_(x) | Result.return_(-x)))
    [1, -1, 2, -2]
    >>> list(Result.zero())
    []
    """

    get: Callable[[], Iterable[A_co]]

    def __iter__(self) -> Iterator[A_co]:
        return iter(self.get())

    def __or__(self, other: "Result[B]") -> "Result[A_co | B]":  # type: ignore[override]
        def g() -> Iterator["A_co | B"]:
            yield from self
            yield from other

        return Result(g)

    def __ge__(self, f: Callable[[A_co], Monad[B]]) -> "Result[B]":
        return self.bind(f)

    def bind(self, f: Callable[[A_co], Monad[B]]) -> "Result[B]":
        def g() -> Iterator[B]:
            for a in self:
                y = f(a)
                assert isinstance(y, Result), y
                yield from y

        return Result(g)

    def filter(self, predicate: Callable[[A_co], bool]) -> "Result[A_co]":
        return Result(lambda: (a for a in self if predicate(a)))

    def first(self) -> A_co:
        """
        >>> Result.zero().first()
        Traceback (most recent call last):
        ...
        monad_parsec.error.NoParseError: Input did not match.
        """
        for a in self:
            return a
        raise NoParseError("Input did not match.")

    def is_empty(self) -> bool:
        return not any(True for _ in islice(self, 1))

    def only(self) -> A_co:
        """
        Returns the unique outcome, pulling no more than two.
        """
        head = list(islice(self, 2))
        if not head:
            raise NoParseError("Input did not match.")
        if len(head) > 1:
            first, second = head
            raise AmbiguousParseError(
                f"Input matched ambiguously: {describe(first)} or {describe(second)}.",
                first=first,
                second=second,
            )
        [a] = head
        return a

    def values(self) -> Iterator:
        for outcome in self:
            yield outcome.value  # type: ignore[attr-defined]

    @classmethod
    def return_(cls: "Type[Result[A]]", a: A) -> "Result[A]":  # type: ignore[override]
        return Result(lambda: (a,))

    @classmethod
    def zero(cls: "Type[Result[A]]") -> "Result[A]":  # type: ignore[override]
        return Result(tuple)
