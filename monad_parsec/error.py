"""
Defines errors raised when a caller asks a `Result` for a single parse.
The combinators themselves never raise: no parse is an empty `Result`.
"""
from dataclasses import dataclass
from itertools import islice
from typing import Any, Generic, TypeVar

A = TypeVar("A")

MAX_SHOWN = 10


@dataclass
class ParseError(Exception):
    usage: str


@dataclass
class NoParseError(ParseError):
    pass


@dataclass
class AmbiguousParseError(ParseError, Generic[A]):
    first: A
    second: A


def describe(outcome: Any) -> str:
    """
    Shows the value of `outcome` and at most `MAX_SHOWN` of the symbols after it.

    >>> from monad_parsec.cursor import Cursor
    >>> from monad_parsec.outcome import Outcome
    >>> describe(Outcome(1, Cursor.make("ab")))
    "1 (leaving ['a', 'b'])"
    >>> describe(Outcome(1, Cursor.make("x" * 20)))
    "1 (leaving ['x', 'x', 'x', 'x', 'x', 'x', 'x', 'x', 'x', 'x', ...])"
    """
    shown = [repr(s) for s in islice(outcome.remaining(), MAX_SHOWN + 1)]
    if len(shown) > MAX_SHOWN:
        shown[MAX_SHOWN:] = ["..."]
    return f"{outcome.value!r} (leaving [{', '.join(shown)}])"
