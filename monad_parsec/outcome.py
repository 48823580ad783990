"""
An `Outcome` is one successful parse: the value produced and the cursor left after producing it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

from monad_parsec.cursor import Cursor

S = TypeVar("S")
A_co = TypeVar("A_co", covariant=True)


@dataclass(frozen=True)
class Outcome(Generic[S, A_co]):
    """
    Parameters
    ----------
    value : A_co
        Value produced by the parser
    cursor : Cursor[S]
        Input remaining after producing `value`
    """

    value: A_co
    cursor: Cursor[S]

    def remaining(self) -> Iterator[S]:
        return self.cursor.remaining()
