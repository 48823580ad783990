from monad_parsec.cursor import Cursor
from monad_parsec.error import AmbiguousParseError, NoParseError, ParseError
from monad_parsec.outcome import Outcome
from monad_parsec.parser import (
    Parser,
    alt,
    bind,
    end,
    equals,
    fail,
    item,
    sat,
    select,
    unit,
    where,
)
from monad_parsec.result import Result

__all__ = [
    "Parser",
    "alt",
    "bind",
    "end",
    "equals",
    "fail",
    "item",
    "sat",
    "select",
    "unit",
    "where",
    "Cursor",
    "Outcome",
    "Result",
    "ParseError",
    "NoParseError",
    "AmbiguousParseError",
]
