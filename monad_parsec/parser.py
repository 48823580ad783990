"""
Defines parsing functions and the `Parser` class that they instantiate.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from functools import partial, reduce
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from pytypeclass import Monad, MonadPlus
from pytypeclass.stateless_iterator import StatelessIterator

from monad_parsec.cursor import Cursor
from monad_parsec.outcome import Outcome
from monad_parsec.result import Result

S = TypeVar("S")
A_co = TypeVar("A_co", covariant=True)
A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")

_START = object()


@dataclass
class Parser(MonadPlus[A_co], Generic[S, A_co]):
    """
    Main class of the library. A `Parser` maps a starting `Cursor` to the lazy
    `Result` of every way it can succeed from there.

    >>> digit = item().filter(str.isdigit).map(int)
    >>> list(digit.parse_input("5").values())
    [5]
    >>> list(digit.parse_input("a").values())
    []

    Sequencing can also be written in do-notation:

    >>> def add():
    ...     left = yield digit
    ...     yield equals("+")
    ...     right = yield digit
    ...     yield Parser.return_(left + right)
    >>> list(Parser.do(add).parse_input("1+2").values())
    [3]
    """

    f: Callable[[Cursor[S]], Iterable[Outcome[S, A_co]]]

    def __ge__(self, f: Callable[[A_co], Monad[B]]) -> "Parser[S, B]":
        return self.bind(f)

    def __lshift__(self, other: "Parser[S, Any]") -> "Parser[S, A_co]":
        """
        Applies `self`, then `other`, keeping the output of `self`.

        >>> p = item() << end()
        >>> list(p.parse_input("a").values())
        ['a']
        >>> list(p.parse_input("ab").values())
        []
        """
        return self >= (lambda a: other >= (lambda _: Parser.return_(a)))

    def __or__(  # type: ignore[override]
        self: "Parser[S, A_co]",
        other: "Parser[S, B]",
    ) -> "Parser[S, A_co | B]":
        """
        Yields every outcome of `self`, followed by every outcome of `other`, both
        starting from the same cursor. `other` does not run until the outcomes of
        `self` are exhausted.

        >>> p = unit(1) | unit(2)
        >>> list(p.parse_input("abc").values())
        [1, 2]

        Taking only the first outcome leaves the second branch untouched:
        >>> def boom(cursor):
        ...     raise RuntimeError("not lazy")
        >>> (unit(1) | Parser(boom)).parse_input("").first().value
        1
        """

        def f(cursor: Cursor[S]) -> Result[Outcome[S, "A_co | B"]]:
            return self.parse(cursor) | other.parse(cursor)

        return Parser(f)

    def __rshift__(self, other: "Parser[S, B]") -> "Parser[S, B]":
        """
        Applies `self`, then `other`, keeping the output of `other`.

        >>> p = equals("(") >> item()
        >>> list(p.parse_input("(a").values())
        ['a']
        """
        return self >= (lambda _: other)

    def alt(self, other: "Parser[S, B]") -> "Parser[S, A_co | B]":
        return self | other

    def bind(self, f: Callable[[A_co], Monad[B]]) -> "Parser[S, B]":
        """
        Returns a new parser that

        1. applies `self`;
        2. for each outcome, in order, applies `f` to the value and runs the resulting
           parser on the remaining input.

        All outcomes that stem from one outcome of `self` come out together, in the
        order `f`'s parser produced them.

        >>> p = item() >= (lambda c: equals(c))  # a doubled symbol
        >>> list(p.parse_input("aa").values())
        ['a']
        >>> list(p.parse_input("ab").values())
        []
        """

        def h(outcome: Outcome[S, A_co]) -> Result[Outcome[S, B]]:
            y = f(outcome.value)
            assert isinstance(y, Parser), y
            return y.parse(outcome.cursor)

        def g(cursor: Cursor[S]) -> Result[Outcome[S, B]]:
            return self.parse(cursor) >= h

        return Parser(g)

    def bind_with(
        self, k: Callable[[A_co], "Parser[S, B]"], combine: Callable[[A_co, B], C]
    ) -> "Parser[S, C]":
        """
        Applies `self`, then `k` of its output, and combines both outputs.

        >>> p = item().bind_with(lambda _: item(), lambda a, b: b + a)
        >>> list(p.parse_input("ab").values())
        ['ba']
        """
        return self >= (lambda a: k(a) >= (lambda b: Parser.return_(combine(a, b))))

    def chainl1(
        self: "Parser[S, A]", op: "Parser[S, Callable[[A, A], A]]"
    ) -> "Parser[S, A]":
        """
        Parses one or more `self` separated by `op` and folds them from the left with
        the functions output by `op`. The longest chain comes first.

        >>> digit = item().filter(str.isdigit).map(int)
        >>> minus = equals("-").map(lambda _: operator.sub)
        >>> list(digit.chainl1(minus).parse_input("9-3-2").values())
        [4, 6, 9]
        """

        def step(acc: A) -> "Parser[S, A]":
            return op >= (lambda f: self.map(lambda b: f(acc, b)))

        def rest(acc: A) -> "Parser[S, A]":
            return Parser(lambda cursor: _longest_first(acc, cursor, step))

        return self >= rest

    @classmethod
    def do(cls, generator: Callable[[], Any]) -> "Parser[Any, Any]":  # type: ignore[override]
        """
        Runs a generator of parsers as a sequence of binds. Unlike
        `pytypeclass.Monad.do`, bound values may be `None`.

        >>> def signed():
        ...     sign = yield equals("-").optional()
        ...     n = yield item().filter(str.isdigit).map(int)
        ...     yield end()
        ...     yield Parser.return_(n if sign is None else -n)
        >>> list(Parser.do(signed).parse_input("-5").values())
        [-5]
        """

        def f(a: Any, it: StatelessIterator) -> "Parser[Any, Any]":
            try:
                if a is _START:
                    ma, it2 = it.__next__()
                else:
                    ma, it2 = it.send(a)
            except StopIteration:
                if a is _START:
                    raise RuntimeError("Cannot use an empty iterator with do.")
                return cls.return_(a)
            return ma.bind(partial(f, it=it2))

        return f(_START, StatelessIterator(generator))

    def filter(self, predicate: Callable[[A_co], bool]) -> "Parser[S, A_co]":
        """
        Keeps the outcomes of `self` whose value satisfies `predicate`, in order.

        >>> p = (unit(1) | unit(2) | unit(3)).filter(lambda x: x != 2)
        >>> list(p.parse_input("").values())
        [1, 3]
        """

        def f(cursor: Cursor[S]) -> Result[Outcome[S, A_co]]:
            return self.parse(cursor).filter(lambda outcome: predicate(outcome.value))

        return Parser(f)

    def many(self) -> "Parser[S, List[A_co]]":
        """
        Applies `self` zero or more times (like `*` in regexes), longest match first.
        `self` must consume input whenever it succeeds, or this will not terminate.

        >>> p = equals("a").many()
        >>> list(p.parse_input("aab").values())
        [['a', 'a'], ['a'], []]

        Repetition does not recurse, so long inputs are fine:
        >>> len((equals("a").many() << end()).parse_input("a" * 2000).first().value)
        2000
        """

        def step(acc: Any) -> "Parser[S, Any]":
            return self.map(lambda a: (acc, a))

        return Parser(lambda cursor: _longest_first((), cursor, step)).map(_unwind)

    def many1(self) -> "Parser[S, List[A_co]]":
        """
        Applies `self` one or more times (like `+` in regexes), longest match first.

        >>> p = equals("a").many1() << end()
        >>> list(p.parse_input("aa").values())
        [['a', 'a']]
        >>> list(p.parse_input("").values())
        []
        """
        return self.many().filter(bool)

    def map(self, f: Callable[[A_co], B]) -> "Parser[S, B]":
        return self >= (lambda a: Parser.return_(f(a)))

    def optional(self, default: Optional[B] = None) -> "Parser[S, A_co | Optional[B]]":
        """
        Tries `self` and also succeeds with `default` without consuming input.

        >>> p = equals("-").optional("+") >> item()
        >>> list(p.parse_input("-1").values())
        ['1', '-']
        """
        return self | Parser.return_(default)

    def parse(self, cursor: Cursor[S]) -> Result[Outcome[S, A_co]]:
        """
        Applies the parser at `cursor`. Nothing runs until the `Result` is iterated.
        """
        return Result(lambda: self.f(cursor))

    def parse_input(self, symbols: Iterable[S]) -> Result[Outcome[S, A_co]]:
        """
        Wraps `symbols` in a fresh `Cursor` and applies the parser to it.
        """
        return self.parse(Cursor.make(symbols))

    @classmethod
    def return_(cls, a: A) -> "Parser[Any, A]":  # type: ignore[override]
        """
        Consumes none of the input and always outputs `a`.

        >>> outcome = Parser.return_(1).parse_input("abc").only()
        >>> outcome.value, outcome.cursor.position
        (1, 0)
        """

        def f(cursor: Cursor[Any]) -> Iterable[Outcome[Any, A]]:
            yield Outcome(a, cursor)

        return Parser(f)

    @classmethod
    def zero(cls) -> "Parser[Any, Any]":  # type: ignore[override]
        """
        This parser always fails.

        >>> Parser.zero().parse_input("a").is_empty()
        True
        """

        def f(cursor: Cursor[Any]) -> Iterable[Outcome[Any, Any]]:
            return ()

        return Parser(f)


def _longest_first(
    value: A, cursor: Cursor[S], step: Callable[[A], "Parser[S, A]"]
) -> Iterator[Outcome[S, A]]:
    """
    Repeatedly applies `step(value)` from `cursor`, depth first, and yields each
    value once everything reachable past it has been yielded. An explicit stack
    keeps long repetitions off the call stack.
    """
    stack = [(value, cursor, iter(step(value).parse(cursor)))]
    while stack:
        value, cursor, outcomes = stack[-1]
        outcome = next(outcomes, None)
        if outcome is None:
            stack.pop()
            yield Outcome(value, cursor)
        else:
            stack.append(
                (
                    outcome.value,
                    outcome.cursor,
                    iter(step(outcome.value).parse(outcome.cursor)),
                )
            )


def _unwind(cell: Any) -> List[Any]:
    # cells are (previous cell, value) pairs ending in ()
    values = []
    while cell:
        cell, value = cell
        values.append(value)
    return values[::-1]


def alt(*parsers: "Parser[S, A]") -> "Parser[S, A]":
    """
    Ordered alternation of any number of parsers. With no parsers, always fails.

    >>> list(alt(unit(1), unit(2), unit(3)).parse_input("").values())
    [1, 2, 3]
    """
    if not parsers:
        return fail()
    return reduce(operator.or_, parsers)


def bind(parser: "Parser[S, A]", f: Callable[[A], "Parser[S, B]"]) -> "Parser[S, B]":
    return parser.bind(f)


def end(default: Optional[A] = None) -> "Parser[Any, Optional[A]]":
    """
    Succeeds with `default`, consuming nothing, exactly when no input is left.

    >>> outcome = end("done").parse_input("").only()
    >>> outcome.value, outcome.cursor.exhausted
    ('done', True)
    >>> end().parse_input("a").is_empty()
    True
    """

    def f(cursor: Cursor[Any]) -> Iterable[Outcome[Any, Optional[A]]]:
        if cursor.advance() is None:
            yield Outcome(default, cursor)

    return Parser(f)


def equals(symbol: S) -> "Parser[S, S]":
    """
    Consumes the next symbol if it is equal to `symbol`.

    >>> list(equals("x").parse_input("xy").values())
    ['x']
    >>> equals("x").parse_input("yx").is_empty()
    True
    """
    return sat(lambda s: s == symbol)


def fail() -> "Parser[Any, Any]":
    return Parser.zero()


def item() -> "Parser[S, S]":
    """
    Consumes a single symbol and outputs it. One of the lowest level building blocks for parsers.

    >>> outcome = item().parse_input("ab").only()
    >>> outcome.value, list(outcome.remaining())
    ('a', ['b'])
    >>> item().parse_input("").is_empty()
    True
    """

    def f(cursor: Cursor[S]) -> Iterable[Outcome[S, S]]:
        if not cursor.exhausted:
            following = cursor.advance()
            assert following is not None
            yield Outcome(cursor.current, following)  # type: ignore[arg-type]

    return Parser(f)


def sat(predicate: Callable[[S], bool]) -> "Parser[S, S]":
    """
    A wrapper around `Parser.filter` that uses `item` to consume a symbol and applies
    `predicate` to it.

    >>> list(sat(str.isupper).many().parse_input("ABc").values())
    [['A', 'B'], ['A'], []]
    """
    return item().filter(predicate)


def select(parser: "Parser[S, A]", f: Callable[[A], B]) -> "Parser[S, B]":
    return parser.map(f)


def unit(a: A) -> "Parser[Any, A]":
    return Parser.return_(a)


def where(parser: "Parser[S, A]", predicate: Callable[[A], bool]) -> "Parser[S, A]":
    return parser.filter(predicate)
