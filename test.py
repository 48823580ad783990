#! /usr/bin/env python
import doctest
import itertools
import operator
import threading
import unittest
from abc import ABC, abstractmethod

import monad_parsec
from monad_parsec import (
    AmbiguousParseError,
    Cursor,
    NoParseError,
    Outcome,
    Parser,
    Result,
    alt,
    bind,
    cursor,
    end,
    equals,
    error,
    fail,
    item,
    parser,
    result,
    sat,
    select,
    unit,
    where,
)


def load_tests(_, tests, __):
    for mod in [
        parser,
        cursor,
        error,
        result,
        monad_parsec,
    ]:
        tests.addTests(doctest.DocTestSuite(mod))
    return tests


def parses(p: Parser, symbols):
    return [(o.value, o.cursor.position) for o in p.parse_input(symbols)]


digit = item().filter(str.isdigit).map(int)


class MonadLawTester(ABC):
    @abstractmethod
    def assertEqual(self, a, b):
        raise NotImplementedError

    def f1(self, x):
        unwrapped = self.unwrap(x)
        if isinstance(unwrapped, int):
            return self.m(unwrapped + 1)
        else:
            return self.m(unwrapped)

    def f2(self, x):
        unwrapped = self.unwrap(x)
        if isinstance(unwrapped, int):
            return self.m(unwrapped * 2)
        else:
            return self.m(unwrapped)

    @staticmethod
    @abstractmethod
    def m(a):
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def return_(a):
        raise NotImplementedError

    @staticmethod
    def unwrapped_values():
        return [1]

    @staticmethod
    @abstractmethod
    def wrapped_values():
        raise NotImplementedError

    def test_law1(self):
        for a in self.unwrapped_values():
            x1 = self.return_(a) >= self.f1
            x2 = self.f1(a)
            self.assertEqual(self.run(x1), self.run(x2))

    def test_law2(self):
        for p in self.wrapped_values():
            p = self.m(p)
            a = p >= self.return_
            self.assertEqual(self.run(a), self.run(p))

    def test_law3(self):
        for p in self.wrapped_values():
            p = self.m(p)
            x1 = p >= (lambda a: self.f1(a) >= self.f2)
            x2 = (p >= self.f1) >= self.f2
            self.assertEqual(self.run(x1), self.run(x2))

    @staticmethod
    @abstractmethod
    def unwrap(x):
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def run(x):
        raise NotImplementedError


class TestParserLaws(MonadLawTester, unittest.TestCase):
    INPUT = "12+3"

    @staticmethod
    def m(a):
        if isinstance(a, Parser):
            return a
        # consume one symbol so that the laws are checked against moving cursors
        return item() >> unit(a) | unit(a)

    @staticmethod
    def return_(a):
        return Parser.return_(a)

    @staticmethod
    def wrapped_values():
        return [
            digit,
            digit.many(),
            item() | item() >> item(),
            fail(),
            end(0),
            unit(3) | unit(4),
        ]

    @staticmethod
    def unwrap(x):
        return x

    @classmethod
    def run(cls, x):
        return parses(x, cls.INPUT)


class TestResultLaws(MonadLawTester, unittest.TestCase):
    @staticmethod
    def m(a):
        if isinstance(a, Result):
            return a
        return Result.return_(a) | Result.return_(-a)

    @staticmethod
    def return_(a):
        return Result.return_(a)

    @staticmethod
    def wrapped_values():
        return [Result.zero(), Result.return_(2), Result.return_(1) | Result.return_(5)]

    @staticmethod
    def unwrap(x):
        return x

    @staticmethod
    def run(x):
        return list(x)


class TestCursor(unittest.TestCase):
    def test_advance_is_memoized(self):
        c = Cursor.make([1, 2, 3])
        self.assertIs(c.advance(), c.advance())
        self.assertIs(c.advance().advance(), c.advance().advance())

    def test_single_pass_source_read_once(self):
        reads = []

        def symbols():
            for s in "abc":
                reads.append(s)
                yield s

        c = Cursor.make(symbols())
        for _ in range(3):
            self.assertEqual(list(c.remaining()), ["a", "b", "c"])
        self.assertEqual(reads, ["a", "b", "c"])

    def test_exhausted(self):
        c = Cursor.make([])
        self.assertTrue(c.exhausted)
        self.assertIsNone(c.current)
        self.assertIsNone(c.advance())
        self.assertEqual(list(c.remaining()), [])

    def test_none_symbols_are_not_end_of_input(self):
        c = Cursor.make([None])
        self.assertFalse(c.exhausted)
        self.assertIsNone(c.current)
        self.assertTrue(c.advance().exhausted)
        self.assertEqual(parses(item(), [None]), [(None, 1)])

    def test_concurrent_first_advance(self):
        reads = []
        lock = threading.Lock()

        def symbols():
            for s in range(100):
                with lock:
                    reads.append(s)
                yield s

        start = Cursor.make(symbols())
        seen = []

        def walk():
            chain = []
            c = start
            while c is not None:
                chain.append(c)
                c = c.advance()
            seen.append(chain)

        threads = [threading.Thread(target=walk) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(reads, list(range(100)))
        first, *others = seen
        for chain in others:
            self.assertEqual(len(chain), len(first))
            for a, b in zip(chain, first):
                self.assertIs(a, b)


class TestPrimitives(unittest.TestCase):
    def test_unit(self):
        self.assertEqual(parses(unit("x"), "abc"), [("x", 0)])
        self.assertEqual(parses(unit("x"), ""), [("x", 0)])

    def test_fail(self):
        self.assertEqual(parses(fail(), "abc"), [])
        self.assertEqual(parses(fail(), ""), [])

    def test_item(self):
        self.assertEqual(parses(item(), "abc"), [("a", 1)])
        self.assertEqual(parses(item(), ""), [])

    def test_item_on_exhausted_cursor(self):
        c = Cursor.make("a").advance()
        self.assertEqual(list(item().parse(c)), [])

    def test_end(self):
        self.assertEqual(parses(end(), ""), [(None, 0)])
        self.assertEqual(parses(end("stop"), ""), [("stop", 0)])
        self.assertEqual(parses(end(), "a"), [])
        self.assertEqual(parses(item() >> end(True), "a"), [(True, 1)])

    def test_outcome_keeps_cursor(self):
        c = Cursor.make("ab")
        [outcome] = item().parse(c)
        self.assertEqual(outcome, Outcome("a", c.advance()))
        self.assertIs(outcome.cursor, c.advance())


class TestCombinators(unittest.TestCase):
    def test_bind_order(self):
        p = (unit(1) | unit(2)) >= (lambda x: unit(x * 10) | unit(x * 100))
        self.assertEqual([v for v, _ in parses(p, "")], [10, 100, 20, 200])

    def test_bind_free_function(self):
        p = bind(item(), lambda c: equals(c))
        self.assertEqual(parses(p, "xx"), [("x", 2)])
        self.assertEqual(parses(p, "xy"), [])

    def test_bind_with(self):
        p = digit.bind_with(lambda _: digit, lambda a, b: 10 * a + b)
        self.assertEqual(parses(p, "42"), [(42, 2)])

    def test_map_and_select(self):
        self.assertEqual(parses(item().map(str.upper), "ab"), [("A", 1)])
        self.assertEqual(parses(select(item(), str.upper), "ab"), [("A", 1)])
        p = item() | item() >> item()
        self.assertEqual(len(parses(p.map(str.upper), "ab")), len(parses(p, "ab")))

    def test_filter_and_where(self):
        p = alt(*[unit(i) for i in range(10)])
        odd = lambda x: x % 2 == 1  # noqa: E731
        self.assertEqual([v for v, _ in parses(p.filter(odd), "")], [1, 3, 5, 7, 9])
        self.assertEqual(parses(where(p, odd), ""), parses(p.filter(odd), ""))
        self.assertEqual(parses(where(p, lambda _: False), ""), [])

    def test_alternation_order(self):
        left = item() | item() >> item()
        right = unit("r")
        self.assertEqual(
            parses(left | right, "ab"), parses(left, "ab") + parses(right, "ab")
        )
        self.assertEqual(parses(left.alt(right), "ab"), parses(left | right, "ab"))

    def test_alt_does_not_short_circuit(self):
        p = equals("a") | item()
        self.assertEqual(parses(p, "a"), [("a", 1), ("a", 1)])

    def test_alt_without_parsers_fails(self):
        self.assertEqual(parses(alt(), "a"), [])

    def test_alt_right_branch_is_lazy(self):
        seen = []

        def right(cursor):
            seen.append(cursor)
            yield Outcome("right", cursor)

        p = unit("left") | Parser(right)
        outcomes = p.parse_input("abc")
        self.assertEqual(seen, [])
        self.assertEqual(next(iter(outcomes)).value, "left")
        self.assertEqual(seen, [])
        self.assertEqual(list(outcomes.values()), ["left", "right"])
        self.assertEqual(len(seen), 1)

    def test_bind_continuation_is_lazy(self):
        calls = []

        def k(x):
            calls.append(x)
            return unit(x)

        p = (unit(1) | unit(2) | unit(3)) >= k
        it = iter(p.parse_input(""))
        self.assertEqual(calls, [])
        next(it)
        self.assertEqual(calls, [1])

    def test_sequence_operators(self):
        self.assertEqual(parses(equals("(") >> item() << equals(")"), "(a)"), [("a", 3)])

    def test_many(self):
        p = sat(str.isdigit).many()
        self.assertEqual(
            parses(p, "12a"), [(["1", "2"], 2), (["1"], 1), ([], 0)]
        )
        self.assertEqual(parses(digit.many1(), "a"), [])

    def test_optional(self):
        p = equals("-").optional()
        self.assertEqual(parses(p, "-"), [("-", 1), (None, 0)])
        self.assertEqual(parses(p, "+"), [(None, 0)])

    def test_chainl1_is_left_associative(self):
        minus = equals("-").map(lambda _: operator.sub)
        p = digit.chainl1(minus) << end()
        self.assertEqual(parses(p, "8-4-2"), [(2, 5)])

    def test_do(self):
        def pair():
            a = yield item()
            b = yield item()
            yield Parser.return_(b + a)

        self.assertEqual(parses(Parser.do(pair), "xyz"), [("yx", 2)])

    def test_do_binds_none(self):
        def signed():
            sign = yield equals("-").optional()
            n = yield digit
            yield end()
            yield Parser.return_(n if sign is None else -n)

        self.assertEqual(parses(Parser.do(signed), "5"), [(5, 1)])
        self.assertEqual(parses(Parser.do(signed), "-5"), [(-5, 2)])

        def nothing():
            x = yield unit(None)
            yield Parser.return_(x is None)

        self.assertEqual(parses(Parser.do(nothing), ""), [(True, 0)])

    def test_do_without_parsers(self):
        def empty():
            return
            yield

        with self.assertRaises(RuntimeError):
            Parser.do(empty)

    def test_long_repetition(self):
        n = 3000
        ones = (digit.many() << end()).parse_input("1" * n).first().value
        self.assertEqual(ones, [1] * n)
        self.assertEqual(
            len((digit.many1() << end()).parse_input("1" * n).only().value), n
        )
        plus = equals("+").map(lambda _: operator.add)
        total = (digit.chainl1(plus) << end()).parse_input("+".join("1" * n))
        self.assertEqual(total.only().value, n)

    def test_many1_order(self):
        self.assertEqual(
            parses(equals("a").many1(), "aab"), [(["a", "a"], 2), (["a"], 1)]
        )

    def test_parse_is_reusable(self):
        c = Cursor.make(iter("12"))
        p = digit.many()
        self.assertEqual(list(p.parse(c).values()), list(p.parse(c).values()))
        outcomes = p.parse(c)
        self.assertEqual(list(outcomes.values()), list(outcomes.values()))


class TestResult(unittest.TestCase):
    def test_first(self):
        self.assertEqual((unit(1) | unit(2)).parse_input("").first().value, 1)
        with self.assertRaises(NoParseError):
            fail().parse_input("").first()

    def test_only(self):
        self.assertEqual(digit.parse_input("7").only().value, 7)
        with self.assertRaises(NoParseError):
            digit.parse_input("x").only()
        with self.assertRaises(AmbiguousParseError) as context:
            (unit(1) | unit(2)).parse_input("").only()
        self.assertEqual(context.exception.first.value, 1)
        self.assertEqual(context.exception.second.value, 2)

    def test_only_pulls_two_outcomes(self):
        def many_ones(cursor):
            while True:
                yield Outcome(1, cursor)

        with self.assertRaises(AmbiguousParseError):
            Parser(many_ones).parse_input("").only()

    def test_ambiguity_message_is_bounded(self):
        p = unit(1) | unit(2)
        with self.assertRaises(AmbiguousParseError) as context:
            p.parse_input("a").only()
        self.assertEqual(
            context.exception.usage,
            "Input matched ambiguously: 1 (leaving ['a']) or 2 (leaving ['a']).",
        )
        with self.assertRaises(AmbiguousParseError) as context:
            p.parse_input(itertools.count()).only()
        leaving = "[0, 1, 2, 3, 4, 5, 6, 7, 8, 9, ...]"
        self.assertEqual(
            context.exception.usage,
            f"Input matched ambiguously: 1 (leaving {leaving}) or 2 (leaving {leaving}).",
        )

    def test_results_compare_by_identity(self):
        r = Result.zero()
        self.assertEqual(r, r)
        self.assertNotEqual(Result.zero(), Result.zero())
        self.assertNotEqual(unit(1).parse_input(""), unit(1).parse_input(""))
        self.assertEqual(len({r, r}), 1)

    def test_is_empty(self):
        self.assertTrue(fail().parse_input("a").is_empty())
        self.assertFalse(item().parse_input("a").is_empty())


class TestScenarios(unittest.TestCase):
    def test_digit(self):
        [outcome] = digit.parse_input("5")
        self.assertEqual(outcome.value, 5)
        self.assertTrue(outcome.cursor.exhausted)
        self.assertEqual(parses(digit, "a"), [])

    def test_binary_operator(self):
        operators = {"+": operator.add, "*": operator.mul}
        p = digit >= (
            lambda left: item().filter(lambda c: c in operators)
            >= (lambda op: digit.map(lambda right: operators[op](left, right)))
        )
        self.assertEqual(parses(p, "1+2"), [(3, 3)])
        self.assertEqual(parses(p, "2*3"), [(6, 3)])
        self.assertEqual(parses(p, "2-3"), [])

    def test_ambiguity(self):
        c = Cursor.make("abc")
        outcomes = list(alt(unit(1), unit(2)).parse(c))
        self.assertEqual([o.value for o in outcomes], [1, 2])
        for o in outcomes:
            self.assertIs(o.cursor, c)


if __name__ == "__main__":
    unittest.main()
