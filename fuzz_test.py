import sys
from itertools import takewhile
from random import Random
from typing import Any, Iterator, List, NamedTuple

from hypothesis import given, note, register_random, settings
from hypothesis import strategies as st

from monad_parsec import Cursor, Outcome, Parser, alt, end, equals, fail, item, sat, unit

SYMBOLS = "ab1+"
MAX_INPUT = 6
MAX_LEAVES = 4


class StOutput(NamedTuple):
    parser: Parser
    repr: str


def outcomes(parser: Parser, symbols: List[str]) -> List[Any]:
    return [(o.value, o.cursor.position) for o in parser.parse_input(symbols)]


st_symbol = st.sampled_from(SYMBOLS)
st_input = st.lists(st_symbol, max_size=MAX_INPUT)
st_value = st.integers(min_value=-3, max_value=3) | st_symbol


st_item = st.just(StOutput(parser=item(), repr="item()"))


@st.composite
def st_equals(draw) -> StOutput:
    s = draw(st_symbol)
    return StOutput(parser=equals(s), repr=f"equals({s!r})")


@st.composite
def st_sat(draw) -> StOutput:
    allowed = draw(st.sets(st_symbol))
    return StOutput(
        parser=sat(lambda s: s in allowed), repr=f"sat(lambda s: s in {allowed!r})"
    )


@st.composite
def st_unit(draw) -> StOutput:
    a = draw(st_value)
    return StOutput(parser=unit(a), repr=f"unit({a!r})")


@st.composite
def st_end(draw) -> StOutput:
    a = draw(st_value)
    return StOutput(parser=end(a), repr=f"end({a!r})")


st_fail = st.just(StOutput(parser=fail(), repr="fail()"))


@st.composite
def st_alt(draw, _st_parser) -> StOutput:
    left, left_repr = draw(_st_parser)
    right, right_repr = draw(_st_parser)
    return StOutput(parser=left | right, repr=f"({left_repr} | {right_repr})")


@st.composite
def st_sequence(draw, _st_parser) -> StOutput:
    left, left_repr = draw(_st_parser)
    right, right_repr = draw(_st_parser)
    keep_left = draw(st.booleans())
    if keep_left:
        return StOutput(parser=left << right, repr=f"({left_repr} << {right_repr})")
    return StOutput(parser=left >> right, repr=f"({left_repr} >> {right_repr})")


@st.composite
def st_bind(draw, _st_parser) -> StOutput:
    parser, repr = draw(_st_parser)
    k, k_repr = draw(st_continuation(_st_parser))
    return StOutput(parser=parser >= k, repr=f"({repr} >= {k_repr})")


@st.composite
def st_map(draw, _st_parser) -> StOutput:
    parser, repr = draw(_st_parser)
    return StOutput(parser=parser.map(lambda a: (a,)), repr=f"{repr}.map(tuple)")


@st.composite
def st_filter(draw, _st_parser) -> StOutput:
    parser, repr = draw(_st_parser)
    predicate, predicate_repr = draw(st_predicate())
    return StOutput(
        parser=parser.filter(predicate), repr=f"{repr}.filter({predicate_repr})"
    )


@st.composite
def st_many(draw) -> StOutput:
    # only parsers that consume on success may be repeated
    parser, repr = draw(st_item | st_equals() | st_sat())
    if draw(st.booleans()):
        return StOutput(parser=parser.many1(), repr=f"{repr}.many1()")
    return StOutput(parser=parser.many(), repr=f"{repr}.many()")


@st.composite
def st_predicate(draw):
    reprs = [repr(v) for v in [*range(-3, 4), *SYMBOLS]]
    accepted = draw(st.sets(st.sampled_from(reprs)))

    def predicate(a: Any) -> bool:
        return repr(a) in accepted or len(repr(a)) > 4

    return predicate, f"accepts({sorted(accepted)})"


@st.composite
def st_continuation(draw, _st_parser):
    """
    A continuation that chooses between two parsers depending on its argument and
    pairs that argument with the chosen parser's output.
    """
    (p, p_repr), (q, q_repr) = draw(_st_parser), draw(_st_parser)

    def k(a: Any) -> Parser:
        chosen = p if len(repr(a)) % 2 else q
        return chosen.map(lambda b: (a, b))

    return k, f"(lambda a: {p_repr} if odd else {q_repr})"


st_simple_parser = st.deferred(
    lambda: st_item
    | st_equals()
    | st_sat()
    | st_unit()
    | st_end()
    | st_fail
    | st_many()
)

st_parser = st.recursive(
    st_simple_parser,
    lambda p: st_alt(p) | st_sequence(p) | st_bind(p) | st_map(p) | st_filter(p),
    max_leaves=MAX_LEAVES,
)


@settings(deadline=2000)
@given(st_value, st_continuation(st_parser), st_input)
def test_left_identity(a, continuation, symbols):
    k, repr = continuation
    note(repr)
    assert outcomes(unit(a) >= k, symbols) == outcomes(k(a), symbols)


@settings(deadline=2000)
@given(st_parser, st_input)
def test_right_identity(parser_with_repr, symbols):
    parser, repr = parser_with_repr
    note(repr)
    assert outcomes(parser >= unit, symbols) == outcomes(parser, symbols)


@settings(deadline=2000)
@given(st_parser, st_continuation(st_parser), st_continuation(st_parser), st_input)
def test_associativity(parser_with_repr, f_with_repr, g_with_repr, symbols):
    parser, repr = parser_with_repr
    f, f_repr = f_with_repr
    g, g_repr = g_with_repr
    note(f"{repr} >= {f_repr} >= {g_repr}")
    nested_left = (parser >= f) >= g
    nested_right = parser >= (lambda a: f(a) >= g)
    assert outcomes(nested_left, symbols) == outcomes(nested_right, symbols)


@settings(deadline=2000)
@given(st_parser, st_parser, st_input)
def test_alternation_ordering(left_with_repr, right_with_repr, symbols):
    left, left_repr = left_with_repr
    right, right_repr = right_with_repr
    note(f"{left_repr} | {right_repr}")
    assert outcomes(alt(left, right), symbols) == outcomes(left, symbols) + outcomes(
        right, symbols
    )


@settings(deadline=2000)
@given(st_parser, st_predicate(), st_input)
def test_filter_reduction(parser_with_repr, predicate_with_repr, symbols):
    parser, repr = parser_with_repr
    predicate, predicate_repr = predicate_with_repr
    note(f"{repr}.filter({predicate_repr})")
    expected = [o for o in outcomes(parser, symbols) if predicate(o[0])]
    assert outcomes(parser.filter(predicate), symbols) == expected


@given(st_input, st.integers(min_value=0, max_value=MAX_INPUT))
def test_item_end_boundary(symbols, steps):
    cursor = Cursor.make(iter(symbols))
    for _ in range(min(steps, len(symbols))):
        cursor = cursor.advance()
    items = list(item().parse(cursor))
    ends = list(end().parse(cursor))
    assert len(ends) == (1 if cursor.exhausted else 0)
    assert len(items) == (0 if cursor.exhausted else 1)
    for outcome in ends:
        assert outcome.cursor is cursor


@given(st_input)
def test_memoized_advance(symbols):
    reads: List[str] = []

    def source():
        for s in symbols:
            reads.append(s)
            yield s

    start = Cursor.make(source())

    def chain(cursor):
        while cursor is not None:
            yield cursor
            cursor = cursor.advance()

    first, second = list(chain(start)), list(chain(start))
    assert all(a is b for a, b in zip(first, second))
    assert len(first) == len(second) == len(symbols) + 1
    assert reads == symbols


@given(st_symbol, st_input)
def test_many_yields_prefixes_longest_first(symbol, symbols):
    run = len(list(takewhile(lambda s: s == symbol, symbols)))
    expected = [([symbol] * n, n) for n in range(run, -1, -1)]
    assert outcomes(equals(symbol).many(), symbols) == expected
    assert outcomes(equals(symbol).many1(), symbols) == expected[:-1]


@settings(deadline=2000)
@given(st_parser, st_input)
def test_alt_right_branch_is_lazy(parser_with_repr, symbols):
    left, repr = parser_with_repr
    note(repr)
    calls: List[Cursor] = []

    def right(cursor: Cursor) -> Iterator[Outcome]:
        calls.append(cursor)
        return iter([Outcome(None, cursor)])

    expected = outcomes(left, symbols)
    result = (left | Parser(right)).parse_input(symbols)
    prefix = [o for _, o in zip(expected, result)]
    assert len(prefix) == len(expected)
    assert calls == []


if __name__ == "__main__":
    sys.setrecursionlimit(10_000)
    register_random(Random(0))

    for test in [
        test_left_identity,
        test_right_identity,
        test_associativity,
        test_alternation_ordering,
        test_filter_reduction,
        test_item_end_boundary,
        test_memoized_advance,
        test_many_yields_prefixes_longest_first,
        test_alt_right_branch_is_lazy,
    ]:
        test()
