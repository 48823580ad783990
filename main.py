#! /usr/bin/env python
import logging
import operator
import os
import sys

from monad_parsec import Parser, end, equals, item, sat

LOG_LEVEL = os.environ.get("MONAD_PARSEC_LOG_LEVEL", "WARNING")
INPUTS = ["5", "a", "1+2", "2*3", "2-3", "1+2*3"]

OPERATORS = {"+": operator.add, "*": operator.mul}

digit = sat(str.isdigit).map(int)


def binary():
    # digit, operator, digit
    left = yield digit
    op = yield item().filter(lambda c: c in OPERATORS)
    right = yield digit
    yield Parser.return_(OPERATORS[op](left, right))


def expression() -> Parser:
    op = (equals("+") | equals("*")).map(OPERATORS.__getitem__)
    return digit.chainl1(op) << end()


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    for text in sys.argv[1:] or INPUTS:
        print(repr(text))
        print("  digit:", list(digit.parse_input(text).values()))
        print("  binary:", list(Parser.do(binary).parse_input(text).values()))
        print("  expression:", list(expression().parse_input(text).values()))
