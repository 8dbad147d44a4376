"""Integer semantics for lineterp. Values are unbounded Python ints; booleans are encoded as 0 (false) and 1 (true).

Division and modulo truncate toward zero, so the remainder always takes the sign of the dividend:
`-7 2 /` is -3 and `-7 2 %` is -1 (Python's // and % would give -4 and 1).
"""

import re

from lineterp.lang.error import EvalError


INTEGER = re.compile(r"[+-]?[0-9]+")


def number(token):
    """Returns int value of token if token is an integer literal, else None."""
    if INTEGER.fullmatch(token):
        return int(token)
    return None


def truthy(value):
    """Any nonzero integer is true."""
    return value != 0


def boolean(condition):
    """Returns 1 if condition else 0."""
    return 1 if condition else 0


def trunc_div(lhs, rhs):
    """Integer division truncating toward zero."""
    if rhs == 0:
        raise EvalError("division by zero")

    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs < 0) == (rhs < 0) else -quotient


def trunc_mod(lhs, rhs):
    """Remainder of trunc_div: lhs == rhs * trunc_div(lhs, rhs) + trunc_mod(lhs, rhs)."""
    if rhs == 0:
        raise EvalError("modulo by zero")
    return lhs - rhs * trunc_div(lhs, rhs)
