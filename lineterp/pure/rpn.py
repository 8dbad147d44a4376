"""Reverse Polish Notation expression evaluation.

Expressions are already in evaluation order, so there is no precedence parsing: `a b + 2 *` is (a + b) * 2. Every
operator is binary and every value is an integer.
"""

import operator

from lineterp.lang.error import EvalError
from lineterp.lang.numerical import boolean, number, trunc_div, trunc_mod, truthy


OPERATORS = {
    # arithmetic
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": trunc_div,
    "%": trunc_mod,

    # comparison
    ">": lambda lhs, rhs: boolean(lhs > rhs),
    "<": lambda lhs, rhs: boolean(lhs < rhs),
    ">=": lambda lhs, rhs: boolean(lhs >= rhs),
    "<=": lambda lhs, rhs: boolean(lhs <= rhs),
    "==": lambda lhs, rhs: boolean(lhs == rhs),
    "!=": lambda lhs, rhs: boolean(lhs != rhs),

    # logic
    "&&": lambda lhs, rhs: boolean(truthy(lhs) and truthy(rhs)),
    "||": lambda lhs, rhs: boolean(truthy(lhs) or truthy(rhs)),
}


def evaluate(tokens, resolve):
    """Evaluates RPN tokens to a single integer. resolve is called with any token that is neither an integer literal nor
    an operator, and should return that variable's value (or raise if it doesn't exist).
    """
    stack = []
    for token in tokens:
        value = number(token)
        if value is not None:
            stack.append(value)

        elif token in OPERATORS:
            if len(stack) < 2:
                raise EvalError("malformed RPN expression: '{}' needs two operands", token)
            rhs = stack.pop()
            lhs = stack.pop()
            stack.append(OPERATORS[token](lhs, rhs))

        else:
            stack.append(resolve(token))

    if len(stack) != 1:
        expr = " ".join(tokens)
        raise EvalError("malformed RPN expression '{}' leaves {} values", (expr, str(len(stack))))
    return stack[0]
