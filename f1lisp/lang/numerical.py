"""Fixed-width integer arithmetic for f1lisp. Numbers are signed 64-bit integers: every intermediate result is range
checked, and division truncates toward zero rather than flooring.
"""

from functools import reduce

from f1lisp.lang.error import DivisionByZero, IntegerOverflow, NotANumber
from f1lisp.pure.values import Builtin, Integer


I64_MIN = -2 ** 63
I64_MAX = 2 ** 63 - 1


def in_range(num):
    return I64_MIN <= num <= I64_MAX


def checked(num, name):
    """Returns num if it fits in 64 bits, otherwise raises IntegerOverflow on behalf of name."""
    if not in_range(num):
        raise IntegerOverflow(name)
    return num


def to_int(value, name):
    """Returns the int inside value, raising NotANumber on behalf of name if value isn't an Integer."""
    if not isinstance(value, Integer):
        raise NotANumber(name, value)
    return value.value


def truncdiv(num, den, name):
    """Integer division rounding toward zero."""
    if den == 0:
        raise DivisionByZero(name)

    quotient = abs(num) // abs(den)
    if (num < 0) != (den < 0):
        quotient = -quotient
    return checked(quotient, name)


def fold(name, op, args, initial=None):
    """Left-folds op over the ints in args, range checking each step. If initial is None, the first arg is used."""
    nums = [to_int(arg, name) for arg in args]
    if initial is None:
        initial, nums = nums[0], nums[1:]
    return Integer(reduce(lambda acc, num: checked(op(acc, num), name), nums, initial))


def add(*args):
    return fold("+", lambda a, b: a + b, args, 0)


def multiply(*args):
    return fold("*", lambda a, b: a * b, args, 1)


def subtract(*args):
    """(-) is 0, (- x) is -x, (- x y ...) is x - y - ..."""
    if not args:
        return Integer(0)
    if len(args) == 1:
        return Integer(checked(-to_int(args[0], "-"), "-"))
    return fold("-", lambda a, b: a - b, args)


def divide(*args):
    """(/ x) is 1 / x, (/ x y ...) is x / y / ... At least one argument is required."""
    if len(args) == 1:
        return Integer(truncdiv(1, to_int(args[0], "/"), "/"))
    return fold("/", lambda a, b: truncdiv(a, b, "/"), args)


OPERATORS = [
    Builtin("+", add),
    Builtin("*", multiply),
    Builtin("-", subtract),
    Builtin("/", divide, (1, None)),
]
