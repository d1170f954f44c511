"""Built-in procedures installed into every fresh environment."""

import sys

from f1lisp.lang.numerical import OPERATORS, to_int
from f1lisp.pure.values import NIL, Builtin


def last_or_nil(values):
    return values[-1] if values else NIL


def display(*args):
    """Prints each argument on its own line."""
    for value in args:
        print(value)
    return last_or_nil(args)


def begin(*args):
    """Arguments were already evaluated in order by the call, so only the last one matters."""
    return last_or_nil(args)


def terminate(status=None):
    """Terminates the process. Never returns."""
    code = 0 if status is None else to_int(status, "exit")
    sys.exit(code)


def make_global_env():
    """Returns a new environment (name: Value dict) holding the built-ins."""
    env = {
        "print": Builtin("print", display),
        "exit": Builtin("exit", terminate, (0, 1)),
        "begin": Builtin("begin", begin),
    }
    for operator in OPERATORS:
        env[operator.name] = operator
    return env
