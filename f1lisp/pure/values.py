"""Runtime values produced by evaluation. There are only numbers, procedures and nil: no lists, no strings."""

from abc import ABC, abstractmethod

from f1lisp.lang.error import ArityError


class Value(ABC):
    """Superclass of every runtime value."""

    def is_truthy(self):
        """Every value is truthy except Integer(0)."""
        return True


class Integer(Value):
    """Signed 64-bit integer. Range checks are left to f1lisp.lang.numerical."""

    def __init__(self, value):
        self.value = value

    def is_truthy(self):
        return self.value != 0

    def __eq__(self, other):
        return isinstance(other, Integer) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        return f"Integer({self.value})"

    def __str__(self):
        return str(self.value)


class Nil(Value):
    """The neutral empty value, e.g. the result of `(begin)`."""

    def __eq__(self, other):
        return isinstance(other, Nil)

    def __hash__(self):
        return hash(Nil)

    def __repr__(self):
        return "Nil()"

    def __str__(self):
        return "nil"


NIL = Nil()


class Procedure(Value):
    """Anything that can be called with a list of evaluated arguments. Should return a Value or raise an EvalError."""

    def __init__(self, name):
        self.name = name

    @abstractmethod
    def __call__(self, args):
        """Applies this procedure to args, a list of Values."""

    def __repr__(self):
        return f"{type(self).__name__}('{self.name}')"

    def __str__(self):
        return f"<callable {self.name}>"


class Builtin(Procedure):
    """Procedure backed by a Python function. arity is a (min, max) pair of argument counts; max None is unbounded."""

    def __init__(self, name, func, arity=(0, None)):
        super().__init__(name)
        self.func = func
        self.arity = arity

    def check_arity(self, args):
        lo, hi = self.arity
        if len(args) < lo or (hi is not None and len(args) > hi):
            raise ArityError(self.name, len(args), self.arity)

    def __call__(self, args):
        self.check_arity(args)
        return self.func(*args)
