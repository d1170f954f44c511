"""Error handling for f1lisp. Only GenericExceptions should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Errors come in two tiers. ParseErrors are fatal for the input unit that produced them: the parser does not attempt to
recover or return a partial tree. EvalErrors are recoverable: they unwind the current evaluation but leave the
environment (and any bindings made before the error) intact.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a f1lisp error/warning. exprs are formatted
    into msg, and span (if any) points at the offending source.
    """
    label = "error"

    def __init__(self, msg, exprs=None, span=None, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.msg = msg.format(*self.exprs)

        self.span = span
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    def display(self):
        """Message with expr snippets bolded."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))


class ParseError(GenericException):
    """Malformed token stream. Fatal for the current input unit."""
    label = "syntax error"


class EvalError(GenericException):
    """Superclass of all recoverable evaluation errors. name is the offending symbol or procedure name."""

    def __init__(self, msg, name, span=None, exprs=None):
        super().__init__(msg, exprs if exprs is not None else name, span=span)
        self.name = name


class UndefinedSymbol(EvalError):

    def __init__(self, name, span=None):
        super().__init__("undefined symbol '{}'", name, span)


class UndefinedProcedure(EvalError):

    def __init__(self, name, span=None):
        super().__init__("'{}' is not a procedure", name, span)


class NotASymbol(EvalError):

    def __init__(self, name, span=None):
        super().__init__("'{}' is not a symbol", name, span)


class NotANumber(EvalError):

    def __init__(self, name, value, span=None):
        super().__init__("{}: expected a number, got '{}'", name, span, exprs=[name, value])
        self.value = value


class DivisionByZero(EvalError):

    def __init__(self, name, span=None):
        super().__init__("{}: division by zero", name, span)


class IntegerOverflow(EvalError):

    def __init__(self, name, span=None):
        super().__init__("{}: integer overflow", name, span)


class ArityError(EvalError):
    """Wrong number of arguments passed to a built-in. arity is a (min, max) pair, max None meaning unbounded."""

    def __init__(self, name, got, arity, span=None):
        lo, hi = arity
        if hi is None:
            expected = f"at least {lo}"
        elif lo == hi:
            expected = str(lo)
        else:
            expected = f"{lo} to {hi}"

        super().__init__("{}: expected " + expected + " argument(s), got " + str(got), name, span)
        self.got = got
        self.arity = arity


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report custom f1lisp errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"
    PREFIX = " !! "

    def __init__(self, out=None):
        self.out = out
        self.traceback = {}
        self.errors = 0
        self.reraised = None  # last internal error, already reported

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session evaluating a unit."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a unit is evaluated successfully."""
        self.traceback[path] = (None, None)

    def _current_text(self):
        for line, __ in self.traceback.values():
            if line:
                return line
        return None

    @staticmethod
    def diagnose(error, text, warning=False):
        """Returns the source line containing error.span with the offending part highlighted and underlined. Returns
        None if error has no usable span.
        """
        if not text or error.span is None or error.span.is_synthetic:
            return None

        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start, end = error.span.char_range(text)

        line_start = text.rfind("\n", 0, start) + 1
        line_end = text.find("\n", start)
        if line_end == -1:
            line_end = len(text)

        line = text[line_start:line_end].rstrip("\r")
        start -= line_start
        end = max(min(end - line_start, len(line)), start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _print(self, msg):
        print(msg, file=self.out if self.out is not None else sys.stdout)

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args."""
        error = GenericException(*args, **kwargs)

        msg = colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.display()
        for file, (line, line_num) in self.traceback.items():
            if line:
                msg = colored(f"{file}:{line_num}: ", attrs=["bold"]) + msg
                break
        self._print(msg)

        if error.diagnosis:
            diagnosis = ErrorHandler.diagnose(error, self._current_text(), warning=True)
            if diagnosis:
                self._print(diagnosis)

    def throw(self, error):
        """Reports error using self.traceback. error must be a GenericException, and self.traceback must be a dict of
        file: (line, line_num) representing origination of error.
        """
        self.errors += 1

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line and file != "<in>":
                first_line = line.strip().split("\n")[0]
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {first_line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        error_msg += colored(ErrorHandler.PREFIX, ErrorHandler.ERROR, attrs=["bold"])
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += colored(f"{error.label}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.display()
        self._print(error_msg)

        if not error.internal and error.diagnosis:
            diagnosis = ErrorHandler.diagnose(error, self._current_text())
            if diagnosis:
                self._print(diagnosis)

        self.traceback = {file: (None, None) for file in self.traceback}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            if exc_val is not self.reraised:  # nested handlers report an internal error once
                self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
                self.reraised = exc_val
            do_exit = True

        return not do_exit
