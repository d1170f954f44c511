"""Session control for f1lisp. Feeds source to the parser one unit at a time, either from a file or from the
interactive shell, and evaluates it against a single environment that lives as long as the session.

A unit is a run of lines whose brackets balance: lines are accumulated until every opened bracket is closed, then
every top-level form in the unit is evaluated in order.
"""

from f1lisp.lang.builtins import make_global_env
from f1lisp.lang.error import GenericException
from f1lisp.pure.lexical import Lexer, bracket_depth
from f1lisp.pure.syntax import Parser


class Session:
    """Governs a f1lisp session, with control over the environment its units are evaluated in."""
    SH_FILE = "<in>"  # command-line interpreter filename
    RESULT = " ~> "

    def __init__(self, error_handler, path=SH_FILE):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path  # used for error messages
        self.env = make_global_env()
        self.results = []

        self._pending = ""         # unfinished unit
        self._pending_line = None  # line number the unfinished unit started on

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    lines = file.readlines()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for line_num, line in enumerate(lines):
                self.add(line, line_num + 1)
            self.flush()

    @staticmethod
    def preprocess_line(line, prev=""):
        """Appends line to prev, the text of an unfinished unit. Returns the joined text and whether it still needs
        more lines. Input the tokenizer gave up on can never close a bracket, so it ends the unit.
        """
        text = prev + line
        lexer = Lexer(text)
        depth = bracket_depth(lexer)
        return text, depth > 0 and lexer.halted is None

    @property
    def pending(self):
        """Whether a unit is waiting for more lines."""
        return bool(self._pending)

    def add(self, line, line_num=None):
        """Adds line to the current unit, and runs the unit if line completes it."""
        text, add_to_prev = Session.preprocess_line(line, self._pending)
        if self._pending_line is None:
            self._pending_line = line_num

        if add_to_prev:
            self._pending = text
            return

        start = self._pending_line
        self._pending, self._pending_line = "", None
        self.run(text, start)

    def flush(self):
        """Runs whatever is left of an unfinished unit. Its brackets don't balance, so this will raise a ParseError."""
        if self._pending:
            text, start = self._pending, self._pending_line
            self._pending, self._pending_line = "", None
            self.run(text, start)

    def run(self, text, line_num=None):
        """Parses and evaluates every top-level form in text, appending each value to self.results. Will raise any
        errors that are encountered; bindings made by forms before the error are kept.
        """
        self.error_handler.register_line(self.path, text, line_num)

        lexer = Lexer(text)
        lexer.tokenize()  # the parser may stop before reaching the character that halts the lexer
        if lexer.halted is not None:
            msg = "unrecognized character '{}', ignoring the rest of the input"
            self.error_handler.warn(msg, lexer.halted.slice(text), span=lexer.halted)

        exprs = Parser(text).program()
        for expr in exprs:
            self.results.append(expr.evaluate(self.env))

        self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop()

    @staticmethod
    def show(value):
        return f"{Session.RESULT}{value}"
