"""Syntax tree, recursive-descent parser and tree-walking evaluator for f1lisp.

Formally, the grammar is

```
<expr> ::= <symbol>                         ; variable reference
         | <number>                         ; integer literal
         | "(" "if" <expr> <expr> <expr> ")"  ; condition: only 0 is false
         | "(" "define" <symbol> <expr> ")"   ; binds <symbol> in the environment
         | "(" <symbol> <expr>* ")"          ; procedure call
```

`if` and `define` are only keywords directly after an opening bracket: anywhere else they are ordinary symbols. The
parser reads one token of lookahead and never backtracks. Every node keeps the tokens it consumed, brackets included,
so errors can point back at the source.
"""

from abc import ABC, abstractmethod

from f1lisp.lang.builtins import make_global_env
from f1lisp.lang.error import EvalError, NotASymbol, ParseError, UndefinedProcedure, UndefinedSymbol
from f1lisp.lang.numerical import in_range
from f1lisp.pure.lexical import NO_SPAN, Lexer, TokenKind
from f1lisp.pure.values import Integer, Procedure


class Expr(ABC):
    """Superclass of all syntax tree nodes. A parent exclusively owns its children."""

    @property
    @abstractmethod
    def nodes(self):
        """Child expressions, in source order."""

    @abstractmethod
    def tokens(self):
        """Yields every token this subtree consumed, in source order."""

    @abstractmethod
    def evaluate(self, env):
        """Evaluates this node against env (a name: Value dict), returning a Value or raising an EvalError."""

    @property
    def span(self):
        """Span covering every non-synthetic token of this subtree."""
        span = NO_SPAN
        for token in self.tokens():
            span = span.join(token.span)
        return span

    def display(self, indents=0):
        """Recursively displays the tree in a readable format.

        Format:
        <Expr>('<text>', nodes=[
            <Expr>('<text>'),
            ...
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}('{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return " ".join(token.text for token in self.tokens()).replace("( ", "(").replace(" )", ")")

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)


def symbol_name(token):
    """Returns the name of a SYMBOL token, raising NotASymbol for anything else."""
    if token.kind is not TokenKind.SYMBOL:
        raise NotASymbol(token.text, span=token.span)
    return token.value


class Symbol(Expr):

    def __init__(self, token):
        self.token = token
        self.name = token.value

    @property
    def nodes(self):
        return []

    def tokens(self):
        yield self.token

    def evaluate(self, env):
        try:
            return env[self.name]
        except KeyError:
            raise UndefinedSymbol(self.name, span=self.token.span) from None


class Number(Expr):

    def __init__(self, token):
        self.token = token
        self.value = token.value

    @property
    def nodes(self):
        return []

    def tokens(self):
        yield self.token

    def evaluate(self, env):
        return Integer(self.value)


class If(Expr):

    def __init__(self, open_, if_, cond, then, else_, close):
        self.open = open_
        self.keyword = if_
        self.cond = cond
        self.then = then
        self.else_ = else_
        self.close = close

    @property
    def nodes(self):
        return [self.cond, self.then, self.else_]

    def tokens(self):
        yield self.open
        yield self.keyword
        for node in self.nodes:
            yield from node.tokens()
        yield self.close

    def evaluate(self, env):
        if self.cond.evaluate(env).is_truthy():
            return self.then.evaluate(env)
        return self.else_.evaluate(env)


class Define(Expr):

    def __init__(self, open_, define, target, value, close):
        self.open = open_
        self.keyword = define
        self.target = target
        self.value = value
        self.close = close

    @property
    def nodes(self):
        return [self.value]

    def tokens(self):
        yield self.open
        yield self.keyword
        yield self.target
        yield from self.value.tokens()
        yield self.close

    def evaluate(self, env):
        value = self.value.evaluate(env)
        env[symbol_name(self.target)] = value
        return value


class Call(Expr):

    def __init__(self, open_, target, args, close):
        self.open = open_
        self.target = target
        self.args = args
        self.close = close

    @property
    def nodes(self):
        return self.args

    def tokens(self):
        yield self.open
        yield self.target
        for node in self.args:
            yield from node.tokens()
        yield self.close

    def evaluate(self, env):
        name = symbol_name(self.target)
        procedure = env.get(name)
        if not isinstance(procedure, Procedure):
            raise UndefinedProcedure(name, span=self.target.span)

        args = [arg.evaluate(env) for arg in self.args]
        try:
            return procedure(args)
        except EvalError as e:
            if e.span is None:
                e.span = self.span
            raise


class Parser:
    """Recursive-descent parser with a single token of lookahead."""

    def __init__(self, source):
        self.source = source
        self.lexer = Lexer(source)
        self._tokens = iter(self.lexer)
        self.current = next(self._tokens, None)

    @property
    def at_end(self):
        return self.current is None

    def eat(self, what="an expression"):
        """Consumes and returns the current token. Raises ParseError if there isn't one."""
        token = self.current
        if token is None:
            raise ParseError("expected {} before end of input", what)
        self.current = next(self._tokens, None)
        return token

    def expr(self):
        token = self.eat()

        if token.kind is TokenKind.NUMBER:
            if not in_range(token.value):
                raise ParseError("number literal is out of range for a 64-bit integer", span=token.span)
            return Number(token)

        if token.kind is TokenKind.SYMBOL:
            return Symbol(token)

        if token.kind is TokenKind.RIGHT_BRACKET:
            raise ParseError("unexpected '{}'", token.text, span=token.span)

        return self.form(token)

    def form(self, open_):
        """Parses the rest of a form whose opening bracket has already been consumed."""
        head = self.current
        if head is None:
            raise ParseError("expected a form after '(' before end of input", span=open_.span)
        if head.kind is not TokenKind.SYMBOL:
            raise ParseError("form must begin with a symbol, got '{}'", head.text, span=head.span)

        if head.value == "if":
            if_ = self.eat()
            cond = self.expr()
            then = self.expr()
            else_ = self.expr()
            return If(open_, if_, cond, then, else_, self.close(open_))

        if head.value == "define":
            define = self.eat()
            target = self.eat("a symbol")
            if target.kind is not TokenKind.SYMBOL:
                raise ParseError("define expects a symbol, got '{}'", target.text, span=target.span)
            value = self.expr()
            return Define(open_, define, target, value, self.close(open_))

        target = self.eat()
        args = []
        while self.current is not None and self.current.kind is not TokenKind.RIGHT_BRACKET:
            args.append(self.expr())
        return Call(open_, target, args, self.close(open_))

    def close(self, open_):
        """Consumes the closing bracket of the form opened by open_."""
        token = self.current
        if token is None:
            raise ParseError("expected ')' to close '(' before end of input", span=open_.span)
        if token.kind is not TokenKind.RIGHT_BRACKET:
            raise ParseError("expected ')', got '{}'", token.text, span=token.span)
        return self.eat()

    def program(self):
        """Parses every remaining top-level expression."""
        exprs = []
        while not self.at_end:
            exprs.append(self.expr())
        return exprs


def parse(source):
    """Parses the first expression in source. Any tokens after it are ignored."""
    return Parser(source).expr()


def parse_program(source):
    """Parses every top-level expression in source."""
    return Parser(source).program()


def evaluate(expr, env=None):
    """Evaluates expr in env. If env is None, a fresh environment with the built-ins is used and then discarded."""
    if env is None:
        env = make_global_env()
    return expr.evaluate(env)
