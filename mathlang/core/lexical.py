"""Parse tree and parser for the math language. The parser is purely syntactic: it never looks at a symbol table.

All grammar can be loosely defined as follows:

```
<program>    ::= <statement>*
<statement>  ::= "var" <ident> "=" <expr>         ; declare + assign (tried first)
               | "var" <ident>                    ; declare, value is 0
               | "in" <ident>                     ; read a number from input into <ident>
               | "out" <expr>                     ; evaluate <expr> and print it
               | <ident> "=" <expr>               ; assign (tried last)
<expr>       ::= <term> (("+" | "-" | "mod") <term>)*
<term>       ::= <factor> (("*" | "/" | "^") <factor>)*
<factor>     ::= <function> "(" <expr> ")"
               | <ident>
               | <float>
               | "(" <expr> ")"
               | "-" <factor>
```

Note that "*", "/" and "^" share one precedence tier, as do "+", "-" and "mod": `2 + 3 * 4 ^ 2` is `2 + ((3 * 4) ^ 2)`.
Both tiers associate to the left. Keywords and function names are reserved and only match on a word boundary, so
`input`, `outer` and `modx` are ordinary identifiers.

Whitespace (space, tab, CR, LF) may appear between any two tokens. Statements need no separator. A statement nested
deeper than the interpreter's recursion limit does not parse.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from mathlang.core.numerical import format_value


class AddOp(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MODULO = "mod"


class MulOp(Enum):
    MULTIPLY = "*"
    DIVIDE = "/"
    EXPONENT = "^"


class FunctionOp(Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    SINH = "sinh"
    COSH = "cosh"
    TANH = "tanh"
    ASINH = "asinh"
    ACOSH = "acosh"
    ATANH = "atanh"
    EXP = "exp"
    EXP2 = "exp2"
    LN = "ln"
    LOG10 = "log10"
    LOG2 = "log2"
    ABS = "abs"
    CEIL = "ceil"
    FLOOR = "floor"
    SIGNUM = "signum"
    SQRT = "sqrt"


FUNCTIONS = {op.value: op for op in FunctionOp}
FUNCTIONS.update({"log": FunctionOp.LOG10, "lg": FunctionOp.LOG2, "sgn": FunctionOp.SIGNUM})

KEYWORDS = ("var", "in", "out", "mod")
WHITESPACE = " \t\r\n"

IDENT = re.compile(r"[A-Za-z]+")
WORD = re.compile(r"[A-Za-z]+[0-9]*")
FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class Node:
    """Superclass of every parse/analyzed tree node. str(node) renders it back to source-like text."""

    @property
    def nodes(self):
        """Child nodes, used by display."""
        return []

    def display(self, indents=0):
        """Recursively displays tree with readable format.

        Format:
        <Node>(expr='<expr>', nodes=[
            <Node>(expr='<expr>', nodes=[
                ...
                <Node>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


@dataclass(frozen=True)
class Literal(Node):
    value: float

    def __str__(self):
        return format_value(self.value)


@dataclass(frozen=True)
class Identifier(Node):
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Parenthesized(Node):
    expr: "Expr"

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"({self.expr})"


@dataclass(frozen=True)
class FunctionCall(Node):
    op: FunctionOp
    expr: "Expr"

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"{self.op.value}({self.expr})"


@dataclass(frozen=True)
class Negation(Node):
    factor: "Factor"

    @property
    def nodes(self):
        return [self.factor]

    def __str__(self):
        return f"-{self.factor}"


Factor = Union[Literal, Identifier, Parenthesized, FunctionCall, Negation]


@dataclass(frozen=True)
class Term(Node):
    factor: Factor
    rest: Tuple[Tuple[MulOp, Factor], ...] = ()

    @property
    def nodes(self):
        return [self.factor] + [factor for __, factor in self.rest]

    def __str__(self):
        return str(self.factor) + "".join(f" {op.value} {factor}" for op, factor in self.rest)


@dataclass(frozen=True)
class Expr(Node):
    term: Term
    rest: Tuple[Tuple[AddOp, Term], ...] = ()

    @property
    def nodes(self):
        return [self.term] + [term for __, term in self.rest]

    def __str__(self):
        return str(self.term) + "".join(f" {op.value} {term}" for op, term in self.rest)


@dataclass(frozen=True)
class Declaration(Node):
    name: str

    def __str__(self):
        return f"var {self.name}"


@dataclass(frozen=True)
class DeclarationWithInit(Node):
    name: str
    expr: Expr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"var {self.name} = {self.expr}"


@dataclass(frozen=True)
class Assignment(Node):
    name: str
    expr: Expr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"{self.name} = {self.expr}"


@dataclass(frozen=True)
class InputOp(Node):
    name: str

    def __str__(self):
        return f"in {self.name}"


@dataclass(frozen=True)
class OutputOp(Node):
    expr: Expr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"out {self.expr}"


Statement = Union[Declaration, DeclarationWithInit, Assignment, InputOp, OutputOp]


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...] = ()

    @property
    def nodes(self):
        return list(self.statements)

    def __str__(self):
        return "; ".join(str(statement) for statement in self.statements)

    def __len__(self):
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)


class Parser:
    """Recursive descent parser with ordered, backtracking alternatives. Every parse_* method either returns a node and
    leaves self.pos after it, or returns None; attempt() restores self.pos when a rule fails.
    """

    def __init__(self, text):
        self.text = text
        self.pos = 0

    def parse_program(self):
        """Parses as many statements as possible. Returns (Program, remaining text)."""
        statements = []
        while True:
            start = self.pos
            self.skip_spaces()
            if self.pos == len(self.text):
                break

            try:
                statement = self.parse_statement()
            except RecursionError:
                statement = None  # nested too deeply to parse
            if statement is None:
                self.pos = start  # remaining text starts where the failed statement did
                break
            statements.append(statement)

        return Program(tuple(statements)), self.text[self.pos:]

    def parse_statement(self):
        # declare+assign must come before declare, and both before assign
        rules = (
            self.parse_declaration_with_init,
            self.parse_declaration,
            self.parse_input,
            self.parse_output,
            self.parse_assignment,
        )
        for rule in rules:
            statement = self.attempt(rule)
            if statement is not None:
                return statement
        return None

    def parse_declaration_with_init(self):
        if not self.keyword("var"):
            return None
        name = self.identifier()
        if name is None or not self.symbol("="):
            return None
        expr = self.parse_expr()
        return DeclarationWithInit(name, expr) if expr is not None else None

    def parse_declaration(self):
        if not self.keyword("var"):
            return None
        name = self.identifier()
        return Declaration(name) if name is not None else None

    def parse_input(self):
        if not self.keyword("in"):
            return None
        name = self.identifier()
        return InputOp(name) if name is not None else None

    def parse_output(self):
        if not self.keyword("out"):
            return None
        expr = self.parse_expr()
        return OutputOp(expr) if expr is not None else None

    def parse_assignment(self):
        name = self.identifier()
        if name is None or not self.symbol("="):
            return None
        expr = self.parse_expr()
        return Assignment(name, expr) if expr is not None else None

    def parse_expr(self):
        term = self.parse_term()
        if term is None:
            return None

        rest = []
        while True:
            start = self.pos
            op = self.add_op()
            next_term = self.parse_term() if op is not None else None
            if next_term is None:
                self.pos = start
                break
            rest.append((op, next_term))

        return Expr(term, tuple(rest))

    def parse_term(self):
        factor = self.parse_factor()
        if factor is None:
            return None

        rest = []
        while True:
            start = self.pos
            op = self.mul_op()
            next_factor = self.parse_factor() if op is not None else None
            if next_factor is None:
                self.pos = start
                break
            rest.append((op, next_factor))

        return Term(factor, tuple(rest))

    def parse_factor(self):
        rules = (
            self.parse_function_call,
            self.parse_identifier,
            self.parse_literal,
            self.parse_parenthesized,
            self.parse_negation,
        )
        for rule in rules:
            factor = self.attempt(rule)
            if factor is not None:
                return factor
        return None

    def parse_function_call(self):
        self.skip_spaces()
        match = WORD.match(self.text, self.pos)
        if not match or match.group() not in FUNCTIONS:
            return None
        self.pos = match.end()

        expr = self.parse_parenthesized()
        return FunctionCall(FUNCTIONS[match.group()], expr.expr) if expr is not None else None

    def parse_identifier(self):
        name = self.identifier()
        return Identifier(name) if name is not None else None

    def parse_literal(self):
        self.skip_spaces()
        match = FLOAT.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return Literal(float(match.group()))

    def parse_parenthesized(self):
        if not self.symbol("("):
            return None
        expr = self.parse_expr()
        if expr is None or not self.symbol(")"):
            return None
        return Parenthesized(expr)

    def parse_negation(self):
        if not self.symbol("-"):
            return None
        factor = self.parse_factor()
        return Negation(factor) if factor is not None else None

    def add_op(self):
        if self.symbol("+"):
            return AddOp.ADD
        elif self.symbol("-"):
            return AddOp.SUBTRACT
        elif self.keyword("mod"):
            return AddOp.MODULO
        return None

    def mul_op(self):
        for op in MulOp:
            if self.symbol(op.value):
                return op
        return None

    def attempt(self, rule):
        """Runs rule, restoring self.pos if it fails."""
        start = self.pos
        result = rule()
        if result is None:
            self.pos = start
        return result

    def skip_spaces(self):
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def symbol(self, char):
        """Skips whitespace and consumes char if it comes next."""
        self.skip_spaces()
        if self.text.startswith(char, self.pos):
            self.pos += len(char)
            return True
        return False

    def keyword(self, word):
        """Skips whitespace and consumes word if it comes next and is not followed by a letter."""
        self.skip_spaces()
        end = self.pos + len(word)
        if self.text.startswith(word, self.pos) and not (end < len(self.text) and self.text[end].isalpha()):
            self.pos = end
            return True
        return False

    def identifier(self):
        """Skips whitespace and consumes an identifier, returning its name. Reserved words are not identifiers."""
        self.skip_spaces()
        match = IDENT.match(self.text, self.pos)
        if not match or match.group() in KEYWORDS or match.group() in FUNCTIONS:
            return None
        self.pos = match.end()
        return match.group()


def parse(text):
    """Parses text into a Program. Never raises on invalid input: returns (Program, remaining text), where remaining
    text is whatever could not be parsed ("" if text is a valid program).
    """
    return Parser(text).parse_program()
