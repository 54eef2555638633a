"""Semantic analysis: resolves every identifier of a parse tree to a handle in a SymbolTable, declaring new variables as
it goes, and produces an analyzed tree that only refers to handles.

Rules:
    - `var x` and `var x = ...` fail with DuplicateDeclaration if x is already declared
    - the initializer of `var x = ...` is resolved before x is declared, so `var x = x` fails
    - assigning to, reading input into, or using an undeclared identifier fails with UndeclaredIdentifier

Analysis mutates the table as it goes and does not undo that on error: declarations that precede the failing statement
stay declared until the caller truncates the table (Session does).
"""

from dataclasses import dataclass
from typing import Tuple, Union

from mathlang.core.lexical import (AddOp, Assignment, Declaration, DeclarationWithInit, Expr, FunctionCall, FunctionOp,
                                   Identifier, InputOp, Literal, MulOp, Negation, Node, OutputOp, Parenthesized, Term)


Handle = int


@dataclass(frozen=True)
class AnalyzedIdentifier(Node):
    handle: Handle

    def __str__(self):
        return f"#{self.handle}"


@dataclass(frozen=True)
class AnalyzedParenthesized(Node):
    expr: "AnalyzedExpr"

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"({self.expr})"


@dataclass(frozen=True)
class AnalyzedFunctionCall(Node):
    op: FunctionOp
    expr: "AnalyzedExpr"

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"{self.op.value}({self.expr})"


@dataclass(frozen=True)
class AnalyzedNegation(Node):
    factor: "AnalyzedFactor"

    @property
    def nodes(self):
        return [self.factor]

    def __str__(self):
        return f"-{self.factor}"


AnalyzedFactor = Union[Literal, AnalyzedIdentifier, AnalyzedParenthesized, AnalyzedFunctionCall, AnalyzedNegation]


@dataclass(frozen=True)
class AnalyzedTerm(Node):
    factor: AnalyzedFactor
    rest: Tuple[Tuple[MulOp, AnalyzedFactor], ...] = ()

    @property
    def nodes(self):
        return [self.factor] + [factor for __, factor in self.rest]

    def __str__(self):
        return str(self.factor) + "".join(f" {op.value} {factor}" for op, factor in self.rest)


@dataclass(frozen=True)
class AnalyzedExpr(Node):
    term: AnalyzedTerm
    rest: Tuple[Tuple[AddOp, AnalyzedTerm], ...] = ()

    @property
    def nodes(self):
        return [self.term] + [term for __, term in self.rest]

    def __str__(self):
        return str(self.term) + "".join(f" {op.value} {term}" for op, term in self.rest)


@dataclass(frozen=True)
class AnalyzedDeclaration(Node):
    handle: Handle

    def __str__(self):
        return f"var #{self.handle}"


@dataclass(frozen=True)
class AnalyzedDeclarationWithInit(Node):
    handle: Handle
    expr: AnalyzedExpr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"var #{self.handle} = {self.expr}"


@dataclass(frozen=True)
class AnalyzedAssignment(Node):
    handle: Handle
    expr: AnalyzedExpr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"#{self.handle} = {self.expr}"


@dataclass(frozen=True)
class AnalyzedInputOp(Node):
    handle: Handle

    def __str__(self):
        return f"in #{self.handle}"


@dataclass(frozen=True)
class AnalyzedOutputOp(Node):
    expr: AnalyzedExpr

    @property
    def nodes(self):
        return [self.expr]

    def __str__(self):
        return f"out {self.expr}"


AnalyzedStatement = Union[AnalyzedDeclaration, AnalyzedDeclarationWithInit, AnalyzedAssignment, AnalyzedInputOp,
                          AnalyzedOutputOp]


@dataclass(frozen=True)
class AnalyzedProgram(Node):
    statements: Tuple[AnalyzedStatement, ...] = ()

    @property
    def nodes(self):
        return list(self.statements)

    def __str__(self):
        return "; ".join(str(statement) for statement in self.statements)

    def __len__(self):
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)


def analyze_factor(table, factor):
    if isinstance(factor, Literal):
        return factor
    elif isinstance(factor, Identifier):
        return AnalyzedIdentifier(table.find(factor.name))
    elif isinstance(factor, Parenthesized):
        return AnalyzedParenthesized(analyze_expr(table, factor.expr))
    elif isinstance(factor, FunctionCall):
        return AnalyzedFunctionCall(factor.op, analyze_expr(table, factor.expr))
    elif isinstance(factor, Negation):
        return AnalyzedNegation(analyze_factor(table, factor.factor))
    raise TypeError(f"unknown factor {factor!r}")


def analyze_term(table, term):
    rest = tuple((op, analyze_factor(table, factor)) for op, factor in term.rest)
    return AnalyzedTerm(analyze_factor(table, term.factor), rest)


def analyze_expr(table, expr):
    rest = tuple((op, analyze_term(table, term)) for op, term in expr.rest)
    return AnalyzedExpr(analyze_term(table, expr.term), rest)


def analyze_statement(table, statement):
    if isinstance(statement, Declaration):
        return AnalyzedDeclaration(table.insert(statement.name))

    elif isinstance(statement, DeclarationWithInit):
        expr = analyze_expr(table, statement.expr)  # before insert, so the initializer cannot see the new name
        return AnalyzedDeclarationWithInit(table.insert(statement.name), expr)

    elif isinstance(statement, Assignment):
        handle = table.find(statement.name)
        return AnalyzedAssignment(handle, analyze_expr(table, statement.expr))

    elif isinstance(statement, InputOp):
        return AnalyzedInputOp(table.find(statement.name))

    elif isinstance(statement, OutputOp):
        return AnalyzedOutputOp(analyze_expr(table, statement.expr))

    raise TypeError(f"unknown statement {statement!r}")


def analyze(table, program):
    """Analyzes every statement of program in order, mutating table. Returns an AnalyzedProgram, or raises
    DuplicateDeclaration/UndeclaredIdentifier at the first offending statement.
    """
    return AnalyzedProgram(tuple(analyze_statement(table, statement) for statement in program))
