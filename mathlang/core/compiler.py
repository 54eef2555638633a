"""Code generation: renders an analyzed program as a self-contained Rust program that prints the same values as the
Executor would for the same input lines.

The math language has flat precedence tiers while Rust does not ('%' binds like '*', method calls bind tighter than
unary minus), so every generated operand whose grouping could change is parenthesized:
    a * b ^ c   ->  (a * b).powf(c)
    a + b mod c ->  (a + b) % (c)
    -b ^ 2      ->  (-(b)).powf(2f64)
"""

from mathlang.core import numerical
from mathlang.core.analyzer import (AnalyzedAssignment, AnalyzedDeclaration, AnalyzedDeclarationWithInit,
                                    AnalyzedFunctionCall, AnalyzedIdentifier, AnalyzedInputOp, AnalyzedNegation,
                                    AnalyzedOutputOp, AnalyzedParenthesized)
from mathlang.core.executor import INPUT_PROMPT, OUTPUT_TAG
from mathlang.core.lexical import AddOp, FunctionOp, Literal, MulOp


RUST_KEYWORDS = {
    "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else", "enum", "extern", "false", "fn", "for",
    "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return", "self", "Self", "static",
    "struct", "super", "trait", "true", "type", "unsafe", "use", "where", "while", "abstract", "become", "box", "do",
    "final", "gen", "macro", "override", "priv", "try", "typeof", "union", "unsized", "virtual", "yield",
}
RESERVED = RUST_KEYWORDS | {"main", "input", "Some", "None", "Ok", "Err"}  # names the generated program relies on

RUST_METHODS = {
    FunctionOp.SIN: "sin",
    FunctionOp.COS: "cos",
    FunctionOp.TAN: "tan",
    FunctionOp.ASIN: "asin",
    FunctionOp.ACOS: "acos",
    FunctionOp.ATAN: "atan",
    FunctionOp.SINH: "sinh",
    FunctionOp.COSH: "cosh",
    FunctionOp.TANH: "tanh",
    FunctionOp.ASINH: "asinh",
    FunctionOp.ACOSH: "acosh",
    FunctionOp.ATANH: "atanh",
    FunctionOp.EXP: "exp",
    FunctionOp.EXP2: "exp2",
    FunctionOp.LN: "ln",
    FunctionOp.LOG10: "log10",
    FunctionOp.LOG2: "log2",
    FunctionOp.ABS: "abs",
    FunctionOp.CEIL: "ceil",
    FunctionOp.FLOOR: "floor",
    FunctionOp.SIGNUM: "signum",
    FunctionOp.SQRT: "sqrt",
}

HEADER = f"""\
#![allow(unused_mut, unused_assignments, unused_variables, unused_parens, non_snake_case, dead_code)]

use std::io::Write;

fn input() -> f64 {{
    let mut text = String::new();
    eprint!("{INPUT_PROMPT}");
    std::io::stderr().flush().unwrap();
    std::io::stdin()
        .read_line(&mut text)
        .expect("Cannot read line.");
    text.trim().parse::<f64>().unwrap_or(0.)
}}
"""


def rust_name(name):
    """Rust identifier for a math language identifier. Identifiers are letters only, so the '_' suffix is unique."""
    return name + "_" if name in RESERVED else name


def translate_factor(table, factor):
    if isinstance(factor, Literal):
        literal = numerical.literal(factor.value)
        return f"({literal})" if literal.startswith("-") else literal
    elif isinstance(factor, AnalyzedIdentifier):
        return rust_name(table.get_name(factor.handle))
    elif isinstance(factor, AnalyzedParenthesized):
        return f"({translate_expr(table, factor.expr)})"
    elif isinstance(factor, AnalyzedFunctionCall):
        return f"({translate_expr(table, factor.expr)}).{RUST_METHODS[factor.op]}()"
    elif isinstance(factor, AnalyzedNegation):
        return f"-({translate_factor(table, factor.factor)})"
    raise TypeError(f"unknown factor {factor!r}")


def translate_term(table, term):
    result = translate_factor(table, term.factor)
    for op, factor in term.rest:
        operand = translate_factor(table, factor)
        if op is MulOp.MULTIPLY:
            result = f"{result} * {operand}"
        elif op is MulOp.DIVIDE:
            result = f"{result} / {operand}"
        elif op is MulOp.EXPONENT:
            result = f"({result}).powf({operand})"
    return result


def translate_expr(table, expr):
    result = translate_term(table, expr.term)
    for op, term in expr.rest:
        operand = translate_term(table, term)
        if op is AddOp.ADD:
            result = f"{result} + {operand}"
        elif op is AddOp.SUBTRACT:
            result = f"{result} - {operand}"
        elif op is AddOp.MODULO:
            result = f"({result}) % ({operand})"
    return result


def translate_statement(table, statement):
    if isinstance(statement, AnalyzedDeclaration):
        return f"let mut {rust_name(table.get_name(statement.handle))}: f64 = 0.0;"

    elif isinstance(statement, AnalyzedDeclarationWithInit):
        name = rust_name(table.get_name(statement.handle))
        return f"let mut {name}: f64 = {translate_expr(table, statement.expr)};"

    elif isinstance(statement, AnalyzedAssignment):
        return f"{rust_name(table.get_name(statement.handle))} = {translate_expr(table, statement.expr)};"

    elif isinstance(statement, AnalyzedInputOp):
        return f"{rust_name(table.get_name(statement.handle))} = input();"

    elif isinstance(statement, AnalyzedOutputOp):
        return f'println!("{OUTPUT_TAG}{{}}", {translate_expr(table, statement.expr)});'

    raise TypeError(f"unknown statement {statement!r}")


def generate(table, program):
    """Returns the Rust source of program. Variables in table that program does not declare itself (the standard
    library constants, or anything declared by an earlier unit of the same session) are bound first, to their current
    values.
    """
    declared = {statement.handle for statement in program
                if isinstance(statement, (AnalyzedDeclaration, AnalyzedDeclarationWithInit))}

    lines = []
    for handle in range(len(table)):
        if handle not in declared:
            name = rust_name(table.get_name(handle))
            lines.append(f"let mut {name}: f64 = {numerical.literal(table.get_value(handle))};")

    lines.extend(translate_statement(table, statement) for statement in program)

    body = "".join(f"    {line}\n" for line in lines)
    return f"{HEADER}\nfn main() {{\n{body}}}\n"
