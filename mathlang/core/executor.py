"""Tree-walking evaluator for analyzed programs. Values live in the SymbolTable; expressions are evaluated as 64-bit
floats, left to right within each precedence tier.

Input and output go through text streams so the caller decides where they come from and go to:
    - `in x` writes the prompt "<input>: " to prompt_stream and reads one line from input_stream
    - `out expr` writes "<output>: <value>" to output_stream
"""

import sys

from mathlang.core import numerical
from mathlang.core.analyzer import (AnalyzedAssignment, AnalyzedDeclaration, AnalyzedDeclarationWithInit,
                                    AnalyzedFunctionCall, AnalyzedIdentifier, AnalyzedInputOp, AnalyzedNegation,
                                    AnalyzedOutputOp, AnalyzedParenthesized)
from mathlang.core.lexical import Literal


INPUT_PROMPT = "<input>: "
OUTPUT_TAG = "<output>: "


class Executor:
    """Runs analyzed programs against table. Streams default to the process' stdin/stdout/stderr when None. on_bad_input
    is called with the offending line when an input line is not a number (its value becomes 0).
    """

    def __init__(self, table, input_stream=None, output_stream=None, prompt_stream=None, on_bad_input=None):
        self.table = table
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.prompt_stream = prompt_stream
        self.on_bad_input = on_bad_input

    def evaluate_factor(self, factor):
        if isinstance(factor, Literal):
            return factor.value
        elif isinstance(factor, AnalyzedIdentifier):
            return self.table.get_value(factor.handle)
        elif isinstance(factor, AnalyzedParenthesized):
            return self.evaluate_expr(factor.expr)
        elif isinstance(factor, AnalyzedFunctionCall):
            return numerical.apply(factor.op.value, self.evaluate_expr(factor.expr))
        elif isinstance(factor, AnalyzedNegation):
            return numerical.negate(self.evaluate_factor(factor.factor))
        raise TypeError(f"unknown factor {factor!r}")

    def evaluate_term(self, term):
        result = self.evaluate_factor(term.factor)
        for op, factor in term.rest:
            result = numerical.binary(op.value, result, self.evaluate_factor(factor))
        return result

    def evaluate_expr(self, expr):
        result = self.evaluate_term(expr.term)
        for op, term in expr.rest:
            result = numerical.binary(op.value, result, self.evaluate_term(term))
        return result

    def read_input(self):
        """Prompts for and reads one line. Lines that are not numbers (and EOF) read as 0."""
        prompt_stream = self.prompt_stream if self.prompt_stream is not None else sys.stderr
        prompt_stream.write(INPUT_PROMPT)
        prompt_stream.flush()

        line = (self.input_stream if self.input_stream is not None else sys.stdin).readline()
        value = numerical.parse_number(line)
        if value is None:
            if self.on_bad_input is not None:
                self.on_bad_input(line.strip())
            return 0.0
        return value

    def write_output(self, value):
        output_stream = self.output_stream if self.output_stream is not None else sys.stdout
        output_stream.write(f"{OUTPUT_TAG}{numerical.format_value(value)}\n")
        output_stream.flush()

    def execute_statement(self, statement):
        """Runs one statement. Returns the printed value for `out` statements, otherwise None."""
        if isinstance(statement, (AnalyzedAssignment, AnalyzedDeclarationWithInit)):
            self.table.set_value(statement.handle, self.evaluate_expr(statement.expr))

        elif isinstance(statement, AnalyzedDeclaration):
            pass  # value was set to 0 when declared

        elif isinstance(statement, AnalyzedInputOp):
            self.table.set_value(statement.handle, self.read_input())

        elif isinstance(statement, AnalyzedOutputOp):
            value = self.evaluate_expr(statement.expr)
            self.write_output(value)
            return value

        else:
            raise TypeError(f"unknown statement {statement!r}")

    def execute(self, program):
        """Runs program's statements in order. Returns the list of values written by `out` statements."""
        results = []
        for statement in program:
            value = self.execute_statement(statement)
            if isinstance(statement, AnalyzedOutputOp):
                results.append(value)
        return results


def execute(table, program, input_stream=None, output_stream=None, prompt_stream=None):
    """Runs analyzed program against table. Returns the output values in order."""
    return Executor(table, input_stream, output_stream, prompt_stream).execute(program)
