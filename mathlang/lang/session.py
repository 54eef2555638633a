"""Session control for the math language: owns one symbol table and drives parsing, analysis, execution and
compilation, either in command-line mode (the shell) or for a single file/string.
"""

import os
import sys

from mathlang.core.analyzer import AnalyzedProgram, analyze
from mathlang.core.compiler import generate
from mathlang.core.executor import Executor
from mathlang.core.lexical import parse
from mathlang.core.symbols import SymbolTable, load_stdlib
from mathlang.lang.error import GenericException, IOFailure, MathSyntaxError


MATH_SUFFIX = ".math"
TARGET_SUFFIX = ".rs"


class Session:
    """Governs a math language session, with control over the scope of variables. Analyzed programs are queued by add
    and executed lazily by run.
    """
    SH_FILE = "<in>"       # command-line interpreter filename
    STR_FILE = "<string>"  # filename used for source text given directly

    def __init__(self, error_handler, path, cmd_line, source=None, input_stream=None, output_stream=None,
                 prompt_stream=None, verbose=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages and as default compile target
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.verbose = verbose    # whether or not to print analyzed programs

        self.input_stream = input_stream
        self.output_stream = output_stream
        self.prompt_stream = prompt_stream

        self.table = load_stdlib(SymbolTable())
        self.to_exec = []  # list of AnalyzedPrograms not run yet
        self.compiled = []  # list of every AnalyzedProgram added outside the shell, for compile
        self.results = []  # list of values printed by `out` statements

        if self.cmd_line:
            self.error_handler.fatal = False

        if source is not None:
            self.add(source)

        elif path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError as exc:
                raise IOFailure(path, exc)

            self.add(source)

        elif not cmd_line:
            raise GenericException("'{}' is a reserved filename", Session.SH_FILE, diagnosis=False)

    def add(self, source, line_num=1):
        """Parses and analyzes source, queueing the analyzed program for run. Raises MathSyntaxError if source is not
        entirely valid, and DuplicateDeclaration/UndeclaredIdentifier if it does not analyze, in which case
        none of its declarations are kept.
        """
        single_line = "\n" not in source.strip()
        self.error_handler.register_line(self.path, source if single_line else None, line_num)  # in case error is raised

        program, remaining = parse(source)
        if remaining.strip():
            raise self._syntax_error(source, remaining, line_num)

        declared = len(self.table)
        try:
            analyzed = analyze(self.table, program)
        except GenericException:
            self.table.truncate(declared)  # a unit that does not analyze declares nothing
            raise

        if self.verbose:
            print(analyzed.display(), file=self._prompt_stream)

        self.to_exec.append(analyzed)
        if not self.cmd_line:
            self.compiled.append(analyzed)

        self.error_handler.remove_line(self.path)  # error was not raised
        return analyzed

    def run(self):
        """Runs every queued program in order. Returns the values printed."""
        executor = Executor(self.table, self.input_stream, self.output_stream, self.prompt_stream, self._bad_input)

        results = []
        while self.to_exec:
            results.extend(executor.execute(self.to_exec.pop(0)))

        self.results.extend(results)
        return results

    def compile(self, target=None):
        """Writes the Rust translation of everything added to this file or string session to target (default: self.path
        with its .math suffix replaced by .rs). Returns target.
        """
        if target is None:
            root, __ = os.path.splitext(self.path)
            target = root + TARGET_SUFFIX

        statements = tuple(statement for program in self.compiled for statement in program)
        try:
            with open(target, "w") as file:
                file.write(generate(self.table, AnalyzedProgram(statements)))
        except OSError as exc:
            raise IOFailure(target, exc)

        return target

    def clear(self):
        """Discards every variable, starting over with a fresh symbol table (standard library reloaded)."""
        self.table = load_stdlib(SymbolTable())
        self.to_exec = []
        self.compiled = []

    def variables(self):
        """(name, value) pairs of the current symbol table, in declaration order."""
        return list(self.table)

    @property
    def _prompt_stream(self):
        return self.prompt_stream if self.prompt_stream is not None else sys.stderr

    def _bad_input(self, line):
        self.error_handler.warn("'{}' is not a number, using 0", line)

    def _syntax_error(self, source, remaining, line_num):
        """MathSyntaxError pointing at the first unparsed character of source, registered in the traceback."""
        offset = len(source) - len(remaining.lstrip())
        line_start = source.rfind("\n", 0, offset) + 1
        line_end = source.find("\n", offset)
        line = source[line_start:line_end if line_end != -1 else len(source)]

        line_num += source.count("\n", 0, offset)
        self.error_handler.register_line(self.path, line, line_num)
        return MathSyntaxError(remaining, line, offset - line_start)
