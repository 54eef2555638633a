import io
import unittest

from mathlang.lang.error import (DuplicateDeclaration, ErrorHandler, GenericException, IOFailure, MathSyntaxError,
                                 UndeclaredIdentifier)


class GenericExceptionTestCase(unittest.TestCase):

    def test_message(self):
        cases = {
            DuplicateDeclaration("a"): "'a' is already declared",
            UndeclaredIdentifier("b"): "'b' is not declared",
            MathSyntaxError("out +\n", "var a out +", 10): "invalid code starting at 'out +'",
            MathSyntaxError("= 1"): "invalid code starting at '= 1'",
            GenericException("'{}' and '{}'", ["x", "y"]): "'x' and 'y'",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(case), expected)

    def test_syntax_error_position(self):
        error = MathSyntaxError("+ 1\nout 2", "out 1 + + 1", 8)
        self.assertEqual("out 1 + + 1", error.expr)
        self.assertEqual(8, error.start)
        self.assertEqual("+ 1\nout 2", error.remaining)
        self.assertTrue(error.diagnosis)

        self.assertFalse(MathSyntaxError("?").diagnosis)

    def test_io_failure(self):
        cause = FileNotFoundError(2, "No such file or directory")
        error = IOFailure("missing.math", cause)
        self.assertEqual("missing.math", error.path)
        self.assertIs(cause, error.cause)
        self.assertIn("missing.math", str(error))


class ErrorHandlerTestCase(unittest.TestCase):

    def test_fatal(self):
        stream = io.StringIO()
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=stream):
                raise UndeclaredIdentifier("a")
        self.assertEqual(1, context.exception.code)
        self.assertIn("error: ", stream.getvalue())
        self.assertIn("is not declared", stream.getvalue())

    def test_not_fatal(self):
        stream = io.StringIO()
        with ErrorHandler(fatal=False, stream=stream):
            raise DuplicateDeclaration("a")
        self.assertIn("error: ", stream.getvalue())
        self.assertIn("is already declared", stream.getvalue())

    def test_traceback(self):
        stream = io.StringIO()
        handler = ErrorHandler(fatal=False, stream=stream)
        handler.register_file("prog.math")
        handler.register_line("prog.math", "out a +", 2)
        with handler:
            raise MathSyntaxError("+", "out a +", 6)

        output = stream.getvalue()
        self.assertTrue(output.startswith("Traceback:\n"), output)
        self.assertIn("  File 'prog.math', line 2:\n    out a +\n", output)
        self.assertIn("^", output)
        self.assertEqual({"prog.math": (None, None)}, handler.traceback)

    def test_no_traceback_without_line(self):
        stream = io.StringIO()
        handler = ErrorHandler(fatal=False, stream=stream)
        handler.register_file("prog.math")
        with handler:
            raise UndeclaredIdentifier("x")
        self.assertNotIn("Traceback:", stream.getvalue())

    def test_internal_error_propagates(self):
        stream = io.StringIO()
        with self.assertRaises(ZeroDivisionError):
            with ErrorHandler(fatal=False, stream=stream):
                raise ZeroDivisionError("{oops}")
        self.assertIn("[internal] ", stream.getvalue())
        self.assertIn("unknown error: ", stream.getvalue())

    def test_system_exit_propagates(self):
        stream = io.StringIO()
        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False, stream=stream):
                raise SystemExit(0)
        self.assertEqual("", stream.getvalue())

    def test_keyboard_interrupt(self):
        stream = io.StringIO()
        with ErrorHandler(fatal=False, stream=stream):
            raise KeyboardInterrupt
        self.assertIn("keyboard interrupt", stream.getvalue())

    def test_warn(self):
        stream = io.StringIO()
        handler = ErrorHandler(stream=stream)
        handler.register_line("<in>", "in x", 3)
        handler.warn("'{}' is not a number, using 0", "abc")

        output = stream.getvalue()
        self.assertIn("<in>:3: ", output)
        self.assertIn("warning: ", output)
        self.assertIn("is not a number, using 0", output)

    def test_diagnose(self):
        diagnosis = ErrorHandler.diagnose(MathSyntaxError("+ 2", "out 1 + + 2", 8))
        first, second = diagnosis.split("\n")
        self.assertTrue(first.startswith("  out 1 + "), first)
        self.assertTrue(second.startswith("  " + " " * 8), second)
        self.assertIn("^", second)


if __name__ == '__main__':
    unittest.main()
