import io
import unittest

from mathlang.lang.error import ErrorHandler
from mathlang.lang.session import Session
from mathlang.lang.shell import Shell


def run_shell(*lines):
    """Feeds lines to a shell. Returns (shell output without prompts and intro, error output)."""
    stdin, stdout, prompt, errors = io.StringIO("".join(line + "\n" for line in lines)), io.StringIO(), io.StringIO(), \
        io.StringIO()
    sess = Session(ErrorHandler(stream=errors), Session.SH_FILE, True, None, stdin, stdout, prompt)

    shell = Shell(sess, stdin=stdin, stdout=stdout)
    shell.use_rawinput = False
    shell.cmdloop()

    output = stdout.getvalue().replace(Shell.prompt, "")
    return output[len(Shell.intro) + 1:], errors.getvalue()


class ShellTestCase(unittest.TestCase):

    def test_intro(self):
        stdin, stdout = io.StringIO(""), io.StringIO()
        shell = Shell(Session(ErrorHandler(stream=io.StringIO()), Session.SH_FILE, True), stdin=stdin, stdout=stdout)
        shell.use_rawinput = False
        shell.cmdloop()
        self.assertTrue(stdout.getvalue().startswith("* Math Interactive Interpreter *\n"))

    def test_statements(self):
        output, errors = run_shell("var a = 5", "out a / 0", "a = a mod 1.5", "out a", "out 2 + 3 * 4 ^ 2")
        self.assertEqual("<output>: inf\n<output>: 0.5\n<output>: 146\n\n", output)
        self.assertEqual("", errors)

    def test_several_statements_per_line(self):
        output, __ = run_shell("var a = 1 var b = a + 1 out a out b")
        self.assertEqual("<output>: 1\n<output>: 2\n\n", output)

    def test_error_does_not_exit(self):
        output, errors = run_shell("out x", "var x = 1", "var x", "out x +", "out x")
        self.assertEqual("<output>: 1\n\n", output)
        self.assertEqual(3, errors.count("error: "))
        self.assertIn("is not declared", errors)
        self.assertIn("is already declared", errors)
        self.assertIn("invalid code starting at", errors)

    def test_error_traceback_line(self):
        __, errors = run_shell("var a", "out a", "out a +")
        self.assertIn("File '<in>', line 3:\n    out a +\n", errors)

    def test_input_from_same_stream(self):
        output, errors = run_shell("var x", "in x", "21", "out x * 2", "in x", "nope", "out x")
        self.assertEqual("<output>: 42\n<output>: 0\n\n", output)
        self.assertIn("warning: ", errors)

    def test_variables(self):
        output, __ = run_shell("var a = 1 / 4", "variables")
        self.assertEqual("Variables:\n  pi: 3.141592653589793\n  e: 2.718281828459045\n  a: 0.25\n\n", output)

    def test_clear(self):
        output, errors = run_shell("var a = 1", "clear", "out a", "var a = 2", "out a")
        self.assertEqual("Cleared variables.\n<output>: 2\n\n", output)
        self.assertIn("is not declared", errors)

    def test_commands_as_variables(self):
        output, errors = run_shell("var clear", "clear = 2", "var quit = 3", "quit = quit + clear", "out quit")
        self.assertEqual("<output>: 5\n\n", output)
        self.assertEqual("", errors)

        output, errors = run_shell("var EOF", "EOF = 2", "var help", "help = EOF * 3", "out help + EOF")
        self.assertEqual("<output>: 8\n\n", output)
        self.assertEqual("", errors)

    def test_failed_line_can_be_retried(self):
        output, errors = run_shell("var x = 1 out y", "var x = 1 out x")
        self.assertEqual("<output>: 1\n\n", output)
        self.assertEqual(1, errors.count("error: "))
        self.assertIn("is not declared", errors)

    def test_deep_nesting_is_a_syntax_error(self):
        output, errors = run_shell("out " + "(" * 5000 + "1" + ")" * 5000, "out 2")
        self.assertEqual("<output>: 2\n\n", output)
        self.assertIn("invalid code starting at", errors)
        self.assertNotIn("[internal]", errors)

    def test_quit(self):
        for command in ["quit", "exit"]:
            output, __ = run_shell("out 1", command, "out 2")
            self.assertEqual("<output>: 1\n", output, command)

    def test_empty_line(self):
        output, __ = run_shell("out 1", "", "   ")
        self.assertEqual("<output>: 1\n\n", output)

    def test_help(self):
        output, __ = run_shell("help")
        self.assertIn("Welcome to the math language interpreter!", output)


if __name__ == '__main__':
    unittest.main()
