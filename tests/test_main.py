import contextlib
import io
import os
import tempfile
import unittest
import unittest.mock

from mathlang.main import build_parser, main


def call(*argv):
    """Runs main with argv. Returns (stdout, stderr)."""
    stdout, stderr = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
        main(list(argv))
    return stdout.getvalue(), stderr.getvalue()


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.source = os.path.join(self.directory.name, "prog.math")
        with open(self.source, "w") as file:
            file.write("var a = 2\nout a ^ 10\n")

    def tearDown(self):
        self.directory.cleanup()

    def test_parser(self):
        args = build_parser().parse_args(["compile", "prog.math", "-o", "out.rs"])
        self.assertEqual(("compile", "prog.math", "out.rs"), (args.command, args.source, args.output))
        self.assertTrue(build_parser().parse_args(["repl", "--verbose"]).verbose)

        with contextlib.redirect_stderr(io.StringIO()):
            self.assertRaises(SystemExit, build_parser().parse_args, [])

    def test_compile_file(self):
        stdout, stderr = call("compile", self.source)
        target = os.path.join(self.directory.name, "prog.rs")

        self.assertEqual("", stdout)
        self.assertEqual(f"Compiled {self.source} to {target}.\n", stderr)
        with open(target) as file:
            self.assertIn('println!("<output>: {}", (a).powf(10f64));', file.read())

    def test_compile_output(self):
        target = os.path.join(self.directory.name, "other.rs")
        call("compile", self.source, "-o", target)
        self.assertTrue(os.path.exists(target))
        self.assertFalse(os.path.exists(os.path.join(self.directory.name, "prog.rs")))

    def test_compile_text_with_output(self):
        target = os.path.join(self.directory.name, "text.rs")
        stdout, __ = call("compile", "out 1 + 2", "-o", target)
        self.assertEqual("", stdout)
        with open(target) as file:
            self.assertIn('println!("<output>: {}", 1f64 + 2f64);', file.read())

    def test_compile_text_interprets(self):
        stdout, __ = call("compile", "var a = 3 out a * 2 out a / 0")
        self.assertEqual("<output>: 6\n<output>: inf\n", stdout)

    def test_run(self):
        stdout, __ = call("run", self.source)
        self.assertEqual("<output>: 1024\n", stdout)

    def test_missing_file(self):
        for command in ["run", "compile"]:
            with self.assertRaises(SystemExit) as context:
                call(command, os.path.join(self.directory.name, "missing.math"))
            self.assertEqual(1, context.exception.code, command)

    def test_errors_are_fatal(self):
        cases = ["out a", "var pi", "out 1 +"]
        for case in cases:
            stderr = io.StringIO()
            with self.assertRaises(SystemExit), contextlib.redirect_stderr(stderr):
                main(["compile", case])
            self.assertIn("error: ", stderr.getvalue(), case)

    def test_repl(self):
        stdin = io.StringIO("var x = 4\nout sqrt(x)\nquit\n")
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            with unittest.mock.patch("sys.stdin", stdin):
                main(["repl"])
        self.assertIn("<output>: 2\n", stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
