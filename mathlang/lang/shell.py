"""Handles interactive/command-line mode for the math language interpreter. Uses cmd as backend."""

import cmd

from mathlang.core.numerical import format_value


class Shell(cmd.Cmd):
    """Math language interpreter shell. Lines that are not shell commands are run as math statements."""
    intro = "* Math Interactive Interpreter *\nType '?' or 'help' for more information."
    prompt = "<shell>: "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary math statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.add(line, self.line_num)
            self.sess.run()

    def _statement(self, command, arg):
        """Shell commands are not reserved words: `clear = 2` assigns to a variable named clear."""
        if arg:
            self.default(f"{command} {arg}")
            return True
        return False

    def do_clear(self, arg):
        """Forgets every variable (pi and e are redefined)."""
        if not self._statement("clear", arg):
            self.sess.clear()
            print("Cleared variables.", file=self.stdout)

    def do_variables(self, arg):
        """Lists every variable with its current value."""
        if not self._statement("variables", arg):
            print("Variables:", file=self.stdout)
            for name, value in self.sess.variables():
                print(f"  {name}: {format_value(value)}", file=self.stdout)

    def do_help(self, arg):
        """Prints a short intro to the language instead of command docs."""
        if self._statement("help", arg):
            return
        print("Welcome to the math language interpreter!\n\n"
              "Statements: 'var x' declares x (value 0), 'var x = 1 + 2' declares and assigns x,\n"
              "'x = 2 * x' assigns, 'in x' reads a number into x, and 'out sqrt(x) mod 3' prints.\n"
              "Operators are + - mod (low precedence) and * / ^ (high precedence), both left to\n"
              "right, so 2 + 3 * 4 ^ 2 is 146. pi and e are predefined.\n\n"
              "Commands: 'variables' lists variables, 'clear' forgets them, 'quit' exits.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        if self._statement("EOF", arg):
            return False
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        return not self._statement("exit", arg)

    def do_quit(self, arg):
        """Exits interpreter."""
        return not self._statement("quit", arg)
