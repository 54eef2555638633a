"""Command-line entry point of the math language: interactive shell, one-shot interpreter, and compiler to Rust. Also uses
error handling context manager. Installed as the mathlang executable script.

    mathlang repl                 interactive shell
    mathlang compile prog.math    writes the Rust translation to prog.rs
    mathlang compile "out 1 + 2"  interprets the given source text
    mathlang run prog.math        interprets a file
"""

import argparse
import sys

from mathlang.lang.error import ErrorHandler
from mathlang.lang.session import MATH_SUFFIX, Session
from mathlang.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="mathlang", description="math language interpreter and compiler")
    commands = parser.add_subparsers(dest="command", metavar="command")
    commands.required = True

    repl = commands.add_parser("repl", help="run the interactive shell")
    repl.add_argument("-v", "--verbose", action="store_true", help="print every analyzed program")

    compile_ = commands.add_parser("compile", help=f"compile a {MATH_SUFFIX} file to Rust, or interpret source text")
    compile_.add_argument("source", help=f"{MATH_SUFFIX} file to compile, or source text to interpret")
    compile_.add_argument("-o", "--output", help="path of the generated Rust file (compiles source text as well)")

    run = commands.add_parser("run", help="interpret a file")
    run.add_argument("file", help="file to interpret and run")

    return parser


def main(argv=None):
    """Runs mathlang. Called from mathlang executable script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.command == "repl":
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, verbose=args.verbose)).cmdloop()

        elif args.command == "compile" and (args.source.endswith(MATH_SUFFIX) or args.output):
            if args.source.endswith(MATH_SUFFIX):
                sess = Session(error_handler, args.source, cmd_line=False)
            else:
                sess = Session(error_handler, Session.STR_FILE, cmd_line=False, source=args.source)

            target = sess.compile(args.output)
            print(f"Compiled {sess.path} to {target}.", file=sys.stderr)

        elif args.command == "compile":
            Session(error_handler, Session.STR_FILE, cmd_line=False, source=args.source).run()

        else:
            Session(error_handler, args.file, cmd_line=False).run()


if __name__ == "__main__":
    main()
