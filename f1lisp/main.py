"""Runs the f1lisp interpreter on source files, or in command-line mode if no files are given. Uses the error handling
context manager so that f1lisp errors are reported rather than raised.
"""

import argparse
import sys

from f1lisp.lang.error import ErrorHandler
from f1lisp.lang.session import Session
from f1lisp.lang.shell import Shell


def make_parser():
    parser = argparse.ArgumentParser(prog="f1lisp", description="A tiny LISP interpreter.")
    parser.add_argument("files", nargs="*", metavar="file",
                        help="files to evaluate, each in a fresh environment (if empty, goes to command-line mode)")
    return parser


def main(argv=None):
    """Runs f1lisp interpreter. Returns the process exit status: 1 if any file failed, 0 otherwise."""
    args = make_parser().parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.files:
            for path in args.files:
                with error_handler:  # a failed file doesn't stop the ones after it
                    sess = Session(error_handler, path)
                    if sess.results:
                        print(sess.show(sess.pop()))
        else:
            Shell(Session(error_handler)).cmdloop()

    return 1 if error_handler.errors else 0


if __name__ == "__main__":
    sys.exit(main())
