"""Runs lineterp source files, or starts command-line mode. Also uses error handling context manager. Called from the
lineterp console script.
"""

import argparse
import sys

from lineterp.lang.error import ErrorHandler
from lineterp.lang.session import Session
from lineterp.lang.shell import Shell


def main():
    """Runs lineterp interpreter. Called from lineterp console script."""
    assert sys.version_info >= (3, 8), "lineterp cannot be run with python < 3.8"

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(description="line-oriented RPN scripting language interpreter")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("-t", "--trace", help="print every executed statement, call and return to stderr",
                            action="store_true")
        args = parser.parse_args()

        error_handler.verbose = args.trace

        if args.file is not None:
            Session(error_handler, args.file, cmd_line=False).run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
