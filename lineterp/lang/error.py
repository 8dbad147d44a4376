"""Error handling for lineterp. Only GenericExceptions should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every lineterp error is fatal when running a file. In command-line mode the handler reports the error and hands control
back to the shell.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a lineterp error. exprs are formatted into msg, and
    exprs[0] should be the offending token (used to highlight it in the offending line).
    """
    kind = "error"

    def __init__(self, msg, exprs=None, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)


class LexError(GenericException):
    """Raised when a source line cannot be split into tokens (unterminated string literal)."""
    kind = "lex error"


class GrammarError(GenericException):
    """Raised for malformed declarations, calls and argument lists."""
    kind = "syntax error"


class UndefinedError(GenericException):
    """Raised when a function or variable is not visible from the working scope."""
    kind = "name error"


class EvalError(GenericException):
    """Raised when an RPN expression or an argument cannot be evaluated."""
    kind = "eval error"


class StructuralError(GenericException):
    """Raised when a block terminator cannot be found, or a function terminator is hit outside of a function."""
    kind = "structural error"


class InputError(GenericException):
    """Raised when input (stdin or the source file) cannot be read or parsed."""
    kind = "io error"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom lineterp errors."""
    ERROR = "red"
    TRACE = "cyan"

    def __init__(self, fatal=True, verbose=False, stream=None):
        self.fatal = fatal
        self.verbose = verbose       # whether or not to print a trace of executed steps
        self.stream = stream         # defaults to sys.stderr at print time
        self.traceback = {}

    @property
    def _out(self):
        return self.stream if self.stream is not None else sys.stderr

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called before each statement is executed."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a statement completed successfully."""
        self.traceback[path] = (None, None)

    def register_step(self, label, text):
        """Prints a trace step if running verbosely."""
        if self.verbose:
            print(colored(f"[{label}]", ErrorHandler.TRACE, attrs=["bold"]) + f" {text}", file=self._out)

    @staticmethod
    def diagnose(error, line):
        """Returns line with the offending token of error highlighted and underlined. Returns None if the token can't
        be found in line.
        """
        if not line or not error.expr or error.expr not in line:
            return None

        start = line.index(error.expr)
        end = start + len(error.expr)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        offending = None
        for file, (line, line_num) in self.traceback.items():
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                offending = line

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg, file=self._out)

        if not error.internal and error.diagnosis:
            diagnosis = ErrorHandler.diagnose(error, offending)
            if diagnosis:
                print(diagnosis, file=self._out)

        if self.fatal:
            sys.exit(1)
        for file in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.traceback[file] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
