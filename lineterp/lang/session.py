"""Session control for lineterp. Loads source (from a file or the command-line) into an Engine and runs it one statement
at a time, keeping the error handler's traceback pointed at the statement being executed.
"""

from lineterp.lang.engine import Engine, NESTED
from lineterp.lang.error import GenericException, InputError
from lineterp.pure.lexical import tokenize, tokenize_line


OPENERS = set(NESTED) | {"void", "int"}           # keywords that open a block
CLOSERS = set(NESTED.values()) | {"endfunc"}      # keywords that close one


class Session:
    """Governs a lineterp session: one engine, so functions and globals persist across everything added to it."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, output=print, prompt=input):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                # used for error messages
        self.cmd_line = cmd_line        # whether or not in command-line mode
        self.line_num = 0               # number of source lines added so far

        self.engine = Engine(output=output, prompt=prompt, trace=self.error_handler.register_step)

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    text = file.read()
            except OSError:
                raise InputError("'{}' could not be opened", path, diagnosis=False)

            self.add(text)

        elif not cmd_line:
            raise InputError("'{}' is a reserved filename", Session.SH_FILE)

    @staticmethod
    def block_depth(line, depth=0):
        """Returns depth (number of open blocks) after line. Used in command-line mode to decide whether to wait for
        more lines before running.
        """
        tokens = tokenize_line(line)
        if tokens and tokens[0] in OPENERS:
            return depth + 1
        if tokens and tokens[0] in CLOSERS:
            return max(depth - 1, 0)
        return depth

    def add(self, text):
        """Tokenizes text and appends it to the program. Nothing is executed until run is called, and nothing from text is
        loaded if any of its lines fails to tokenize.
        """
        source = text.splitlines()
        lines = []
        try:
            for line_num, line in enumerate(source, self.line_num + 1):
                self.error_handler.register_line(self.path, line.strip(), line_num)  # in case of a lex error
                lines.extend(tokenize(line, line_num))
                self.error_handler.remove_line(self.path)
        finally:
            self.line_num += len(source)  # also when a line fails to tokenize

        self.engine.load(lines)

    def run(self):
        """Runs every statement not run yet. Will raise any errors that are encountered; in command-line mode the
        engine is first reset so that the session stays usable.
        """
        engine = self.engine
        try:
            while not engine.finished:
                statement = engine.current
                self.error_handler.register_line(self.path, str(statement), statement.line_num)
                engine.step()
                self.error_handler.remove_line(self.path)
        except GenericException:
            if self.cmd_line:
                engine.abandon()
            raise
