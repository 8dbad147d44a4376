"""Handles interactive/command-line mode for lineterp. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """lineterp interpreter shell."""
    intro = "lineterp :: line-oriented RPN scripting\nType 'help' for more information, 'exit' to quit."
    prompt = "> "
    secondary_prompt = ". "  # used while a block is open
    _tmp_prompt = "> "       # also used for prompt swapping while a block is open

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._buffer = []
        self._depth = 0

    def default(self, line):
        """Adds line to the session, then runs it once no block is left open."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self._depth = self.sess.block_depth(line, self._depth)
            self._buffer.append(line)

            if self._depth:
                self.prompt = self.secondary_prompt
                return

            text = "\n".join(self._buffer)
            self._buffer = []
            self.prompt = self._tmp_prompt

            self.sess.add(text)
            self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return self.default(self.lastcmd)  # statement on a variable named help
        print("Welcome to lineterp!\n\n"
              "Every line is one statement, and every expression is written in reverse Polish \n"
              "notation: operators come after their operands, so 'x = 2 3 + 4 *' sets x to 20.\n\n"
              "Try it out by typing 'n = 3', then 'while n', 'print n', 'n = n 1 -' and \n"
              "'endwhile'. Blocks (while/if/functions) run once they are closed. 'dump' shows \n"
              "every variable in scope.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(self.lastcmd)
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(self.lastcmd)
        return True
