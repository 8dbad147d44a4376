import io
import os
import tempfile
import textwrap
import unittest

from lineterp.lang.error import ErrorHandler, GenericException, InputError, UndefinedError
from lineterp.lang.session import Session
from lineterp.lang.shell import Shell


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.stream = io.StringIO()
        self.output = []

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, source):
        path = os.path.join(self.tmp.name, "program.lt")
        with open(path, "w", encoding="utf-8") as file:
            file.write(textwrap.dedent(source))
        return path

    def session(self, path, fatal=True, cmd_line=False, verbose=False):
        error_handler = ErrorHandler(fatal=fatal, verbose=verbose, stream=self.stream)
        return Session(error_handler, path, cmd_line, output=self.output.append)

    def test_run_file(self):
        path = self.write("""
            // sums 1..n
            int sum(int n)
                total = 0
                while n
                    total = total n +
                    n = n 1 -
                endwhile
                return total
            endfunc
            x = sum(4)
            print "sum is"
            print x
        """)
        self.session(path).run()
        self.assertEqual(["sum is", "10"], self.output)
        self.assertEqual("", self.stream.getvalue())

    def test_missing_file(self):
        path = os.path.join(self.tmp.name, "missing.lt")
        self.assertRaises(InputError, self.session, path)
        self.assertRaises(InputError, self.session, Session.SH_FILE, cmd_line=False)

    def test_fatal_error(self):
        path = self.write("""
            x = 1
            print x
            print nope 1 +
            print "unreachable"
        """)
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=self.stream) as error_handler:
                Session(error_handler, path, cmd_line=False, output=self.output.append).run()

        self.assertEqual(1, context.exception.code)
        self.assertEqual(["1"], self.output)

        report = self.stream.getvalue()
        self.assertIn(f"File '{path}', line 4:", report)
        self.assertIn("print nope 1 +", report)
        self.assertIn("name error: ", report)
        self.assertIn("^~~~", report)

    def test_lex_error_line(self):
        path = self.write("""
            print "fine"
            print "not fine
        """)
        with self.assertRaises(SystemExit):
            with ErrorHandler(stream=self.stream) as error_handler:
                Session(error_handler, path, cmd_line=False, output=self.output.append).run()

        report = self.stream.getvalue()
        self.assertIn("line 3:", report)
        self.assertIn("lex error: ", report)
        self.assertEqual([], self.output)  # nothing runs if the file doesn't tokenize

    def test_trace(self):
        path = self.write("""
            int one()
                return 1
            endfunc
            x = one()
        """)
        self.session(path, verbose=True).run()

        report = self.stream.getvalue()
        for label in ("[exec]", "[call]", "[return]"):
            self.assertIn(label, report)

    def test_cmd_line(self):
        sess = self.session(Session.SH_FILE, cmd_line=True)
        self.assertFalse(sess.error_handler.fatal)

        sess.add("x = 2")
        sess.run()

        sess.add("void f()\nprint nope\nendfunc\nf()")
        with sess.error_handler:
            sess.run()
        self.assertIn("name error: ", self.stream.getvalue())
        self.assertFalse(sess.engine.call_stack)
        self.assertTrue(sess.engine.finished)

        sess.add("print x 1 +")
        sess.run()
        self.assertEqual(["3"], self.output)
        self.assertEqual(6, sess.line_num)

    def test_line_numbers_after_lex_error(self):
        sess = self.session(Session.SH_FILE, cmd_line=True)
        sess.add("x = 1")
        with sess.error_handler:
            sess.add("print \"unclosed")
        self.assertIn("line 2:", self.stream.getvalue())
        self.assertEqual(2, sess.line_num)

        sess.add("print nope")
        with sess.error_handler:
            sess.run()
        self.assertIn("line 3:", self.stream.getvalue())

    def test_block_depth(self):
        cases = [
            ("x = 1", 0, 0),
            ("while x", 0, 1),
            ("  if x", 1, 2),
            ("int f(int a)", 0, 1),
            ("void g()", 2, 3),
            ("endif", 2, 1),
            ("endwhile", 1, 0),
            ("endfunc", 1, 0),
            ("endfunc", 0, 0),
            ("// while", 1, 1),
            ("", 1, 1),
        ]
        for line, depth, expected in cases:
            self.assertEqual(expected, Session.block_depth(line, depth), (line, depth))


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.output = []
        error_handler = ErrorHandler(stream=self.stream)
        self.shell = Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, output=self.output.append))

    def feed(self, *lines):
        for line in lines:
            self.shell.onecmd(line)

    def test_block_waits(self):
        self.feed("n = 2", "while n", "print n")
        self.assertEqual([], self.output)
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)

        self.feed("n = n 1 -", "endwhile")
        self.assertEqual(["2", "1"], self.output)
        self.assertEqual("> ", self.shell.prompt)

    def test_functions_persist(self):
        self.feed("int twice(int n)", "return n 2 *", "endfunc", "x = twice(21)", "print x")
        self.assertEqual(["42"], self.output)

    def test_error_recovers(self):
        self.feed("print missing", "y = 1", "print y")
        self.assertIn("name error: ", self.stream.getvalue())
        self.assertEqual(["1"], self.output)

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))

    def test_command_words_as_variables(self):
        self.assertFalse(self.shell.onecmd("exit = 3"))
        self.assertFalse(self.shell.onecmd("help = 4"))
        self.feed("print exit help +")
        self.assertEqual(["7"], self.output)
        self.assertEqual({"exit": 3, "help": 4}, self.shell.sess.engine.globals.ints)
        self.assertTrue(self.shell.onecmd("exit"))


class ErrorHandlerTestCase(unittest.TestCase):

    def test_diagnose(self):
        error = UndefinedError("undefined variable '{}'", "nope")
        self.assertEqual("nope", error.expr)
        self.assertIsNone(ErrorHandler.diagnose(error, "print other"))
        self.assertIsNone(ErrorHandler.diagnose(error, None))

        diagnosis = ErrorHandler.diagnose(error, "print nope 1 +")
        self.assertIn("^~~~", diagnosis)

    def test_internal(self):
        stream = io.StringIO()
        with self.assertRaises(SystemExit):
            with ErrorHandler(stream=stream):
                raise ValueError("boom")
        self.assertIn("[internal]", stream.getvalue())
        self.assertIn("ValueError", stream.getvalue())

    def test_kinds(self):
        self.assertEqual("error", GenericException("x").kind)
        self.assertEqual("io error", InputError("x").kind)


if __name__ == '__main__':
    unittest.main()
