"""Statement grammar for lineterp. Each tokenized line is classified once, by its first token, into one Statement
subclass; executing a statement is delegated to that subclass.

All grammar can be loosely defined as follows:

```
<while>      ::= "while" <rpn>                    ; loops until <rpn> is 0
<endwhile>   ::= "endwhile"
<if>         ::= "if" <rpn>
<else>       ::= "else"
<endif>      ::= "endif"

<func_decl>  ::= ("void" | "int") <name> "(" [<param> ("," <param>)*] ")"
<param>      ::= ("int" | "string") <name>
<endfunc>    ::= "endfunc"
<return>     ::= "return" [<rpn>]

<print>      ::= "print" (<string> | <name> | <rpn>)
<dump>       ::= "dump"                           ; prints every variable in the working scope
<input>      ::= "input" <name>                   ; reads an integer from stdin

<assignment> ::= <name> "=" (<string> | <name> | <call> | <rpn>)
<call>       ::= <name> "(" [<arg> ("," <arg>)*] ")"
<arg>        ::= <string> | <name> | <rpn>
```

Statements are classified without looking at the engine, so whether a name is a declared function is only known (and
only reported) when the statement runs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import re
from typing import Tuple

from lineterp.lang.error import GrammarError, InputError, StructuralError, UndefinedError
from lineterp.lang.numerical import number, truthy
from lineterp.pure.lexical import QUOTE, dequote


INT = "int"
STRING = "string"
VOID = "void"

PARAM_TYPES = {"int": INT, "string": STRING}
NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Signature:
    """A declared function. start is the statement index of its declaration; execution of a call resumes on the
    statement after it.
    """
    name: str
    start: int
    returns: str
    params: Tuple[Tuple[str, str], ...]  # (name, type) pairs, in declaration order


def check_name(name):
    """Raises GrammarError if name can't be used as a variable/function/parameter name."""
    if not NAME.fullmatch(name):
        raise GrammarError("'{}' is not a valid name", name)
    return name


def split_args(text):
    """Splits text on commas that aren't inside a string literal. Returns [] if text is blank."""
    args = []
    current = ""
    quoted = False
    for char in text:
        if char == QUOTE:
            quoted = not quoted
        if char == "," and not quoted:
            args.append(current.strip())
            current = ""
        else:
            current += char
    args.append(current.strip())

    if args == [""]:
        return []
    return args


def parse_call(tokens):
    """Splits `name(arg, ...)` (spread over tokens) into name and list of raw argument strings."""
    text = " ".join(tokens)
    open_paren = text.find("(")
    if open_paren == -1 or not text.endswith(")"):
        raise GrammarError("'{}' is missing parentheses", text)

    name = text[:open_paren].strip()
    if not name:
        raise GrammarError("'{}' is missing a function name", text)
    return check_name(name), split_args(text[open_paren + 1:-1])


class Statement(ABC):
    """Superclass representing any statement line in lineterp."""
    KEYWORD = None

    def __init__(self, line):
        """Assumes check_grammar has been run."""
        self.line = line
        self.tokens = line.tokens
        self.args = line.tokens[1:]
        self._cls = type(self).__name__

    @classmethod
    def check_grammar(cls, tokens):
        """Whether or not tokens form this kind of statement. Only looks at the shape of the line: errors inside the
        statement are raised by execute.
        """
        return tokens[0] == cls.KEYWORD

    @abstractmethod
    def execute(self, engine):
        """Runs this statement on engine. The engine advances past the statement afterwards unless execute calls
        engine.goto.
        """

    @staticmethod
    def infer(line):
        """Returns an object of the correct Statement subclass for line. Subclasses are tried in definition order, and
        Unrecognized (defined last) accepts anything.
        """
        for subclass in Statement.__subclasses__():
            if subclass.check_grammar(line.tokens):
                return subclass(line)
        raise GrammarError("'{}' is not valid lineterp grammar", str(line))

    @property
    def keyword(self):
        return self.line.keyword

    @property
    def line_num(self):
        return self.line.line_num

    def __repr__(self):
        return f"{self._cls}('{self.line}')"

    def __str__(self):
        return str(self.line)


class While(Statement):
    KEYWORD = "while"

    def execute(self, engine):
        if not truthy(engine.evaluate(self.args)):
            engine.land(engine.find_forward({"endwhile"}))


class EndWhile(Statement):
    KEYWORD = "endwhile"

    def execute(self, engine):
        engine.goto(engine.find_backward("while"))  # condition is re-evaluated, so no advance


class If(Statement):
    KEYWORD = "if"

    def execute(self, engine):
        if not truthy(engine.evaluate(self.args)):
            engine.land(engine.find_forward({"else", "endif"}))


class Else(Statement):
    """Only reached by falling off the end of a true if-branch: a false if lands past the else."""
    KEYWORD = "else"

    def execute(self, engine):
        engine.land(engine.find_forward({"endif"}))


class EndIf(Statement):
    KEYWORD = "endif"

    def execute(self, engine):
        pass


class FuncDecl(Statement):
    """Function declaration. Reaching one records its signature and skips its body."""

    @classmethod
    def check_grammar(cls, tokens):
        return tokens[0] in (VOID, INT)

    def signature(self, start):
        """Parses this declaration into a Signature starting at statement index start."""
        try:
            name, args = parse_call(self.args)
        except GrammarError:
            raise GrammarError("malformed function declaration '{}'", str(self.line))

        params = []
        for arg in args:
            parts = arg.split()
            if len(parts) != 2:
                raise GrammarError("parameter '{}' should be '<type> <name>'", arg)

            kind, param = parts
            if kind not in PARAM_TYPES:
                raise GrammarError("unknown parameter type '{}'", kind)
            if param in (seen for seen, __ in params):
                raise GrammarError("duplicate parameter '{}'", param)
            params.append((check_name(param), PARAM_TYPES[kind]))

        return Signature(name, start, self.keyword, tuple(params))

    def execute(self, engine):
        engine.declare(self.signature(engine.pc))
        engine.land(engine.find_forward({"endfunc"}, nested=False))


class EndFunc(Statement):
    KEYWORD = "endfunc"

    def execute(self, engine):
        frame = engine.pop_frame(self.keyword)
        engine.land(frame.return_line)


class Return(Statement):
    KEYWORD = "return"

    def execute(self, engine):
        if not engine.call_stack:
            raise StructuralError("'{}' outside of a function", self.keyword)

        if not self.args:  # bare return: same as falling through to endfunc
            frame = engine.pop_frame(self.keyword)
            engine.land(frame.return_line)
            return

        engine.return_value(engine.evaluate(self.args))


class Print(Statement):
    KEYWORD = "print"

    def execute(self, engine):
        if not self.args:
            raise GrammarError("'{}' expects a string or an expression", self.keyword)

        first = self.args[0]
        if first.startswith(QUOTE):
            if len(self.args) != 1:
                raise GrammarError("unexpected '{}' after string", self.args[1])
            engine.output(dequote(first))
            return

        if len(self.args) == 1:
            text = engine.working_scope.get_string(first)
            if text is not None:
                engine.output(text)
                return

        engine.output(str(engine.evaluate(self.args)))


class Dump(Statement):
    KEYWORD = "dump"

    def execute(self, engine):
        engine.output(engine.working_scope.snapshot())


class Input(Statement):
    KEYWORD = "input"
    INPUT_PROMPT = "? "

    def execute(self, engine):
        if len(self.args) != 1:
            raise GrammarError("'{}' expects a single variable name", self.keyword)
        name = check_name(self.args[0])

        try:
            raw = engine.prompt(Input.INPUT_PROMPT)
        except EOFError:
            raise InputError("no input left for '{}'", name)

        value = number(raw.strip())
        if value is None:
            raise InputError("'{}' is not an integer", raw.strip())
        engine.working_scope.assign(name, value)


class Assignment(Statement):
    """<name> = <value>. The kind of the value (string or int) decides which namespace name ends up in."""

    @classmethod
    def check_grammar(cls, tokens):
        return len(tokens) > 1 and tokens[1] == "="

    def execute(self, engine):
        name = check_name(self.tokens[0])
        rhs = self.tokens[2:]
        if not rhs:
            raise GrammarError("nothing to assign to '{}'", name)

        first = rhs[0]
        if first.startswith(QUOTE):
            if len(rhs) != 1:
                raise GrammarError("unexpected '{}' after string", rhs[1])
            engine.working_scope.assign(name, dequote(first))

        elif "(" in first:
            engine.call(rhs, target=name)

        else:
            text = engine.working_scope.get_string(first) if len(rhs) == 1 else None
            if text is not None:
                engine.working_scope.assign(name, text)
            else:
                engine.working_scope.assign(name, engine.evaluate(rhs))


class Call(Statement):
    """Standalone call. A returned value is discarded."""

    @classmethod
    def check_grammar(cls, tokens):
        return "(" in tokens[0]

    def execute(self, engine):
        engine.call(self.tokens)


class Unrecognized(Statement):
    """Anything else. Must be defined last."""

    @classmethod
    def check_grammar(cls, tokens):
        return True

    def execute(self, engine):
        raise UndefinedError("undefined function or variable '{}'", self.keyword)
