"""Program-counter driven execution of lineterp statements.

The engine owns all runtime state: the statements, the program counter, the call stack, the global scope, declared
functions, and the return-value register. Statements (see lang/lexical.py) manipulate that state through the methods
below; the engine itself only knows how to step.

Calls are two-phase. A call site pushes a frame and jumps into the function body. A `return` stores its value in the
register and jumps back onto the call site itself, which runs a second time: finding the register full, it consumes the
value instead of calling again. A function that finishes through `endfunc` leaves the register empty and execution
continues after the call site.
"""

from lineterp.lang.error import EvalError, GrammarError, StructuralError, UndefinedError
from lineterp.lang.lexical import STRING, Statement, parse_call
from lineterp.lang.scope import CallStack, Frame, Scope
from lineterp.pure.lexical import QUOTE, dequote
from lineterp.pure.rpn import evaluate


NESTED = {"while": "endwhile", "if": "endif"}   # openers and closers of blocks that can be nested
CLOSERS = {closer: opener for opener, closer in NESTED.items()}


class Engine:
    """Executes statements one at a time. output is called with each printed line, prompt is called with a prompt
    string and should return one line of input (or raise EOFError), trace is called with (label, text) for every step.
    """

    def __init__(self, output=print, prompt=input, trace=None):
        self.output = output
        self.prompt = prompt
        self.trace = trace if trace is not None else (lambda label, text: None)

        self.program = []               # list of Statements
        self.pc = 0                     # index of the statement to execute next
        self.call_stack = CallStack()
        self.globals = Scope()
        self.functions = {}             # dict of name: Signature
        self.returned = None            # value returned by the last call, until its call site consumes it
        self.evaluating_args = False    # whether or not names resolve in the caller's scope

        self._advance = True

    def load(self, lines):
        """Classifies tokenized lines and appends them to the program. Execution continues from the current program
        counter, so loading after a run executes only the new lines.
        """
        self.program.extend(Statement.infer(line) for line in lines)

    @property
    def finished(self):
        return self.pc >= len(self.program)

    @property
    def current(self):
        """Statement at the program counter."""
        return self.program[self.pc]

    def step(self):
        """Executes the current statement, then advances the program counter unless the statement jumped with goto."""
        statement = self.current
        self.trace("exec", f"{statement.line_num}: {statement}")

        self._advance = True
        statement.execute(self)
        if self._advance:
            self.pc += 1

    def run(self):
        """Runs until the program counter runs off the end of the program."""
        while not self.finished:
            self.step()

    def abandon(self):
        """Drops any call in progress and moves to the end of the program. Used to recover from an error in
        command-line mode; declared functions and global variables are kept.
        """
        self.call_stack.clear()
        self.returned = None
        self.evaluating_args = False
        self.pc = len(self.program)

    # control flow

    def land(self, idx):
        """Moves the program counter to idx. The statement at idx is skipped: execution continues after it."""
        self.pc = idx

    def goto(self, idx):
        """Moves the program counter to idx without advancing, so that the statement at idx is executed next."""
        self.pc = idx
        self._advance = False

    def find_forward(self, targets, nested=True):
        """Returns index of the first statement after the current one whose keyword is in targets. If nested, blocks
        opened between here and there are skipped along with their contents.
        """
        depth = 0
        for idx in range(self.pc + 1, len(self.program)):
            keyword = self.program[idx].keyword
            if depth == 0 and keyword in targets:
                return idx

            if nested and keyword in NESTED:
                depth += 1
            elif nested and keyword in CLOSERS and depth:
                depth -= 1

        raise StructuralError("'{}' has no matching '{}'", (str(self.current), "' or '".join(sorted(targets))))

    def find_backward(self, target):
        """Returns index of the closest statement before the current one with keyword target, skipping complete blocks
        in between.
        """
        depth = 0
        for idx in range(self.pc - 1, -1, -1):
            keyword = self.program[idx].keyword
            if keyword in CLOSERS:
                depth += 1
            elif keyword in NESTED and depth:
                depth -= 1
            elif keyword == target:
                return idx

        raise StructuralError("'{}' has no matching '{}'", (str(self.current), target))

    # scopes

    @property
    def working_scope(self):
        """Scope names resolve against. While a call's arguments are evaluated the callee's frame is already on the
        stack, but arguments are written in the caller's context, so the caller's scope is used.
        """
        if self.evaluating_args:
            caller = self.call_stack.caller
            return caller.scope if caller else self.globals

        top = self.call_stack.top
        return top.scope if top else self.globals

    def resolve(self, name):
        """Value of integer variable name in the working scope."""
        scope = self.working_scope
        value = scope.get_int(name)
        if value is not None:
            return value

        if scope.get_string(name) is not None:
            raise UndefinedError("'{}' is a string, not an integer variable", name)
        raise UndefinedError("undefined variable '{}'", name)

    def evaluate(self, tokens):
        return evaluate(tokens, self.resolve)

    # functions

    def declare(self, signature):
        """Records signature the first time its declaration is reached."""
        existing = self.functions.get(signature.name)
        if existing is None:
            self.functions[signature.name] = signature
        elif existing.start != signature.start:
            raise GrammarError("function '{}' is already declared", signature.name)

    def call(self, tokens, target=None):
        """Calls (or finishes calling) the function in call tokens `name(arg, ...)`. If target, the returned value is
        assigned to variable target in the working scope.
        """
        name, args = parse_call(tokens)
        signature = self.functions.get(name)
        if signature is None:
            raise UndefinedError("undefined function '{}'", name)

        if self.returned is not None:  # second pass over the call site: the call already happened
            value, self.returned = self.returned, None
            if target is not None:
                self.working_scope.assign(target, value)
            return

        if len(args) != len(signature.params):
            msg = "'{}' expects {} arguments but got {} (missing comma?)"
            raise GrammarError(msg, (name, str(len(signature.params)), str(len(args))))

        frame = Frame(name, self.pc)
        self.call_stack.push(frame)

        self.evaluating_args = True
        try:
            for (param, kind), arg in zip(signature.params, args):
                frame.scope.assign(param, self._argument(param, kind, arg))
        finally:
            self.evaluating_args = False

        self.trace("call", f"{name}({', '.join(args)}) from line {self.current.line_num}")
        self.land(signature.start)

    def _argument(self, param, kind, arg):
        """Evaluates raw argument string arg for parameter param of type kind."""
        if not arg:
            raise GrammarError("missing argument for '{}' (stray comma?)", param)

        if kind == STRING:
            if arg.startswith(QUOTE):
                return dequote(arg)
            text = self.working_scope.get_string(arg)
            if text is None:
                raise EvalError("'{}' expects a string, got '{}'", (param, arg))
            return text

        return self.evaluate(arg.split())

    def pop_frame(self, keyword, value=None):
        """Pops the innermost call. keyword is the statement ending the call (used for errors), value what it returns."""
        if not self.call_stack:
            raise StructuralError("'{}' outside of a function", keyword)
        frame = self.call_stack.pop()
        returned = "" if value is None else f" with {value}"
        self.trace("return", f"{frame.name}{returned} to line {self.program[frame.return_line].line_num}")
        return frame

    def return_value(self, value):
        """Ends the innermost call with value. Execution goes back onto the call site, which consumes value."""
        frame = self.pop_frame("return", value)
        self.returned = value
        self.goto(frame.return_line)
