"""Variable storage and the call stack."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


class Scope:
    """Variables of one lexical frame: the global frame or a single function activation. Integers and strings live in
    separate namespaces, and a name is only ever in the one it was last assigned to.
    """

    def __init__(self):
        self.ints: Dict[str, int] = {}
        self.strings: Dict[str, str] = {}

    def assign(self, name, value):
        """Binds name to value (int or str), moving it between namespaces if its kind changed."""
        if isinstance(value, str):
            self.ints.pop(name, None)
            self.strings[name] = value
        else:
            self.strings.pop(name, None)
            self.ints[name] = value

    def get_int(self, name):
        return self.ints.get(name)

    def get_string(self, name):
        return self.strings.get(name)

    def __contains__(self, name):
        return name in self.ints or name in self.strings

    def snapshot(self):
        """One-line rendering of every variable, used by dump."""
        ints = ", ".join(f"{name}: {value}" for name, value in self.ints.items())
        strings = ", ".join(f"{name}: \"{value}\"" for name, value in self.strings.items())
        return f"int{{{ints}}} string{{{strings}}}"

    def __repr__(self):
        return f"Scope(ints={self.ints}, strings={self.strings})"


@dataclass
class Frame:
    """Activation record of one call: where to go back to, and the callee's variables."""
    name: str
    return_line: int
    scope: Scope = field(default_factory=Scope)


class CallStack:
    """Active function calls, innermost last."""

    def __init__(self):
        self.frames: List[Frame] = []

    def push(self, frame):
        self.frames.append(frame)

    def pop(self):
        return self.frames.pop()

    @property
    def top(self) -> Optional[Frame]:
        return self.frames[-1] if self.frames else None

    @property
    def caller(self) -> Optional[Frame]:
        """Frame below the top, i.e. the frame of whoever pushed the top frame. None if the caller is global."""
        return self.frames[-2] if len(self.frames) > 1 else None

    def clear(self):
        self.frames = []

    def __len__(self):
        return len(self.frames)

    def __bool__(self):
        return bool(self.frames)

    def __iter__(self):
        return iter(self.frames)
