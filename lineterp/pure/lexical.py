"""Tokenization of lineterp source text.

The `pure` directory holds the language-independent core: splitting source into statement lines and evaluating RPN
expressions. Classification of lines into statements lives in `lang`.

A source line is tokenized as follows:

```
<line>    ::= <token> (" " <token>)*      ; tabs are stripped, runs of spaces collapse
<comment> ::= "//" <char>*                ; only recognized as the first token of a line
<string>  ::= '"' <char>* '"'             ; may contain spaces, must close on the same line
```

Blank lines and comment lines are dropped entirely, so statement indices are not source line numbers: each Line keeps
the number of the source line it came from.
"""

from dataclasses import dataclass
from typing import List

from lineterp.lang.error import LexError


COMMENT = "//"
QUOTE = "\""


@dataclass
class Line:
    """A statement line: tokens of one source line, plus its (1-based) line number in the source."""
    tokens: List[str]
    line_num: int

    @property
    def keyword(self):
        """First token of the line. Block matching only ever looks at this."""
        return self.tokens[0]

    def __str__(self):
        return " ".join(self.tokens)


def is_string(token):
    """Whether or not token is a complete string literal."""
    return len(token) >= 2 and token.startswith(QUOTE) and token.endswith(QUOTE)


def dequote(token):
    """Returns contents of string literal token."""
    if not is_string(token):
        raise LexError("unclosed string '{}'", token)
    return token[1:-1]


def split_line(line):
    """Strips tabs and splits line on single spaces, dropping empty tokens."""
    return [token for token in line.replace("\t", "").split(" ") if token.strip()]


def reassemble(tokens):
    """Merges tokens belonging to the same string literal. Raises LexError if a string literal is never closed."""
    merged = []
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        idx += 1

        if token.startswith(QUOTE) and not is_string(token):
            parts = [token]
            while not is_string(" ".join(parts)):
                if idx == len(tokens):
                    raise LexError("unclosed string starting at '{}'", token)
                parts.append(tokens[idx])
                idx += 1
            token = " ".join(parts)

        merged.append(token)
    return merged


def tokenize_line(line):
    """Tokenizes a single source line. Returns [] for blank and comment lines."""
    tokens = split_line(line)
    if not tokens or tokens[0].startswith(COMMENT):
        return []
    return reassemble(tokens)


def tokenize(text, first_line_num=1):
    """Tokenizes source text into a list of Lines. first_line_num is the number given to the first line of text."""
    lines = []
    for line_num, line in enumerate(text.splitlines(), first_line_num):
        tokens = tokenize_line(line)
        if tokens:
            lines.append(Line(tokens, line_num))
    return lines
