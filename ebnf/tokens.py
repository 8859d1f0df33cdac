import dataclasses
import enum
import typing


class TokenKind(enum.Enum):
    IDENTIFIER = "ident"
    INTEGER = "integer"
    STRING = "string"
    SYMBOL = "symbol"
    COMMENT = "comment"
    SPECIAL = "special"
    EOF = "eof"


@dataclasses.dataclass(frozen=True)
class Token:
    text: str
    kind: TokenKind
    line: int = 1
    integer: int | None = None

    @classmethod
    def make(cls, text: str, kind: TokenKind, line: int) -> "Token":
        """Build a token, decoding the value of integer tokens."""
        integer = int(text) if kind == TokenKind.INTEGER else None
        return cls(text=text, kind=kind, line=line, integer=integer)

    def is_symbol(self, text: str) -> bool:
        return self.kind == TokenKind.SYMBOL and self.text == text

    def to_debug(self) -> str:
        return f"[TOKEN: {self.kind.value}, '{self.text}']"


@dataclasses.dataclass(frozen=True)
class Diagnostic:
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.message}, at line {self.line}"


class Diagnostics:
    """The errors and warnings collected over a scan and parse.

    Nothing in the scanner or the parser raises on bad input; they record what
    went wrong here and report failure through their return values, so the
    caller can show every problem at once.
    """

    errors: list[Diagnostic]
    warnings: list[Diagnostic]

    def __init__(self):
        self.errors = []
        self.warnings = []

    def error(self, message: str, line: int):
        self.errors.append(Diagnostic(line=line, message=message))

    def warning(self, message: str, line: int):
        self.warnings.append(Diagnostic(line=line, message=message))

    def clear(self):
        self.errors.clear()
        self.warnings.clear()

    def any(self) -> bool:
        """Return True if there are any errors in this collection."""
        return len(self.errors) > 0

    def lines(self) -> list[str]:
        result = [f"ERROR: {error}" for error in self.errors]
        result.extend(f"WARNING: {warning}" for warning in self.warnings)
        return result

    def err_out(self) -> str:
        return "".join(line + "\n" for line in self.lines())


class TokenStream:
    """A cursor over a list of tokens.

    The cursor never moves past the last token, which (for any stream that
    came out of a successful scan) is the EOF token. The stream also owns the
    diagnostics for the scan and the parse that consumes it.
    """

    tokens: list[Token]
    diagnostics: Diagnostics

    def __init__(self, tokens: typing.Iterable[Token] = (), diagnostics: Diagnostics | None = None):
        self.tokens = list(tokens)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._index = 0

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self) -> typing.Iterator[Token]:
        return iter(self.tokens)

    def push(self, token: Token):
        self.tokens.append(token)

    @property
    def index(self) -> int:
        return self._index

    def seek(self, pos: int) -> bool:
        if 0 <= pos < len(self.tokens):
            self._index = pos
            return True
        return False

    def current(self) -> Token:
        return self.tokens[self._index]

    def advance(self) -> bool:
        if self._index + 1 < len(self.tokens):
            self._index += 1
            return True
        return False

    def rewind(self, count: int = 1):
        self._index = max(self._index - count, 0)

    @property
    def kind(self) -> TokenKind:
        return self.current().kind

    @property
    def text(self) -> str:
        return self.current().text

    @property
    def line(self) -> int:
        if len(self.tokens) == 0:
            return 1
        return self.current().line

    def at_symbol(self, text: str) -> bool:
        return self.current().is_symbol(text)

    def at_eof(self) -> bool:
        return self.kind == TokenKind.EOF

    def error(self, message: str, line: int | None = None):
        self.diagnostics.error(message, self.line if line is None else line)

    def warning(self, message: str, line: int | None = None):
        self.diagnostics.warning(message, self.line if line is None else line)

    def err_out(self) -> str:
        return self.diagnostics.err_out()

    ###########################################################################
    # Fix-up passes, run once after a clean scan.
    ###########################################################################

    def delete_comments(self) -> int:
        """Drop all the comment tokens, returning how many were dropped."""
        before = len(self.tokens)
        self.tokens = [t for t in self.tokens if t.kind != TokenKind.COMMENT]
        self._index = 0
        return before - len(self.tokens)

    def join_words(self, separator: str) -> int:
        """Merge each run of adjacent identifiers into a single identifier.

        Meta-identifiers can be made of several words (`syntax rule`), which
        the scanner sees as separate identifiers. Returns the number of merges.
        """
        merged: list[Token] = []
        count = 0
        for token in self.tokens:
            if (
                token.kind == TokenKind.IDENTIFIER
                and len(merged) > 0
                and merged[-1].kind == TokenKind.IDENTIFIER
            ):
                previous = merged[-1]
                merged[-1] = dataclasses.replace(previous, text=previous.text + separator + token.text)
                count += 1
            else:
                merged.append(token)

        self.tokens = merged
        self._index = 0
        return count

    ###########################################################################
    # Debugging
    ###########################################################################

    def to_debug(self) -> str:
        return ", ".join(token.to_debug() for token in self.tokens)

    def dump(self, *, start=None, end=None) -> list[str]:
        if start is None:
            start = 0
        if end is None:
            end = len(self.tokens)

        if len(self.tokens) == 0:
            return []

        max_kind_name = max(len(kind.value) for kind in TokenKind)
        max_index_len = len(str(len(self.tokens)))

        prev_line = None
        lines = []
        for index, token in enumerate(self.tokens[start:end], start):
            if token.line != prev_line:
                line_part = f"{token.line:4}"
                prev_line = token.line
            else:
                line_part = "   |"

            lines.append(
                f"{index:{max_index_len}} {line_part} {token.kind.value:{max_kind_name}} {repr(token.text)}"
            )
        return lines
