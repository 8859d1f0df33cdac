"""The scanner: turn ISO EBNF text into a stream of tokens.

Scanning is a single left-to-right pass. The first malformed token (an
unterminated string, comment, or special sequence, an empty string in ISO
mode, or a character that can't start any token) records an error and stops
the scan; there is no attempt to resynchronize, since a grammar with a broken
lexical structure isn't worth parsing.

After a clean scan we run the fix-up passes: comments are deleted, and runs
of adjacent identifiers are joined into multi-word meta-identifiers.
"""

import bisect
import dataclasses
import logging
import re

from . import chars
from .nodes import WORD_SEPARATOR
from .tokens import Diagnostics, Token, TokenKind, TokenStream


scan_log = logging.getLogger("ebnf.scanner")


@dataclasses.dataclass(frozen=True)
class ScanOptions:
    # ISO/IEC 14977: no empty terminal strings, no '_' in meta-identifiers.
    iso: bool = True
    # Let '-' continue a meta-identifier when it sits between two words with
    # no space around it, as in `syntax-rule`.
    hyphen_words: bool = False


def index_to_line(text: str, index: int) -> int:
    """The 1-based line number of the character at `index`."""
    return text.count("\n", 0, max(index, 0)) + 1


def line_to_index(text: str, line: int) -> int:
    """The index of the first character of the 1-based `line`. Lines past the
    end of the text map to the end of the text."""
    if line <= 1:
        return 0

    count = 1
    for match in re.finditer("\n", text):
        count += 1
        if count == line:
            return match.end()
    return len(text)


class Scanner:
    text: str
    options: ScanOptions
    pos: int

    def __init__(self, text: str, options: ScanOptions | None = None):
        self.text = text
        self.options = options if options is not None else ScanOptions()
        self.pos = 0
        self._newlines = [m.start() for m in re.finditer("\n", text)]

    def line_at(self, pos: int) -> int:
        return bisect.bisect_left(self._newlines, pos) + 1

    def peek(self, offset: int = 0) -> str:
        """The character `offset` past the cursor, or "" at the end."""
        index = self.pos + offset
        if index < len(self.text):
            return self.text[index]
        return ""

    def scan(self, stream: TokenStream) -> bool:
        """Append tokens to the stream until the end of the text or the first
        error. Returns False if there was an error."""
        while True:
            while chars.is_space(self.peek()):
                self.pos += 1

            line = self.line_at(self.pos)
            ch = self.peek()

            if ch == "":
                self._push(stream, Token.make("", TokenKind.EOF, line))
                return True

            if chars.is_digit(ch):
                self._push(stream, Token.make(self.scan_integer(), TokenKind.INTEGER, line))
                continue

            if ch == '"' or ch == "'":
                text = self.scan_terminal_string()
                if text is None:
                    stream.error("no end of string", line)
                    return False
                if text == "" and self.options.iso:
                    stream.error("empty string not acceptable", line)
                    return False
                self._push(stream, Token.make(text, TokenKind.STRING, line))
                continue

            if self._is_word_start(ch):
                self._push(stream, Token.make(self.scan_meta_identifier(), TokenKind.IDENTIFIER, line))
                continue

            if ch == "(" and self.peek(1) == "*":
                text = self.scan_comment()
                if text is None:
                    stream.error("no end of comment", line)
                    return False
                self._push(stream, Token.make(text, TokenKind.COMMENT, line))
                continue

            if ch == "?":
                text = self.scan_special()
                if text is None:
                    stream.error("no end of special", line)
                    return False
                self._push(stream, Token.make(text, TokenKind.SPECIAL, line))
                continue

            if chars.is_symbol(ch):
                self.pos += 1
                self._push(stream, Token.make(ch, TokenKind.SYMBOL, line))
                continue

            stream.error(f"invalid character: {ch}", line)
            return False

    def _push(self, stream: TokenStream, token: Token):
        if scan_log.isEnabledFor(logging.DEBUG):
            scan_log.debug(f"{token.line:4} {token.to_debug()}")
        stream.push(token)

    def _is_word_start(self, ch: str) -> bool:
        if self.options.iso:
            return chars.is_alpha(ch)
        return chars.is_csymf(ch)

    def _is_word_char(self, ch: str) -> bool:
        if self.options.iso:
            return chars.is_alnum(ch)
        return chars.is_csym(ch)

    # integer = decimal digit, {decimal digit};
    def scan_integer(self) -> str:
        start = self.pos
        while chars.is_digit(self.peek()):
            self.pos += 1
        return self.text[start : self.pos]

    # meta identifier = letter, {letter | decimal digit};
    def scan_meta_identifier(self) -> str:
        start = self.pos
        self.pos += 1
        while True:
            ch = self.peek()
            if self._is_word_char(ch):
                self.pos += 1
            elif self.options.hyphen_words and ch == "-" and chars.is_alnum(self.peek(1)):
                self.pos += 2
            else:
                break
        return self.text[start : self.pos]

    # terminal string = "'", character - "'", {character - "'"}, "'"
    #                 | '"', character - '"', {character - '"'}, '"';
    def scan_terminal_string(self) -> str | None:
        """Scan a quoted string, returning the text between the quotes, or
        None if the closing quote never shows up."""
        quote = self.peek()
        end = self.text.find(quote, self.pos + 1)
        if end < 0:
            self.pos = len(self.text)
            return None

        text = self.text[self.pos + 1 : end]
        self.pos = end + 1
        return text

    def scan_comment(self) -> str | None:
        end = self.text.find("*)", self.pos + 2)
        if end < 0:
            self.pos = len(self.text)
            return None

        text = self.text[self.pos + 2 : end]
        self.pos = end + 2
        return text

    def scan_special(self) -> str | None:
        end = self.text.find("?", self.pos + 1)
        if end < 0:
            self.pos = len(self.text)
            return None

        text = self.text[self.pos + 1 : end]
        self.pos = end + 1
        return text


def fixup(stream: TokenStream):
    """Run the post-scan passes: drop comments, then join multi-word
    identifiers."""
    comments = stream.delete_comments()
    joins = stream.join_words(WORD_SEPARATOR)
    scan_log.debug(f"fixup: deleted {comments} comment(s), joined {joins} word(s)")


def scan(
    text: str,
    options: ScanOptions | None = None,
    diagnostics: Diagnostics | None = None,
) -> tuple[TokenStream, bool]:
    """Scan the text into a token stream ready for the parser.

    Returns the stream and whether the scan succeeded. On failure the stream
    holds whatever tokens were produced before the error, plus the error
    itself; it should not be handed to the parser.
    """
    stream = TokenStream(diagnostics=diagnostics)
    ok = Scanner(text, options).scan(stream)
    if ok:
        fixup(stream)
        scan_log.info(f"scanned {len(stream)} token(s)")
    else:
        scan_log.info("scan failed")
    return stream, ok
