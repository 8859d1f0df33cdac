"""A recursive-descent parser for ISO EBNF.

There is one `visit_` method per production of the EBNF-in-EBNF grammar:

    syntax            = syntax rule, {syntax rule};
    syntax rule       = meta identifier, '=', definitions list, ';';
    definitions list  = single definition, {'|', single definition};
    single definition = term, {',', term};
    term              = factor, ['-', exception];
    exception         = factor;
    factor            = [integer, '*'], primary;
    primary           = optional sequence | repeated sequence
                      | grouped sequence | meta identifier
                      | terminal string | special sequence | empty;
    optional sequence = '[', definitions list, ']';
    repeated sequence = '{', definitions list, '}';
    grouped sequence  = '(', definitions list, ')';

The grammar is LL(1), so each method just looks at the current token and
either builds its node or records what it expected and returns None. A None
from any production propagates straight up and the whole parse fails; any
half-built subtree is simply dropped. Nothing raises.
"""

import logging

from .nodes import (
    Binary,
    BinaryOp,
    Empty,
    Ident,
    Integer,
    Node,
    Seq,
    SeqKind,
    Special,
    StringLit,
    Unary,
    UnaryOp,
)
from .scanner import ScanOptions, scan
from .tokens import Diagnostics, Token, TokenKind, TokenStream


parse_log = logging.getLogger("ebnf.parser")


# A primary that starts with one of these is the empty primary: it matches
# nothing and leaves the token for the enclosing production. This is what
# makes `empty = ;` and `text = | a, b;` legal.
EMPTY_FOLLOWERS = frozenset([";", "|", ",", ")", "}", "]"])


def describe(token: Token) -> str:
    if token.kind == TokenKind.EOF:
        return "end of file"
    if token.kind == TokenKind.STRING:
        return f"string {token.text!r}"
    return f"'{token.text}'"


class Parser:
    stream: TokenStream
    ast: Seq | None

    def __init__(self, stream: TokenStream):
        self.stream = stream
        self.ast = None

    @property
    def diagnostics(self) -> Diagnostics:
        return self.stream.diagnostics

    def err_out(self) -> str:
        return self.stream.err_out()

    def parse(self) -> bool:
        """Parse the whole stream. Succeeds only if we built a tree *and*
        consumed every token up to the end of the file."""
        self.ast = None
        if len(self.stream) == 0:
            return False

        self.stream.seek(0)
        ast = self.visit_syntax()
        if ast is None:
            return False

        if not self.stream.at_eof():
            self._error(f"unexpected {describe(self.stream.current())}")
            return False

        parse_log.info(f"parsed {len(ast.items)} rule(s)")
        self.ast = ast
        return True

    def _trace(self, production: str):
        if parse_log.isEnabledFor(logging.DEBUG):
            token = self.stream.current()
            parse_log.debug(f"{token.line:4} {production} @ {describe(token)}")

    def _error(self, message: str):
        parse_log.debug(f"error: {message} (line {self.stream.line})")
        self.stream.error(message)

    def _expect(self, symbol: str, message: str) -> bool:
        if not self.stream.at_symbol(symbol):
            self._error(message)
            return False
        self.stream.advance()
        return True

    # syntax = syntax rule, {syntax rule};
    def visit_syntax(self) -> Seq | None:
        self._trace("syntax")

        rule = self.visit_syntax_rule()
        if rule is None:
            return None

        rules = Seq(SeqKind.RULES, [rule])
        while not self.stream.at_eof():
            rule = self.visit_syntax_rule()
            if rule is None:
                return None
            rules.push(rule)

        return rules

    # syntax rule = meta identifier, '=', definitions list, ';';
    def visit_syntax_rule(self) -> Binary | None:
        self._trace("syntax rule")

        if self.stream.kind != TokenKind.IDENTIFIER:
            self._error("expected identifier")
            return None
        name = Ident(self.stream.text)
        self.stream.advance()

        if not self._expect("=", "expected '='"):
            return None

        definitions = self.visit_definitions_list()
        if definitions is None:
            return None

        if not self._expect(";", "expected ';' or ','"):
            return None

        return Binary(BinaryOp.RULE, name, definitions)

    # definitions list = single definition, {'|', single definition};
    def visit_definitions_list(self) -> Seq | None:
        self._trace("definitions list")

        definition = self.visit_single_definition()
        if definition is None:
            return None

        expr = Seq(SeqKind.EXPR, [definition])
        while self.stream.at_symbol("|"):
            self.stream.advance()
            definition = self.visit_single_definition()
            if definition is None:
                return None
            expr.push(definition)

        return expr

    # single definition = term, {',', term};
    def visit_single_definition(self) -> Seq | None:
        self._trace("single definition")

        term = self.visit_term()
        if term is None:
            return None

        terms = Seq(SeqKind.TERMS, [term])
        while self.stream.at_symbol(","):
            self.stream.advance()
            term = self.visit_term()
            if term is None:
                return None
            terms.push(term)

        return terms

    # term = factor, ['-', exception];
    def visit_term(self) -> Node | None:
        self._trace("term")

        factor = self.visit_factor()
        if factor is None:
            return None

        if not self.stream.at_symbol("-"):
            return factor

        self.stream.advance()
        exception = self.visit_exception()
        if exception is None:
            return None
        return Binary(BinaryOp.EXCEPT, factor, exception)

    # exception = factor;
    def visit_exception(self) -> Node | None:
        self._trace("exception")
        return self.visit_factor()

    # factor = [integer, '*'], primary;
    def visit_factor(self) -> Node | None:
        self._trace("factor")

        if self.stream.kind != TokenKind.INTEGER:
            return self.visit_primary()

        count = self.stream.current().integer
        assert count is not None
        self.stream.advance()
        if not self._expect("*", "expected '*'"):
            return None

        primary = self.visit_primary()
        if primary is None:
            return None
        return Binary(BinaryOp.TIMES, Integer(count), primary)

    # primary = optional sequence | repeated sequence | grouped sequence
    #         | meta identifier | terminal string | special sequence | empty;
    def visit_primary(self) -> Node | None:
        self._trace("primary")

        token = self.stream.current()
        match token.kind:
            case TokenKind.STRING:
                self.stream.advance()
                return StringLit(token.text)

            case TokenKind.IDENTIFIER:
                self.stream.advance()
                return Ident(token.text)

            case TokenKind.SPECIAL:
                self.stream.advance()
                return Special(token.text)

            case TokenKind.SYMBOL if token.text == "[":
                return self.visit_optional_sequence()

            case TokenKind.SYMBOL if token.text == "{":
                return self.visit_repeated_sequence()

            case TokenKind.SYMBOL if token.text == "(":
                return self.visit_grouped_sequence()

            case TokenKind.SYMBOL if token.text in EMPTY_FOLLOWERS:
                return Empty()

            case _:
                self._error(f"unexpected {describe(token)}")
                return None

    def _visit_bracketed(self, op: UnaryOp, opening: str, closing: str) -> Unary | None:
        if not self._expect(opening, f"expected '{opening}'"):
            return None

        definitions = self.visit_definitions_list()
        if definitions is None:
            return None

        if not self._expect(closing, f"'{closing}' unmatched"):
            return None

        return Unary(op, definitions)

    # optional sequence = '[', definitions list, ']';
    def visit_optional_sequence(self) -> Unary | None:
        self._trace("optional sequence")
        return self._visit_bracketed(UnaryOp.OPTIONAL, "[", "]")

    # repeated sequence = '{', definitions list, '}';
    def visit_repeated_sequence(self) -> Unary | None:
        self._trace("repeated sequence")
        return self._visit_bracketed(UnaryOp.REPEATED, "{", "}")

    # grouped sequence = '(', definitions list, ')';
    def visit_grouped_sequence(self) -> Unary | None:
        self._trace("grouped sequence")
        return self._visit_bracketed(UnaryOp.GROUP, "(", ")")


def parse(stream: TokenStream) -> tuple[Seq | None, bool]:
    """Parse a scanned (and fixed-up) token stream into a `Seq(RULES)`.

    Returns the tree, or None, and whether the parse succeeded. Diagnostics
    end up in `stream.diagnostics`.
    """
    parser = Parser(stream)
    ok = parser.parse()
    return parser.ast, ok


def parse_text(text: str, options: ScanOptions | None = None) -> tuple[Seq | None, Diagnostics]:
    """Scan and parse grammar text in one go.

    Returns the tree (None if either the scan or the parse failed) and all of
    the diagnostics from both.
    """
    stream, ok = scan(text, options)
    if not ok:
        return None, stream.diagnostics

    ast, _ = parse(stream)
    return ast, stream.diagnostics
