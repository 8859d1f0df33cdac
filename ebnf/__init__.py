"""Read, compare, and rewrite grammars written in ISO EBNF (ISO/IEC 14977).

    from ebnf import parse_text, ast_equal, to_bnf

    left, _ = parse_text("a = x | y;")
    right, _ = parse_text("a = y | x;")
    assert ast_equal(left, right)
    print(to_bnf(left))  # <a> ::= <x> | <y>

The pieces, in the order text flows through them:

- `scanner`: text -> `TokenStream` (comments removed, multi-word names joined)
- `parser`: `TokenStream` -> tree of `nodes`
- `algebra`: canonical forms, comparison, joining and adding rules
- `nodes`: the tree itself, plus debug/BNF/EBNF renderers

Bad input never raises. Each stage returns whether it succeeded, and the
`Diagnostics` attached to the token stream say why not.
"""

from .algebra import (
    ast_add_rule,
    ast_compare,
    ast_equal,
    ast_get_rule_body,
    ast_join_joinable_rules,
    ast_less_than,
    increment_name,
    is_empty,
    rule_names,
    sort_key,
    sorted_clone,
)
from .nodes import (
    WORD_SEPARATOR,
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
    clone,
    format_lines,
    format_tree,
    rule,
    to_bnf,
    to_debug,
    to_ebnf,
)
from .parser import Parser, parse, parse_text
from .scanner import ScanOptions, Scanner, scan
from .tokens import Diagnostic, Diagnostics, Token, TokenKind, TokenStream

__version__ = "0.9.0"
