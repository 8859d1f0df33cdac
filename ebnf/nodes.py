"""The abstract syntax tree for EBNF grammars.

A grammar parses to a closed set of node types:

    Seq(RULES)               the whole grammar, a list of rules
      Binary(RULE)           `name = ...;`
        Ident                the left hand side
        Seq(EXPR)            alternatives, `a | b | c`
          Seq(TERMS)         a concatenation, `a, b, c`
            Binary(EXCEPT)   `factor - exception`
            Binary(TIMES)    `3 * primary`, left is always an Integer
            Unary(...)       `[...]`, `{...}`, `(...)`, arg is a Seq(EXPR)
            Ident, StringLit, Special, Empty

Trees are strictly trees: every node owns its children and nothing is
shared, so it's safe to edit one in place (see the rule functions in the
algebra module) as long as you don't hand the same node to two parents.
`clone` always makes a disjoint copy.

The dataclass `==` on these nodes is *exact* structural equality: same
shapes, same order. For the looser notion where `a | b` equals `b | a`, use
`ast_equal` from the algebra module.
"""

import dataclasses
import enum
import re
import typing


# Multi-word meta-identifiers are stored with their words separated by exactly
# this. The scanner uses it to join adjacent words, and Ident uses it to
# normalize names, so `syntax rule`, `syntax  rule` and `syntax-rule` are all
# the same name.
WORD_SEPARATOR = " "

_WORD_BREAK = re.compile(r"[\s\-]+")


def normalize_name(name: str) -> str:
    return WORD_SEPARATOR.join(word for word in _WORD_BREAK.split(name) if word)


class UnaryOp(enum.Enum):
    OPTIONAL = "optional"
    REPEATED = "repeated"
    GROUP = "group"


class BinaryOp(enum.Enum):
    RULE = "rule"
    EXCEPT = "except"
    TIMES = "times"


class SeqKind(enum.Enum):
    RULES = "rules"
    EXPR = "expr"
    TERMS = "terms"


@dataclasses.dataclass
class Integer:
    value: int


@dataclasses.dataclass
class StringLit:
    text: str  # Unquoted; the quotes are picked when rendering.


@dataclasses.dataclass
class Ident:
    name: str

    def __post_init__(self):
        self.name = normalize_name(self.name)


@dataclasses.dataclass
class Special:
    text: str


@dataclasses.dataclass
class Unary:
    op: UnaryOp
    arg: "Node"

    def __post_init__(self):
        assert self.arg is not None, "Unary node needs an argument"


@dataclasses.dataclass
class Binary:
    op: BinaryOp
    left: "Node"
    right: "Node"

    def __post_init__(self):
        assert self.left is not None and self.right is not None
        if self.op == BinaryOp.RULE:
            assert isinstance(self.left, Ident), "Rules are named by an identifier"
            assert isinstance(self.right, Seq) and self.right.kind == SeqKind.EXPR


@dataclasses.dataclass
class Seq:
    kind: SeqKind
    items: list["Node"] = dataclasses.field(default_factory=list)

    def push(self, node: "Node"):
        assert node is not None
        self.items.append(node)


@dataclasses.dataclass
class Empty:
    pass


Node = Integer | StringLit | Ident | Special | Unary | Binary | Seq | Empty


def rule(name: str, expr: Seq) -> Binary:
    return Binary(BinaryOp.RULE, Ident(name), expr)


def rule_name(node: Binary) -> str:
    assert node.op == BinaryOp.RULE
    assert isinstance(node.left, Ident)
    return node.left.name


def rule_body(node: Binary) -> Seq:
    assert node.op == BinaryOp.RULE
    assert isinstance(node.right, Seq)
    return node.right


def clone(node: Node) -> Node:
    """Make a deep copy of the tree, sharing nothing with the original."""
    match node:
        case Integer(value=value):
            return Integer(value)
        case StringLit(text=text):
            return StringLit(text)
        case Ident(name=name):
            return Ident(name)
        case Special(text=text):
            return Special(text)
        case Unary(op=op, arg=arg):
            return Unary(op, clone(arg))
        case Binary(op=op, left=left, right=right):
            return Binary(op, clone(left), clone(right))
        case Seq(kind=kind, items=items):
            return Seq(kind, [clone(item) for item in items])
        case Empty():
            return Empty()
        case _:
            typing.assert_never(node)


###############################################################################
# Rendering
###############################################################################


def quote(text: str) -> str:
    """Quote a terminal string, preferring double quotes."""
    if '"' not in text:
        return f'"{text}"'
    return f"'{text}'"


_BRACKETS = {
    UnaryOp.OPTIONAL: ("[", "]"),
    UnaryOp.REPEATED: ("{", "}"),
    UnaryOp.GROUP: ("(", ")"),
}

_BINARY_SYMBOLS = {
    BinaryOp.EXCEPT: "-",
    BinaryOp.TIMES: "*",
}


def to_debug(node: Node) -> str:
    """Render the tree as nested brackets, e.g.
    `[SEQ rules: [BINARY rule: [IDENT: a], [SEQ expr: ...]]]`."""
    match node:
        case Integer(value=value):
            return f"[INTEGER: {value}]"
        case StringLit(text=text):
            return f"[STRING: {text}]"
        case Ident(name=name):
            return f"[IDENT: {name}]"
        case Special(text=text):
            return f"[SPECIAL: {text}]"
        case Unary(op=op, arg=arg):
            return f"[UNARY {op.value}: {to_debug(arg)}]"
        case Binary(op=op, left=left, right=right):
            return f"[BINARY {op.value}: {to_debug(left)}, {to_debug(right)}]"
        case Seq(kind=kind, items=items):
            return f"[SEQ {kind.value}: " + ", ".join(to_debug(item) for item in items) + "]"
        case Empty():
            return "[EMPTY]"
        case _:
            typing.assert_never(node)


def format_lines(node: Node) -> list[str]:
    """Render the tree one node per line, children indented under parents."""
    lines = []

    def format_node(node: Node, indent: int):
        prefix = " " * indent
        match node:
            case Integer(value=value):
                lines.append(f"{prefix}integer {value}")
            case StringLit(text=text):
                lines.append(f"{prefix}string {quote(text)}")
            case Ident(name=name):
                lines.append(f"{prefix}ident {name}")
            case Special(text=text):
                lines.append(f"{prefix}special ?{text}?")
            case Unary(op=op, arg=arg):
                lines.append(f"{prefix}{op.value}")
                format_node(arg, indent + 2)
            case Binary(op=op, left=left, right=right):
                lines.append(f"{prefix}{op.value}")
                format_node(left, indent + 2)
                format_node(right, indent + 2)
            case Seq(kind=kind, items=items):
                lines.append(f"{prefix}{kind.value} [{len(items)}]")
                for item in items:
                    format_node(item, indent + 2)
            case Empty():
                lines.append(f"{prefix}empty")
            case _:
                typing.assert_never(node)

    format_node(node, 0)
    return lines


def format_tree(node: Node) -> str:
    return "\n".join(format_lines(node))


def to_bnf(node: Node) -> str:
    """Render the tree in BNF: `<name> ::= <a> "b" | [<c>]`, one rule per
    line."""
    match node:
        case Integer(value=value):
            return str(value)
        case StringLit(text=text):
            return quote(text)
        case Ident(name=name):
            return f"<{name}>"
        case Special(text=text):
            return f"...{text}..."
        case Unary(op=op, arg=arg):
            left, right = _BRACKETS[op]
            return f"{left}{to_bnf(arg)}{right}"
        case Binary(op=BinaryOp.RULE, left=left, right=right):
            return f"{to_bnf(left)} ::= {to_bnf(right)}\n"
        case Binary(op=op, left=left, right=right):
            return f"{to_bnf(left)} {_BINARY_SYMBOLS[op]} {to_bnf(right)}"
        case Seq(kind=SeqKind.RULES, items=items):
            return "".join(to_bnf(item) for item in items)
        case Seq(kind=SeqKind.EXPR, items=items):
            return " | ".join(to_bnf(item) for item in items)
        case Seq(kind=SeqKind.TERMS, items=items):
            return " ".join(to_bnf(item) for item in items)
        case Empty():
            return '""'
        case _:
            raise ValueError(f"Cannot render {node!r} as BNF")


def to_ebnf(node: Node) -> str:
    """Render the tree in ISO EBNF: `name = a, "b" | [c];`, one rule per
    line. Parsing the output gives back an equal tree."""
    match node:
        case Integer(value=value):
            return str(value)
        case StringLit(text=text):
            return quote(text)
        case Ident(name=name):
            return name
        case Special(text=text):
            return f"?{text}?"
        case Unary(op=op, arg=arg):
            left, right = _BRACKETS[op]
            return f"{left}{to_ebnf(arg)}{right}"
        case Binary(op=BinaryOp.RULE, left=left, right=right):
            return f"{to_ebnf(left)} = {to_ebnf(right)};\n"
        case Binary(op=op, left=left, right=right):
            return f"{to_ebnf(left)} {_BINARY_SYMBOLS[op]} {to_ebnf(right)}"
        case Seq(kind=SeqKind.RULES, items=items):
            return "".join(to_ebnf(item) for item in items)
        case Seq(kind=SeqKind.EXPR, items=items):
            return " | ".join(to_ebnf(item) for item in items)
        case Seq(kind=SeqKind.TERMS, items=items):
            return ", ".join(to_ebnf(item) for item in items)
        case Empty():
            return ""
        case _:
            raise ValueError(f"Cannot render {node!r} as EBNF")
