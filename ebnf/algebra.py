"""Comparing, canonicalizing, and editing grammar trees.

Two grammars that differ only superficially (`a | b` vs `b | a`, `a | a`
vs `a`, `(x, y), z` vs `x, y, z`) should compare equal. We get there by
reducing both trees to a *canonical form* and comparing those:

- An alternation (`Seq(EXPR)`) is a set. Its alternatives are canonicalized,
  any alternative that is just a parenthesized alternation is spliced into
  the parent, and the result is sorted and de-duplicated.
- A concatenation (`Seq(TERMS)`) is ordered. Empty factors are dropped, and a
  parenthesized group with a single alternative is spliced in place. A
  concatenation with nothing left in it is `[Empty]`.
- The grammar (`Seq(RULES)`) keeps its rules in declaration order.
- An empty terminal string is the empty primary.

Everything compares through `sort_key`, which maps a tree to nested tuples
whose ordinary tuple ordering is the total order on trees: first the kind of
node, then its payload, then its children. Sequences compare element-wise,
with a sequence that is a strict prefix of another sorting first. Equality
and ordering both come from the same key, so they can't disagree.

For the grammar as a whole, rule order doesn't matter for comparison (the
key sorts the rules), even though canonicalization leaves them alone.
"""

import logging
import re
import typing

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
    normalize_name,
    rule,
    rule_body,
    rule_name,
)


algebra_log = logging.getLogger("ebnf.algebra")


# The order of node kinds in the total order.
_RANK = {
    Integer: 0,
    StringLit: 1,
    Binary: 2,
    Ident: 3,
    Unary: 4,
    Seq: 5,
    Special: 6,
    Empty: 7,
}

SortKey = tuple[typing.Any, ...]


def is_empty(node: Node) -> bool:
    """Does this node only ever match the empty string?

    The grammar itself is never empty, even with no rules in it.
    """
    match node:
        case Empty():
            return True
        case StringLit(text=text):
            return text == ""
        case Unary(arg=arg):
            return is_empty(arg)
        case Seq(kind=SeqKind.RULES):
            return False
        case Seq(items=items):
            return all(is_empty(item) for item in items)
        case _:
            return False


def _group_alternatives(node: Node) -> list[Node] | None:
    """If the node is `( a | b | ... )`, the alternatives inside it."""
    match node:
        case Unary(op=UnaryOp.GROUP, arg=Seq(kind=SeqKind.EXPR, items=items)):
            return items
    return None


def _canonical_terms(items: list[Node]) -> Seq:
    factors: list[Node] = []
    for item in items:
        factor = sorted_clone(item)
        if is_empty(factor):
            continue

        inner = _group_alternatives(factor)
        if inner is not None and len(inner) == 1:
            match inner[0]:
                case Seq(kind=SeqKind.TERMS, items=terms):
                    factors.extend(terms)
                    continue
        factors.append(factor)

    if len(factors) == 0:
        factors.append(Empty())
    return Seq(SeqKind.TERMS, factors)


def _canonical_expr(items: list[Node]) -> Seq:
    alternatives: list[Node] = []
    for item in items:
        alternative = sorted_clone(item)
        match alternative:
            case Seq(kind=SeqKind.TERMS, items=[factor]):
                inner = _group_alternatives(factor)
                if inner is not None:
                    alternatives.extend(inner)
                    continue
        alternatives.append(alternative)

    unique: dict[SortKey, Node] = {}
    for alternative in alternatives:
        unique.setdefault(_key(alternative), alternative)

    return Seq(SeqKind.EXPR, [unique[key] for key in sorted(unique)])


def sorted_clone(node: Node) -> Node:
    """Make a canonical copy of the tree. The original is not touched."""
    match node:
        case Integer(value=value):
            return Integer(value)
        case StringLit(text=""):
            return Empty()
        case StringLit(text=text):
            return StringLit(text)
        case Ident(name=name):
            return Ident(name)
        case Special(text=text):
            return Special(text)
        case Unary(op=op, arg=arg):
            return Unary(op, sorted_clone(arg))
        case Binary(op=op, left=left, right=right):
            return Binary(op, sorted_clone(left), sorted_clone(right))
        case Seq(kind=SeqKind.RULES, items=items):
            return Seq(SeqKind.RULES, [sorted_clone(item) for item in items])
        case Seq(kind=SeqKind.EXPR, items=items):
            return _canonical_expr(items)
        case Seq(kind=SeqKind.TERMS, items=items):
            return _canonical_terms(items)
        case Empty():
            return Empty()
        case _:
            typing.assert_never(node)


def _key(node: Node) -> SortKey:
    """The sort key of a tree that is already in canonical form."""
    rank = _RANK[type(node)]
    match node:
        case Integer(value=value):
            return (rank, value)
        case StringLit(text=text):
            return (rank, text)
        case Ident(name=name):
            return (rank, name)
        case Special(text=text):
            return (rank, text)
        case Unary(op=op, arg=arg):
            return (rank, op.value, _key(arg))
        case Binary(op=op, left=left, right=right):
            return (rank, op.value, _key(left), _key(right))
        case Seq(kind=SeqKind.RULES, items=items):
            return (rank, SeqKind.RULES.value, tuple(sorted(_key(item) for item in items)))
        case Seq(kind=kind, items=items):
            return (rank, kind.value, tuple(_key(item) for item in items))
        case Empty():
            return (rank,)
        case _:
            typing.assert_never(node)


def sort_key(node: Node) -> SortKey:
    """A key for sorting trees by their canonical forms: `sorted(trees,
    key=sort_key)`."""
    return _key(sorted_clone(node))


def ast_equal(left: Node, right: Node) -> bool:
    """Are the two trees the same once canonicalized?"""
    return sort_key(left) == sort_key(right)


def ast_less_than(left: Node, right: Node) -> bool:
    """Does `left` come strictly before `right` in the total order?"""
    return sort_key(left) < sort_key(right)


def ast_compare(left: Node, right: Node) -> int:
    """-1, 0, or 1 as `left` is less than, equal to, or greater than
    `right`."""
    lk = sort_key(left)
    rk = sort_key(right)
    if lk < rk:
        return -1
    if lk > rk:
        return 1
    return 0


###############################################################################
# Rules
###############################################################################


def _rules(rules: Seq) -> list[Binary]:
    assert isinstance(rules, Seq) and rules.kind == SeqKind.RULES, "Expected a Seq(RULES)"
    result = []
    for item in rules.items:
        assert isinstance(item, Binary) and item.op == BinaryOp.RULE, "Expected a rule"
        result.append(item)
    return result


def rule_names(rules: Seq) -> list[str]:
    return [rule_name(r) for r in _rules(rules)]


def ast_get_rule_body(rules: Seq, name: str) -> Seq | None:
    """The right hand side of the first rule named `name`, or None."""
    name = normalize_name(name)
    for r in _rules(rules):
        if rule_name(r) == name:
            return rule_body(r)
    return None


def ast_join_joinable_rules(rules: Seq) -> bool:
    """Merge rules that share a name into the first of them, in place.

    `a = x; b = y; a = z;` becomes `a = x | z; b = y;`. Returns True if
    anything was merged.
    """
    items = _rules(rules)

    joined = False
    i = 0
    while i < len(items):
        name = rule_name(items[i])
        body = rule_body(items[i])
        j = i + 1
        while j < len(items):
            if rule_name(items[j]) == name:
                algebra_log.debug(f"joining rule {j} into rule {i} ({name})")
                body.items.extend(rule_body(items[j]).items)
                del items[j]
                joined = True
            else:
                j += 1
        i += 1

    rules.items = list(items)
    return joined


_TRAILING_DIGITS = re.compile(r"[0-9]+$")


def increment_name(name: str) -> str:
    """Bump the numeric suffix of a name: `x` -> `x_02`, `x_02` -> `x_03`,
    `x9` -> `x10`."""
    match = _TRAILING_DIGITS.search(name)
    if match is None or match.start() == 0:
        return f"{name}_02"

    digits = match.group()
    return f"{name[: match.start()]}{int(digits) + 1:02d}"


def ast_add_rule(rules: Seq, expr: Seq, name: str) -> str:
    """Add a rule `name = expr;` to the grammar, unless there's one already.

    The expression is canonicalized first. If some existing rule already has
    the same body, nothing is added and that rule's name is returned.
    Otherwise the rule is appended under `name`, bumping its numeric suffix
    until it doesn't collide, and the name actually used is returned.

    Rules must already have been joined (see `ast_join_joinable_rules`).
    """
    assert isinstance(expr, Seq) and expr.kind == SeqKind.EXPR, "Rule bodies are Seq(EXPR)"
    items = _rules(rules)
    names = [rule_name(r) for r in items]
    assert len(set(names)) == len(names), "Join rules before adding new ones"

    canonical = sorted_clone(expr)
    assert isinstance(canonical, Seq)
    wanted = _key(canonical)
    for r in items:
        if sort_key(rule_body(r)) == wanted:
            existing = rule_name(r)
            algebra_log.debug(f"rule {name} already exists as {existing}")
            return existing

    name = normalize_name(name)
    while name in names:
        name = increment_name(name)

    algebra_log.debug(f"adding rule {name}")
    rules.push(rule(name, canonical))
    return name
