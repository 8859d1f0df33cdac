import pytest

from ebnf import (
    Binary,
    BinaryOp,
    Empty,
    Ident,
    Integer,
    Parser,
    ScanOptions,
    Seq,
    SeqKind,
    Special,
    StringLit,
    TokenKind,
    Unary,
    UnaryOp,
    parse,
    parse_text,
    scan,
)


def outcome(text: str, options: ScanOptions | None = None) -> tuple[str, int]:
    """Scan and parse, returning which stage failed (if any) and how many
    rules we ended up with."""
    stream, ok = scan(text, options)
    if not ok:
        return "scan", 0
    ast, ok = parse(stream)
    if not ok:
        return "parse", 0
    assert ast is not None
    return "ok", len(ast.items)


GRAMMARS = [
    ("scan", 0, "list = '';"),
    ("scan", 0, 'list = "";'),
    ("scan", 0, "underline_not_allowed"),
    ("ok", 1, 'list = "a";'),
    ("parse", 0, 'list = "a"; arg = list | list, list'),
    ("ok", 2, 'list = "a"; arg = list | list, list;'),
    ("parse", 0, 'list = v "a";'),
    ("parse", 0, "'a' \"a\""),
    ("parse", 0, "z = 'a' \"a\""),
    ("ok", 1, "z = 'a', \"a\";"),
    ("ok", 1, "z = 'a' | \"a\";"),
    ("ok", 1, "z = ['a'];"),
    ("ok", 1, "z = {'a'};"),
    ("ok", 1, "z = ('a');"),
    ("parse", 0, "z = 'a' ; 'z' = a;"),
    ("ok", 2, "z = 'a'; a = 'z';"),
    ("parse", 0, "'z' = a; a = test;"),
    ("parse", 0, "'z';"),
    ("parse", 0, "z;"),
    ("parse", 0, "z"),
    ("scan", 0, '"not terminated'),
    ("scan", 0, "'not terminated"),
    ("scan", 0, "?not terminated"),
    ("scan", 0, "(*not terminated"),
    ("ok", 1, 'xx = "A" - xx;'),
    ("ok", 1, 'line = 5 * " ", (character - (" " | "0")), 66 * [character];'),
    ("ok", 1, "aa = 'A';"),
    (
        "ok",
        7,
        "aa = 'A';\n"
        "bb = 3 * aa, 'B';\n"
        "cc = 3 * [aa], 'C';\n"
        "dd = {aa}, 'D';\n"
        "ee = aa, {aa}, 'E';\n"
        "ff = 3 * aa, 3 * [aa], 'F';\n"
        "gg = 3 * {aa}, 'D';\n",
    ),
    (
        "ok",
        1,
        "letter = 'A' | 'B' | 'C' | 'D' | 'E' | 'F' | 'G' | 'H' | 'I' | 'J' | 'K' | 'L' | 'M'"
        " | 'N' | 'O' | 'P' | 'Q' | 'R' | 'S' | 'T' | 'U' | 'V' | 'W' | 'X' | 'Y' | 'Z';",
    ),
    ("ok", 1, "vowel = 'A' | 'E' | 'I' | 'O' | 'U';"),
    ("ok", 1, "ee = {'A'} - , 'E';"),
    ("ok", 1, "ee = {'A'}-, 'E';"),
    ("ok", 1, "(* comment *) a = b (* inside *) | c; (* trailing *)"),
    ("ok", 1, "other = ' ' | ':' | '+' | '_' | '%' | '@' | '&' | '#' | '$' | '<' | '>' | '\\' | '^' | '`' | '~';"),
    ("ok", 1, "special = ? ISO 6429 character Horizontal Tabulation ?;"),
    ("ok", 1, "newline = { ? ISO 6429 character Carriage Return ? }, ? ISO 6429 character Line Feed ?;"),
    ("parse", 0, "test = 'test';;"),
    ("ok", 1, "gap free symbol = terminal character - (first quote symbol | second quote symbol) | terminal string;"),
    ("ok", 1, "syntax = syntax rule, {syntax rule};"),
    ("ok", 2, "a = 'a';\r\nb = 'b';\r\n"),
    (
        "ok",
        1,
        "comment = '(*', {comment symbol}, '*)' "
        "(* A comment is allowed anywhere outside a <terminal string>, "
        "<meta identifier>, <integer> or <special sequence> *);",
    ),
    ("ok", 1, "empty = ;"),
    ("ok", 1, "text = character, { character } | ;"),
    ("ok", 1, "text = | character, { character };"),
    ("ok", 1, "text = { character | };"),
    ("ok", 1, "nothing = [];"),
    ("parse", 0, "n = 3;"),
    ("parse", 0, "n = 3 * 3 * x;"),
    ("parse", 0, "a = [x;"),
    ("parse", 0, "a = x];"),
    ("parse", 0, "a = x; b"),
    ("parse", 0, ""),
]


@pytest.mark.parametrize("expected,rules,text", GRAMMARS)
def test_grammars(expected, rules, text):
    assert outcome(text) == (expected, rules)


@pytest.mark.parametrize(
    "text",
    [
        ". : ! + % @ & # $ < > / \\ ^ ` ~",
        "a = b_c;",
        "a = x. b = y.",
    ],
)
def test_invalid_characters_fail_the_scan(text):
    assert outcome(text) == ("scan", 0)


def test_relaxed_grammars():
    relaxed = ScanOptions(iso=False)
    assert outcome("list = '';", relaxed) == ("ok", 1)
    assert outcome("snake_case = other_name | '';", relaxed) == ("ok", 1)


def test_hyphenated_names():
    hyphens = ScanOptions(hyphen_words=True)
    assert outcome("syntax-rule = meta-identifier, '=', definitions-list, ';';", hyphens) == ("ok", 1)
    assert outcome("syntax-rule = a;") == ("parse", 0)


def test_rule_tree():
    ast, diagnostics = parse_text("digit = '0' | \"1\", x;")
    assert not diagnostics.any()
    assert ast == Seq(
        SeqKind.RULES,
        [
            Binary(
                BinaryOp.RULE,
                Ident("digit"),
                Seq(
                    SeqKind.EXPR,
                    [
                        Seq(SeqKind.TERMS, [StringLit("0")]),
                        Seq(SeqKind.TERMS, [StringLit("1"), Ident("x")]),
                    ],
                ),
            )
        ],
    )


def test_factor_tree():
    ast, _ = parse_text("line = 5 * x - (y | ? z ?), [], {w};")
    assert ast is not None
    terms = ast.items[0].right.items[0]
    assert terms == Seq(
        SeqKind.TERMS,
        [
            Binary(
                BinaryOp.EXCEPT,
                Binary(BinaryOp.TIMES, Integer(5), Ident("x")),
                Unary(
                    UnaryOp.GROUP,
                    Seq(
                        SeqKind.EXPR,
                        [
                            Seq(SeqKind.TERMS, [Ident("y")]),
                            Seq(SeqKind.TERMS, [Special(" z ")]),
                        ],
                    ),
                ),
            ),
            Unary(UnaryOp.OPTIONAL, Seq(SeqKind.EXPR, [Seq(SeqKind.TERMS, [Empty()])])),
            Unary(UnaryOp.REPEATED, Seq(SeqKind.EXPR, [Seq(SeqKind.TERMS, [Ident("w")])])),
        ],
    )


def test_empty_alternatives():
    ast, _ = parse_text("text = | a, ;")
    assert ast is not None
    assert ast.items[0].right == Seq(
        SeqKind.EXPR,
        [
            Seq(SeqKind.TERMS, [Empty()]),
            Seq(SeqKind.TERMS, [Ident("a"), Empty()]),
        ],
    )


def test_empty_exception():
    ast, _ = parse_text("ee = {'A'} - , 'E';")
    assert ast is not None
    first = ast.items[0].right.items[0].items[0]
    assert first == Binary(
        BinaryOp.EXCEPT,
        Unary(UnaryOp.REPEATED, Seq(SeqKind.EXPR, [Seq(SeqKind.TERMS, [StringLit("A")])])),
        Empty(),
    )


def test_multi_word_names():
    ast, _ = parse_text("syntax rule = meta  identifier, '=';")
    assert ast is not None
    rule = ast.items[0]
    assert rule.left == Ident("syntax rule")
    assert rule.right.items[0].items[0] == Ident("meta identifier")


@pytest.mark.parametrize(
    "text,message,line",
    [
        ("test = 'test';;", "expected identifier", 1),
        ("z", "expected '='", 1),
        ("z;", "expected '='", 1),
        ("a = x", "expected ';' or ','", 1),
        ("a = x 'y';", "expected ';' or ','", 1),
        ("n = 3;", "expected '*'", 1),
        ("a = [x;", "']' unmatched", 1),
        ("a = {x;", "'}' unmatched", 1),
        ("a = (x;", "')' unmatched", 1),
        ("a = =;", "unexpected '='", 1),
        ("a = x;\nb = 3 * 'q' * 'r';", "expected ';' or ','", 2),
        ("a = x;\n\n'b' = y;", "expected identifier", 3),
    ],
)
def test_parse_errors(text, message, line):
    stream, ok = scan(text)
    assert ok
    ast, ok = parse(stream)
    assert not ok
    assert ast is None
    assert [(e.message, e.line) for e in stream.diagnostics.errors] == [(message, line)]


def test_error_report_text():
    ast, diagnostics = parse_text("a = [x;\n")
    assert ast is None
    assert diagnostics.err_out() == "ERROR: ']' unmatched, at line 1\n"


def test_scan_failure_has_no_tree():
    ast, diagnostics = parse_text("a = '';")
    assert ast is None
    assert diagnostics.any()
    assert diagnostics.errors[0].message == "empty string not acceptable"


def test_parser_object():
    stream, ok = scan("a = x; b = y;")
    assert ok

    parser = Parser(stream)
    assert parser.parse()
    assert parser.ast is not None
    assert len(parser.ast.items) == 2
    assert parser.err_out() == ""

    # Parsing again starts over from the first token.
    assert parser.parse()
    assert len(parser.ast.items) == 2


def test_productions_can_be_called_directly():
    stream, ok = scan("x | y, z")
    assert ok
    parser = Parser(stream)
    expr = parser.visit_definitions_list()
    assert expr == Seq(
        SeqKind.EXPR,
        [
            Seq(SeqKind.TERMS, [Ident("x")]),
            Seq(SeqKind.TERMS, [Ident("y"), Ident("z")]),
        ],
    )
    assert stream.kind == TokenKind.EOF
