import argparse
import logging
import sys

from . import __version__
from .algebra import ast_compare, ast_join_joinable_rules, sorted_clone
from .nodes import Node, format_tree, to_bnf, to_debug, to_ebnf
from .parser import parse
from .scanner import ScanOptions, scan
from .tokens import TokenStream

EXIT_OK = 0
EXIT_SCAN_ERROR = 1
EXIT_PARSE_ERROR = 2
EXIT_IO_ERROR = 3

RENDERERS = {
    "debug": lambda node: to_debug(node) + "\n",
    "tree": lambda node: format_tree(node) + "\n",
    "bnf": to_bnf,
    "ebnf": to_ebnf,
}


def read_grammar(path: str, options: ScanOptions) -> tuple[Node | None, TokenStream | None, int]:
    """Read, scan, and parse a grammar file, printing any diagnostics.

    Returns the tree (if we got one), the token stream (if we got that far),
    and the exit status to use.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        print(f"ERROR: cannot read {path}: {e.strerror}")
        return None, None, EXIT_IO_ERROR

    stream, ok = scan(text, options)
    if not ok:
        print("scan error")
        print(stream.err_out(), end="")
        return None, stream, EXIT_SCAN_ERROR

    ast, ok = parse(stream)
    if not ok or ast is None:
        print("parse error")
        print(stream.err_out(), end="")
        return None, stream, EXIT_PARSE_ERROR

    return ast, stream, EXIT_OK


def main(args: list[str] | None = None) -> int:
    if args is None:
        args = sys.argv

    parser = argparse.ArgumentParser(
        prog="ebnf",
        description="Parse, compare, and rewrite grammars written in ISO EBNF",
    )
    parser.add_argument("files", nargs="+", help="Path to a file containing an EBNF grammar")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log what the scanner and parser are doing. Give twice for a full trace.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default="ebnf",
        help="How to print the parsed grammar. The default is to print it back out as EBNF.",
    )
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Dump the token stream before the grammar.",
    )
    parser.add_argument(
        "--join",
        action="store_true",
        help="Merge rules that define the same name into a single rule.",
    )
    parser.add_argument(
        "--canonical",
        action="store_true",
        help="Print the canonical form of the grammar: alternatives sorted and "
        "de-duplicated, redundant groups and empty factors removed.",
    )
    parser.add_argument(
        "--compare",
        action="store_true",
        help="Compare two grammars and print 'equal', 'less', or 'greater'.",
    )
    parser.add_argument(
        "--relaxed",
        action="store_true",
        help="Accept empty terminal strings and underscores in names, which ISO EBNF forbids.",
    )
    parser.add_argument(
        "--hyphen-words",
        action="store_true",
        help="Allow hyphens inside names, as in syntax-rule.",
    )

    parsed = parser.parse_args(args[1:])

    level = logging.WARNING
    if parsed.verbose == 1:
        level = logging.INFO
    elif parsed.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(name)s: %(message)s")

    options = ScanOptions(iso=not parsed.relaxed, hyphen_words=parsed.hyphen_words)

    if parsed.compare:
        if len(parsed.files) != 2:
            parser.error("--compare needs exactly two files")

        trees = []
        for path in parsed.files:
            ast, _, status = read_grammar(path, options)
            if ast is None:
                return status
            if parsed.join:
                ast_join_joinable_rules(ast)
            trees.append(ast)

        result = ast_compare(trees[0], trees[1])
        print({-1: "less", 0: "equal", 1: "greater"}[result])
        return EXIT_OK

    if len(parsed.files) != 1:
        parser.error("expected a single grammar file (or --compare with two)")

    ast, stream, status = read_grammar(parsed.files[0], options)
    if parsed.tokens and stream is not None:
        for line in stream.dump():
            print(line)
    if ast is None:
        return status
    assert stream is not None

    if parsed.join:
        ast_join_joinable_rules(ast)
    if parsed.canonical:
        ast = sorted_clone(ast)

    print(RENDERERS[parsed.format](ast), end="")
    for line in stream.diagnostics.lines():
        print(line)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main(sys.argv))
