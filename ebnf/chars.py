"""Character classes for the EBNF scanner.

These are ASCII-only. ISO/IEC 14977 defines its terminal
characters over a 7-bit set, and `str.isalpha` would happily accept things
like 'é' which no conforming grammar can contain.
"""

SPACE_CHARS = " \t\n\r\f\v"
SYMBOL_CHARS = "=;|,-*[]{}()"


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_lower(ch: str) -> bool:
    return "a" <= ch <= "z"


def is_upper(ch: str) -> bool:
    return "A" <= ch <= "Z"


def is_alpha(ch: str) -> bool:
    return is_lower(ch) or is_upper(ch)


def is_alnum(ch: str) -> bool:
    return is_alpha(ch) or is_digit(ch)


def is_csymf(ch: str) -> bool:
    """Can this character start a C-style identifier?"""
    return is_alpha(ch) or ch == "_"


def is_csym(ch: str) -> bool:
    """Can this character continue a C-style identifier?"""
    return is_alnum(ch) or ch == "_"


def is_space(ch: str) -> bool:
    return ch != "" and ch in SPACE_CHARS


def is_symbol(ch: str) -> bool:
    return ch != "" and ch in SYMBOL_CHARS
