# parser/lexer.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Lexical analyzer for SVA expression tokenization using SLY

"""Lexical analyzer for SVA directive, property and sequence text.

This module implements tokenization of the supported SystemVerilog
Assertions subset, breaking input strings into tokens for parser
consumption. The lexer distinguishes reserved keywords from identifiers,
recognises sized literals such as ``4'b1010`` and the multi-character
temporal operators (``##``, ``|->``, ``[*``, ``[->``).

Supported Tokens:
- Temporal operators: ##, |->, |=>, [*, [+, [->, [=
- Boolean operators: ! ~ && || & | ^ == != < <= > >= + -
- Keywords: property, assert, assume, cover, restrict, disable, iff,
  not, and, or, if, else, always, s_eventually, until, s_until,
  until_with, s_until_with, nexttime, s_nexttime, strong, weak,
  posedge, negedge
- Identifiers, system function names ($past, $rose, ...), numbers
- Whitespace and // or /* */ comments: ignored
"""

from sly import Lexer
from svamon.utils.logger import get_logger

from .exceptions import ParseError

def parse_sized_literal(text: str):
    """Decode ``8'hFF``, ``'b1``, ``4'd9`` into ``(value, width)``.

    Unsized-but-based literals (``'b1``) report a width of None.
    """
    size, _, rest = text.partition("'")
    base = rest[0].lower()
    digits = rest[1:].replace("_", "")
    radix = {"b": 2, "o": 8, "d": 10, "h": 16}[base]
    value = int(digits, radix)
    width = int(size) if size else None
    return value, width


class SVALexer(Lexer):
    """SLY-based lexer for SVA text tokenization.

    Transforms input strings into token sequences for parsing. Keywords are
    recognised by remapping the identifier token, so ``until_with`` and
    ``s_eventually`` are never split.

    Attributes:
        tokens: Set of valid token types
        ignore: Characters to skip during tokenization
    """

    tokens = {
        # keywords
        "PROPERTY", "ASSERT", "ASSUME", "COVER", "RESTRICT", "DISABLE", "IFF",
        "NOT", "AND", "OR", "IF", "ELSE", "ALWAYS", "S_EVENTUALLY",
        "UNTIL", "S_UNTIL", "UNTIL_WITH", "S_UNTIL_WITH", "NEXTTIME", "S_NEXTTIME",
        "STRONG", "WEAK", "POSEDGE", "NEGEDGE",
        # atoms
        "ID", "SYSID", "NUMBER", "SIZED",
        # temporal punctuation
        "HASH2", "IMPL_OVERLAP", "IMPL_NONOVERLAP",
        "LBRACKET_STAR", "LBRACKET_PLUS", "LBRACKET_ARROW", "LBRACKET_EQ",
        "LBRACKET", "RBRACKET", "COLON", "DOLLAR",
        # Boolean operators
        "LNOT", "BNOT", "LAND", "LOR", "BAND", "BOR", "BXOR",
        "EQ", "NE", "LE", "GE", "LT", "GT", "PLUS", "MINUS",
        # grouping
        "LPAREN", "RPAREN", "COMMA", "SEMI", "AT",
    }

    ignore = " \t\r"
    ignore_line_comment = r"//[^\n]*"
    ignore_block_comment = r"/\*(.|\n)*?\*/"

    # Longest operators first: SLY tries patterns in definition order
    IMPL_OVERLAP = r"\|->"
    IMPL_NONOVERLAP = r"\|=>"
    HASH2 = r"\#\#"
    LBRACKET_ARROW = r"\[->"
    LBRACKET_STAR = r"\[\*"
    LBRACKET_PLUS = r"\[\+"
    LBRACKET_EQ = r"\[="
    LBRACKET = r"\["
    RBRACKET = r"\]"

    SIZED = r"\d*'[sS]?[bBoOdDhH][0-9a-fA-F_]+"
    NUMBER = r"\d+"

    SYSID = r"\$[a-zA-Z_][a-zA-Z0-9_]*"
    DOLLAR = r"\$"

    ID = r"[a-zA-Z_][a-zA-Z0-9_]*"
    ID["property"] = PROPERTY
    ID["assert"] = ASSERT
    ID["assume"] = ASSUME
    ID["cover"] = COVER
    ID["restrict"] = RESTRICT
    ID["disable"] = DISABLE
    ID["iff"] = IFF
    ID["not"] = NOT
    ID["and"] = AND
    ID["or"] = OR
    ID["if"] = IF
    ID["else"] = ELSE
    ID["always"] = ALWAYS
    ID["s_eventually"] = S_EVENTUALLY
    ID["until"] = UNTIL
    ID["s_until"] = S_UNTIL
    ID["until_with"] = UNTIL_WITH
    ID["s_until_with"] = S_UNTIL_WITH
    ID["nexttime"] = NEXTTIME
    ID["s_nexttime"] = S_NEXTTIME
    ID["strong"] = STRONG
    ID["weak"] = WEAK
    ID["posedge"] = POSEDGE
    ID["negedge"] = NEGEDGE

    LAND = r"&&"
    LOR = r"\|\|"
    EQ = r"=="
    NE = r"!="
    LE = r"<="
    GE = r">="
    LNOT = r"!"
    BNOT = r"~"
    BAND = r"&"
    BOR = r"\|"
    BXOR = r"\^"
    LT = r"<"
    GT = r">"
    PLUS = r"\+"
    MINUS = r"-"
    COLON = r":"
    LPAREN = r"\("
    RPAREN = r"\)"
    COMMA = r","
    SEMI = r";"
    AT = r"@"

    @_(r"\n+")
    def ignore_newline(self, t):
        self.lineno += len(t.value)

    def SIZED(self, t):
        text = t.value.replace("'s", "'").replace("'S", "'")
        try:
            t.value = parse_sized_literal(text)
        except ValueError:
            raise ParseError(f"Invalid sized literal '{t.value}' at position {t.index}")
        return t

    def NUMBER(self, t):
        t.value = int(t.value)
        return t

    def error(self, t):
        """Handle illegal characters during tokenization.

        Args:
            t: SLY token object containing error context

        Raises:
            ParseError: Always raised with character and position information
        """
        logger = get_logger()

        illegal_char = t.value[0]
        error_pos = self.index

        logger.debug(f"Illegal character '{illegal_char}' at position {error_pos}")

        self.index += 1

        raise ParseError(
            f"Illegal character '{illegal_char}' encountered at position {error_pos}"
        )
