# parser/grammar.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# LALR(1) grammar and parser for SVA directives, properties and sequences using SLY

"""SVA-subset grammar implementation using the SLY parser generator.

A single ``expr`` nonterminal covers the Boolean, sequence and property
layers; the AST constructors lift operands between layers and reject
combinations that make no sense (a sequence under ``&&``, a property under
``##``) with ``MalformedExpression``. A directive wraps one expression.

Operator Precedence (lowest to highest):
- if / else
- always, s_eventually: prefix, extend as far right as possible
- |->, |=>: right-associative
- until, s_until, until_with, s_until_with: right-associative
- or, and: left-associative
- not, nexttime, s_nexttime: prefix
- ## (concatenation and leading delay): left-associative
- [*], [+], [->], [=]: postfix repetition of a whole Boolean expression
- || && | ^ & == != < <= > >= + -: C precedence
- ! ~ unary -: prefix
"""

from sly import Parser

from svamon.utils.logger import get_logger
from .lexer import SVALexer
from .ast_nodes import (
    BinaryOp,
    BitSelect,
    Always,
    Const,
    CycleRange,
    Directive,
    DirectiveKind,
    Eventually,
    Implication,
    Nexttime,
    PartSelect,
    PropAnd,
    PropIf,
    PropNot,
    PropOr,
    RepeatKind,
    SeqConcat,
    SeqDelay,
    SeqRepeat,
    SequenceProperty,
    Signal,
    Strength,
    SysCall,
    UnaryOp,
    Until,
)
from .exceptions import ParseError


class _SVAParser(Parser):
    """SLY-based LALR(1) parser for the SVA subset.

    Attributes:
        tokens: Token types from SVALexer
        precedence: Operator precedence and associativity rules
    """

    tokens = SVALexer.tokens

    precedence = (
        ("nonassoc", "IFX"),
        ("nonassoc", "ELSE"),
        ("right", "ALWAYS", "S_EVENTUALLY"),
        ("right", "IMPL_OVERLAP", "IMPL_NONOVERLAP"),
        ("right", "UNTIL", "S_UNTIL", "UNTIL_WITH", "S_UNTIL_WITH"),
        ("left", "OR"),
        ("left", "AND"),
        ("right", "NOT", "NEXTTIME", "S_NEXTTIME"),
        ("left", "HASH2"),
        ("left", "LBRACKET_STAR", "LBRACKET_PLUS", "LBRACKET_ARROW", "LBRACKET_EQ"),
        ("left", "LOR"),
        ("left", "LAND"),
        ("left", "BOR"),
        ("left", "BXOR"),
        ("left", "BAND"),
        ("left", "EQ", "NE"),
        ("left", "LT", "LE", "GT", "GE"),
        ("left", "PLUS", "MINUS"),
        ("right", "LNOT", "BNOT", "UMINUS"),
    )

    @_("directive", "expr")
    def start(self, p):
        """Start rule: a verification directive or a bare expression."""
        return p[0]

    # Directives
    @_("ID COLON directive_body")
    def directive(self, p):
        kind, clock, disable, prop = p.directive_body
        return Directive(kind, prop, disable=disable, label=p.ID, clock=clock)

    @_("directive_body")
    def directive(self, p):
        kind, clock, disable, prop = p.directive_body
        return Directive(kind, prop, disable=disable, clock=clock)

    @_("kind PROPERTY LPAREN directive_expr RPAREN SEMI",
       "kind PROPERTY LPAREN directive_expr RPAREN")
    def directive_body(self, p):
        return (p.kind,) + p.directive_expr

    @_("ASSERT", "ASSUME", "COVER", "RESTRICT")
    def kind(self, p):
        return DirectiveKind(p[0])

    @_("clocking disable expr")
    def directive_expr(self, p):
        return p.clocking, p.disable, p.expr

    @_("clocking expr")
    def directive_expr(self, p):
        return p.clocking, None, p.expr

    @_("disable expr")
    def directive_expr(self, p):
        return None, p.disable, p.expr

    @_("expr")
    def directive_expr(self, p):
        return None, None, p.expr

    @_("AT LPAREN POSEDGE ID RPAREN", "AT LPAREN NEGEDGE ID RPAREN")
    def clocking(self, p):
        return f"{p[2]} {p.ID}"

    @_("AT LPAREN ID RPAREN")
    def clocking(self, p):
        return p.ID

    @_("DISABLE IFF LPAREN expr RPAREN")
    def disable(self, p):
        return p.expr

    # Property operators
    @_("IF LPAREN expr RPAREN expr %prec IFX")
    def expr(self, p):
        return PropIf(p.expr0, p.expr1)

    @_("IF LPAREN expr RPAREN expr ELSE expr")
    def expr(self, p):
        return PropIf(p.expr0, p.expr1, p.expr2)

    @_("ALWAYS expr")
    def expr(self, p):
        return Always(p.expr)

    @_("S_EVENTUALLY expr")
    def expr(self, p):
        return Eventually(p.expr)

    @_("expr IMPL_OVERLAP expr")
    def expr(self, p):
        return Implication(p.expr0, p.expr1, overlapping=True)

    @_("expr IMPL_NONOVERLAP expr")
    def expr(self, p):
        return Implication(p.expr0, p.expr1, overlapping=False)

    @_("expr UNTIL expr", "expr S_UNTIL expr", "expr UNTIL_WITH expr", "expr S_UNTIL_WITH expr")
    def expr(self, p):
        keyword = p[1]
        return Until(
            p.expr0,
            p.expr1,
            strong=keyword.startswith("s_"),
            inclusive=keyword.endswith("_with"),
        )

    @_("expr OR expr")
    def expr(self, p):
        return PropOr(p.expr0, p.expr1)

    @_("expr AND expr")
    def expr(self, p):
        return PropAnd(p.expr0, p.expr1)

    @_("NOT expr")
    def expr(self, p):
        return PropNot(p.expr)

    @_("NEXTTIME expr")
    def expr(self, p):
        return Nexttime(p.expr)

    @_("S_NEXTTIME expr")
    def expr(self, p):
        return Nexttime(p.expr, strong=True)

    @_("STRONG LPAREN expr RPAREN")
    def expr(self, p):
        return SequenceProperty(p.expr, Strength.STRONG)

    @_("WEAK LPAREN expr RPAREN")
    def expr(self, p):
        return SequenceProperty(p.expr, Strength.WEAK)

    # Sequence operators
    @_("expr HASH2 delay expr")
    def expr(self, p):
        return SeqConcat(p.expr0, p.expr1, p.delay)

    @_("HASH2 delay expr")
    def expr(self, p):
        return SeqDelay(p.expr, p.delay)

    @_("NUMBER")
    def delay(self, p):
        return CycleRange.exactly(p.NUMBER)

    @_("LBRACKET range_bounds RBRACKET")
    def delay(self, p):
        return p.range_bounds

    @_("LBRACKET_STAR RBRACKET")
    def delay(self, p):
        return CycleRange(0)

    @_("LBRACKET_PLUS RBRACKET")
    def delay(self, p):
        return CycleRange(1)

    @_("NUMBER COLON NUMBER")
    def range_bounds(self, p):
        return CycleRange(p.NUMBER0, p.NUMBER1)

    @_("NUMBER COLON DOLLAR")
    def range_bounds(self, p):
        return CycleRange(p.NUMBER)

    @_("NUMBER")
    def repeat_bounds(self, p):
        return CycleRange.exactly(p.NUMBER)

    @_("range_bounds")
    def repeat_bounds(self, p):
        return p.range_bounds

    @_("expr LBRACKET_STAR repeat_bounds RBRACKET")
    def expr(self, p):
        return SeqRepeat(p.expr, p.repeat_bounds)

    @_("expr LBRACKET_STAR RBRACKET")
    def expr(self, p):
        return SeqRepeat(p.expr, CycleRange(0))

    @_("expr LBRACKET_PLUS RBRACKET")
    def expr(self, p):
        return SeqRepeat(p.expr, CycleRange(1))

    @_("expr LBRACKET_ARROW repeat_bounds RBRACKET")
    def expr(self, p):
        return SeqRepeat(p.expr, p.repeat_bounds, RepeatKind.GOTO)

    @_("expr LBRACKET_EQ repeat_bounds RBRACKET")
    def expr(self, p):
        return SeqRepeat(p.expr, p.repeat_bounds, RepeatKind.NONCONSECUTIVE)

    # Boolean operators
    @_("expr LOR expr", "expr LAND expr", "expr BOR expr", "expr BXOR expr",
       "expr BAND expr", "expr EQ expr", "expr NE expr", "expr LT expr",
       "expr LE expr", "expr GT expr", "expr GE expr", "expr PLUS expr",
       "expr MINUS expr")
    def expr(self, p):
        return BinaryOp(p[1], p.expr0, p.expr1)

    @_("LNOT expr", "BNOT expr")
    def expr(self, p):
        return UnaryOp(p[0], p.expr)

    @_("MINUS expr %prec UMINUS")
    def expr(self, p):
        return UnaryOp("-", p.expr)

    @_("LPAREN expr RPAREN")
    def expr(self, p):
        """Parenthesized expression for grouping."""
        return p.expr

    # Atoms
    @_("ID")
    def expr(self, p):
        return Signal(p.ID)

    @_("ID LBRACKET NUMBER RBRACKET")
    def expr(self, p):
        return BitSelect(p.ID, p.NUMBER)

    @_("ID LBRACKET NUMBER COLON NUMBER RBRACKET")
    def expr(self, p):
        return PartSelect(p.ID, p.NUMBER0, p.NUMBER1)

    @_("NUMBER")
    def expr(self, p):
        return Const(p.NUMBER)

    @_("SIZED")
    def expr(self, p):
        value, width = p.SIZED
        return Const(value, width)

    @_("SYSID LPAREN arguments RPAREN")
    def expr(self, p):
        return SysCall(p.SYSID, tuple(p.arguments))

    @_("expr")
    def arguments(self, p):
        return [p.expr]

    @_("arguments COMMA expr")
    def arguments(self, p):
        return p.arguments + [p.expr]

    def parse(self, text: str):
        """Parse SVA text into an AST node or a Directive.

        Args:
            text: Directive, property, sequence or Boolean expression text

        Returns:
            Root AST node, or a Directive

        Raises:
            ParseError: If the text is empty or contains syntax errors
            MalformedExpression: If the text parses but mixes layers illegally
        """
        logger = get_logger()
        logger.debug(f"Parsing SVA text: {text}")

        if text.strip() == "":
            raise ParseError("Input text is empty.")

        result = super().parse(SVALexer().tokenize(text))
        if result is None:
            raise ParseError("Failed to parse SVA text (syntax error).")

        logger.debug(f"Successfully parsed text into {type(result).__name__}")
        return result

    def error(self, token):
        """Handle syntax errors during parsing.

        Args:
            token: Problematic token or None for EOF errors

        Raises:
            ParseError: Always raises with detailed error information
        """
        if token:
            error_msg = (
                f"Syntax error near '{token.value}' "
                f"(type: {token.type}) at line {token.lineno}, position {token.index}"
            )
        else:
            error_msg = "Syntax error: Unexpected end of input"

        raise ParseError(error_msg)
