# parser/__init__.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Text front end for SVA directives, properties, sequences and Boolean expressions

"""SVA-subset parsing for the evaluation engine.

The parsing pipeline converts SystemVerilog Assertions text into immutable
AST nodes. One grammar covers every layer; the entry points below check that
the result belongs to the layer the caller asked for and lift it where the
language allows (a Boolean is a one-cycle sequence, a sequence is a
property).

Core Functions:
    parse_expression: Boolean expression text to a BoolExpr
    parse_sequence: sequence text to a Sequence
    parse_property: property text to a Property
    parse_directive: ``assert property (...)`` text to a Directive

Example:
    >>> from svamon.parser import parse_directive
    >>> d = parse_directive("assert property (@(posedge clk) req |=> ##[0:3] ack);")
    >>> d.kind.value
    'assert'
"""

from .exceptions import MalformedExpression, ParseError, SVAMonError
from .grammar import _SVAParser
from .ast_nodes import Directive, as_bool, as_property, as_sequence
from svamon.utils.logger import get_logger


def _parse(source: str):
    """Run a fresh parser over ``source`` and wrap unexpected failures."""
    logger = get_logger()
    parser = _SVAParser()

    try:
        result = parser.parse(source)
        logger.debug(f"Text parsed successfully into AST with type: {type(result).__name__}")
        return result

    except SVAMonError:
        logger.debug("ParseError or MalformedExpression encountered during parsing")
        raise

    except Exception as exc:
        logger.debug(f"Unexpected parsing error: {type(exc).__name__}: {exc}")
        raise ParseError(str(exc)) from exc


def _reject_directive(result, wanted: str):
    if isinstance(result, Directive):
        raise ParseError(f"Expected a {wanted}, got a {result.kind.value} directive")
    return result


def parse_expression(source: str):
    """Parse a Boolean expression such as ``$past(cnt, 2) + 1 == cnt``.

    Raises:
        ParseError: Text is not syntactically valid
        MalformedExpression: Text is a sequence or property, not a Boolean
    """
    return as_bool(_reject_directive(_parse(source), "Boolean expression"))


def parse_sequence(source: str):
    """Parse a sequence such as ``req ##[1:3] ack[*2]``."""
    return as_sequence(_reject_directive(_parse(source), "sequence"))


def parse_property(source: str):
    """Parse a property such as ``req |=> s_eventually ack``."""
    return as_property(_reject_directive(_parse(source), "property"))


def parse_directive(source: str) -> Directive:
    """Parse a verification directive.

    Accepted form::

        [label:] assert|assume|cover|restrict property (
            [@(posedge clk)] [disable iff (expr)] property_expr ) [;]

    Args:
        source: Directive text

    Returns:
        The Directive, with its property lifted to the property layer

    Raises:
        ParseError: Text is malformed or is not a directive
        MalformedExpression: Operands mix layers illegally
    """
    result = _parse(source)
    if not isinstance(result, Directive):
        raise ParseError(f"Expected an assert/assume/cover/restrict directive: {source.strip()}")
    return result


__all__ = [
    "parse_expression",
    "parse_sequence",
    "parse_property",
    "parse_directive",
    "ParseError",
    "MalformedExpression",
    "SVAMonError",
]
