# parser/exceptions.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Custom exceptions for expression construction and parsing

"""Domain-specific exceptions raised before any trace is accepted.

Everything in this module is a construction-time failure: a directive that
raises one of these was never built, and nothing partially built is usable.
Runtime failures live in ``svamon.logic.exceptions``.
"""


class SVAMonError(RuntimeError):
    """Root of every exception raised by the engine."""

    pass


class ParseError(SVAMonError):
    """Exception raised when SVA text does not conform to the supported grammar.

    Carries the offending position in the message when the lexer or parser
    could determine it.
    """

    pass


class MalformedExpression(SVAMonError):
    """Exception raised when an expression tree is structurally invalid.

    Examples are negative repetition bounds, a range whose upper bound is
    below its lower bound, a non-constant ``$past`` depth, or a sequence used
    where only a Boolean is allowed.
    """

    pass
