# svamon/__init__.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Public API

"""SVAMon: evaluation of SystemVerilog Assertions sequences and properties
over finite, cycle-sampled traces.

Example:
    >>> from svamon import Trace, run_directive
    >>> trace = Trace.from_signals(20, foo={2}, bar={3, 4})
    >>> run_directive("assert property (foo ##[1:2] bar);", trace).kind.name
    'HOLDS'
"""

from .config import ConfigError, EngineConfig, FiniteTracePolicy, load_config
from .logic import (
    AttemptOverflowError,
    DirectiveRunner,
    MatchEvent,
    MissingVariableError,
    UndefinedHistoryError,
    Verdict,
    VerdictKind,
    compile_directive,
    replay_trace,
    run_directive,
    run_directives,
)
from .model import BitVector, HistoryWindow, Snapshot, Trace, TraceOrderError
from .parser import (
    MalformedExpression,
    ParseError,
    SVAMonError,
    parse_directive,
    parse_expression,
    parse_property,
    parse_sequence,
)
from .utils.trace_reader import TraceFormatError, read_trace

__all__ = [
    "BitVector",
    "Snapshot",
    "Trace",
    "HistoryWindow",
    "parse_expression",
    "parse_sequence",
    "parse_property",
    "parse_directive",
    "compile_directive",
    "DirectiveRunner",
    "run_directive",
    "run_directives",
    "replay_trace",
    "read_trace",
    "MatchEvent",
    "Verdict",
    "VerdictKind",
    "EngineConfig",
    "FiniteTracePolicy",
    "load_config",
    "SVAMonError",
    "ParseError",
    "MalformedExpression",
    "UndefinedHistoryError",
    "AttemptOverflowError",
    "MissingVariableError",
    "TraceOrderError",
    "TraceFormatError",
    "ConfigError",
]

__version__ = "1.0.0"
