# logic/__init__.py

"""Evaluation engine core.

This package provides:
  • evaluate / holds: Boolean evaluator over one snapshot and its history
  • compile_sequence / SequenceMatcher: sequence automata and their attempts
  • instantiate / PropertyInstance: incremental property evaluation
  • compile_directive / DirectiveRunner: assert, assume, cover, restrict
  • run_directive / run_directives / replay_trace: whole-trace helpers
  • Verdict: directive outcome
"""

from .boolean_eval import evaluate, holds
from .directive import (
    CompiledDirective,
    DirectiveRunner,
    check_signals,
    compile_directive,
    run_directive,
    run_directives,
)
from .exceptions import AttemptOverflowError, MissingVariableError, UndefinedHistoryError
from .property_eval import CycleContext, EvalEnv, PropertyInstance, evaluate_property, instantiate
from .replay import DirectiveTraceReplay, load_directives, replay_trace
from .sequence_matcher import MatchAttempt, MatchEvent, SequenceMatcher
from .sequence_nfa import SequenceAutomaton, compile_sequence
from .verdict import PartialVerdict, Resolution, Verdict, VerdictKind

__all__ = [
    "evaluate",
    "holds",
    "compile_sequence",
    "SequenceAutomaton",
    "SequenceMatcher",
    "MatchAttempt",
    "MatchEvent",
    "instantiate",
    "evaluate_property",
    "PropertyInstance",
    "CycleContext",
    "EvalEnv",
    "compile_directive",
    "check_signals",
    "CompiledDirective",
    "DirectiveRunner",
    "run_directive",
    "run_directives",
    "replay_trace",
    "load_directives",
    "DirectiveTraceReplay",
    "PartialVerdict",
    "Resolution",
    "Verdict",
    "VerdictKind",
    "UndefinedHistoryError",
    "AttemptOverflowError",
    "MissingVariableError",
]
