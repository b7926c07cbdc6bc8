# logic/directive.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Verification directive compilation and the cycle-by-cycle runner

"""Verification directive runner.

``compile_directive`` resolves strength defaults, sizes the history window
and compiles every sequence once. A ``DirectiveRunner`` then consumes one
snapshot per cycle and turns property outcomes into a directive ``Verdict``:

- ``assert``: the first violated attempt is ``VIOLATED``; at trace end the
  directive holds, or is ``INCONCLUSIVE`` while a strong obligation is still
  pending (``VIOLATED`` under the ``fail`` finite-trace policy).
- ``assume`` / ``restrict``: as assert, with violations reported as
  ``ASSUMPTION_UNSATISFIED``.
- ``cover``: the first holding attempt is ``COVERED``, unless it held only
  because an implication antecedent never matched; without a witness the
  trace ends ``INCONCLUSIVE``, never violated.

A fresh attempt of the property starts every enabled cycle. A directive
whose property is a bare multi-cycle sequence runs one shared matcher in
search mode instead, and an attempt counts only from a cycle where the
sequence got past its first element.

While the ``disable iff`` condition is true, every in-flight attempt is
discarded and nothing is started.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Union

from svamon.config import DEFAULT_CONFIG, EngineConfig, FiniteTracePolicy
from svamon.model.history import HistoryWindow
from svamon.model.snapshot import Snapshot, Trace, TraceOrderError
from svamon.parser import parse_directive
from svamon.parser.ast_nodes import (
    Always,
    Directive,
    DirectiveKind,
    Property,
    SequenceProperty,
    Strength,
)
from svamon.parser.checks import iter_sequences, iter_signals, required_history, resolve_strength
from svamon.utils.logger import get_logger
from .exceptions import AttemptOverflowError, MissingVariableError, UndefinedHistoryError
from .property_eval import CycleContext, EvalEnv, PropertyInstance, instantiate
from .sequence_matcher import MatchEvent, SequenceMatcher
from .verdict import PartialVerdict, Resolution, Verdict, VerdictKind

logger = get_logger(__name__)


@dataclass(slots=True)
class CompiledDirective:
    """
    A directive ready to run.

    Attributes:
      directive: The directive as written.
      prop: Its property with every unmarked sequence strength resolved.
      history_depth: Prior cycles the runner retains.
      signals: Every signal name the directive reads.
      env: Compiled automata and attempt limits.
      search: True when the property is a bare multi-cycle sequence.
    """
    directive: Directive
    prop: Property
    history_depth: int
    signals: FrozenSet[str]
    env: EvalEnv
    search: bool = False

    @property
    def kind(self) -> DirectiveKind:
        return self.directive.kind

    @property
    def name(self) -> str:
        return self.directive.name


def default_strength(kind: DirectiveKind) -> Strength:
    """Strength an unmarked sequence takes under ``kind``."""
    return Strength.STRONG if kind is DirectiveKind.COVER else Strength.WEAK


def compile_directive(directive: Union[Directive, str], config: EngineConfig = DEFAULT_CONFIG) -> CompiledDirective:
    """Prepare ``directive`` for running.

    The runner primes its history with zero-valued snapshots, so ``$past``
    and the edge functions read 0 for cycles before the trace starts rather
    than being rejected. Only an explicit ``history_depth`` too shallow for
    the deepest ``$past`` is an error.

    Raises:
        ParseError: ``directive`` is text that does not parse
        MalformedExpression: A sequence cannot be compiled
        UndefinedHistoryError: ``config.history_depth`` is shallower than a ``$past`` needs
    """
    if isinstance(directive, str):
        directive = parse_directive(directive)

    prop = resolve_strength(directive.prop, default_strength(directive.kind))

    needed = required_history(directive)
    if config.history_depth is not None and config.history_depth < needed:
        raise UndefinedHistoryError(
            f"{directive.name} needs {needed} cycle(s) of history, "
            f"but history_depth is {config.history_depth}"
        )
    depth = needed if config.history_depth is None else config.history_depth

    env = EvalEnv(max_attempts=config.max_outstanding_attempts)
    for seq in iter_sequences(prop):
        env.automaton(seq)

    search = isinstance(prop, SequenceProperty) and not env.automaton(prop.seq).single_cycle

    return CompiledDirective(
        directive=directive,
        prop=prop,
        history_depth=depth,
        signals=frozenset(iter_signals(directive)),
        env=env,
        search=search,
    )


def check_signals(directive: Union[Directive, CompiledDirective], available: Iterable[str]) -> None:
    """Fail up front if ``directive`` reads a signal outside ``available``.

    Raises:
        MissingVariableError: Naming the first missing signal alphabetically
    """
    if isinstance(directive, CompiledDirective):
        names = directive.signals
    else:
        names = iter_signals(directive)
    missing = sorted(set(names) - set(available))
    if missing:
        raise MissingVariableError(missing[0])


@dataclass(slots=True)
class _Attempt:
    start: int
    instance: PropertyInstance


class DirectiveRunner:
    """Feeds snapshots to one compiled directive and tracks its verdict.

    The runner is ``RUNNING`` until a decisive verdict is reached or
    ``finish`` is called, then ``RESOLVED``. Feeding after resolution only
    checks cycle order.
    """

    def __init__(self, compiled: Union[CompiledDirective, Directive, str], config: EngineConfig = DEFAULT_CONFIG):
        if not isinstance(compiled, CompiledDirective):
            compiled = compile_directive(compiled, config)
        self.compiled = compiled
        self.config = config
        self.history = HistoryWindow(compiled.history_depth)
        self.snapshots: List[Snapshot] = []
        self.matches: List[MatchEvent] = []
        self.verdict: Optional[Verdict] = None
        self._next_cycle: Optional[int] = None
        self._last_cycle: Optional[int] = None
        self._attempts: List[_Attempt] = []
        self._matcher: Optional[SequenceMatcher] = None
        self._triggered: Set[int] = set()
        self._seen_match = False
        if compiled.search:
            self._matcher = compiled.env.matcher(compiled.prop.seq)

        logger.directive_start(str(compiled.directive), compiled.kind.value, compiled.history_depth)

    @property
    def resolved(self) -> bool:
        return self.verdict is not None

    @property
    def state(self) -> str:
        return "RESOLVED" if self.resolved else "RUNNING"

    @property
    def live_attempts(self) -> int:
        if self._matcher is not None:
            return len(self._matcher)
        return len(self._attempts)

    def feed(self, snapshot: Snapshot) -> Verdict:
        """Process the snapshot of the next cycle and return the verdict so far.

        Raises:
            TraceOrderError: ``snapshot`` is not for the cycle after the last one fed
        """
        cycle = snapshot.cycle
        if self._next_cycle is not None and cycle != self._next_cycle:
            raise TraceOrderError(f"Snapshot for cycle {cycle} out of order (expected {self._next_cycle})")
        self._next_cycle = cycle + 1
        if self.resolved:
            return self.verdict

        self._last_cycle = cycle
        self.history.prime(snapshot)
        if self.config.record_trace:
            self.snapshots.append(snapshot)

        ctx = CycleContext(cycle, snapshot, self.history.view())
        try:
            if self._disabled(ctx):
                dropped = self._drop_all()
                logger.cycle_disabled(cycle, dropped)
            elif self._matcher is not None:
                self._step_search(ctx)
            else:
                self._step_attempts(ctx)
        except MissingVariableError as exc:
            self._resolve(Verdict(VerdictKind.MISSING_VARIABLE, cycle=cycle, reason=str(exc)))
        except AttemptOverflowError as exc:
            self._resolve(Verdict(VerdictKind.OVERFLOW, cycle=cycle, reason=str(exc)))

        self.history.push(snapshot)
        current = self.current_verdict()
        logger.cycle_processed(cycle, self.live_attempts, str(current))
        return current

    def finish(self) -> Verdict:
        """Conclude the run at trace end."""
        if not self.resolved:
            self.verdict = self._conclude(final=True)
        logger.final_verdict(str(self.verdict))
        return self.verdict

    def current_verdict(self) -> Verdict:
        """Resolved verdict, or what ``finish`` would say right now."""
        if self.resolved:
            return self.verdict
        return self._conclude(final=False)

    def run(self, snapshots: Iterable[Snapshot], stop_on_decision: bool = False) -> Verdict:
        """Feed every snapshot, then finish."""
        for snapshot in snapshots:
            self.feed(snapshot)
            if stop_on_decision and self.resolved:
                break
        return self.finish()

    # Per-cycle work
    def _disabled(self, ctx: CycleContext) -> bool:
        condition = self.compiled.directive.disable
        return condition is not None and ctx.holds(condition)

    def _drop_all(self) -> int:
        dropped = len(self._attempts) + len(self._triggered)
        self._attempts.clear()
        self._triggered.clear()
        if self._matcher is not None:
            dropped += self._matcher.reset()
        return dropped

    def _step_attempts(self, ctx: CycleContext) -> None:
        prop = self.compiled.prop
        # One live ``always`` attempt already checks every later cycle
        if not (isinstance(prop, Always) and self._attempts):
            self._attempts.append(_Attempt(ctx.cycle, instantiate(prop, ctx.cycle, self.compiled.env)))
            logger.attempt_spawned("property", ctx.cycle)
            self.compiled.env.check_budget(len(self._attempts), ctx.cycle)

        remaining = []
        for attempt in self._attempts:
            outcome = attempt.instance.step(ctx)
            if outcome is PartialVerdict.VIOLATED:
                if self.compiled.kind is not DirectiveKind.COVER:
                    self._resolve(self._failure(ctx.cycle, attempt.start))
                    return
            elif outcome is PartialVerdict.HOLDS:
                # a vacuous hold is no witness
                if self.compiled.kind is DirectiveKind.COVER and not attempt.instance.vacuous:
                    self._resolve(self._covered(ctx.cycle, attempt.start))
                    return
            else:
                remaining.append(attempt)
        self._attempts = remaining

    def _step_search(self, ctx: CycleContext) -> None:
        cycle = ctx.cycle
        events = self._matcher.advance(cycle, ctx.snapshot, ctx.history, spawn=True, cache=ctx.cache)
        if events:
            self._seen_match = True
            self.matches.extend(sorted(events))
        matched = {event.start for event in events}

        if self.compiled.kind is DirectiveKind.COVER:
            if events:
                first = min(events)
                self._resolve(self._covered(first.end, first.start))
            return

        live = self._matcher.live_starts()
        if cycle in live:
            self._triggered.add(cycle)
        self._triggered -= matched
        failed = sorted(start for start in self._triggered if start not in live)
        if failed:
            self._resolve(self._failure(cycle, failed[0]))

    # Verdict construction
    def _failure(self, cycle: int, start: int) -> Verdict:
        kind = VerdictKind.VIOLATED
        if self.compiled.kind in (DirectiveKind.ASSUME, DirectiveKind.RESTRICT):
            kind = VerdictKind.ASSUMPTION_UNSATISFIED
        return Verdict(kind, cycle=cycle, start=start, prefix=self._window(None, cycle))

    def _covered(self, cycle: int, start: int) -> Verdict:
        return Verdict(VerdictKind.COVERED, cycle=cycle, start=start, witness=self._window(start, cycle))

    def _window(self, first: Optional[int], last: int):
        return tuple(s for s in self.snapshots if (first is None or s.cycle >= first) and s.cycle <= last)

    def _resolve(self, verdict: Verdict) -> None:
        self.verdict = verdict
        self._drop_all()

    def _pending(self) -> tuple:
        """Resolution of everything still in flight, and the oldest start owing it."""
        if self._matcher is not None:
            strong = self.compiled.prop.strength is Strength.STRONG
            if strong and (self._triggered or not self._seen_match):
                owed = min(self._triggered) if self._triggered else self._last_cycle
                return Resolution.PENDING_STRONG, owed
            return Resolution.HOLDS, None

        result, owed = Resolution.HOLDS, None
        for attempt in self._attempts:
            settled = attempt.instance.settle()
            if owed is None and settled in (Resolution.VIOLATED, Resolution.PENDING_STRONG):
                owed = attempt.start
            result = result.combine_conjunctive(settled)
        return result, owed

    def _conclude(self, final: bool) -> Verdict:
        if self.compiled.kind is DirectiveKind.COVER:
            return Verdict.inconclusive(final=final)

        result, owed = self._pending()
        if result is Resolution.VIOLATED:
            return self._failure(self._last_cycle, owed)
        if result is Resolution.PENDING_STRONG:
            if final and self.config.finite_trace_policy is FiniteTracePolicy.FAIL:
                return self._failure(self._last_cycle, owed)
            return Verdict.inconclusive(final=final)
        return Verdict.holds(final=final)


def run_directive(
    directive: Union[Directive, CompiledDirective, str],
    trace: Iterable[Snapshot],
    config: EngineConfig = DEFAULT_CONFIG,
    stop_on_decision: bool = False,
) -> Verdict:
    """Run one directive over ``trace`` and return its final verdict."""
    return DirectiveRunner(directive, config).run(trace, stop_on_decision=stop_on_decision)


def run_directives(
    directives: Iterable[Union[Directive, CompiledDirective, str]],
    trace: Union[Trace, Iterable[Snapshot]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> Dict[str, Verdict]:
    """Run several independent directives over one trace.

    The trace is walked once; every runner sees every snapshot. Results are
    keyed by directive name (its label, or its text when unlabelled).
    """
    runners = [DirectiveRunner(d, config) for d in directives]
    for snapshot in trace:
        for runner in runners:
            runner.feed(snapshot)
    return {runner.compiled.name: runner.finish() for runner in runners}
