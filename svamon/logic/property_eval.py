# logic/property_eval.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Incremental evaluation of property instances anchored at a start cycle

"""Property evaluator.

``instantiate`` turns a property and a start cycle into a
``PropertyInstance``. The creator steps the instance in the cycle it was
created for and in every later cycle until it reports a decided
``PartialVerdict``; once decided, an instance keeps its verdict. ``settle``
reports the ``Resolution`` the instance would reach if the trace ended now,
without changing it, which is how weak and strong obligations are told
apart at trace end.

Instances that spawn sub-obligations (implication, ``always``,
``s_eventually``, the ``until`` family and ``nexttime``) create them in the
cycle they start, so every live instance sees every cycle from its own
start onwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence as Seq, Tuple

from svamon.model.history import HistoryWindow
from svamon.model.snapshot import Snapshot
from svamon.parser.ast_nodes import (
    Always,
    BoolExpr,
    Eventually,
    Implication,
    Nexttime,
    PropAnd,
    PropIf,
    PropNot,
    PropOr,
    Property,
    Sequence,
    SequenceProperty,
    Strength,
    Until,
)
from svamon.utils.logger import get_logger
from .boolean_eval import holds
from .exceptions import AttemptOverflowError
from .sequence_matcher import SequenceMatcher
from .sequence_nfa import SequenceAutomaton, compile_sequence
from .verdict import PartialVerdict, Resolution

logger = get_logger(__name__)

STILL = PartialVerdict.STILL_EVALUATING
HOLDS = PartialVerdict.HOLDS
VIOLATED = PartialVerdict.VIOLATED


@dataclass(slots=True)
class CycleContext:
    """
    Everything an instance may read while being stepped for one cycle.

    Attributes:
      cycle: Index of the cycle being fed.
      snapshot: Sampled values for the cycle.
      history: Prior snapshots, oldest first.
      cache: Guard results computed so far this cycle, shared by all matchers.
    """
    cycle: int
    snapshot: Snapshot
    history: Tuple[Snapshot, ...] = ()
    cache: Dict[BoolExpr, bool] = field(default_factory=dict)

    def holds(self, expr: BoolExpr) -> bool:
        passed = self.cache.get(expr)
        if passed is None:
            passed = holds(expr, self.snapshot, self.history)
            self.cache[expr] = passed
        return passed


@dataclass(slots=True)
class EvalEnv:
    """
    Shared, read-mostly state for the instances of one directive.

    Attributes:
      automata: Compiled automaton for every sequence in the property.
      max_attempts: Limit on live attempts per matcher and live obligations
        per spawning instance; None for no limit.
    """
    automata: Dict[Sequence, SequenceAutomaton] = field(default_factory=dict)
    max_attempts: Optional[int] = None

    def automaton(self, seq: Sequence) -> SequenceAutomaton:
        automaton = self.automata.get(seq)
        if automaton is None:
            automaton = compile_sequence(seq)
            self.automata[seq] = automaton
        return automaton

    def matcher(self, seq: Sequence) -> SequenceMatcher:
        return SequenceMatcher(self.automaton(seq), self.max_attempts)

    def check_budget(self, count: int, cycle: int) -> None:
        if self.max_attempts is not None and count > self.max_attempts:
            raise AttemptOverflowError(self.max_attempts, cycle)


class PropertyInstance:
    """One evaluation of a property anchored at ``start``."""

    __slots__ = ("prop", "start", "env", "result", "decided_at")

    def __init__(self, prop: Property, start: int, env: EvalEnv):
        self.prop = prop
        self.start = start
        self.env = env
        self.result = STILL
        self.decided_at: Optional[int] = None

    def step(self, ctx: CycleContext) -> PartialVerdict:
        """Feed one cycle; decided verdicts are latched."""
        if self.result.decided:
            return self.result
        self.result = self._step(ctx)
        if self.result.decided:
            self.decided_at = ctx.cycle
        return self.result

    def settle(self) -> Resolution:
        """Outcome if the trace ended after the last stepped cycle."""
        if self.result.decided:
            return Resolution.of(self.result, Resolution.PENDING_WEAK)
        return self._settle()

    @property
    def vacuous(self) -> bool:
        """True when a holding verdict was reached without any sequence matching."""
        return False

    def _step(self, ctx: CycleContext) -> PartialVerdict:
        raise NotImplementedError

    def _settle(self) -> Resolution:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.prop} @ {self.start}: {self.result.name})"


class SequenceInstance(PropertyInstance):
    """Holds at the sequence's first match from ``start``; fails once every attempt died."""

    __slots__ = ("matcher", "strength")

    def __init__(self, prop: SequenceProperty, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.strength = prop.strength or Strength.WEAK
        self.matcher = env.matcher(prop.seq)
        self.matcher.start(start)

    def _step(self, ctx):
        events = self.matcher.advance(ctx.cycle, ctx.snapshot, ctx.history, spawn=False, cache=ctx.cache)
        if events:
            self.matcher.reset()
            return HOLDS
        if not self.matcher.live:
            return VIOLATED
        return STILL

    def _settle(self):
        if self.strength is Strength.STRONG:
            return Resolution.PENDING_STRONG
        return Resolution.PENDING_WEAK


class NotInstance(PropertyInstance):
    __slots__ = ("operand",)

    def __init__(self, prop: PropNot, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.operand = instantiate(prop.operand, start, env)

    def _step(self, ctx):
        return self.operand.step(ctx).negate()

    def _settle(self):
        return self.operand.settle().negate()


class AndInstance(PropertyInstance):
    __slots__ = ("left", "right")

    def __init__(self, prop: PropAnd, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.left = instantiate(prop.left, start, env)
        self.right = instantiate(prop.right, start, env)

    def _step(self, ctx):
        return self.left.step(ctx).combine_conjunctive(self.right.step(ctx))

    def _settle(self):
        return self.left.settle().combine_conjunctive(self.right.settle())


class OrInstance(PropertyInstance):
    __slots__ = ("left", "right")

    def __init__(self, prop: PropOr, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.left = instantiate(prop.left, start, env)
        self.right = instantiate(prop.right, start, env)

    def _step(self, ctx):
        return self.left.step(ctx).combine_disjunctive(self.right.step(ctx))

    def _settle(self):
        return self.left.settle().combine_disjunctive(self.right.settle())


class IfInstance(PropertyInstance):
    """Chooses its branch from the condition sampled at ``start``."""

    __slots__ = ("branch", "chosen")

    def __init__(self, prop: PropIf, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.branch: Optional[PropertyInstance] = None
        self.chosen = False

    def _step(self, ctx):
        if not self.chosen:
            self.chosen = True
            if ctx.holds(self.prop.cond):
                self.branch = instantiate(self.prop.then, self.start, self.env)
            elif self.prop.otherwise is not None:
                self.branch = instantiate(self.prop.otherwise, self.start, self.env)
            else:
                return HOLDS
        return self.branch.step(ctx)

    def _settle(self):
        if self.branch is None:
            return Resolution.PENDING_WEAK
        return self.branch.settle()


class ImplicationInstance(PropertyInstance):
    """``s |-> p`` / ``s |=> p`` anchored at ``start``.

    Every antecedent match ending at ``e`` spawns an obligation for the
    consequent at ``e`` (overlapping) or ``e + 1`` (non-overlapping). The
    instance holds once the antecedent can match no more and every obligation
    held; a single violated obligation violates it.
    """

    __slots__ = ("matcher", "obligations", "scheduled", "fired")

    def __init__(self, prop: Implication, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.matcher = env.matcher(prop.antecedent)
        self.matcher.start(start)
        self.obligations: List[PropertyInstance] = []
        self.scheduled: List[int] = []
        self.fired = False

    def _spawn(self, cycle: int) -> None:
        self.obligations.append(instantiate(self.prop.consequent, cycle, self.env))
        self.env.check_budget(len(self.obligations), cycle)
        logger.obligation_spawned(str(self.prop.consequent), cycle)

    def _step(self, ctx):
        cycle = ctx.cycle
        if self.scheduled and self.scheduled[0] == cycle:
            self.scheduled.pop(0)
            self._spawn(cycle)

        if self.matcher.live:
            events = self.matcher.advance(cycle, ctx.snapshot, ctx.history, spawn=False, cache=ctx.cache)
            if events:
                self.fired = True
                if self.prop.overlapping:
                    self._spawn(cycle)
                else:
                    self.scheduled.append(cycle + 1)

        remaining = []
        for obligation in self.obligations:
            outcome = obligation.step(ctx)
            if outcome is VIOLATED:
                logger.obligation_failed(str(self.prop.consequent), cycle)
                return VIOLATED
            if outcome is STILL:
                remaining.append(obligation)
        self.obligations = remaining

        if not self.matcher.live and not self.scheduled and not self.obligations:
            return HOLDS
        return STILL

    @property
    def vacuous(self) -> bool:
        return not self.fired

    def _settle(self):
        result = Resolution.HOLDS
        for obligation in self.obligations:
            result = result.combine_conjunctive(obligation.settle())
        # a consequent due after the last cycle owes what a fresh one would
        for cycle in self.scheduled:
            pending = instantiate(self.prop.consequent, cycle, self.env).settle()
            result = result.combine_conjunctive(pending)
        return result


class AlwaysInstance(PropertyInstance):
    """Starts a fresh check of the operand every cycle; never holds early."""

    __slots__ = ("checks",)

    def __init__(self, prop: Always, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.checks: List[PropertyInstance] = []

    def _step(self, ctx):
        self.checks.append(instantiate(self.prop.operand, ctx.cycle, self.env))
        self.env.check_budget(len(self.checks), ctx.cycle)
        remaining = []
        for check in self.checks:
            outcome = check.step(ctx)
            if outcome is VIOLATED:
                return VIOLATED
            if outcome is STILL:
                remaining.append(check)
        self.checks = remaining
        return STILL

    def _settle(self):
        result = Resolution.PENDING_WEAK
        for check in self.checks:
            result = result.combine_conjunctive(check.settle())
        return result


class EventuallyInstance(PropertyInstance):
    """Holds once any per-cycle check of the operand holds."""

    __slots__ = ("checks",)

    def __init__(self, prop: Eventually, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.checks: List[PropertyInstance] = []

    def _step(self, ctx):
        self.checks.append(instantiate(self.prop.operand, ctx.cycle, self.env))
        self.env.check_budget(len(self.checks), ctx.cycle)
        remaining = []
        for check in self.checks:
            outcome = check.step(ctx)
            if outcome is HOLDS:
                return HOLDS
            if outcome is STILL:
                remaining.append(check)
        self.checks = remaining
        return STILL

    def _settle(self):
        result = Resolution.PENDING_STRONG
        for check in self.checks:
            result = result.combine_disjunctive(check.settle())
        return result


class UntilInstance(PropertyInstance):
    """The ``until`` family.

    Each cycle ``i`` from ``start`` contributes a pair of checks ``(p_i, q_i)``.
    The overall value folds right to left as ``q_i or (p_i and rest)``, or
    ``p_i and (q_i or rest)`` for the inclusive ``_with`` forms, where the
    rest after the last fed cycle is undecided while stepping and weak or
    strong pending at trace end. Leading pairs that cannot affect the value
    are dropped, and nothing after a pair that decides on its own is kept.
    """

    __slots__ = ("pairs", "closed")

    def __init__(self, prop: Until, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.pairs: List[Tuple[PropertyInstance, PropertyInstance]] = []
        self.closed = False

    def _fold(self, left, right, rest):
        if self.prop.inclusive:
            return left.combine_conjunctive(right.combine_disjunctive(rest))
        return right.combine_disjunctive(left.combine_conjunctive(rest))

    def _step(self, ctx):
        if not self.closed:
            self.pairs.append((
                instantiate(self.prop.left, ctx.cycle, self.env),
                instantiate(self.prop.right, ctx.cycle, self.env),
            ))
            self.env.check_budget(len(self.pairs), ctx.cycle)

        outcomes = []
        for left, right in self.pairs:
            outcomes.append((left.step(ctx), right.step(ctx)))

        for index, (lv, rv) in enumerate(outcomes):
            if self._fold(lv, rv, STILL).decided:
                del self.pairs[index + 1:]
                del outcomes[index + 1:]
                self.closed = True
                break

        while outcomes and outcomes[0] == (HOLDS, VIOLATED):
            outcomes.pop(0)
            self.pairs.pop(0)

        result = STILL
        for lv, rv in reversed(outcomes):
            result = self._fold(lv, rv, result)
        return result

    def _settle(self):
        result = Resolution.PENDING_STRONG if self.prop.strong else Resolution.PENDING_WEAK
        for left, right in reversed(self.pairs):
            result = self._fold(left.settle(), right.settle(), result)
        return result


class NexttimeInstance(PropertyInstance):
    """Evaluates the operand from ``start + 1``."""

    __slots__ = ("operand",)

    def __init__(self, prop: Nexttime, start: int, env: EvalEnv):
        super().__init__(prop, start, env)
        self.operand: Optional[PropertyInstance] = None

    def _step(self, ctx):
        if ctx.cycle == self.start:
            return STILL
        if self.operand is None:
            self.operand = instantiate(self.prop.operand, ctx.cycle, self.env)
        return self.operand.step(ctx)

    def _settle(self):
        if self.operand is None:
            return Resolution.PENDING_STRONG if self.prop.strong else Resolution.PENDING_WEAK
        return self.operand.settle()


_INSTANCE_TYPES = {
    SequenceProperty: SequenceInstance,
    PropNot: NotInstance,
    PropAnd: AndInstance,
    PropOr: OrInstance,
    PropIf: IfInstance,
    Implication: ImplicationInstance,
    Always: AlwaysInstance,
    Eventually: EventuallyInstance,
    Until: UntilInstance,
    Nexttime: NexttimeInstance,
}


def instantiate(prop: Property, start: int, env: EvalEnv) -> PropertyInstance:
    """Create the instance evaluating ``prop`` from cycle ``start``."""
    try:
        kind = _INSTANCE_TYPES[type(prop)]
    except KeyError:
        raise TypeError(f"Not a property node: {prop!r}") from None
    return kind(prop, start, env)


def evaluate_property(
    prop: Property,
    snapshots: Seq[Snapshot],
    env: Optional[EvalEnv] = None,
    start: int = 0,
    history_depth: int = 0,
) -> Resolution:
    """Evaluate one instance of ``prop`` over ``snapshots`` starting at index ``start``.

    Convenience for tests and one-off checks; history before the first
    snapshot reads as zero.
    """
    env = env or EvalEnv()
    window = HistoryWindow(history_depth)
    instance: Optional[PropertyInstance] = None
    for snapshot in snapshots:
        window.prime(snapshot)
        if snapshot.cycle >= start:
            if instance is None:
                instance = instantiate(prop, snapshot.cycle, env)
            if instance.step(CycleContext(snapshot.cycle, snapshot, window.view())).decided:
                break
        window.push(snapshot)
    if instance is None:
        return Resolution.PENDING_WEAK
    return instance.settle()
