# logic/verdict.py

"""
Verdict types for the evaluation engine.

Three layers of outcome exist. ``PartialVerdict`` is what a property
instance reports after each cycle it is stepped. ``Resolution`` is what an
instance would conclude if the trace ended now, keeping weak and strong
pending apart. ``Verdict`` is the directive-level answer handed to callers.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from svamon.model.snapshot import Snapshot


class PartialVerdict(Enum):
    """Three-state result of stepping a property instance."""
    STILL_EVALUATING = auto()  # needs more cycles
    HOLDS = auto()  # satisfied, whatever comes next
    VIOLATED = auto()  # failed, whatever comes next

    @property
    def decided(self) -> bool:
        return self is not PartialVerdict.STILL_EVALUATING

    def negate(self) -> "PartialVerdict":
        if self is PartialVerdict.HOLDS:
            return PartialVerdict.VIOLATED
        if self is PartialVerdict.VIOLATED:
            return PartialVerdict.HOLDS
        return self

    def combine_conjunctive(self, other: "PartialVerdict") -> "PartialVerdict":
        if PartialVerdict.VIOLATED in (self, other):
            return PartialVerdict.VIOLATED
        if self is PartialVerdict.HOLDS and other is PartialVerdict.HOLDS:
            return PartialVerdict.HOLDS
        return PartialVerdict.STILL_EVALUATING

    def combine_disjunctive(self, other: "PartialVerdict") -> "PartialVerdict":
        if PartialVerdict.HOLDS in (self, other):
            return PartialVerdict.HOLDS
        if self is PartialVerdict.VIOLATED and other is PartialVerdict.VIOLATED:
            return PartialVerdict.VIOLATED
        return PartialVerdict.STILL_EVALUATING


class Resolution(Enum):
    """What an instance concludes when no further cycle will come."""
    HOLDS = auto()
    VIOLATED = auto()
    PENDING_WEAK = auto()  # unfinished, satisfied on a finite trace
    PENDING_STRONG = auto()  # unfinished, owes an event the trace never showed

    @classmethod
    def of(cls, partial: PartialVerdict, pending: "Resolution") -> "Resolution":
        """Lift a decided partial verdict; undecided ones become ``pending``."""
        if partial is PartialVerdict.HOLDS:
            return cls.HOLDS
        if partial is PartialVerdict.VIOLATED:
            return cls.VIOLATED
        return pending

    @property
    def pending(self) -> bool:
        return self in (Resolution.PENDING_WEAK, Resolution.PENDING_STRONG)

    def negate(self) -> "Resolution":
        return _NEGATION[self]

    def combine_conjunctive(self, other: "Resolution") -> "Resolution":
        if Resolution.VIOLATED in (self, other):
            return Resolution.VIOLATED
        if self is Resolution.HOLDS:
            return other
        if other is Resolution.HOLDS:
            return self
        if Resolution.PENDING_STRONG in (self, other):
            return Resolution.PENDING_STRONG
        return Resolution.PENDING_WEAK

    def combine_disjunctive(self, other: "Resolution") -> "Resolution":
        if Resolution.HOLDS in (self, other):
            return Resolution.HOLDS
        if self is Resolution.VIOLATED:
            return other
        if other is Resolution.VIOLATED:
            return self
        if Resolution.PENDING_WEAK in (self, other):
            return Resolution.PENDING_WEAK
        return Resolution.PENDING_STRONG


_NEGATION = {
    Resolution.HOLDS: Resolution.VIOLATED,
    Resolution.VIOLATED: Resolution.HOLDS,
    Resolution.PENDING_WEAK: Resolution.PENDING_STRONG,
    Resolution.PENDING_STRONG: Resolution.PENDING_WEAK,
}


class VerdictKind(Enum):
    """Directive-level outcome."""
    HOLDS = auto()
    VIOLATED = auto()
    COVERED = auto()
    INCONCLUSIVE = auto()
    ASSUMPTION_UNSATISFIED = auto()
    OVERFLOW = auto()
    MISSING_VARIABLE = auto()


@dataclass(frozen=True, slots=True)
class Verdict:
    """
    Outcome of running one directive over a trace.

    Attributes:
      kind: The outcome.
      cycle: Cycle the outcome was detected at, when it has one.
      start: Start cycle of the attempt that violated or covered.
      prefix: Snapshots up to the violating cycle (Violated, AssumptionUnsatisfied).
      witness: Snapshots from the covering attempt's start to its end (Covered).
      reason: Human-readable detail for Overflow and MissingVariable.
      final: False for a verdict-so-far returned while streaming.
    """
    kind: VerdictKind
    cycle: Optional[int] = None
    start: Optional[int] = None
    prefix: Tuple[Snapshot, ...] = ()
    witness: Tuple[Snapshot, ...] = ()
    reason: Optional[str] = None
    final: bool = True

    @property
    def decisive(self) -> bool:
        """True when no further cycle can change the outcome."""
        return self.kind not in (VerdictKind.HOLDS, VerdictKind.INCONCLUSIVE)

    @classmethod
    def holds(cls, final: bool = True) -> "Verdict":
        return cls(VerdictKind.HOLDS, final=final)

    @classmethod
    def inconclusive(cls, final: bool = True) -> "Verdict":
        return cls(VerdictKind.INCONCLUSIVE, final=final)

    def __str__(self) -> str:
        name = self.kind.name
        if self.kind in (VerdictKind.VIOLATED, VerdictKind.ASSUMPTION_UNSATISFIED, VerdictKind.COVERED):
            return f"{name} at cycle {self.cycle} (attempt from cycle {self.start})"
        if self.reason:
            return f"{name}: {self.reason}"
        if not self.final:
            return f"{name} (so far)"
        return name
