# model/snapshot.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Per-cycle signal snapshots and the traces that order them

"""Snapshots and traces: the engine's only input data.

A ``Snapshot`` is the sampled state of the design at one clock cycle, an
immutable mapping from signal name to ``BitVector``. A ``Trace`` is an
ordered run of snapshots whose cycle indices are strictly increasing and
contiguous.
"""

from __future__ import annotations
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from svamon.parser.exceptions import SVAMonError
from .bitvector import BitVector

SignalValue = Union[int, bool, BitVector]


class TraceOrderError(SVAMonError):
    """Raised when a snapshot would break the contiguous cycle ordering."""

    pass


class Snapshot(Mapping):
    """Immutable signal-name to bit-vector mapping for one cycle.

    Attributes:
        cycle: Cycle index the values were sampled at
    """

    __slots__ = ("_cycle", "_values", "_hash")

    def __init__(self, cycle: int, values: Mapping[str, SignalValue] = None, **kwargs: SignalValue):
        if isinstance(cycle, bool) or not isinstance(cycle, int) or cycle < 0:
            raise ValueError(f"Cycle index must be a non-negative integer, got {cycle!r}")
        merged: Dict[str, SignalValue] = dict(values or {})
        merged.update(kwargs)
        self._cycle = cycle
        self._values: Dict[str, BitVector] = {
            str(name): BitVector.of(value) for name, value in merged.items()
        }
        self._hash = None

    @property
    def cycle(self) -> int:
        return self._cycle

    def __getitem__(self, name: str) -> BitVector:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._cycle == other._cycle and self._values == other._values

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self._cycle, frozenset(self._values.items())))
        return self._hash

    def zeroed(self, cycle: int) -> "Snapshot":
        """Copy with every signal at zero, keeping widths.

        Used to stand in for the samples before the first clock cycle.
        """
        zero = Snapshot.__new__(Snapshot)
        zero._cycle = cycle
        zero._values = {name: value.zero() for name, value in self._values.items()}
        zero._hash = None
        return zero

    def with_cycle(self, cycle: int) -> "Snapshot":
        """Same values re-stamped at another cycle index."""
        return Snapshot(cycle, self._values)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v.value}" for k, v in sorted(self._values.items()))
        return f"Snapshot({self._cycle}: {inner})"


class Trace:
    """Ordered, contiguous sequence of snapshots.

    A trace may be built up front for replay or grown one snapshot at a time
    for incremental feeds. Cycle indices start wherever the first snapshot
    says and must then increase by exactly one.
    """

    def __init__(self, snapshots: Iterable[Snapshot] = ()):
        self._snapshots: List[Snapshot] = []
        for snap in snapshots:
            self.append(snap)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, SignalValue]], start: int = 0) -> "Trace":
        """Build a trace from plain mappings, numbering cycles from ``start``."""
        return cls(Snapshot(start + i, row) for i, row in enumerate(rows))

    @classmethod
    def from_signals(cls, length: int, **signals: Iterable[SignalValue]) -> "Trace":
        """Build a trace column-wise: ``Trace.from_signals(3, a=[0, 1, 0])``.

        Signals given as a set or frozenset of cycle indices are high exactly
        on those cycles; sequences give one value per cycle.
        """
        columns: Dict[str, List[SignalValue]] = {}
        for name, column in signals.items():
            if isinstance(column, (set, frozenset)):
                columns[name] = [1 if c in column else 0 for c in range(length)]
            else:
                values = list(column)
                if len(values) != length:
                    raise ValueError(f"Signal {name!r} has {len(values)} values, expected {length}")
                columns[name] = values
        return cls.from_rows({name: col[i] for name, col in columns.items()} for i in range(length))

    def append(self, snapshot: Snapshot) -> None:
        if self._snapshots:
            expected = self._snapshots[-1].cycle + 1
            if snapshot.cycle != expected:
                raise TraceOrderError(
                    f"Snapshot for cycle {snapshot.cycle} out of order (expected {expected})"
                )
        self._snapshots.append(snapshot)

    @property
    def first_cycle(self) -> int:
        return self._snapshots[0].cycle if self._snapshots else 0

    def prefix(self, cycle: int) -> Tuple[Snapshot, ...]:
        """Snapshots up to and including ``cycle``."""
        return self.window(self.first_cycle, cycle)

    def window(self, first: int, last: int) -> Tuple[Snapshot, ...]:
        """Snapshots with cycle indices in ``[first, last]``."""
        base = self.first_cycle
        lo = max(first - base, 0)
        hi = max(last - base + 1, 0)
        return tuple(self._snapshots[lo:hi])

    def signals(self) -> frozenset:
        """Every signal name that appears in at least one snapshot."""
        names = set()
        for snap in self._snapshots:
            names.update(snap)
        return frozenset(names)

    def __getitem__(self, index):
        return self._snapshots[index]

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __repr__(self) -> str:
        return f"Trace({len(self._snapshots)} cycles from {self.first_cycle})"
