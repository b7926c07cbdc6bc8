# model/history.py

"""
HistoryWindow keeps the bounded run of prior snapshots that ``$past`` and
the edge-detection functions read. The window is primed with zero-valued
stand-ins for the cycles before the trace started, so an expression that
reaches back further than the trace has run reads logic 0 rather than
failing mid-run.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional, Tuple

from .snapshot import Snapshot


@dataclass(slots=True)
class HistoryWindow:
    """
    Fixed-depth window of the snapshots preceding the current cycle.

    Attributes:
      depth: Number of prior cycles retained.
      _buffer: Retained snapshots, oldest first.
    """
    depth: int = 0
    _buffer: Deque[Snapshot] = field(default_factory=deque, init=False)
    _primed: bool = field(default=False, init=False)

    def __post_init__(self):
        if self.depth < 0:
            raise ValueError(f"History depth must be non-negative, got {self.depth}")
        self._buffer = deque(maxlen=self.depth or None)

    def prime(self, first: Snapshot) -> None:
        """Fill the window with zero-valued copies of ``first``'s signals."""
        if self._primed:
            return
        self._primed = True
        for back in range(self.depth, 0, -1):
            self._buffer.append(first.zeroed(first.cycle - back))

    def view(self) -> Tuple[Snapshot, ...]:
        """Prior snapshots, oldest first."""
        return tuple(self._buffer)

    def push(self, snapshot: Snapshot) -> None:
        """Record the snapshot of the cycle that just finished."""
        if self.depth:
            self._buffer.append(snapshot)

    @property
    def latest(self) -> Optional[Snapshot]:
        return self._buffer[-1] if self._buffer else None

    def __len__(self) -> int:
        return len(self._buffer)
