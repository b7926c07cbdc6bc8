# model/__init__.py

"""
Data model for the evaluation engine.

Exports:
  - BitVector: immutable fixed-width value
  - Snapshot: per-cycle signal mapping
  - Trace: ordered, contiguous snapshots
  - HistoryWindow: bounded window of prior snapshots
  - TraceOrderError: raised on out-of-order snapshots
"""

from .bitvector import BitVector
from .snapshot import Snapshot, Trace, TraceOrderError
from .history import HistoryWindow

__all__ = [
    "BitVector",
    "Snapshot",
    "Trace",
    "TraceOrderError",
    "HistoryWindow",
]
