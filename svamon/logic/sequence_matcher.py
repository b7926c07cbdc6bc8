# logic/sequence_matcher.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Cycle-by-cycle tracking of concurrent sequence match attempts

"""Sequence matcher.

A ``SequenceMatcher`` runs one compiled sequence over the trace. Every
in-flight attempt is a ``MatchAttempt``: the automaton node to check next,
the window of cycles it may be checked in, and the cycle the attempt
started. Attempts live in an ``AttemptArena`` that hands out integer handles
and refuses duplicates, so two paths that reach the same node with the same
window from the same start collapse into one.

Per cycle, every attempt whose window covers the cycle checks its guard.
A guard that holds on a final node reports a ``MatchEvent``; every outgoing
edge then spawns a successor attempt. Successors with a zero delay are
checked in the same cycle. Attempts whose window has passed are pruned, and
the rest are normalised so equivalent attempts merge.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence as Seq, Set, Tuple

from svamon.model.snapshot import Snapshot
from svamon.parser.ast_nodes import BoolExpr
from svamon.utils.logger import get_logger
from .boolean_eval import holds
from .exceptions import AttemptOverflowError
from .sequence_nfa import SequenceAutomaton

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True, order=True)
class MatchEvent:
    """A completed match of a sequence from ``start`` to ``end`` inclusive."""

    start: int
    end: int

    @property
    def offset(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class MatchAttempt:
    """An attempt waiting to check ``node`` somewhere in ``[earliest, latest]``."""

    start: int
    node: int
    earliest: int
    latest: Optional[int]

    def covers(self, cycle: int) -> bool:
        return self.earliest <= cycle and (self.latest is None or cycle <= self.latest)

    def expired(self, cycle: int) -> bool:
        return self.latest is not None and self.latest <= cycle


class AttemptArena:
    """Handle-addressed store of live attempts with duplicate suppression.

    Args:
        limit: Maximum number of live attempts, None for no limit
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit
        self._slots: Dict[int, MatchAttempt] = {}
        self._index: Dict[MatchAttempt, int] = {}
        self._next_handle = 0

    def add(self, attempt: MatchAttempt, cycle: int) -> Tuple[int, bool]:
        """Store ``attempt``; returns its handle and whether it was new."""
        handle = self._index.get(attempt)
        if handle is not None:
            return handle, False
        if self.limit is not None and len(self._slots) >= self.limit:
            raise AttemptOverflowError(self.limit, cycle)
        handle = self._next_handle
        self._next_handle += 1
        self._slots[handle] = attempt
        self._index[attempt] = handle
        return handle, True

    def remove(self, handle: int) -> None:
        attempt = self._slots.pop(handle)
        del self._index[attempt]

    def clear(self) -> None:
        self._slots.clear()
        self._index.clear()

    def handles(self) -> List[int]:
        return list(self._slots)

    def starts(self) -> Set[int]:
        return {attempt.start for attempt in self._slots.values()}

    def __getitem__(self, handle: int) -> MatchAttempt:
        return self._slots[handle]

    def __iter__(self) -> Iterator[MatchAttempt]:
        return iter(self._slots.values())

    def __len__(self) -> int:
        return len(self._slots)


class SequenceMatcher:
    """Tracks every live attempt of one compiled sequence.

    In search mode (``advance(..., spawn=True)``) a fresh attempt starts on
    every cycle. Anchored users call ``start(cycle)`` once and then advance
    with ``spawn=False``.
    """

    def __init__(self, automaton: SequenceAutomaton, max_attempts: Optional[int] = None):
        self.automaton = automaton
        self.arena = AttemptArena(max_attempts)
        self.last_cycle: Optional[int] = None

    def start(self, cycle: int) -> None:
        """Open an attempt anchored at ``cycle``."""
        for node, lo, hi in self.automaton.entries:
            latest = None if hi is None else cycle + hi
            self.arena.add(MatchAttempt(cycle, node, cycle + lo, latest), cycle)
        logger.attempt_spawned(f"sequence {self.automaton.source}", cycle)

    def advance(
        self,
        cycle: int,
        snapshot: Snapshot,
        history: Seq[Snapshot] = (),
        spawn: bool = True,
        cache: Optional[Dict[BoolExpr, bool]] = None,
    ) -> Set[MatchEvent]:
        """Process one cycle and return the matches that end in it.

        Args:
            cycle: Index of the cycle being fed
            snapshot: Sampled values for the cycle
            history: Prior snapshots, oldest first
            spawn: Start a fresh attempt at this cycle first
            cache: Guard results already computed this cycle, shared between matchers

        Raises:
            AttemptOverflowError: The live attempt count would exceed the limit
            MissingVariableError: A guard reads a signal the snapshot lacks
        """
        if spawn:
            self.start(cycle)
        if cache is None:
            cache = {}

        events: Set[MatchEvent] = set()
        expanded: Set[Tuple[int, int]] = set()
        worklist = [h for h in self.arena.handles() if self.arena[h].covers(cycle)]

        while worklist:
            attempt = self.arena[worklist.pop()]
            key = (attempt.start, attempt.node)
            if key in expanded:
                continue
            expanded.add(key)

            guard = self.automaton.guards[attempt.node]
            passed = cache.get(guard)
            if passed is None:
                passed = holds(guard, snapshot, history)
                cache[guard] = passed
            if not passed:
                continue

            if attempt.node in self.automaton.finals:
                events.add(MatchEvent(attempt.start, cycle))
                logger.match_found(attempt.start, cycle)

            for target, lo, hi in self.automaton.edges[attempt.node]:
                latest = None if hi is None else cycle + hi
                handle, new = self.arena.add(MatchAttempt(attempt.start, target, cycle + lo, latest), cycle)
                if new and lo == 0:
                    worklist.append(handle)

        self._prune(cycle)
        self.last_cycle = cycle
        return events

    def _prune(self, cycle: int) -> None:
        expired = 0
        survivors: Dict[Tuple[int, int, int], Optional[int]] = {}
        for handle in self.arena.handles():
            attempt = self.arena[handle]
            self.arena.remove(handle)
            if attempt.expired(cycle):
                expired += 1
                continue
            key = (attempt.start, attempt.node, max(attempt.earliest, cycle + 1))
            if key in survivors:
                current = survivors[key]
                if current is None or (attempt.latest is not None and attempt.latest <= current):
                    continue
            survivors[key] = attempt.latest

        for (start, node, earliest), latest in survivors.items():
            self.arena.add(MatchAttempt(start, node, earliest, latest), cycle)
        logger.attempt_pruned(expired, cycle)

    def reset(self) -> int:
        """Drop every live attempt; returns how many were dropped."""
        dropped = len(self.arena)
        self.arena.clear()
        return dropped

    @property
    def live(self) -> bool:
        return len(self.arena) > 0

    def live_starts(self) -> Set[int]:
        """Start cycles that still have at least one live attempt."""
        return self.arena.starts()

    def pending_nodes(self) -> Set[int]:
        """Automaton nodes some live attempt will check next."""
        return {attempt.node for attempt in self.arena}

    def is_live(self, start: int) -> bool:
        return any(attempt.start == start for attempt in self.arena)

    def __len__(self) -> int:
        return len(self.arena)
