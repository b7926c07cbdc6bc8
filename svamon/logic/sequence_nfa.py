# logic/sequence_nfa.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Compilation of sequence expressions into delay-annotated position automata

"""Sequence compiler.

A sequence compiles to a position automaton whose nodes are Boolean guards,
each checked at exactly one cycle, and whose edges carry the delay window
``[lo, hi]`` between the cycle the source node matched and the cycle the
target node is checked (``hi`` None means unbounded). Entry edges carry the
window measured from the attempt's start cycle. A match ends in the cycle a
final node's guard holds.

Construction works on fragments: a fragment is a set of entry windows, a set
of exit nodes and a flag telling whether the fragment also matches the empty
sequence. Repetition unrolls its operand into fresh copies; an unbounded
upper bound becomes a back edge on the last copy. Goto and non-consecutive
repetition are rewritten into consecutive forms before compilation:

    b[->m:n]  =  (!b[*0:$] ##1 b)[*m:n]
    b[=m:n]   =  b[->m:n] ##1 !b[*0:$]

Empty matches obey the usual rules: ``empty ##n s`` is ``##(n-1) s``,
``s ##n empty`` is ``s ##(n-1) 1``, and ``##0`` next to an empty side
never matches.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from svamon.parser.ast_nodes import (
    BoolExpr,
    CycleRange,
    RepeatKind,
    SeqBool,
    SeqConcat,
    SeqDelay,
    SeqRepeat,
    Sequence,
    TRUE,
    UnaryOp,
)
from svamon.parser.exceptions import MalformedExpression
from svamon.utils.logger import get_logger

logger = get_logger(__name__)

Window = Tuple[int, Optional[int]]
Edge = Tuple[int, int, Optional[int]]  # (target node, lo, hi)


def _add(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None or b is None:
        return None
    return a + b


def _empty_shift(delay: CycleRange) -> Optional[Window]:
    """Window an empty side turns ``##[m:n]`` into, or None if it cannot match."""
    if delay.hi == 0:
        return None
    return max(delay.lo, 1) - 1, None if delay.hi is None else delay.hi - 1


@dataclass(slots=True)
class _Fragment:
    entries: List[Edge] = field(default_factory=list)
    exits: List[int] = field(default_factory=list)
    nullable: bool = False


@dataclass(slots=True)
class SequenceAutomaton:
    """
    Compiled form of one sequence.

    Attributes:
      source: The sequence this automaton recognises.
      guards: Boolean guard of each node, indexed by node id.
      edges: Outgoing ``(target, lo, hi)`` edges per node.
      entries: ``(node, lo, hi)`` windows measured from the attempt start.
      finals: Nodes whose guard holding ends a match.
      nullable: True when the sequence also admits the empty match.
    """
    source: Sequence
    guards: List[BoolExpr] = field(default_factory=list)
    edges: List[List[Edge]] = field(default_factory=list)
    entries: Tuple[Edge, ...] = ()
    finals: frozenset = frozenset()
    nullable: bool = False

    @property
    def size(self) -> int:
        return len(self.guards)

    @property
    def single_cycle(self) -> bool:
        """True when every match starts and ends in the same cycle."""
        return all(not out for out in self.edges) and all(
            lo == 0 and hi == 0 for _, lo, hi in self.entries
        )

    def describe(self) -> str:
        """Multi-line dump of nodes and edges for debug logging."""
        lines = [f"automaton for {self.source}"]
        for node, lo, hi in self.entries:
            lines.append(f"  start -[{lo}:{'$' if hi is None else hi}]-> n{node}")
        for node, guard in enumerate(self.guards):
            mark = " (final)" if node in self.finals else ""
            lines.append(f"  n{node}: {guard}{mark}")
            for target, lo, hi in self.edges[node]:
                lines.append(f"    -[{lo}:{'$' if hi is None else hi}]-> n{target}")
        return "\n".join(lines)


class _Builder:
    def __init__(self, source: Sequence):
        self.automaton = SequenceAutomaton(source)

    def node(self, guard: BoolExpr) -> int:
        self.automaton.guards.append(guard)
        self.automaton.edges.append([])
        return len(self.automaton.guards) - 1

    def link(self, exits: List[int], entries: List[Edge], lo: int, hi: Optional[int]) -> None:
        for source in exits:
            out = self.automaton.edges[source]
            for target, e_lo, e_hi in entries:
                edge = (target, lo + e_lo, _add(hi, e_hi))
                if edge not in out:
                    out.append(edge)

    def build(self, seq: Sequence) -> _Fragment:
        if isinstance(seq, SeqBool):
            node = self.node(seq.expr)
            return _Fragment([(node, 0, 0)], [node], False)
        if isinstance(seq, SeqConcat):
            return self.concat(self.build(seq.left), seq.right, seq.delay)
        if isinstance(seq, SeqDelay):
            # ##[m:n] s behaves as 1 ##[m:n] s
            node = self.node(TRUE)
            return self.concat(_Fragment([(node, 0, 0)], [node], False), seq.operand, seq.delay)
        if isinstance(seq, SeqRepeat):
            return self.repeat(seq)
        raise MalformedExpression(f"Not a sequence: {seq!r}")

    def concat(self, left: _Fragment, right_seq: Sequence, delay: CycleRange) -> _Fragment:
        right = self.build(right_seq)
        result = _Fragment(list(left.entries), list(right.exits), False)

        self.link(left.exits, right.entries, delay.lo, delay.hi)

        shift = _empty_shift(delay)
        if shift is not None and left.nullable:
            lo, hi = shift
            for target, e_lo, e_hi in right.entries:
                entry = (target, lo + e_lo, _add(hi, e_hi))
                if entry not in result.entries:
                    result.entries.append(entry)
        if shift is not None and right.nullable and left.exits:
            lo, hi = shift
            tail = self.node(TRUE)
            self.link(left.exits, [(tail, 0, 0)], lo, hi)
            result.exits.append(tail)
        return result

    def repeat(self, seq: SeqRepeat) -> _Fragment:
        if seq.kind is RepeatKind.GOTO:
            return self.build(_goto_form(seq.operand, seq.count))
        if seq.kind is RepeatKind.NONCONSECUTIVE:
            goto = SeqRepeat(seq.operand, seq.count, RepeatKind.GOTO)
            idle = SeqRepeat(SeqBool(UnaryOp("!", seq.operand.expr)), CycleRange(0))
            return self.build(SeqConcat(goto, idle, CycleRange.exactly(1)))

        lo, hi = seq.count.lo, seq.count.hi
        if hi == 0:
            return _Fragment([], [], True)

        copies = hi if hi is not None else max(lo, 1)
        fragments = []
        for index in range(copies):
            fragment = self.build(seq.operand)
            if fragment.nullable:
                raise MalformedExpression(
                    f"Repetition operand must not match the empty sequence: {seq}"
                )
            if fragments:
                self.link(fragments[-1].exits, fragment.entries, 1, 1)
            fragments.append(fragment)

        if hi is None:
            last = fragments[-1]
            self.link(last.exits, last.entries, 1, 1)

        exits: List[int] = []
        for fragment in fragments[max(lo, 1) - 1:]:
            exits.extend(fragment.exits)
        return _Fragment(list(fragments[0].entries), exits, lo == 0)


def _goto_form(operand: SeqBool, count: CycleRange) -> Sequence:
    idle = SeqRepeat(SeqBool(UnaryOp("!", operand.expr)), CycleRange(0))
    hit = SeqConcat(idle, operand, CycleRange.exactly(1))
    return SeqRepeat(hit, count)


def compile_sequence(seq: Sequence) -> SequenceAutomaton:
    """Compile ``seq`` into a position automaton.

    Raises:
        MalformedExpression: A repetition operand admits the empty match
    """
    builder = _Builder(seq)
    fragment = builder.build(seq)
    automaton = builder.automaton
    automaton.entries = tuple(fragment.entries)
    automaton.finals = frozenset(fragment.exits)
    automaton.nullable = fragment.nullable

    if logger.is_debug():
        logger.debug(automaton.describe())
    return automaton
