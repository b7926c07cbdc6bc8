# logic/boolean_eval.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Evaluation of Boolean-layer expressions against one snapshot and its history

"""Boolean evaluator.

``evaluate`` computes the bit-vector value of a Boolean expression at one
snapshot; ``holds`` reduces it to a truth value (non-zero is true). Prior
samples are passed in as ``history``, a tuple of snapshots oldest first, so
``$past(e, n)`` evaluates ``e`` against ``history[-n]`` with the older part
of the tuple as that sample's own history.

Width rules follow SystemVerilog's self-determined sizing for two-state
operands: unsized literals are 32 bits, logical and relational results are a
single bit, bitwise and arithmetic results take the wider operand's width
and wrap within it.
"""

from typing import Iterable, Sequence, Tuple

from svamon.model.bitvector import BitVector
from svamon.model.snapshot import Snapshot
from svamon.parser.ast_nodes import (
    BinaryOp,
    BitSelect,
    BoolExpr,
    Const,
    PartSelect,
    Signal,
    SysCall,
    UNSIZED_WIDTH,
    UnaryOp,
)
from .exceptions import MissingVariableError, UndefinedHistoryError

History = Tuple[Snapshot, ...]


def evaluate(expr: BoolExpr, snapshot: Snapshot, history: Sequence[Snapshot] = ()) -> BitVector:
    """Value of ``expr`` at ``snapshot``.

    Raises:
        MissingVariableError: ``snapshot`` (or a history sample) lacks a signal
        UndefinedHistoryError: ``$past`` or an edge function reaches beyond ``history``
    """
    if isinstance(expr, Signal):
        return _lookup(snapshot, expr.name)
    if isinstance(expr, Const):
        return BitVector(expr.value, expr.effective_width)
    if isinstance(expr, BitSelect):
        return BitVector(_lookup(snapshot, expr.name).get_bit(expr.index), 1)
    if isinstance(expr, PartSelect):
        return _lookup(snapshot, expr.name).slice(expr.msb, expr.lsb)
    if isinstance(expr, UnaryOp):
        return _unary(expr.op, evaluate(expr.operand, snapshot, history))
    if isinstance(expr, BinaryOp):
        return _binary(expr, snapshot, history)
    if isinstance(expr, SysCall):
        return _system_call(expr, snapshot, history)
    raise TypeError(f"Not a Boolean expression: {expr!r}")


def holds(expr: BoolExpr, snapshot: Snapshot, history: Sequence[Snapshot] = ()) -> bool:
    """Truth value of ``expr`` at ``snapshot``."""
    return bool(evaluate(expr, snapshot, history))


def missing_signals(names: Iterable[str], snapshot: Snapshot) -> Tuple[str, ...]:
    """Names among ``names`` that ``snapshot`` does not carry, sorted."""
    return tuple(sorted(name for name in names if name not in snapshot))


def _lookup(snapshot: Snapshot, name: str) -> BitVector:
    try:
        return snapshot[name]
    except KeyError:
        raise MissingVariableError(name, snapshot.cycle) from None


def _unary(op: str, operand: BitVector) -> BitVector:
    if op == "!":
        return BitVector.bit(not operand)
    if op == "~":
        return BitVector(~operand.value, operand.width)
    return BitVector(-operand.value, operand.width)


def _binary(expr: BinaryOp, snapshot: Snapshot, history) -> BitVector:
    op = expr.op
    left = evaluate(expr.left, snapshot, history)

    # Logical operators short-circuit like their C counterparts
    if op == "&&":
        return BitVector.bit(bool(left) and holds(expr.right, snapshot, history))
    if op == "||":
        return BitVector.bit(bool(left) or holds(expr.right, snapshot, history))

    right = evaluate(expr.right, snapshot, history)
    width = max(left.width, right.width)
    a, b = left.value, right.value

    if op == "&":
        return BitVector(a & b, width)
    if op == "|":
        return BitVector(a | b, width)
    if op == "^":
        return BitVector(a ^ b, width)
    if op == "+":
        return BitVector(a + b, width)
    if op == "-":
        return BitVector(a - b, width)
    if op == "==":
        return BitVector.bit(a == b)
    if op == "!=":
        return BitVector.bit(a != b)
    if op == "<":
        return BitVector.bit(a < b)
    if op == "<=":
        return BitVector.bit(a <= b)
    if op == ">":
        return BitVector.bit(a > b)
    if op == ">=":
        return BitVector.bit(a >= b)
    raise TypeError(f"Unknown binary operator: {op}")


def _sample_back(expr: BoolExpr, history, depth: int, fn: str) -> BitVector:
    if depth > len(history):
        raise UndefinedHistoryError(
            f"{fn} needs {depth} prior cycle(s) but only {len(history)} are retained"
        )
    return evaluate(expr, history[-depth], history[:-depth])


def _system_call(call: SysCall, snapshot: Snapshot, history) -> BitVector:
    name = call.name
    operand = call.args[0]

    if name == "$past":
        return _sample_back(operand, history, call.past_depth, name)
    if name == "$sampled":
        return evaluate(operand, snapshot, history)

    current = evaluate(operand, snapshot, history)

    if name in ("$rose", "$fell", "$stable", "$changed"):
        prior = _sample_back(operand, history, 1, name)
        if name == "$rose":
            return BitVector.bit(current.lsb == 1 and prior.lsb == 0)
        if name == "$fell":
            return BitVector.bit(current.lsb == 0 and prior.lsb == 1)
        if name == "$stable":
            return BitVector.bit(current.lsb == prior.lsb)
        return BitVector.bit(current.lsb != prior.lsb)

    if name == "$onehot":
        return BitVector.bit(current.ones() == 1)
    if name == "$onehot0":
        return BitVector.bit(current.ones() <= 1)
    if name == "$countones":
        return BitVector(current.ones(), UNSIZED_WIDTH)
    if name == "$countbits":
        controls = {arg.value for arg in call.args[1:]}
        count = (current.ones() if 1 in controls else 0) + (current.zeros() if 0 in controls else 0)
        return BitVector(count, UNSIZED_WIDTH)
    raise TypeError(f"Unsupported system function: {name}")
