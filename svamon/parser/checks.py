# parser/checks.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Static walks over built ASTs: signal references, history depth, strength defaults

"""Static analysis of expression trees, run once before any cycle is fed.

The walks here never look at trace data. They answer the questions the
directive compiler asks up front: which signals does this directive read,
how many prior cycles must be retained for ``$past`` and the edge functions,
and what does each unmarked sequence property mean under a given directive.
"""

from dataclasses import replace
from typing import Iterator, Set

from .ast_nodes import (
    BitSelect,
    BoolExpr,
    Directive,
    PartSelect,
    PropIf,
    Property,
    SeqBool,
    SeqConcat,
    SeqDelay,
    SeqRepeat,
    Sequence,
    SequenceProperty,
    Signal,
    Strength,
    SysCall,
    Implication,
    PropNot,
    PropAnd,
    PropOr,
    Always,
    Eventually,
    Until,
    Nexttime,
)

#: Functions that compare the current sample with the previous one.
EDGE_FUNCTIONS = frozenset({"$rose", "$fell", "$stable", "$changed"})


def iter_bool_exprs(node) -> Iterator[BoolExpr]:
    """Yield every top-level Boolean expression embedded in ``node``.

    The disable condition and ``if`` conditions of a directive are included.
    """
    if isinstance(node, BoolExpr):
        yield node
    elif isinstance(node, Directive):
        if node.disable is not None:
            yield node.disable
        yield from iter_bool_exprs(node.prop)
    elif isinstance(node, SeqBool):
        yield node.expr
    elif isinstance(node, SeqConcat):
        yield from iter_bool_exprs(node.left)
        yield from iter_bool_exprs(node.right)
    elif isinstance(node, (SeqDelay, SeqRepeat)):
        yield from iter_bool_exprs(node.operand)
    elif isinstance(node, SequenceProperty):
        yield from iter_bool_exprs(node.seq)
    elif isinstance(node, PropIf):
        yield node.cond
        yield from iter_bool_exprs(node.then)
        if node.otherwise is not None:
            yield from iter_bool_exprs(node.otherwise)
    elif isinstance(node, Implication):
        yield from iter_bool_exprs(node.antecedent)
        yield from iter_bool_exprs(node.consequent)
    elif isinstance(node, (PropAnd, PropOr, Until)):
        yield from iter_bool_exprs(node.left)
        yield from iter_bool_exprs(node.right)
    elif isinstance(node, (PropNot, Always, Eventually, Nexttime)):
        yield from iter_bool_exprs(node.operand)
    else:
        raise TypeError(f"Not an expression node: {node!r}")


def iter_signals(node) -> Set[str]:
    """Names of every signal ``node`` reads."""
    names: Set[str] = set()
    stack = list(iter_bool_exprs(node))
    while stack:
        expr = stack.pop()
        if isinstance(expr, Signal):
            names.add(expr.name)
        elif isinstance(expr, (BitSelect, PartSelect)):
            names.add(expr.name)
        stack.extend(expr.children())
    return names


def required_history(node) -> int:
    """Deepest history window any Boolean expression in ``node`` reads.

    ``$past(e, n)`` needs ``n`` cycles plus whatever ``e`` needs itself; the
    edge functions need one cycle plus their operand's requirement.
    """
    if not isinstance(node, BoolExpr):
        return max((required_history(e) for e in iter_bool_exprs(node)), default=0)
    if isinstance(node, SysCall):
        if node.name == "$past":
            return node.past_depth + required_history(node.args[0])
        if node.name in EDGE_FUNCTIONS:
            return 1 + required_history(node.args[0])
    return max((required_history(child) for child in node.children()), default=0)


def resolve_strength(prop: Property, default: Strength) -> Property:
    """Return ``prop`` with every unmarked sequence property given ``default``.

    Explicit ``strong(...)`` and ``weak(...)`` are left alone.
    """
    if isinstance(prop, SequenceProperty):
        if prop.strength is None:
            return replace(prop, strength=default)
        return prop
    if isinstance(prop, (PropNot, Always, Eventually, Nexttime)):
        return replace(prop, operand=resolve_strength(prop.operand, default))
    if isinstance(prop, (PropAnd, PropOr, Until)):
        return replace(
            prop,
            left=resolve_strength(prop.left, default),
            right=resolve_strength(prop.right, default),
        )
    if isinstance(prop, PropIf):
        otherwise = None if prop.otherwise is None else resolve_strength(prop.otherwise, default)
        return replace(prop, then=resolve_strength(prop.then, default), otherwise=otherwise)
    if isinstance(prop, Implication):
        return replace(prop, consequent=resolve_strength(prop.consequent, default))
    raise TypeError(f"Not a property node: {prop!r}")


def iter_sequences(node) -> Iterator[Sequence]:
    """Yield the root sequence of every sequence-valued position in ``node``.

    These are the sequences a matcher will be compiled for: sequence
    properties and implication antecedents.
    """
    if isinstance(node, Directive):
        yield from iter_sequences(node.prop)
    elif isinstance(node, SequenceProperty):
        yield node.seq
    elif isinstance(node, Implication):
        yield node.antecedent
        yield from iter_sequences(node.consequent)
    elif isinstance(node, PropIf):
        yield from iter_sequences(node.then)
        if node.otherwise is not None:
            yield from iter_sequences(node.otherwise)
    elif isinstance(node, (PropAnd, PropOr, Until)):
        yield from iter_sequences(node.left)
        yield from iter_sequences(node.right)
    elif isinstance(node, (PropNot, Always, Eventually, Nexttime)):
        yield from iter_sequences(node.operand)
