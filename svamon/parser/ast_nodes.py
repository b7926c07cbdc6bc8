# parser/ast_nodes.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Abstract Syntax Tree node classes for Boolean, sequence and property expressions

"""AST node classes for the supported SystemVerilog Assertions subset.

This module defines immutable and hashable node classes in three layers that
mirror the SVA language structure:

Boolean layer:
    Signal, Const, BitSelect, PartSelect, UnaryOp, BinaryOp, SysCall

Sequence layer:
    SeqBool (a Boolean used as a one-cycle sequence), SeqConcat (``##``),
    SeqDelay (a leading ``##``), SeqRepeat (``[*]``, ``[->]``, ``[=]``)

Property layer:
    SequenceProperty, PropNot, PropAnd, PropOr, PropIf, Implication,
    Always, Eventually, Until, Nexttime

plus the ``Directive`` that wraps a property for assert/assume/cover/restrict.

Nodes validate their own shape on construction and raise
``MalformedExpression``, so a tree that exists is structurally valid. Every
node's ``__str__`` prints text the front end parses back to an equal tree.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .exceptions import MalformedExpression


# ---------------------------------------------------------------------------
# Boolean layer
# ---------------------------------------------------------------------------

#: Width given to unsized integer literals, as in SystemVerilog.
UNSIZED_WIDTH = 32

UNARY_OPERATORS = frozenset({"!", "~", "-"})
BINARY_OPERATORS = frozenset(
    {"&&", "||", "&", "|", "^", "==", "!=", "<", "<=", ">", ">=", "+", "-"}
)

#: System functions with the number of arguments each accepts (min, max).
SYSTEM_FUNCTIONS = {
    "$past": (1, 2),
    "$rose": (1, 1),
    "$fell": (1, 1),
    "$stable": (1, 1),
    "$changed": (1, 1),
    "$sampled": (1, 1),
    "$onehot": (1, 1),
    "$onehot0": (1, 1),
    "$countones": (1, 1),
    "$countbits": (2, None),
}


@dataclass(frozen=True, slots=True)
class BoolExpr:
    """Base class for Boolean-layer expressions.

    A Boolean expression is a pure function of the current snapshot and, for
    the sampled-value functions, a bounded window of prior snapshots.
    """

    def children(self) -> Tuple["BoolExpr", ...]:
        """Direct sub-expressions, used by generic tree walks."""
        return ()

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Signal(BoolExpr):
    """Reference to a sampled design signal.

    Attributes:
        name: Signal identifier as it appears in snapshots
    """

    name: str

    def __post_init__(self):
        if not self.name:
            raise MalformedExpression("Signal name must not be empty")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Const(BoolExpr):
    """Integer literal.

    Attributes:
        value: Non-negative literal value
        width: Explicit width for sized literals, None for unsized ones
    """

    value: int
    width: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.value, bool):
            object.__setattr__(self, "value", int(self.value))
        if not isinstance(self.value, int) or self.value < 0:
            raise MalformedExpression(f"Literal value must be a non-negative integer: {self.value!r}")
        if self.width is not None and self.width < 1:
            raise MalformedExpression(f"Literal width must be positive: {self.width}")
        if self.width is not None and self.value.bit_length() > self.width:
            raise MalformedExpression(f"Literal {self.value} does not fit in {self.width} bits")

    @property
    def effective_width(self) -> int:
        return self.width if self.width is not None else UNSIZED_WIDTH

    def __str__(self) -> str:
        if self.width is None:
            return str(self.value)
        return f"{self.width}'d{self.value}"


#: The always-true one-bit constant, used for delays that check nothing.
TRUE = Const(1, 1)


@dataclass(frozen=True, slots=True)
class BitSelect(BoolExpr):
    """Single-bit select ``name[index]``."""

    name: str
    index: int

    def __post_init__(self):
        if self.index < 0:
            raise MalformedExpression(f"Bit index must be non-negative: {self.name}[{self.index}]")

    def __str__(self) -> str:
        return f"{self.name}[{self.index}]"


@dataclass(frozen=True, slots=True)
class PartSelect(BoolExpr):
    """Part select ``name[msb:lsb]``."""

    name: str
    msb: int
    lsb: int

    def __post_init__(self):
        if self.lsb < 0 or self.msb < self.lsb:
            raise MalformedExpression(
                f"Part select bounds must satisfy msb >= lsb >= 0: {self.name}[{self.msb}:{self.lsb}]"
            )

    def __str__(self) -> str:
        return f"{self.name}[{self.msb}:{self.lsb}]"


@dataclass(frozen=True, slots=True)
class UnaryOp(BoolExpr):
    """Unary operator: logical not ``!``, bitwise not ``~`` or negation ``-``."""

    op: str
    operand: BoolExpr

    def __post_init__(self):
        if self.op not in UNARY_OPERATORS:
            raise MalformedExpression(f"Unknown unary operator: {self.op}")
        _require_bool(self.operand, f"operand of '{self.op}'")

    def children(self) -> Tuple[BoolExpr, ...]:
        return (self.operand,)

    def __str__(self) -> str:
        return f"{self.op}{self.operand}"


@dataclass(frozen=True, slots=True)
class BinaryOp(BoolExpr):
    """Binary logical, bitwise, relational or arithmetic operator."""

    op: str
    left: BoolExpr
    right: BoolExpr

    def __post_init__(self):
        if self.op not in BINARY_OPERATORS:
            raise MalformedExpression(f"Unknown binary operator: {self.op}")
        _require_bool(self.left, f"left operand of '{self.op}'")
        _require_bool(self.right, f"right operand of '{self.op}'")

    def children(self) -> Tuple[BoolExpr, ...]:
        return (self.left, self.right)

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass(frozen=True, slots=True)
class SysCall(BoolExpr):
    """System function call such as ``$past(x, 2)`` or ``$rose(req)``.

    Attributes:
        name: Function name including the leading ``$``
        args: Argument expressions
    """

    name: str
    args: Tuple[BoolExpr, ...]

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        if self.name not in SYSTEM_FUNCTIONS:
            raise MalformedExpression(f"Unsupported system function: {self.name}")
        lo, hi = SYSTEM_FUNCTIONS[self.name]
        count = len(self.args)
        if count < lo or (hi is not None and count > hi):
            raise MalformedExpression(f"{self.name} takes {lo}..{hi or 'n'} arguments, got {count}")
        for arg in self.args:
            _require_bool(arg, f"argument of {self.name}")
        if self.name == "$past" and count == 2:
            depth = self.args[1]
            if not isinstance(depth, Const) or depth.value < 1:
                raise MalformedExpression(f"$past depth must be a constant >= 1, got {depth}")
        if self.name == "$countbits":
            for control in self.args[1:]:
                if not isinstance(control, Const) or control.value not in (0, 1):
                    raise MalformedExpression(
                        f"$countbits control bits must be the constants 0 or 1, got {control}"
                    )

    @property
    def past_depth(self) -> int:
        """Number of cycles ``$past`` reaches back (1 when omitted)."""
        if self.name != "$past":
            raise AttributeError("past_depth is only defined for $past")
        return self.args[1].value if len(self.args) == 2 else 1

    def children(self) -> Tuple[BoolExpr, ...]:
        return self.args

    def __str__(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


# ---------------------------------------------------------------------------
# Sequence layer
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CycleRange:
    """Inclusive cycle-count window ``[lo:hi]``; ``hi`` None means ``$``."""

    lo: int
    hi: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.lo, bool) or not isinstance(self.lo, int) or self.lo < 0:
            raise MalformedExpression(f"Range lower bound must be a non-negative integer: {self.lo!r}")
        if self.hi is not None and (not isinstance(self.hi, int) or self.hi < self.lo):
            raise MalformedExpression(f"Range upper bound {self.hi!r} is below lower bound {self.lo}")

    @classmethod
    def exactly(cls, n: int) -> "CycleRange":
        return cls(n, n)

    @property
    def bounded(self) -> bool:
        return self.hi is not None

    def __str__(self) -> str:
        if self.hi == self.lo:
            return str(self.lo)
        return f"[{self.lo}:{'$' if self.hi is None else self.hi}]"


class RepeatKind(Enum):
    """Repetition operator flavours."""

    CONSECUTIVE = "[*"
    GOTO = "[->"
    NONCONSECUTIVE = "[="


@dataclass(frozen=True, slots=True)
class Sequence:
    """Base class for sequence-layer expressions."""

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SeqBool(Sequence):
    """A Boolean expression used as a sequence matching in one cycle."""

    expr: BoolExpr

    def __post_init__(self):
        _require_bool(self.expr, "sequence element")

    def __str__(self) -> str:
        return str(self.expr)


@dataclass(frozen=True, slots=True)
class SeqConcat(Sequence):
    """Concatenation ``left ##delay right``.

    A delay of 0 is fusion: ``right`` starts in the cycle ``left`` ends.
    """

    left: Sequence
    right: Sequence
    delay: CycleRange

    def __post_init__(self):
        _lift(self, "left", as_sequence, "left operand of ##")
        _lift(self, "right", as_sequence, "right operand of ##")

    def __str__(self) -> str:
        return f"({self.left} ##{self.delay} {self.right})"


@dataclass(frozen=True, slots=True)
class SeqDelay(Sequence):
    """Leading delay ``##delay operand``, counted from the attempt start."""

    operand: Sequence
    delay: CycleRange

    def __post_init__(self):
        _lift(self, "operand", as_sequence, "operand of leading ##")

    def __str__(self) -> str:
        return f"(##{self.delay} {self.operand})"


@dataclass(frozen=True, slots=True)
class SeqRepeat(Sequence):
    """Repetition ``operand[*m:n]``, ``operand[->m:n]`` or ``operand[=m:n]``.

    Goto and non-consecutive repetition take a Boolean operand and need at
    least one occurrence.
    """

    operand: Sequence
    count: CycleRange
    kind: RepeatKind = RepeatKind.CONSECUTIVE

    def __post_init__(self):
        _lift(self, "operand", as_sequence, f"operand of {self.kind.value}]")
        if self.kind is not RepeatKind.CONSECUTIVE:
            if not isinstance(self.operand, SeqBool):
                raise MalformedExpression(f"{self.kind.value}] repetition needs a Boolean operand")
            if self.count.lo < 1:
                raise MalformedExpression(f"{self.kind.value}] repetition needs a count of at least 1")

    def __str__(self) -> str:
        if self.count.hi == self.count.lo:
            bounds = str(self.count.lo)
        else:
            bounds = f"{self.count.lo}:{'$' if self.count.hi is None else self.count.hi}"
        return f"({self.operand}){self.kind.value}{bounds}]"


# ---------------------------------------------------------------------------
# Property layer
# ---------------------------------------------------------------------------


class Strength(Enum):
    """Whether an unfinished match at trace end counts as satisfied."""

    WEAK = "weak"
    STRONG = "strong"


@dataclass(frozen=True, slots=True)
class Property:
    """Base class for property-layer expressions."""

    def __str__(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SequenceProperty(Property):
    """A sequence used as a property.

    Attributes:
        seq: The sequence that must match
        strength: Explicit strength, or None to take the directive default
    """

    seq: Sequence
    strength: Optional[Strength] = None

    def __post_init__(self):
        _lift(self, "seq", as_sequence, "sequence property")

    def __str__(self) -> str:
        if self.strength is None:
            return str(self.seq)
        return f"{self.strength.value}({self.seq})"


@dataclass(frozen=True, slots=True)
class PropNot(Property):
    operand: Property

    def __post_init__(self):
        _lift(self, "operand", as_property, "operand of not")

    def __str__(self) -> str:
        return f"(not {self.operand})"


@dataclass(frozen=True, slots=True)
class PropAnd(Property):
    left: Property
    right: Property

    def __post_init__(self):
        _lift(self, "left", as_property, "left operand of and")
        _lift(self, "right", as_property, "right operand of and")

    def __str__(self) -> str:
        return f"({self.left} and {self.right})"


@dataclass(frozen=True, slots=True)
class PropOr(Property):
    left: Property
    right: Property

    def __post_init__(self):
        _lift(self, "left", as_property, "left operand of or")
        _lift(self, "right", as_property, "right operand of or")

    def __str__(self) -> str:
        return f"({self.left} or {self.right})"


@dataclass(frozen=True, slots=True)
class PropIf(Property):
    """``if (cond) then [else otherwise]``; without else a false condition holds."""

    cond: BoolExpr
    then: Property
    otherwise: Optional[Property] = None

    def __post_init__(self):
        _require_bool(self.cond, "if condition")
        _lift(self, "then", as_property, "if branch")
        if self.otherwise is not None:
            _lift(self, "otherwise", as_property, "else branch")

    def __str__(self) -> str:
        if self.otherwise is None:
            return f"(if ({self.cond}) {self.then})"
        return f"(if ({self.cond}) {self.then} else {self.otherwise})"


@dataclass(frozen=True, slots=True)
class Implication(Property):
    """Suffix implication ``antecedent |-> consequent`` or ``|=>``.

    Attributes:
        overlapping: True for ``|->`` (consequent starts in the match cycle),
            False for ``|=>`` (consequent starts one cycle later)
    """

    antecedent: Sequence
    consequent: Property
    overlapping: bool = True

    def __post_init__(self):
        _lift(self, "antecedent", as_sequence, "implication antecedent")
        _lift(self, "consequent", as_property, "implication consequent")

    def __str__(self) -> str:
        arrow = "|->" if self.overlapping else "|=>"
        return f"({self.antecedent} {arrow} {self.consequent})"


@dataclass(frozen=True, slots=True)
class Always(Property):
    """Weak ``always p``: ``p`` checked from every cycle on."""

    operand: Property

    def __post_init__(self):
        _lift(self, "operand", as_property, "operand of always")

    def __str__(self) -> str:
        return f"(always {self.operand})"


@dataclass(frozen=True, slots=True)
class Eventually(Property):
    """Strong ``s_eventually p``."""

    operand: Property

    def __post_init__(self):
        _lift(self, "operand", as_property, "operand of s_eventually")

    def __str__(self) -> str:
        return f"(s_eventually {self.operand})"


@dataclass(frozen=True, slots=True)
class Until(Property):
    """``until`` family.

    Attributes:
        strong: ``right`` must eventually hold (``s_until``, ``s_until_with``)
        inclusive: ``left`` must also hold in the cycle ``right`` holds
            (``until_with``, ``s_until_with``)
    """

    left: Property
    right: Property
    strong: bool = False
    inclusive: bool = False

    def __post_init__(self):
        _lift(self, "left", as_property, "left operand of until")
        _lift(self, "right", as_property, "right operand of until")

    @property
    def keyword(self) -> str:
        return ("s_" if self.strong else "") + ("until_with" if self.inclusive else "until")

    def __str__(self) -> str:
        return f"({self.left} {self.keyword} {self.right})"


@dataclass(frozen=True, slots=True)
class Nexttime(Property):
    """``nexttime p`` / ``s_nexttime p``: ``p`` evaluated from the next cycle."""

    operand: Property
    strong: bool = False

    def __post_init__(self):
        _lift(self, "operand", as_property, "operand of nexttime")

    def __str__(self) -> str:
        return f"({'s_' if self.strong else ''}nexttime {self.operand})"


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


class DirectiveKind(Enum):
    """Verification directive flavours."""

    ASSERT = "assert"
    ASSUME = "assume"
    COVER = "cover"
    RESTRICT = "restrict"


@dataclass(frozen=True, slots=True)
class Directive:
    """A property instantiated under assert/assume/cover/restrict semantics.

    Attributes:
        kind: Directive flavour
        prop: The property being checked
        disable: ``disable iff`` condition, evaluated every cycle
        label: Optional directive label
        clock: Clocking event text, recorded only
    """

    kind: DirectiveKind
    prop: Property
    disable: Optional[BoolExpr] = None
    label: Optional[str] = None
    clock: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.kind, DirectiveKind):
            raise MalformedExpression(f"Unknown directive kind: {self.kind!r}")
        object.__setattr__(self, "prop", as_property(self.prop))
        if self.disable is not None:
            _require_bool(self.disable, "disable iff condition")

    @property
    def name(self) -> str:
        return self.label or f"{self.kind.value}:{self.prop}"

    def __str__(self) -> str:
        head = f"{self.label}: " if self.label else ""
        clock = f"@({self.clock}) " if self.clock else ""
        disable = f"disable iff ({self.disable}) " if self.disable is not None else ""
        return f"{head}{self.kind.value} property ({clock}{disable}{self.prop});"


# ---------------------------------------------------------------------------
# Layer coercions
# ---------------------------------------------------------------------------

Node = Union[BoolExpr, Sequence, Property]


def as_bool(node: Node, where: str = "expression") -> BoolExpr:
    """Return ``node`` if it is a Boolean expression, else fail."""
    _require_bool(node, where)
    return node


def as_sequence(node: Node, where: str = "sequence") -> Sequence:
    """Lift a Boolean to a one-cycle sequence; sequences pass through."""
    if isinstance(node, BoolExpr):
        return SeqBool(node)
    if isinstance(node, SequenceProperty) and node.strength is None:
        return node.seq
    _require_sequence(node, where)
    return node


def as_property(node: Node, where: str = "property") -> Property:
    """Lift a Boolean or sequence to a sequence property."""
    if isinstance(node, BoolExpr):
        return SequenceProperty(SeqBool(node))
    if isinstance(node, Sequence):
        return SequenceProperty(node)
    _require_property(node, where)
    return node


def _layer_name(node) -> str:
    if isinstance(node, BoolExpr):
        return "Boolean expression"
    if isinstance(node, Sequence):
        return "sequence"
    if isinstance(node, Property):
        return "property"
    return type(node).__name__


def _require_bool(node, where: str) -> None:
    if not isinstance(node, BoolExpr):
        raise MalformedExpression(f"Expected a Boolean expression for {where}, got a {_layer_name(node)}: {node}")


def _require_sequence(node, where: str) -> None:
    if not isinstance(node, Sequence):
        raise MalformedExpression(f"Expected a sequence for {where}, got a {_layer_name(node)}: {node}")


def _require_property(node, where: str) -> None:
    if not isinstance(node, Property):
        raise MalformedExpression(f"Expected a property for {where}, got a {_layer_name(node)}: {node}")


def _lift(node, attr: str, coerce, where: str) -> None:
    object.__setattr__(node, attr, coerce(getattr(node, attr), where))
