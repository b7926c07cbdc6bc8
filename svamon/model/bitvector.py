# model/bitvector.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Fixed-width bit-vector values sampled from a design

"""Immutable fixed-width unsigned bit-vector values.

Every signal value in a snapshot and every intermediate result of the
Boolean evaluator is a ``BitVector``. Values are two-state (no X/Z) and
always stored masked to their width.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union


def _mask(width: int) -> int:
    return (1 << width) - 1


@dataclass(frozen=True, slots=True)
class BitVector:
    """Unsigned value of a fixed number of bits.

    Attributes:
        value: Non-negative integer, masked to ``width`` bits
        width: Number of bits, at least 1
    """

    value: int
    width: int = 1

    def __post_init__(self):
        if isinstance(self.width, bool) or not isinstance(self.width, int) or self.width < 1:
            raise ValueError(f"Bit-vector width must be a positive integer, got {self.width!r}")
        if isinstance(self.value, bool):
            object.__setattr__(self, "value", int(self.value))
        if not isinstance(self.value, int):
            raise TypeError(f"Bit-vector value must be an integer, got {type(self.value).__name__}")
        object.__setattr__(self, "value", self.value & _mask(self.width))

    @classmethod
    def of(cls, value: Union[int, bool, "BitVector"], width: int = None) -> "BitVector":
        """Coerce a Python value into a bit-vector.

        Integers without an explicit width get the narrowest width that holds
        them (at least one bit). Negative integers need an explicit width and
        are stored in two's complement.
        """
        if isinstance(value, BitVector):
            return value if width is None else cls(value.value, width)
        if isinstance(value, bool):
            return cls(int(value), width or 1)
        if not isinstance(value, int):
            raise TypeError(f"Cannot build a bit-vector from {type(value).__name__}")
        if width is None:
            if value < 0:
                raise ValueError("Negative values need an explicit width")
            width = max(1, value.bit_length())
        return cls(value, width)

    @classmethod
    def bit(cls, flag: bool) -> "BitVector":
        """Single-bit result of a logical or relational operator."""
        return _ONE if flag else _ZERO

    @property
    def lsb(self) -> int:
        """Least-significant bit, as used by the edge-detection functions."""
        return self.value & 1

    def ones(self) -> int:
        """Number of bits set."""
        return bin(self.value).count("1")

    def zeros(self) -> int:
        """Number of bits clear within the width."""
        return self.width - self.ones()

    def get_bit(self, index: int) -> int:
        """Bit at ``index``; out-of-range indices read as 0."""
        if index < 0 or index >= self.width:
            return 0
        return (self.value >> index) & 1

    def slice(self, msb: int, lsb: int) -> "BitVector":
        """Part select ``[msb:lsb]``; bits beyond the width read as 0."""
        width = msb - lsb + 1
        return BitVector((self.value >> lsb) & _mask(width), width)

    def zero(self) -> "BitVector":
        """A zero value of the same width."""
        return BitVector(0, self.width)

    def __bool__(self) -> bool:
        return self.value != 0

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.width}'h{self.value:x}"


_ZERO = BitVector(0, 1)
_ONE = BitVector(1, 1)
