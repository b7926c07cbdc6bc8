# logic/exceptions.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Exceptions raised while compiling or running a directive

from svamon.parser.exceptions import SVAMonError


class UndefinedHistoryError(SVAMonError):
    """Raised when an expression reaches further back than the retained history.

    At compile time this means the configured ``history_depth`` is smaller
    than the deepest ``$past`` in the directive. At evaluation time it means
    the caller supplied too short a history tuple.
    """

    pass


class AttemptOverflowError(SVAMonError):
    """Raised when a matcher would hold more live attempts than allowed."""

    def __init__(self, limit: int, cycle: int):
        self.limit = limit
        self.cycle = cycle
        super().__init__(f"More than {limit} outstanding match attempts at cycle {cycle}")


class MissingVariableError(SVAMonError):
    """Raised when a snapshot lacks a variable the expression reads.

    Distinct from the variable reading as false.
    """

    def __init__(self, name: str, cycle: int = None):
        self.name = name
        self.cycle = cycle
        where = f" at cycle {cycle}" if cycle is not None else ""
        super().__init__(f"Variable '{name}' missing from snapshot{where}")
