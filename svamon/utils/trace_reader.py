# utils/trace_reader.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# CSV test-vector reader producing per-cycle snapshots

import csv
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from svamon.model.bitvector import BitVector
from svamon.model.snapshot import Snapshot, Trace
from svamon.parser.exceptions import SVAMonError
from svamon.parser.lexer import parse_sized_literal
from svamon.utils.logger import get_logger

WIDTHS_DIRECTIVE = "# widths:"
CYCLE_COLUMN = "cycle"


class TraceFormatError(SVAMonError):
    """Exception raised when trace files contain invalid format or data."""

    pass


def read_trace(filepath: str) -> Trace:
    """Read a CSV test-vector file into a Trace.

    Expected CSV format::

        # widths: data=8|state=3
        cycle,req,ack,data,state
        0,1,0,0x00,3'b001
        1,0,1,0xff,

    The optional first line declares bit widths; signals without a declared
    width take the narrowest width holding their value. The ``cycle`` column
    is optional; without it rows are numbered from 0. Values may be decimal,
    ``0x``/``0b`` prefixed, or SystemVerilog sized literals. An empty cell
    leaves the signal out of that cycle's snapshot.

    Args:
        filepath: Path to the CSV trace file

    Returns:
        Trace: Snapshots in file order

    Raises:
        TraceFormatError: If the file is missing or malformed
    """
    return Trace(iter_snapshots(filepath))


def iter_snapshots(filepath: str) -> Iterator[Snapshot]:
    """Yield snapshots from a CSV test-vector file one row at a time."""
    logger = get_logger()
    path = Path(filepath)

    if not path.exists():
        raise TraceFormatError(f"Trace file not found: {filepath}")

    logger.debug(f"Reading trace file: {filepath}")

    try:
        with open(path, "r", newline="", encoding="utf-8") as file:
            lines = file.readlines()
    except OSError as e:
        raise TraceFormatError(f"Cannot open trace file {filepath}: {e}")

    widths, body = _split_directive(lines)
    reader = csv.DictReader(line for line in body if line.strip() and not line.lstrip().startswith("#"))
    signals = _validate_headers(reader.fieldnames)

    unknown = set(widths) - set(signals)
    if unknown:
        raise TraceFormatError(f"Width declared for unknown signal(s): {sorted(unknown)}")

    previous: Optional[int] = None
    for row_num, row in enumerate(reader, start=1):
        try:
            snapshot = _parse_row(row, signals, widths, row_num - 1)
        except (ValueError, KeyError, IndexError) as e:
            raise TraceFormatError(f"Error parsing row {row_num}: {e}")
        if previous is not None and snapshot.cycle != previous + 1:
            raise TraceFormatError(
                f"Row {row_num}: cycle {snapshot.cycle} does not follow cycle {previous}"
            )
        previous = snapshot.cycle
        logger.debug(f"Parsed snapshot for cycle {snapshot.cycle} from row {row_num}")
        yield snapshot


def read_signal_names(filepath: str) -> List[str]:
    """Signal columns declared in a trace file's header."""
    path = Path(filepath)
    if not path.exists():
        raise TraceFormatError(f"Trace file not found: {filepath}")
    with open(path, "r", newline="", encoding="utf-8") as file:
        _, body = _split_directive(file.readlines())
    reader = csv.DictReader(line for line in body if line.strip() and not line.lstrip().startswith("#"))
    return _validate_headers(reader.fieldnames)


def parse_value(text: str) -> Tuple[int, Optional[int]]:
    """Decode one cell into ``(value, width)``; width is None unless sized."""
    text = text.strip().replace("_", "")
    if "'" in text:
        return parse_sized_literal(text.replace("'s", "'").replace("'S", "'"))
    lowered = text.lower()
    if lowered.startswith("0x"):
        return int(lowered[2:], 16), None
    if lowered.startswith("0b"):
        return int(lowered[2:], 2), None
    value = int(text, 10)
    if value < 0:
        raise ValueError(f"Negative value '{text}'")
    return value, None


def _split_directive(lines: List[str]) -> Tuple[Dict[str, int], List[str]]:
    """Extract the optional widths directive from the leading lines."""
    widths: Dict[str, int] = {}
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(WIDTHS_DIRECTIVE):
            for item in stripped[len(WIDTHS_DIRECTIVE):].split("|"):
                item = item.strip()
                if not item:
                    continue
                name, _, width = item.partition("=")
                try:
                    widths[name.strip()] = int(width)
                except ValueError:
                    raise TraceFormatError(f"Invalid width declaration: '{item}'")
                if widths[name.strip()] < 1:
                    raise TraceFormatError(f"Width must be positive: '{item}'")
            return widths, lines[index + 1:]
        return widths, lines[index:]
    return widths, []


def _validate_headers(fieldnames) -> List[str]:
    if not fieldnames:
        raise TraceFormatError("Trace file has no header row")
    names = [name.strip() for name in fieldnames]
    if len(set(names)) != len(names):
        raise TraceFormatError(f"Duplicate columns in header: {names}")
    if any(not name for name in names):
        raise TraceFormatError("Empty column name in header")
    return [name for name in names if name != CYCLE_COLUMN]


def _parse_row(row: dict, signals: List[str], widths: Dict[str, int], index: int) -> Snapshot:
    if row.get(None):
        raise ValueError("row has more cells than the header")
    cells = {key.strip(): value for key, value in row.items() if key is not None}
    if any(value is None for value in cells.values()):
        raise ValueError("row has fewer cells than the header")

    cycle_text = cells.get(CYCLE_COLUMN, "").strip()
    cycle = int(cycle_text) if cycle_text else index

    values = {}
    for name in signals:
        cell = cells[name].strip()
        if not cell:
            continue
        value, literal_width = parse_value(cell)
        width = widths.get(name, literal_width)
        if width is not None and value.bit_length() > width:
            raise ValueError(f"value {cell!r} of '{name}' does not fit in {width} bits")
        values[name] = BitVector.of(value, width)
    return Snapshot(cycle, values)
