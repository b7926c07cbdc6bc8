# tests/integration_tests/test_trace_replay.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Test suite for CSV trace reading and directive replay

"""Test suite for trace files and directive replay.

Trace files are written to pytest's ``tmp_path`` and read back through the
CSV reader, then replayed against directive lists and directive files.
"""

import pytest

from svamon.logic.replay import DirectiveTraceReplay, load_directives, replay_trace
from svamon.logic.verdict import VerdictKind
from svamon.model import BitVector
from svamon.utils.trace_reader import TraceFormatError, parse_value, read_signal_names, read_trace

E2E_CSV = "cycle,foo,bar,data\n" + "".join(
    f"{c},{int(c == 2)},{int(c in (3, 4))},{'0xff' if c == 4 else '0x00'}\n" for c in range(20)
)


@pytest.fixture
def write_file(tmp_path):
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


class TestParseValue:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("12", (12, None)),
            ("0x1f", (31, None)),
            ("0b101", (5, None)),
            ("4'b1010", (10, 4)),
            ("8'hFF", (255, 8)),
            ("1_000", (1000, None)),
        ],
    )
    def test_formats(self, text, expected):
        assert parse_value(text) == expected

    @pytest.mark.parametrize("text", ["zz", "-1", "0xg"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_value(text)


class TestReadTrace:
    def test_reads_rows_in_order(self, write_file):
        trace = read_trace(write_file("t.csv", E2E_CSV))
        assert len(trace) == 20
        assert int(trace[2]["foo"]) == 1
        assert trace[4]["data"] == BitVector(0xFF, 8)

    def test_widths_directive(self, write_file):
        text = "# widths: data=8|flag=1\ncycle,data,flag\n0,3,1\n1,0x10,0\n"
        trace = read_trace(write_file("w.csv", text))
        assert trace[0]["data"] == BitVector(3, 8)
        assert trace[1]["flag"] == BitVector(0, 1)

    def test_sized_literal_cell(self, write_file):
        trace = read_trace(write_file("s.csv", "state\n3'b001\n"))
        assert trace[0]["state"] == BitVector(1, 3)
        assert trace[0].cycle == 0

    def test_empty_cell_omits_signal(self, write_file):
        trace = read_trace(write_file("e.csv", "cycle,a,b\n0,1,\n1,0,1\n"))
        assert "b" not in trace[0]
        assert "b" in trace[1]

    def test_comment_lines_are_skipped(self, write_file):
        trace = read_trace(write_file("c.csv", "a\n# note\n1\n0\n"))
        assert [int(s["a"]) for s in trace] == [1, 0]

    def test_signal_names(self, write_file):
        assert read_signal_names(write_file("n.csv", E2E_CSV)) == ["foo", "bar", "data"]

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "a,a\n1,1\n",
            "cycle,a\n0,zz\n",
            "cycle,a\n0,1\n2,1\n",
            "cycle,a\n0,1,1\n",
            "cycle,a,b\n0,1\n",
            "# widths: a=2\ncycle,a\n0,7\n",
            "# widths: b=2\ncycle,a\n0,1\n",
            "# widths: a=x\ncycle,a\n0,1\n",
        ],
    )
    def test_malformed_files(self, write_file, text):
        with pytest.raises(TraceFormatError):
            read_trace(write_file("bad.csv", text))

    def test_missing_file(self, tmp_path):
        with pytest.raises(TraceFormatError):
            read_trace(tmp_path / "absent.csv")


class TestReplay:
    def test_replay_directive_list(self, write_file):
        path = write_file("t.csv", E2E_CSV)
        results = replay_trace(
            [
                "range: assert property (foo ##[1:2] bar);",
                "full: cover property (data == 8'hff);",
                "never: cover property (foo && bar);",
                "late: assert property (bar |-> ##1 bar);",
            ],
            path,
        )
        assert results["range"].kind is VerdictKind.HOLDS
        assert (results["full"].kind, results["full"].cycle) == (VerdictKind.COVERED, 4)
        assert results["never"].kind is VerdictKind.INCONCLUSIVE
        assert (results["late"].kind, results["late"].cycle) == (VerdictKind.VIOLATED, 5)

    def test_unknown_signal_resolves_without_running(self, write_file):
        path = write_file("t.csv", E2E_CSV)
        replay = DirectiveTraceReplay(["ghost: assert property (foo |-> qux);"], path)
        assert replay.runners == []
        results = replay.run()
        assert results["ghost"].kind is VerdictKind.MISSING_VARIABLE
        assert "qux" in results["ghost"].reason

    def test_stop_on_decision(self, write_file):
        path = write_file("t.csv", E2E_CSV)
        replay = DirectiveTraceReplay(["p: assert property (!bar);"], path)
        results = replay.run(stop_on_decision=True)
        assert results["p"].cycle == 3
        assert [s.cycle for s in replay.runners[0].snapshots] == [0, 1, 2, 3]

    def test_directive_file(self, write_file):
        directives = write_file(
            "checks.sva",
            "// handshake checks\n"
            "a1: assert property (foo |=> bar);\n"
            "c1: cover property (\n"
            "    bar ##1 bar\n"
            ");\n",
        )
        loaded = load_directives(directives)
        assert [d.label for d in loaded] == ["a1", "c1"]
        results = replay_trace(loaded, write_file("t.csv", E2E_CSV))
        assert results["a1"].kind is VerdictKind.HOLDS
        assert results["c1"].kind is VerdictKind.COVERED

    def test_missing_directive_file(self, tmp_path):
        with pytest.raises(TraceFormatError):
            load_directives(tmp_path / "absent.sva")
