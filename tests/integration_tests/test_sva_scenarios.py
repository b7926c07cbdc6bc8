# tests/integration_tests/test_sva_scenarios.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# End-to-end scenarios: directive text in, verdict out

"""End-to-end scenarios.

Each test drives the public API only: directive text and a trace go in, a
verdict and the recorded matches come out.
"""

import pytest

from svamon import (
    DirectiveRunner,
    EngineConfig,
    FiniteTracePolicy,
    MatchEvent,
    Trace,
    VerdictKind,
    run_directive,
)


class TestRangeDelayScenario:
    """``foo ##[1:2] bar`` with ``foo`` high at cycle 2."""

    def test_twenty_cycle_trace_holds_with_two_matches(self, e2e_trace):
        runner = DirectiveRunner("assert property (@(posedge clk) foo ##[1:2] bar);")
        verdict = runner.run(e2e_trace)
        assert verdict.kind is VerdictKind.HOLDS
        assert runner.matches == [MatchEvent(2, 3), MatchEvent(2, 4)]
        assert [m.offset for m in runner.matches] == [1, 2]

    @pytest.mark.parametrize(
        "bar,offsets",
        [
            ({3}, [1]),
            ({4}, [2]),
            ({3, 4}, [1, 2]),
            ({5}, []),
            ({2}, []),
        ],
    )
    def test_match_offsets_stay_inside_window(self, bar, offsets):
        trace = Trace.from_signals(20, foo={2}, bar=bar)
        runner = DirectiveRunner("assert property (foo ##[1:2] bar);")
        runner.run(trace)
        assert [m.offset for m in runner.matches if m.start == 2] == offsets

    def test_no_bar_in_window_violates(self):
        trace = Trace.from_signals(20, foo={2}, bar={5})
        verdict = run_directive("assert property (foo ##[1:2] bar);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 4, 2)


class TestIdempotence:
    @pytest.mark.parametrize(
        "text",
        [
            "assert property (foo ##[1:2] bar);",
            "assert property (foo |=> bar);",
            "cover property (bar ##1 bar);",
            "assume property (s_eventually bar);",
        ],
    )
    def test_same_directive_same_trace_same_verdict(self, text, e2e_trace):
        assert run_directive(text, e2e_trace) == run_directive(text, e2e_trace)


class TestWeakAndStrongDefaults:
    """A sequence that never matches on a finite trace."""

    trace = Trace.from_signals(10, req=set(), gnt=set())

    def test_unmarked_sequence_holds(self):
        assert run_directive("assert property (req ##[1:3] gnt);", self.trace).kind is VerdictKind.HOLDS

    def test_strong_sequence_is_inconclusive(self):
        verdict = run_directive("assert property (strong(req ##[1:3] gnt));", self.trace)
        assert verdict.kind is VerdictKind.INCONCLUSIVE

    def test_strong_sequence_violates_under_fail_policy(self):
        config = EngineConfig(finite_trace_policy=FiniteTracePolicy.FAIL)
        verdict = run_directive("assert property (strong(req ##[1:3] gnt));", self.trace, config)
        assert verdict.kind is VerdictKind.VIOLATED


class TestConsecutiveRepetition:
    """``CMDWR |-> ##1 notCMDPRE[*15]``."""

    text = "assert property (@(posedge clk) CMDWR |-> ##1 notCMDPRE[*15]);"

    def test_holds_when_all_fifteen_cycles_are_true(self):
        trace = Trace.from_signals(20, CMDWR={2}, notCMDPRE=set(range(3, 18)))
        assert run_directive(self.text, trace).kind is VerdictKind.HOLDS

    @pytest.mark.parametrize("gap", [3, 10, 17])
    def test_violates_when_any_required_cycle_is_false(self, gap):
        trace = Trace.from_signals(20, CMDWR={2}, notCMDPRE=set(range(3, 18)) - {gap})
        verdict = run_directive(self.text, trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, gap, 2)

    def test_short_trace_leaves_weak_obligation(self):
        trace = Trace.from_signals(10, CMDWR={2}, notCMDPRE=set(range(3, 10)))
        assert run_directive(self.text, trace).kind is VerdictKind.HOLDS


class TestCoverExistential:
    def test_first_match_covers_despite_failing_attempts(self):
        trace = Trace.from_signals(12, req={1, 6}, gnt={8})
        assert run_directive("assert property (req ##[1:2] gnt);", trace).kind is VerdictKind.VIOLATED
        verdict = run_directive("cover property (req ##[1:2] gnt);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.COVERED, 8, 6)
        assert [s.cycle for s in verdict.witness] == [6, 7, 8]


class TestDisableIff:
    def test_antecedent_match_during_reset_spawns_nothing(self):
        trace = Trace.from_signals(10, reset={0, 1, 2, 3, 4}, req={3}, gnt=set())
        verdict = run_directive("assert property (disable iff (reset) req |=> gnt);", trace)
        assert verdict.kind is VerdictKind.HOLDS

    def test_same_trace_without_disable_violates(self):
        trace = Trace.from_signals(10, reset={0, 1, 2, 3, 4}, req={3}, gnt=set())
        verdict = run_directive("assert property (req |=> gnt);", trace)
        assert (verdict.kind, verdict.cycle) == (VerdictKind.VIOLATED, 4)


class TestHandshake:
    """A request/grant protocol checked several ways over one trace."""

    trace = Trace.from_signals(
        12,
        req={1, 2, 3, 7, 8},
        gnt={3, 8},
        busy={4, 5, 6},
    )

    def test_request_held_until_grant(self):
        text = "assert property ($rose(req) |-> req until_with gnt);"
        assert run_directive(text, self.trace).kind is VerdictKind.HOLDS

    def test_grant_followed_by_busy(self):
        text = "assert property (gnt |=> busy);"
        verdict = run_directive(text, self.trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 9, 8)

    def test_grant_eventually_after_request(self):
        text = "assert property ($rose(req) |-> s_eventually gnt);"
        config = EngineConfig(finite_trace_policy=FiniteTracePolicy.FAIL)
        assert run_directive(text, self.trace, config).kind is VerdictKind.HOLDS

    def test_busy_burst_is_covered(self):
        verdict = run_directive("cover property (gnt ##1 busy[*3] ##1 !busy);", self.trace)
        assert (verdict.kind, verdict.start, verdict.cycle) == (VerdictKind.COVERED, 3, 7)

    def test_past_relation(self):
        text = "assert property ($fell(busy) |-> $past(busy, 3) && !$past(busy, 4));"
        assert run_directive(text, self.trace).kind is VerdictKind.HOLDS
