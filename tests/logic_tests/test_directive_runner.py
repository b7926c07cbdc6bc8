# tests/logic_tests/test_directive_runner.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Test suite for directive compilation and the cycle-by-cycle runner

"""Test suite for DirectiveRunner.

Covers directive kinds, the finite-trace policy, streaming feeds, disable
conditions, runtime failures and the per-directive history window.
"""

import pytest

from svamon.config import EngineConfig, FiniteTracePolicy
from svamon.logic.directive import (
    DirectiveRunner,
    check_signals,
    compile_directive,
    default_strength,
    run_directive,
    run_directives,
)
from svamon.logic.exceptions import MissingVariableError, UndefinedHistoryError
from svamon.logic.sequence_matcher import MatchEvent
from svamon.logic.verdict import VerdictKind
from svamon.model import Snapshot, Trace, TraceOrderError
from svamon.parser import parse_directive
from svamon.parser.ast_nodes import DirectiveKind, Strength

FAIL = EngineConfig(finite_trace_policy=FiniteTracePolicy.FAIL)


class TestCompilation:
    """Static preparation of a directive."""

    def test_history_depth_is_derived(self):
        assert compile_directive("assert property ($past(a, 2) == b);").history_depth == 2

    def test_configured_depth_too_shallow(self):
        with pytest.raises(UndefinedHistoryError):
            compile_directive("assert property ($past(a, 2) == b);", EngineConfig(history_depth=1))

    def test_configured_depth_wins_when_deep_enough(self):
        assert compile_directive("assert property (a);", EngineConfig(history_depth=3)).history_depth == 3

    def test_signals(self):
        compiled = compile_directive("assert property (disable iff (rst) req |-> ##1 ack);")
        assert compiled.signals == frozenset({"rst", "req", "ack"})

    def test_search_mode_only_for_multi_cycle_sequences(self):
        assert compile_directive("assert property (a ##1 b);").search
        assert not compile_directive("assert property (a && b);").search
        assert not compile_directive("assert property (a |-> ##1 b);").search

    def test_default_strength(self):
        assert default_strength(DirectiveKind.COVER) is Strength.STRONG
        assert default_strength(DirectiveKind.ASSERT) is Strength.WEAK
        assert compile_directive("cover property (a ##1 b);").prop.strength is Strength.STRONG

    def test_check_signals(self):
        d = parse_directive("assert property (a |-> b ##1 c);")
        check_signals(d, ["a", "b", "c", "d"])
        with pytest.raises(MissingVariableError) as info:
            check_signals(d, ["a"])
        assert info.value.name == "b"


class TestAssert:
    def test_violation_reports_cycle_start_and_prefix(self):
        trace = Trace.from_signals(6, a={2}, b=set())
        verdict = run_directive("assert property (a |-> ##1 b);", trace)
        assert verdict.kind is VerdictKind.VIOLATED
        assert (verdict.cycle, verdict.start) == (3, 2)
        assert [s.cycle for s in verdict.prefix] == [0, 1, 2, 3]

    def test_boolean_checked_every_cycle(self):
        verdict = run_directive("assert property (a);", Trace.from_signals(4, a={0, 1, 3}))
        assert verdict.kind is VerdictKind.VIOLATED
        assert verdict.cycle == 2

    def test_holds(self):
        trace = Trace.from_signals(6, a={2}, b={3})
        assert run_directive("assert property (a |-> ##1 b);", trace).kind is VerdictKind.HOLDS

    def test_always_uses_single_attempt(self):
        trace = Trace.from_signals(6, a={0, 1, 2, 4, 5})
        runner = DirectiveRunner("assert property (always a);")
        for snapshot in trace[:3]:
            runner.feed(snapshot)
        assert runner.live_attempts == 1
        verdict = runner.run(trace[3:])
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 3, 0)

    def test_sampled_history_reads_zero_at_start(self):
        trace = Trace.from_signals(3, a={0}, b={0})
        assert run_directive("assert property ($rose(a) |-> b);", trace).kind is VerdictKind.HOLDS
        trace = Trace.from_signals(3, a={0}, b=set())
        verdict = run_directive("assert property ($rose(a) |-> b);", trace)
        assert (verdict.kind, verdict.cycle) == (VerdictKind.VIOLATED, 0)

    def test_past_before_trace_start_reads_zero(self):
        trace = Trace.from_signals(4, a={0, 1, 2, 3})
        verdict = run_directive("assert property (!$past(a, 2));", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 2, 2)


class TestFiniteTracePolicy:
    """Strong obligations still pending at trace end."""

    text = "assert property (a |-> s_eventually b);"

    def test_inconclusive_by_default(self):
        trace = Trace.from_signals(4, a={1}, b=set())
        assert run_directive(self.text, trace).kind is VerdictKind.INCONCLUSIVE

    def test_fail_policy_violates(self):
        trace = Trace.from_signals(4, a={1}, b=set())
        verdict = run_directive(self.text, trace, FAIL)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 3, 1)

    def test_satisfied_obligation(self):
        trace = Trace.from_signals(4, a={1}, b={3})
        assert run_directive(self.text, trace, FAIL).kind is VerdictKind.HOLDS

    @pytest.mark.parametrize("consequent", ["b", "(nexttime b)", "(b until c)", "always b"])
    def test_weak_consequent_due_after_trace_end_holds(self, consequent):
        trace = Trace.from_signals(3, a={2}, b=set(), c=set())
        text = f"assert property (a |=> {consequent});"
        assert run_directive(text, trace, FAIL).kind is VerdictKind.HOLDS

    @pytest.mark.parametrize(
        "consequent",
        ["strong(b)", "s_eventually b", "(s_nexttime b)", "(b s_until c)", "(b s_until_with c)"],
    )
    def test_strong_consequent_due_after_trace_end_is_owed(self, consequent):
        trace = Trace.from_signals(3, a={2}, b=set(), c=set())
        text = f"assert property (a |=> {consequent});"
        assert run_directive(text, trace).kind is VerdictKind.INCONCLUSIVE
        verdict = run_directive(text, trace, FAIL)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 2, 2)


class TestAssumeAndRestrict:
    @pytest.mark.parametrize("kind", ["assume", "restrict"])
    def test_failure_is_assumption_unsatisfied(self, kind):
        verdict = run_directive(f"{kind} property (a);", Trace.from_signals(2, a={1}))
        assert verdict.kind is VerdictKind.ASSUMPTION_UNSATISFIED
        assert verdict.cycle == 0

    def test_fail_policy_applies_to_assume(self):
        trace = Trace.from_signals(3, a=set())
        verdict = run_directive("assume property (s_eventually a);", trace, FAIL)
        assert verdict.kind is VerdictKind.ASSUMPTION_UNSATISFIED


class TestCover:
    def test_first_match_covers(self):
        trace = Trace.from_signals(6, a={3}, b={4})
        verdict = run_directive("cover property (a ##1 b);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.COVERED, 4, 3)
        assert [s.cycle for s in verdict.witness] == [3, 4]

    def test_no_match_is_inconclusive(self):
        trace = Trace.from_signals(6, a={3}, b=set())
        assert run_directive("cover property (a ##1 b);", trace).kind is VerdictKind.INCONCLUSIVE

    def test_cover_ignores_failed_attempts(self):
        trace = Trace.from_signals(8, a={0, 5}, b={6})
        assert run_directive("assert property (a ##1 b);", trace).kind is VerdictKind.VIOLATED
        verdict = run_directive("cover property (a ##1 b);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.COVERED, 6, 5)

    def test_vacuous_implication_is_not_a_witness(self):
        trace = Trace.from_signals(10, req=set(), ack={3})
        verdict = run_directive("cover property (req |-> ##[1:3] ack);", trace)
        assert verdict.kind is VerdictKind.INCONCLUSIVE

    def test_implication_covers_once_antecedent_fires(self):
        trace = Trace.from_signals(5, req={1}, ack={3})
        verdict = run_directive("cover property (req |-> ##[1:3] ack);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.COVERED, 3, 1)
        assert [s.cycle for s in verdict.witness] == [1, 2, 3]

    def test_cover_of_property_needs_a_holding_attempt(self):
        trace = Trace.from_signals(5, req={0, 1, 2, 3, 4}, ack={3})
        verdict = run_directive("cover property (req |-> ##[1:3] ack);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.COVERED, 3, 0)


class TestSequenceSearch:
    """Directives whose property is a bare multi-cycle sequence."""

    def test_all_matches_are_recorded(self, e2e_trace):
        runner = DirectiveRunner("assert property (foo ##[1:2] bar);")
        verdict = runner.run(e2e_trace)
        assert verdict.kind is VerdictKind.HOLDS
        assert runner.matches == [MatchEvent(2, 3), MatchEvent(2, 4)]

    def test_never_triggered_weak_sequence_holds(self):
        trace = Trace.from_signals(5, a=set(), b=set())
        assert run_directive("assert property (a ##1 b);", trace).kind is VerdictKind.HOLDS

    def test_never_matched_strong_sequence(self):
        trace = Trace.from_signals(5, a=set(), b=set())
        text = "assert property (strong(a ##1 b));"
        assert run_directive(text, trace).kind is VerdictKind.INCONCLUSIVE
        assert run_directive(text, trace, FAIL).kind is VerdictKind.VIOLATED

    def test_triggered_attempt_that_dies_violates(self):
        trace = Trace.from_signals(5, a={1}, b=set())
        verdict = run_directive("assert property (a ##1 b);", trace)
        assert (verdict.kind, verdict.cycle, verdict.start) == (VerdictKind.VIOLATED, 2, 1)

    def test_pending_triggered_attempt_at_trace_end(self):
        trace = Trace.from_signals(5, a={4}, b=set())
        assert run_directive("assert property (a ##1 b);", trace).kind is VerdictKind.HOLDS
        verdict = run_directive("assert property (strong(a ##1 b));", trace, FAIL)
        assert (verdict.kind, verdict.start) == (VerdictKind.VIOLATED, 4)


class TestDisable:
    text = "assert property (disable iff (rst) a |-> ##1 b);"

    def test_disabled_cycles_start_nothing(self):
        trace = Trace.from_signals(8, rst={0, 1, 2, 3, 4}, a={3}, b=set())
        assert run_directive(self.text, trace).kind is VerdictKind.HOLDS

    def test_in_flight_attempts_are_discarded(self):
        trace = Trace.from_signals(8, rst={4}, a={3}, b=set())
        assert run_directive(self.text, trace).kind is VerdictKind.HOLDS
        assert run_directive("assert property (a |-> ##1 b);", trace).kind is VerdictKind.VIOLATED

    def test_enabled_again_after_reset(self):
        trace = Trace.from_signals(8, rst={1}, a={5}, b=set())
        verdict = run_directive(self.text, trace)
        assert (verdict.kind, verdict.cycle) == (VerdictKind.VIOLATED, 6)


class TestStreaming:
    """Incremental feeds and runtime failures."""

    def test_feed_returns_verdict_so_far(self):
        runner = DirectiveRunner("assert property (a |-> ##2 b);")
        verdict = runner.feed(Snapshot(0, a=1, b=0))
        assert verdict.kind is VerdictKind.HOLDS
        assert not verdict.final
        assert runner.state == "RUNNING"

    def test_decisive_verdict_is_final(self):
        runner = DirectiveRunner("assert property (a);")
        verdict = runner.feed(Snapshot(0, a=0))
        assert verdict.kind is VerdictKind.VIOLATED
        assert verdict.final
        assert runner.resolved
        assert runner.feed(Snapshot(1, a=1)) is verdict

    def test_out_of_order_snapshot(self):
        runner = DirectiveRunner("assert property (a);")
        runner.feed(Snapshot(0, a=1))
        with pytest.raises(TraceOrderError):
            runner.feed(Snapshot(2, a=1))

    def test_trace_may_start_late(self):
        trace = Trace.from_rows([{"a": 1}, {"a": 1}], start=10)
        assert run_directive("assert property (a);", trace).kind is VerdictKind.HOLDS

    def test_missing_variable(self):
        trace = Trace.from_signals(3, a={1})
        verdict = run_directive("assert property (a |-> x);", trace)
        assert (verdict.kind, verdict.cycle) == (VerdictKind.MISSING_VARIABLE, 1)
        assert "x" in verdict.reason

    def test_overflow(self):
        trace = Trace.from_signals(4, a={0, 1, 2, 3}, b=set())
        config = EngineConfig(max_outstanding_attempts=2)
        verdict = run_directive("assert property (a |-> ##[1:$] b);", trace, config)
        assert (verdict.kind, verdict.cycle) == (VerdictKind.OVERFLOW, 2)

    def test_stop_on_decision(self):
        trace = Trace.from_signals(4, a={1, 2, 3})
        runner = DirectiveRunner("assert property (a);")
        runner.run(trace, stop_on_decision=True)
        assert [s.cycle for s in runner.snapshots] == [0]

    def test_record_trace_off(self):
        config = EngineConfig(record_trace=False)
        verdict = run_directive("assert property (a);", Trace.from_signals(2, a={1}), config)
        assert verdict.kind is VerdictKind.VIOLATED
        assert verdict.prefix == ()


class TestRunHelpers:
    def test_results_are_repeatable(self):
        trace = Trace.from_signals(6, a={2}, b=set())
        text = "assert property (a |-> ##1 b);"
        assert run_directive(text, trace) == run_directive(text, trace)

    def test_run_directives_keyed_by_name(self):
        trace = Trace.from_signals(4, a={1}, b={2})
        results = run_directives(
            ["p1: assert property (a |=> b);", "p2: cover property (b);", "assert property (b);"],
            trace,
        )
        assert results["p1"].kind is VerdictKind.HOLDS
        assert results["p2"].kind is VerdictKind.COVERED
        assert results["assert:b"].kind is VerdictKind.VIOLATED
