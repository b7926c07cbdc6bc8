# tests/utils_tests/test_automaton_visualizer.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Test suite for Graphviz rendering of sequence automata

import pytest
from graphviz import Digraph

from svamon.logic.sequence_matcher import SequenceMatcher
from svamon.logic.sequence_nfa import compile_sequence
from svamon.model import Trace
from svamon.parser import parse_sequence
from svamon.utils.automaton_visualizer import automaton_digraph, render_automaton


def automaton(text):
    return compile_sequence(parse_sequence(text))


class TestAutomatonDigraph:
    def test_nodes_and_windows(self):
        source = automaton_digraph(automaton("a ##[1:2] b")).source
        assert "START -> n0" in source
        assert "n0 -> n1" in source
        assert "##[1:2]" in source
        assert source.count("doublecircle") == 1

    def test_unbounded_window_uses_dollar(self):
        assert "##[1:$]" in automaton_digraph(automaton("a ##[1:$] b")).source

    def test_empty_match_is_drawn(self):
        assert "empty match" in automaton_digraph(automaton("a[*0:1]")).source
        assert "empty match" not in automaton_digraph(automaton("a")).source

    def test_pending_nodes_are_highlighted(self):
        seq = automaton("a ##1 b")
        matcher = SequenceMatcher(seq)
        trace = Trace.from_signals(2, a={0}, b=set())
        matcher.start(0)
        matcher.advance(0, trace[0], spawn=False)
        assert matcher.pending_nodes() == {1}
        source = automaton_digraph(seq, matcher.pending_nodes()).source
        assert source.count("lightskyblue") == 1


class TestRenderAutomaton:
    def test_writes_into_folder(self, tmp_path, monkeypatch):
        calls = []

        def fake_render(self, filename, view=False, cleanup=False):
            calls.append(filename)
            return f"{filename}.{self.format}"

        monkeypatch.setattr(Digraph, "render", fake_render)
        folder = tmp_path / "viz"
        written = render_automaton(automaton("a ##1 b"), "seq", fmt="svg", folder=str(folder))
        assert folder.is_dir()
        assert written == str(folder / "seq") + ".svg"
        assert calls == [str(folder / "seq")]

    def test_render_failure_returns_none(self, tmp_path, monkeypatch):
        def failing_render(self, *args, **kwargs):
            raise RuntimeError("dot not found")

        monkeypatch.setattr(Digraph, "render", failing_render)
        assert render_automaton(automaton("a"), "seq", folder=str(tmp_path)) is None


@pytest.mark.parametrize("text", ["a[->2]", "a[=1:2]", "a ##1 b[*1:$]"])
def test_desugared_forms_render(text):
    assert automaton_digraph(automaton(text)).source.startswith("//")
