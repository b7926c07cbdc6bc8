# utils/automaton_visualizer.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Graphviz rendering of compiled sequence automata

import os
from typing import TYPE_CHECKING, Iterable, Optional

from graphviz import Digraph

from svamon.utils.logger import get_logger

if TYPE_CHECKING:
    from svamon.logic.sequence_nfa import SequenceAutomaton

logger = get_logger(__name__)

VISUALIZATION_OUTPUT_FOLDER = "automaton_visualizations"


def _window_label(lo: int, hi: Optional[int]) -> str:
    if hi == lo:
        return f"##{lo}"
    return f"##[{lo}:{'$' if hi is None else hi}]"


def automaton_digraph(
    automaton: "SequenceAutomaton",
    active: Iterable[int] = (),
    fmt: str = "png",
) -> Digraph:
    """
    Build a Graphviz graph of a compiled sequence.

    Nodes are labelled with their guards, final nodes are drawn with a double
    border, and edges carry their delay windows. Nodes listed in ``active``
    (for example the pending nodes of live attempts) are filled.
    """
    active = set(active)
    dot = Digraph(comment=f"Automaton for {automaton.source}", format=fmt)
    dot.attr(rankdir="LR", nodesep="0.5", ranksep="0.6")
    dot.attr(label=str(automaton.source), labelloc="t", fontsize="12")

    dot.node("START", "start", shape="point", width="0.15")
    if automaton.nullable:
        dot.node("EMPTY", "empty match", shape="box", style="dashed")
        dot.edge("START", "EMPTY", style="dashed")

    for node, guard in enumerate(automaton.guards):
        attrs = {"shape": "doublecircle" if node in automaton.finals else "circle"}
        if node in active:
            attrs.update(style="filled", fillcolor="lightskyblue")
        dot.node(f"n{node}", f"n{node}\n{guard}", **attrs)

    for node, lo, hi in automaton.entries:
        dot.edge("START", f"n{node}", label=_window_label(lo, hi))
    for node, out in enumerate(automaton.edges):
        for target, lo, hi in out:
            dot.edge(f"n{node}", f"n{target}", label=_window_label(lo, hi))
    return dot


def render_automaton(
    automaton: "SequenceAutomaton",
    base_filename: str,
    fmt: str = "png",
    active: Iterable[int] = (),
    folder: str = VISUALIZATION_OUTPUT_FOLDER,
) -> Optional[str]:
    """
    Render a compiled sequence to an image file under ``folder``.

    Returns the written path, or None when the Graphviz ``dot`` executable
    is unavailable or fails.
    """
    os.makedirs(folder, exist_ok=True)
    output_path = os.path.join(folder, base_filename)
    dot = automaton_digraph(automaton, active, fmt)
    try:
        written = dot.render(output_path, view=False, cleanup=True)
    except Exception as e:
        logger.warning(f"Failed to render automaton to {output_path}.{fmt}: {e}. "
                       "Ensure Graphviz executables (dot) are in your system's PATH.")
        return None
    logger.info(f"Automaton visualization saved to {written}")
    return written
