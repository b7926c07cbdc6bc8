# utils/__init__.py

"""Logging, trace-file and visualization helpers."""

from .automaton_visualizer import automaton_digraph, render_automaton
from .logger import LogLevel, configure_logging, get_logger, set_log_level

__all__ = [
    "LogLevel",
    "configure_logging",
    "get_logger",
    "set_log_level",
    "automaton_digraph",
    "render_automaton",
]
