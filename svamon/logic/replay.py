# logic/replay.py

"""
DirectiveTraceReplay: glue code that ties a set of verification directives
to a CSV test-vector file, checking the directives' signals against the
trace header and driving one DirectiveRunner per directive over every
snapshot to produce a final Verdict for each.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Union

from svamon.config import DEFAULT_CONFIG, EngineConfig
from svamon.parser import parse_directive
from svamon.parser.ast_nodes import Directive
from svamon.utils.logger import get_logger
from svamon.utils.trace_reader import TraceFormatError, iter_snapshots, read_signal_names

from .directive import DirectiveRunner, check_signals, compile_directive
from .exceptions import MissingVariableError
from .verdict import Verdict, VerdictKind

logger = get_logger(__name__)


def load_directives(path: Union[str, Path]) -> List[Directive]:
    """
    Read directives from a text file, one per ``;``-terminated statement.
    Lines starting with ``//`` are ignored.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TraceFormatError(f"Directive file not found: {path}")
    except OSError as e:
        raise TraceFormatError(f"Could not read directive file {path}: {e}")

    lines = [line for line in text.splitlines() if not line.strip().startswith("//")]
    statements = [s.strip() for s in "\n".join(lines).split(";")]
    return [parse_directive(s) for s in statements if s]


class DirectiveTraceReplay:
    """
    Given directives and a CSV trace, runs every directive and collects the
    final verdicts. Directives reading a signal the trace header lacks are
    not run and resolve to MISSING_VARIABLE up front.
    """

    def __init__(
        self,
        directives: Iterable[Union[Directive, str]],
        trace_path: Union[str, Path],
        config: EngineConfig = DEFAULT_CONFIG,
    ):
        self.trace_path = str(trace_path)
        self.config = config
        self.verdicts: Dict[str, Verdict] = {}
        self.runners: List[DirectiveRunner] = []

        available = read_signal_names(self.trace_path)
        for directive in directives:
            compiled = compile_directive(directive, config)
            try:
                check_signals(compiled, available)
            except MissingVariableError as e:
                logger.warning(f"{compiled.name}: {e}")
                self.verdicts[compiled.name] = Verdict(VerdictKind.MISSING_VARIABLE, reason=str(e))
                continue
            self.runners.append(DirectiveRunner(compiled, config))

    def run(self, *, stop_on_decision: bool = False) -> Dict[str, Verdict]:
        """
        Feed each snapshot to every runner still in play, then finish them.
        With stop_on_decision, reading stops once every runner has resolved.
        """
        count = 0
        for snapshot in iter_snapshots(self.trace_path):
            for runner in self.runners:
                runner.feed(snapshot)
            count += 1
            if stop_on_decision and all(r.resolved for r in self.runners):
                break

        if count == 0:
            logger.info("No snapshot rows processed despite headers present.")

        for runner in self.runners:
            self.verdicts[runner.compiled.name] = runner.finish()
        return self.verdicts


def replay_trace(
    directives: Iterable[Union[Directive, str]],
    trace_path: Union[str, Path],
    config: EngineConfig = DEFAULT_CONFIG,
    stop_on_decision: bool = False,
) -> Dict[str, Verdict]:
    """Run ``directives`` over the CSV trace at ``trace_path``."""
    return DirectiveTraceReplay(directives, trace_path, config).run(stop_on_decision=stop_on_decision)
