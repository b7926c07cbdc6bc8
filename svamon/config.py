# config.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Engine configuration: defaults, mapping conversion and file loading

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

import tomllib

from svamon.parser.exceptions import SVAMonError


class ConfigError(SVAMonError):
    """Raised when configuration values or files are invalid."""

    pass


class FiniteTracePolicy(Enum):
    """What a strong obligation still pending at trace end becomes."""

    INCONCLUSIVE = "inconclusive"
    FAIL = "fail"


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings shared by every directive run.

    Attributes:
      max_outstanding_attempts: Cap on live attempts per matcher and live
        obligations per spawning instance; None for no cap.
      finite_trace_policy: Outcome of strong obligations pending at trace end.
      history_depth: Prior cycles retained for ``$past``; None derives the
        depth from the deepest ``$past`` in each directive.
      record_trace: Keep fed snapshots so verdicts can carry the violating
        prefix or the covering witness.
    """
    max_outstanding_attempts: Optional[int] = None
    finite_trace_policy: FiniteTracePolicy = FiniteTracePolicy.INCONCLUSIVE
    history_depth: Optional[int] = None
    record_trace: bool = True

    def __post_init__(self):
        limit = self.max_outstanding_attempts
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
            raise ConfigError(f"max_outstanding_attempts must be a positive integer, got {limit!r}")
        depth = self.history_depth
        if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int) or depth < 0):
            raise ConfigError(f"history_depth must be a non-negative integer, got {depth!r}")
        if not isinstance(self.finite_trace_policy, FiniteTracePolicy):
            object.__setattr__(self, "finite_trace_policy", _policy(self.finite_trace_policy))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "EngineConfig":
        """Build a config from snake_case or camelCase keys.

        Unknown keys raise ``ConfigError`` so typos do not pass silently.
        """
        values = {}
        for key, value in raw.items():
            name = _ALIASES.get(key)
            if name is None:
                raise ConfigError(f"Unknown engine option: {key}")
            values[name] = value
        return cls(**values)


_ALIASES = {
    "max_outstanding_attempts": "max_outstanding_attempts",
    "maxOutstandingAttempts": "max_outstanding_attempts",
    "finite_trace_policy": "finite_trace_policy",
    "finiteTracePolicy": "finite_trace_policy",
    "finite_trace_eventually_policy": "finite_trace_policy",
    "finiteTraceEventuallyPolicy": "finite_trace_policy",
    "history_depth": "history_depth",
    "historyDepth": "history_depth",
    "record_trace": "record_trace",
    "recordTrace": "record_trace",
}


def _policy(value: Any) -> FiniteTracePolicy:
    try:
        return FiniteTracePolicy(str(value).lower())
    except ValueError:
        choices = ", ".join(p.value for p in FiniteTracePolicy)
        raise ConfigError(f"finite_trace_policy must be one of {choices}, got {value!r}") from None


def _load_raw(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        return tomllib.loads(path.read_text(encoding="utf-8"))
    if path.suffix == ".json":
        return json.loads(path.read_text(encoding="utf-8"))
    raise ConfigError(f"Unsupported config extension: {path.suffix}")


def load_config(path: str | Path) -> EngineConfig:
    """Read the ``[engine]`` table of a TOML or JSON file.

    A file without an ``[engine]`` table yields the defaults.
    """
    cfg_path = Path(path)
    try:
        raw = _load_raw(cfg_path)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {cfg_path}") from None
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse config file {cfg_path}: {exc}") from exc

    engine_raw = raw.get("engine", {})
    if not isinstance(engine_raw, dict):
        raise ConfigError("[engine] must be a table/object")
    return EngineConfig.from_mapping(engine_raw)


DEFAULT_CONFIG = EngineConfig()
