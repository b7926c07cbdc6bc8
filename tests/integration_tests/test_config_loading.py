# tests/integration_tests/test_config_loading.py
# This file is part of SVAMon - An SVA Sequence & Property Evaluation Engine
#
# Test suite for engine configuration values and files

import json

import pytest

from svamon import Trace, VerdictKind, run_directive
from svamon.config import ConfigError, EngineConfig, FiniteTracePolicy, load_config


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.max_outstanding_attempts is None
        assert config.finite_trace_policy is FiniteTracePolicy.INCONCLUSIVE
        assert config.history_depth is None
        assert config.record_trace

    def test_policy_given_as_text(self):
        assert EngineConfig(finite_trace_policy="FAIL").finite_trace_policy is FiniteTracePolicy.FAIL

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_outstanding_attempts": 0},
            {"max_outstanding_attempts": "10"},
            {"history_depth": -1},
            {"finite_trace_policy": "sometimes"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            EngineConfig(**kwargs)

    def test_from_mapping_accepts_camel_case(self):
        config = EngineConfig.from_mapping(
            {"maxOutstandingAttempts": 10, "finiteTraceEventuallyPolicy": "fail", "historyDepth": 3}
        )
        assert config == EngineConfig(10, FiniteTracePolicy.FAIL, 3)

    def test_from_mapping_rejects_unknown_keys(self):
        with pytest.raises(ConfigError, match="max_attempts"):
            EngineConfig.from_mapping({"max_attempts": 3})


class TestLoadConfig:
    def test_toml(self, tmp_path):
        path = tmp_path / "svamon.toml"
        path.write_text(
            "[engine]\nmax_outstanding_attempts = 64\nfinite_trace_policy = \"fail\"\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.max_outstanding_attempts == 64
        assert config.finite_trace_policy is FiniteTracePolicy.FAIL

    def test_json(self, tmp_path):
        path = tmp_path / "svamon.json"
        path.write_text(json.dumps({"engine": {"historyDepth": 2, "recordTrace": False}}), encoding="utf-8")
        config = load_config(path)
        assert config.history_depth == 2
        assert not config.record_trace

    def test_missing_engine_table_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.toml"
        path.write_text("[other]\nx = 1\n", encoding="utf-8")
        assert load_config(path) == EngineConfig()

    @pytest.mark.parametrize(
        "name,text",
        [
            ("bad.toml", "[engine\n"),
            ("bad.json", "{"),
            ("bad.yaml", "engine: {}"),
            ("table.json", json.dumps({"engine": 5})),
        ],
    )
    def test_invalid_files(self, tmp_path, name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "absent.toml")

    def test_loaded_policy_drives_runner(self, tmp_path):
        path = tmp_path / "svamon.toml"
        path.write_text("[engine]\nfinite_trace_policy = \"fail\"\n", encoding="utf-8")
        trace = Trace.from_signals(4, a={1}, b=set())
        verdict = run_directive("assert property (a |-> s_eventually b);", trace, load_config(path))
        assert verdict.kind is VerdictKind.VIOLATED
