"""Tests for :mod:`stepgraph.config`."""

from __future__ import annotations

from stepgraph import config


def test_get_env_prefers_process_environment(monkeypatch):
    config._load_environment.cache_clear()
    monkeypatch.setenv("STEPGRAPH_TEST_VALUE", "in-memory")

    assert config.get_env("STEPGRAPH_TEST_VALUE") == "in-memory"


def test_get_env_returns_default_when_missing(monkeypatch):
    config._load_environment.cache_clear()
    monkeypatch.delenv("STEPGRAPH_DOES_NOT_EXIST", raising=False)

    assert config.get_env("STEPGRAPH_DOES_NOT_EXIST", default="fallback") == "fallback"


def test_get_bool_env_parses_flags(monkeypatch):
    monkeypatch.setenv(config.INCLUDE_TRACEBACK, " Yes ")
    assert config.get_bool_env(config.INCLUDE_TRACEBACK) is True

    monkeypatch.setenv(config.INCLUDE_TRACEBACK, "0")
    assert config.get_bool_env(config.INCLUDE_TRACEBACK, default=True) is False

    monkeypatch.delenv(config.INCLUDE_TRACEBACK)
    assert config.get_bool_env(config.INCLUDE_TRACEBACK, default=True) is True


def test_load_environment_reads_dotenv_once(monkeypatch):
    calls = []
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: calls.append(kwargs))
    config._load_environment.cache_clear()

    config.get_env("ANYTHING")
    config.get_env("ANYTHING_ELSE")

    assert calls == [{"override": False}]
    config._load_environment.cache_clear()
