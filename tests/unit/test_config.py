from __future__ import annotations

import json

import pytest

from topoactions.core.config import ActionsConfig

pytestmark = [pytest.mark.unit]


def test_defaults_and_derived_ms():
    cfg = ActionsConfig()
    assert cfg.max_staleness_sec == 300
    assert cfg.max_staleness_ms == 300_000
    assert cfg.keep_count == 10
    assert cfg.prune_order == "name"
    assert cfg.strict_wildcards is False


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_staleness_sec": -1},
        {"keep_count": -5},
        {"prune_order": "random"},
        {"replica_action_fmt": "zk/{cell}/action"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValueError):
        ActionsConfig(**overrides)


def test_load_file_then_env_then_overrides(tmp_path, monkeypatch):
    path = tmp_path / "actions.json"
    path.write_text(json.dumps({"keep_count": 3, "max_staleness_sec": 60, "max_staleness_ms": 1}), encoding="utf-8")
    monkeypatch.setenv("TOPOACTIONS_KEEP_COUNT", "7")
    monkeypatch.setenv("TOPOACTIONS_PRUNE_ORDER", "mtime")
    monkeypatch.delenv("TOPOACTIONS_MAX_STALENESS_SEC", raising=False)

    cfg = ActionsConfig.load(path, overrides={"strict_wildcards": True})

    assert cfg.keep_count == 7
    assert cfg.max_staleness_ms == 60_000
    assert cfg.prune_order == "mtime"
    assert cfg.strict_wildcards is True


def test_load_missing_file_uses_defaults(tmp_path, monkeypatch):
    for name in ("TOPOACTIONS_KEEP_COUNT", "TOPOACTIONS_PRUNE_ORDER", "TOPOACTIONS_MAX_STALENESS_SEC"):
        monkeypatch.delenv(name, raising=False)
    cfg = ActionsConfig.load(tmp_path / "absent.json")
    assert cfg == ActionsConfig()
