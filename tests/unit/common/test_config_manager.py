"""ConfigManager 加载与合并规则测试。"""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sf_graphdb.common.config import ENV_CONFIG_PATH, ConfigManager

TESTING_CONFIG = Path(__file__).resolve().parents[2] / "fixtures" / "config" / "testing.yaml"


@pytest.fixture(autouse=True)
def restore_testing_config():
    yield
    ConfigManager.load(str(TESTING_CONFIG))


def test_defaults_without_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_CONFIG_PATH, raising=False)
    settings = ConfigManager.load().settings
    assert settings.store.endpoint == "http://localhost:7200"
    assert settings.store.transactions_path == "/transactions"
    assert settings.store.save_format == "application/n-triples"
    assert settings.security.trace_header == "X-Trace-Id"


def test_override_is_deep_merged(tmp_path: Path) -> None:
    override = tmp_path / "override.yaml"
    override.write_text(
        "store:\n  repository: acl\n  transactionsPath: /tx\n  timeout:\n    max: 60\n",
        encoding="utf-8",
    )
    manager = ConfigManager.load(str(override))
    store = manager.store
    assert store.repository == "acl"
    assert store.transactions_path == "/tx"
    assert store.timeout.max == 60
    # 未覆盖的键保持默认
    assert store.timeout.default == 30
    assert store.endpoint == "http://localhost:7200"
    assert ConfigManager.current() is manager


def test_env_variable_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    override = tmp_path / "env.yaml"
    override.write_text("app:\n  env: prod\n", encoding="utf-8")
    monkeypatch.setenv(ENV_CONFIG_PATH, str(override))
    assert ConfigManager.load().settings.app.env == "prod"


def test_missing_override_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ConfigManager.load(str(tmp_path / "absent.yaml"))


def test_invalid_timeout_bounds(tmp_path: Path) -> None:
    override = tmp_path / "bad.yaml"
    override.write_text("store:\n  timeout:\n    default: 60\n    max: 10\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        ConfigManager.load(str(override))
