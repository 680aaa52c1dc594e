"""全局配置管理。

``ConfigManager.load()`` 读取包内 ``default.yaml``，再合并可选的覆盖文件（显式参数或环境变量
``SF_GRAPHDB_CONFIG``），校验为 :class:`Settings` 并设为当前配置。"""
from __future__ import annotations

import os
from pathlib import Path
from threading import Lock
from typing import Any, ClassVar

import yaml

from sf_graphdb.common.config.settings import Settings

ENV_CONFIG_PATH = "SF_GRAPHDB_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "default.yaml"


class ConfigManager:
    """持有进程级配置快照。"""

    _current: ClassVar["ConfigManager | None"] = None
    _lock: ClassVar[Lock] = Lock()

    def __init__(self, settings: Settings, *, source: str | None = None) -> None:
        self.settings = settings
        self.source = source

    @property
    def store(self):
        return self.settings.store

    @property
    def security(self):
        return self.settings.security

    @classmethod
    def load(cls, override_path: str | None = None) -> "ConfigManager":
        """加载默认配置并合并覆盖文件，返回新的当前实例。

        参数：
            override_path：覆盖配置 YAML 路径，例如 ``"tests/fixtures/config/testing.yaml"``；
                为 ``None`` 时读取环境变量 ``SF_GRAPHDB_CONFIG``。

        异常：覆盖文件不存在时抛出 :class:`FileNotFoundError`；校验失败抛出
        ``pydantic.ValidationError``。"""

        data = cls._read_yaml(DEFAULT_CONFIG_PATH)
        path = override_path or os.environ.get(ENV_CONFIG_PATH)
        if path:
            override_file = Path(path)
            if not override_file.exists():
                raise FileNotFoundError(f"配置文件不存在: {path}")
            data = _deep_merge(data, cls._read_yaml(override_file))
        manager = cls(Settings.model_validate(data), source=path or str(DEFAULT_CONFIG_PATH))
        with cls._lock:
            cls._current = manager
        return manager

    @classmethod
    def current(cls) -> "ConfigManager":
        """返回当前配置；尚未加载时按默认规则加载一次。"""

        if cls._current is None:
            return cls.load()
        return cls._current

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._current = None

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        with open(path, "r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"配置文件顶层必须是映射: {path}")
        return loaded


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


__all__ = ["ConfigManager", "Settings", "ENV_CONFIG_PATH", "DEFAULT_CONFIG_PATH"]
