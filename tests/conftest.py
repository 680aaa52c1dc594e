"""Pytest 全局配置：加载测试配置并提供内存版 GraphDB 与客户端夹具。"""
from __future__ import annotations

from pathlib import Path

import pytest

from sf_graphdb.common.config import ConfigManager
from sf_graphdb.connection.client import GraphDBClient

from fakes import FakeGraphDB

FIXTURES = Path(__file__).resolve().parent / "fixtures"

# 测试统一使用固定的假服务地址，避免读取开发者本地的环境变量配置。
ConfigManager.load(str(FIXTURES / "config" / "testing.yaml"))


@pytest.fixture()
def fake_store() -> FakeGraphDB:
    return FakeGraphDB(endpoint="http://graphdb.test", repository="demo")


@pytest.fixture()
def client(fake_store: FakeGraphDB) -> GraphDBClient:
    return GraphDBClient.from_settings(transport=fake_store.transport())
