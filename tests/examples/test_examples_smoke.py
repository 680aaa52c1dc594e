"""示例脚本冒烟测试

示例默认连接真实 GraphDB；这里注入指向内存版服务端的客户端，验证示例的核心流程可运行。
"""
from __future__ import annotations

import importlib.util
import types
from pathlib import Path

import pytest

from sf_graphdb import GraphDBClient

from fakes import FakeGraphDB

EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples"


def _load(name: str, monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    # 示例以 ``from helpers import ...`` 方式导入共享工具
    monkeypatch.syspath_prepend(str(EXAMPLES_DIR))
    spec = importlib.util.spec_from_file_location(f"example_{name}", EXAMPLES_DIR / f"{name}.py")
    assert spec and spec.loader
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore[union-attr]
    return module


@pytest.mark.asyncio
async def test_end_to_end_scenario(monkeypatch: pytest.MonkeyPatch, client: GraphDBClient) -> None:
    module = _load("end_to_end_scenario", monkeypatch)

    outcome = await module.main(client)

    assert outcome == {"seen_inside": True, "seen_after_rollback": False, "statuses": ["released"]}


@pytest.mark.asyncio
async def test_manage_graphs(monkeypatch: pytest.MonkeyPatch, client: GraphDBClient) -> None:
    module = _load("manage_graphs", monkeypatch)

    summary = await module.main(client)

    assert summary["exists"] is True and summary["empty"] is False


@pytest.mark.asyncio
async def test_run_query(monkeypatch: pytest.MonkeyPatch, client: GraphDBClient, fake_store: FakeGraphDB) -> None:
    await _load("manage_graphs", monkeypatch).main(client)

    rows = await _load("run_query", monkeypatch).main(client)

    assert len(rows) == 2
    assert {row["o"]["value"] for row in rows} == {"running", "L1"}
    assert fake_store.open_transactions == 0
