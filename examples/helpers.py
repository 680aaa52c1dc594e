"""示例脚本共享工具：加载演示配置并构造 GraphDB 客户端。"""
from __future__ import annotations

from pathlib import Path

from sf_graphdb import GraphDBClient
from sf_graphdb.common.config import ConfigManager

DEMO_GRAPH = "http://example.com/graphs/quality"
EX = "http://example.com/"


def load_demo_config() -> None:
    """加载 examples/config/demo.yaml，供示例脚本直接使用。"""

    config_path = Path(__file__).resolve().parent / "config" / "demo.yaml"
    ConfigManager.load(override_path=str(config_path))


def build_client() -> GraphDBClient:
    """按当前配置创建指向真实 GraphDB 的客户端。"""

    return GraphDBClient.from_settings()
