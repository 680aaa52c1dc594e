"""命名图管理工具。

在 :class:`GraphDBClient` 之上封装列举、判空、整体保存、替换、删除与增量更新等常见操作。
所有写操作都要求显式事务，由调用方决定何时提交或回滚。
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

from rdflib import Graph as RDFGraph

from sf_graphdb.common.config.settings import Settings
from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.connection.client import GraphDBClient
from sf_graphdb.graph.model import NamedGraph, Triple, format_iri
from sf_graphdb.transaction.state import Transaction
from sf_graphdb.utils import resolve_graph_iri


class NamedGraphManager:
    """命名图管理器。

主要职责：
1. 统一把 ``NamedGraph``、rdflib Graph 或字符串解析为命名图 IRI。
2. 提供 list/exists/is_empty/save/replace/delete/update 等高频操作。
3. 统一透传 ``trace_id`` 以便日志排查与链路追踪。
"""

    def __init__(
        self,
        *,
        client: Optional[GraphDBClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """初始化管理器。

参数：
    client：可选的客户端实例，例如 ``GraphDBClient("http://localhost:7200", "acl")``；缺省时根据配置创建。
    settings：可选的 ``Settings`` 配置快照；仅在未传入 ``client`` 时使用。
"""

        self._client = client or GraphDBClient.from_settings(settings)
        self._logger = LoggerFactory.create_default_logger(__name__)

    @property
    def client(self) -> GraphDBClient:
        return self._client

    async def list(self, *, transaction: Transaction | None = None, trace_id: str | None = None) -> list[str]:
        return await self._client.list_graphs(transaction=transaction, trace_id=trace_id)

    async def exists(
        self,
        graph: NamedGraph | RDFGraph | str,
        *,
        transaction: Transaction | None = None,
        trace_id: str | None = None,
    ) -> bool:
        """命名图中至少有一条三元组即视为存在。"""

        graph_iri = self._resolve(graph)
        query = f"ASK {{ GRAPH {format_iri(graph_iri)} {{ ?s ?p ?o }} }}"
        return await self._client.ask(query, transaction=transaction, allow_plain_text=False, trace_id=trace_id)

    async def is_empty(
        self,
        graph: NamedGraph | RDFGraph | str,
        *,
        transaction: Transaction | None = None,
        trace_id: str | None = None,
    ) -> bool:
        return await self._client.is_empty(self._resolve(graph), transaction=transaction, trace_id=trace_id)

    async def save(
        self,
        graph: NamedGraph | RDFGraph,
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """把图中全部三元组追加到存储（已存在的三元组保持不变）。

返回：
    包含 ``graph``（命名图 IRI，默认图为 ``None``）与 ``triples``（上传条数）的字典。
"""

        named = graph if isinstance(graph, NamedGraph) else NamedGraph.from_rdflib(graph)
        await self._client.save_graph(named, transaction=transaction, trace_id=trace_id)
        self._logger.info("图已保存: %s (%d 条)", named.iri, len(named), extra={"trace_id": trace_id})
        return {"graph": named.iri, "triples": len(named)}

    async def replace(
        self,
        graph: NamedGraph | RDFGraph,
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """先删除同名命名图再整体保存，使存储内容与 ``graph`` 一致。"""

        named = graph if isinstance(graph, NamedGraph) else NamedGraph.from_rdflib(graph)
        if named.iri is None:
            raise ValueError("replace 需要命名图 IRI")
        await self._client.delete_graph(named.iri, transaction=transaction, trace_id=trace_id)
        await self._client.save_graph(named, transaction=transaction, trace_id=trace_id)
        return {"graph": named.iri, "triples": len(named), "status": "replaced"}

    async def delete(
        self,
        graph: NamedGraph | RDFGraph | str,
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        graph_iri = self._resolve(graph)
        await self._client.delete_graph(graph_iri, transaction=transaction, trace_id=trace_id)
        return {"graph": graph_iri, "status": "deleted"}

    async def update(
        self,
        graph: NamedGraph | RDFGraph | str,
        *,
        additions: Iterable[Triple] = (),
        removals: Iterable[Triple] = (),
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> dict[str, Any]:
        """按差集增量更新命名图，返回删除/新增条数与耗时。"""

        graph_iri = self._resolve(graph)
        result = await self._client.update_graph(
            graph_iri,
            additions,
            removals,
            transaction=transaction,
            trace_id=trace_id,
        )
        return {
            "graph": result.graph_iri,
            "removed": result.removed,
            "added": result.added,
            "statements": result.statements,
            "durationMs": result.duration_ms,
        }

    @staticmethod
    def _resolve(graph: NamedGraph | RDFGraph | str) -> str:
        graph_iri = resolve_graph_iri(graph)
        if graph_iri is None:
            raise ValueError("需要命名图 IRI，默认图不受支持")
        return graph_iri


__all__ = ["NamedGraphManager"]
