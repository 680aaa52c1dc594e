"""命名图增量更新批处理器。

把 ``(additions, removals)`` 差集转换为一串原子 SPARQL Update 请求：

- 先逐条发送删除 ``DELETE DATA { GRAPH <g> { t } }``，再逐条发送插入
  ``INSERT DATA { GRAPH <g> { t } }``，保证同时出现在两侧的三元组最终存在；
- 每个请求只包含一条三元组，失败单元即该条语句：第 k 条失败时前 k-1 条已生效、其后的不再发送，
  是否回滚整个事务由调用方决定；
- 三元组使用规范 N-Triples 文本，多次调用输出一致。

删除不存在的三元组、插入已存在的三元组在协议层面均为空操作，因此重复应用同一批次结果不变。"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from sf_graphdb.common.exceptions import GraphStoreError
from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.graph.model import Triple, format_iri
from sf_graphdb.query.dsl import UpdateBatch
from sf_graphdb.transaction.state import Transaction

UpdateSender = Callable[..., Awaitable[None]]


@dataclass(slots=True, frozen=True)
class UpdateStatement:
    """一条待发送的单三元组更新语句。"""

    action: str
    triple: Triple
    sparql: str


@dataclass
class GraphUpdateResult:
    """批量更新结果汇总。"""

    graph_iri: str
    removed: int
    added: int
    statements: int
    duration_ms: float


class GraphUpdateBatcher:
    """把 :class:`UpdateBatch` 拆分为单三元组更新并依次提交。"""

    def __init__(self, send_update: UpdateSender) -> None:
        """参数：
            send_update：协程函数 ``send_update(sparql, *, transaction, graph_iri, trace_id)``，
                通常为 :meth:`GraphDBClient.update`。"""

        self._send_update = send_update
        self._logger = LoggerFactory.create_default_logger(__name__)

    def plan(self, batch: UpdateBatch) -> list[UpdateStatement]:
        """生成有序语句列表：全部删除在前，全部插入在后。"""

        graph = format_iri(batch.graph_iri)
        statements = [
            UpdateStatement("DELETE", triple, f"DELETE DATA {{ GRAPH {graph} {{ {triple.to_ntriples()} }} }}")
            for triple in batch.removals
        ]
        statements.extend(
            UpdateStatement("INSERT", triple, f"INSERT DATA {{ GRAPH {graph} {{ {triple.to_ntriples()} }} }}")
            for triple in batch.additions
        )
        return statements

    async def apply(self, batch: UpdateBatch, *, trace_id: str | None = None) -> GraphUpdateResult:
        """依次发送所有语句。

        异常：第 k 条失败时原异常向上抛出，并在 ``details`` 中补充 ``applied``（已生效条数）与
        ``failedStatement``（失败语句）。"""

        start = time.perf_counter()
        statements = self.plan(batch)
        transaction: Transaction = batch.transaction
        applied = 0
        for statement in statements:
            try:
                await self._send_update(
                    statement.sparql,
                    transaction=transaction,
                    graph_iri=batch.graph_iri,
                    trace_id=trace_id,
                )
            except GraphStoreError as exc:
                self._logger.error(
                    "图 %s 第 %d/%d 条更新失败: %s",
                    batch.graph_iri,
                    applied + 1,
                    len(statements),
                    exc,
                    extra={"trace_id": trace_id},
                )
                exc.details.update({"applied": applied, "failedStatement": statement.sparql})
                raise
            applied += 1

        duration_ms = (time.perf_counter() - start) * 1000.0
        return GraphUpdateResult(
            graph_iri=batch.graph_iri,
            removed=len(batch.removals),
            added=len(batch.additions),
            statements=applied,
            duration_ms=duration_ms,
        )


__all__ = ["GraphUpdateBatcher", "GraphUpdateResult", "UpdateStatement"]
