from __future__ import annotations

"""GraphUpdateBatcher 单元测试。

覆盖点：
- 先删后增、每个请求只含一条三元组
- 增删集合各自去重
- 第 k 条失败时前 k-1 条已发送、其后不再发送，异常中记录进度
"""

import pytest

from sf_graphdb.common.exceptions import QueryError
from sf_graphdb.graph.model import Triple
from sf_graphdb.query.dsl import UpdateBatch
from sf_graphdb.transaction.batch import GraphUpdateBatcher

G = "http://example.org/g"
T1 = Triple.of("http://example.org/s", "http://example.org/p", "1")
T2 = Triple.of("http://example.org/s", "http://example.org/p", "2")
T3 = Triple.of("http://example.org/s", "http://example.org/p", "3")


class _RecordingSender:
    def __init__(self, fail_at: int | None = None) -> None:
        self.calls: list[dict] = []
        self._fail_at = fail_at

    async def __call__(self, sparql: str, *, transaction, graph_iri, trace_id) -> None:
        self.calls.append({"sparql": sparql, "transaction": transaction, "graph_iri": graph_iri, "trace_id": trace_id})
        if self._fail_at is not None and len(self.calls) == self._fail_at:
            raise QueryError(message="rejected", operation="update", status=400, body="MALFORMED")


def test_plan_orders_removals_first() -> None:
    batcher = GraphUpdateBatcher(_RecordingSender())
    plan = batcher.plan(UpdateBatch(G, transaction=object(), additions=(T1, T2), removals=(T3,)))

    assert [s.action for s in plan] == ["DELETE", "INSERT", "INSERT"]
    assert plan[0].sparql == f"DELETE DATA {{ GRAPH <{G}> {{ {T3.to_ntriples()} }} }}"
    assert plan[1].sparql == f"INSERT DATA {{ GRAPH <{G}> {{ {T1.to_ntriples()} }} }}"
    assert [s.triple for s in plan] == [T3, T1, T2]


@pytest.mark.asyncio
async def test_apply_sends_one_request_per_triple() -> None:
    sender = _RecordingSender()
    tx = object()
    result = await GraphUpdateBatcher(sender).apply(
        UpdateBatch(G, transaction=tx, additions=(T1, T2, T1), removals=(T3, T3)),
        trace_id="trace-1",
    )

    assert len(sender.calls) == 3
    assert sender.calls[0]["sparql"].startswith("DELETE DATA")
    assert all(call["sparql"].count(" .") == 1 for call in sender.calls)
    assert all(call["transaction"] is tx and call["graph_iri"] == G for call in sender.calls)
    assert (result.removed, result.added, result.statements) == (1, 2, 3)
    assert result.duration_ms >= 0


@pytest.mark.asyncio
async def test_same_triple_in_both_sets_is_deleted_then_inserted() -> None:
    sender = _RecordingSender()
    await GraphUpdateBatcher(sender).apply(UpdateBatch(G, transaction=object(), additions=(T1,), removals=(T1,)))
    assert [call["sparql"].split(" ")[0] for call in sender.calls] == ["DELETE", "INSERT"]


@pytest.mark.asyncio
async def test_failure_stops_and_reports_progress() -> None:
    sender = _RecordingSender(fail_at=2)
    batch = UpdateBatch(G, transaction=object(), additions=(T1, T2), removals=(T3,))

    with pytest.raises(QueryError) as exc:
        await GraphUpdateBatcher(sender).apply(batch)

    assert len(sender.calls) == 2
    assert exc.value.details["applied"] == 1
    assert exc.value.details["failedStatement"] == sender.calls[1]["sparql"]


def test_update_batch_requires_transaction_and_valid_graph() -> None:
    with pytest.raises(ValueError):
        UpdateBatch(G, transaction=None)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        UpdateBatch("http://example.org/bad graph", transaction=object())


def test_update_batch_dedupes_preserving_order() -> None:
    batch = UpdateBatch(G, transaction=object(), additions=(T2, T1, T2), removals=(T3, T3))
    assert batch.additions == (T2, T1)
    assert batch.removals == (T3,)
    assert batch.size == 3
