"""端到端示例：用显式事务串联“产线质检”故事线的写入、校验、回滚与增量更新。"""
from __future__ import annotations

import asyncio

from sf_graphdb import GraphDBClient, GraphStoreError, NamedGraph, Triple

from helpers import DEMO_GRAPH, EX, build_client, load_demo_config

ORDER = EX + "order/PO-10001"
STATUS = EX + "status"


async def main(client: GraphDBClient | None = None) -> dict:
    """依次演示：保存后回滚不可见、增量更新后提交可见。"""

    # 1) 载入示例配置并创建客户端（测试中可注入客户端）。
    if client is None:
        load_demo_config()
        client = build_client()

    # 2) 在事务内整体上传订单图，事务内可见；回滚后事务外不可见。
    draft = NamedGraph(DEMO_GRAPH, [Triple.of(ORDER, STATUS, "draft")])
    tx = await client.begin(trace_id="demo-e2e-draft")
    await client.save_graph(draft, transaction=tx)
    seen_inside = await client.ask(f'ASK {{ <{ORDER}> <{STATUS}> "draft" }}', transaction=tx)
    await client.rollback(tx)
    seen_after_rollback = await client.ask(f'ASK {{ <{ORDER}> <{STATUS}> "draft" }}')
    print(f"draft visible in tx={seen_inside}, after rollback={seen_after_rollback}")

    # 3) 写入初始状态并提交。
    tx = await client.begin(trace_id="demo-e2e-seed")
    await client.save_graph(NamedGraph(DEMO_GRAPH, [Triple.of(ORDER, STATUS, "quality_check")]), transaction=tx)
    await client.commit(tx)

    # 4) 增量更新：先删旧状态再写新状态；失败时由调用方决定回滚。
    tx = await client.begin(trace_id="demo-e2e-update")
    try:
        result = await client.update_graph(
            DEMO_GRAPH,
            additions=[Triple.of(ORDER, STATUS, "released")],
            removals=[Triple.of(ORDER, STATUS, "quality_check")],
            transaction=tx,
        )
    except GraphStoreError as exc:
        print("update failed after", exc.details.get("applied"), "statements; rolling back")
        await client.rollback(tx)
        raise
    await client.commit(tx, on_finished=lambda t: print("transaction finished:", t))

    rows = await client.select(f"SELECT ?status WHERE {{ GRAPH <{DEMO_GRAPH}> {{ <{ORDER}> <{STATUS}> ?status }} }}")
    statuses = [str(value) for value in rows.values("status")]
    print("order status:", statuses, "statements:", result.statements)
    return {
        "seen_inside": seen_inside,
        "seen_after_rollback": seen_after_rollback,
        "statuses": statuses,
    }


if __name__ == "__main__":
    asyncio.run(main())
