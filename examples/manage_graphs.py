"""Example: list, save, replace and inspect named graphs."""
from __future__ import annotations

import asyncio

from sf_graphdb import GraphDBClient, NamedGraph, NamedGraphManager, Triple

from helpers import DEMO_GRAPH, EX, build_client, load_demo_config


async def main(client: GraphDBClient | None = None) -> dict:
    if client is None:
        load_demo_config()
        client = build_client()
    manager = NamedGraphManager(client=client)

    graph = NamedGraph(
        DEMO_GRAPH,
        [
            Triple.of(EX + "machine/M-9", EX + "status", "running"),
            Triple.of(EX + "machine/M-9", EX + "line", "L1"),
        ],
    )

    tx = await client.begin(trace_id="demo-graphs")
    try:
        saved = await manager.replace(graph, transaction=tx, trace_id="demo-replace")
        print("Graph replace response:", saved)
    except Exception:
        await tx.rollback()
        raise
    await tx.commit()

    summary = {
        "graphs": await manager.list(trace_id="demo-list"),
        "exists": await manager.exists(DEMO_GRAPH),
        "empty": await manager.is_empty(DEMO_GRAPH),
    }
    print("Graph summary:", summary)
    return summary


if __name__ == "__main__":
    asyncio.run(main())
