from __future__ import annotations

"""NamedGraphManager 测试（内存版 GraphDB）。"""

import pytest
from rdflib import Graph as RDFGraph, Literal, URIRef

from sf_graphdb.connection.client import GraphDBClient
from sf_graphdb.graph.model import NamedGraph, Triple
from sf_graphdb.graph.named_graph import NamedGraphManager

from fakes import FakeGraphDB

G = "http://example.org/graphs/people"
ALICE = Triple.of("http://example.org/alice", "http://example.org/name", "Alice")
BOB = Triple.of("http://example.org/bob", "http://example.org/name", "Bob")


@pytest.fixture()
def manager(client: GraphDBClient) -> NamedGraphManager:
    return NamedGraphManager(client=client)


@pytest.mark.asyncio
async def test_save_exists_and_list(manager: NamedGraphManager, fake_store: FakeGraphDB) -> None:
    tx = await manager.client.begin()
    saved = await manager.save(NamedGraph(G, [ALICE, BOB]), transaction=tx, trace_id="trace-save")
    assert saved == {"graph": G, "triples": 2}
    assert await manager.exists(G, transaction=tx) is True
    # 未提交前事务外不可见
    assert await manager.exists(G) is False
    await tx.commit()

    assert await manager.exists(G) is True
    assert await manager.is_empty(G) is False
    assert G in await manager.list()
    assert fake_store.open_transactions == 0


@pytest.mark.asyncio
async def test_replace_and_delete(manager: NamedGraphManager) -> None:
    tx = await manager.client.begin()
    await manager.save(NamedGraph(G, [ALICE, BOB]), transaction=tx)
    replaced = await manager.replace(NamedGraph(G, [BOB]), transaction=tx)
    assert replaced["status"] == "replaced"
    await tx.commit()

    rows = await manager.client.select(f"SELECT ?o WHERE {{ GRAPH <{G}> {{ ?s ?p ?o }} }}")
    assert rows.values("o") == [Literal("Bob")]

    tx = await manager.client.begin()
    assert (await manager.delete(G, transaction=tx))["status"] == "deleted"
    await tx.commit()
    assert await manager.is_empty(G) is True


@pytest.mark.asyncio
async def test_update_with_rdflib_graph_reference(manager: NamedGraphManager) -> None:
    target = RDFGraph(identifier=URIRef(G))
    tx = await manager.client.begin()
    summary = await manager.update(target, additions=[ALICE], removals=[BOB], transaction=tx)
    await tx.commit()

    assert summary["graph"] == G
    assert (summary["removed"], summary["added"], summary["statements"]) == (1, 1, 2)
    assert await manager.client.ask(f"ASK {{ GRAPH <{G}> {{ {ALICE.to_ntriples()} }} }}") is True


@pytest.mark.asyncio
async def test_default_graph_is_rejected(manager: NamedGraphManager) -> None:
    tx = await manager.client.begin()
    with pytest.raises(ValueError):
        await manager.replace(NamedGraph(None, [ALICE]), transaction=tx)
    with pytest.raises(ValueError):
        await manager.delete(RDFGraph(), transaction=tx)
    await tx.rollback()
