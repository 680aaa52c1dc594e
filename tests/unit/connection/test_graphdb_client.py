from __future__ import annotations

"""GraphDBClient 单元测试（脚本化传输，断言实际发出的请求）。

覆盖点：
- ASK 查询始终请求 SPARQL 结果类型，与调用方纯文本标志无关
- 事务外查询为表单 POST，事务内为 PUT action=QUERY
- 终态事务上的查询/更新/图操作在网络请求前失败
- 结果形态断言：ask/select/construct
- list_graphs/is_empty 辅助查询
- save_graph 单请求上传、update_graph 先删后增
"""

import json
import uuid
from urllib.parse import parse_qs

import httpx
import pytest
from rdflib import Graph as RDFGraph

from sf_graphdb.common.config import ConfigManager
from sf_graphdb.common.exceptions import ProtocolViolationError, TransactionStateError
from sf_graphdb.connection.client import GraphDBClient, LIST_GRAPHS_QUERY
from sf_graphdb.converter.results import SparqlResultSet
from sf_graphdb.graph.model import NamedGraph, Triple
from sf_graphdb.query.builder import SPARQL_RESULTS_ACCEPT
from sf_graphdb.query.classifier import QueryKind

from fakes import ScriptedStore, begin_response, json_boolean

G = "http://example.org/g"
T_OLD = Triple.of("http://example.org/s", "http://example.org/p", "old")
T_NEW = Triple.of("http://example.org/s", "http://example.org/p", "new")


def _client(store: ScriptedStore, **kwargs) -> GraphDBClient:
    return GraphDBClient("http://graphdb.test", "demo", transport=store.transport(), **kwargs)


def _select(vars_: list[str], rows: list[dict]) -> httpx.Response:
    return httpx.Response(
        200,
        content=json.dumps({"head": {"vars": vars_}, "results": {"bindings": rows}}).encode("utf-8"),
        headers={"Content-Type": "application/sparql-results+json"},
    )


def test_from_settings_uses_current_config() -> None:
    client = GraphDBClient.from_settings()
    settings = ConfigManager.current().settings
    assert client.builder.query_url == f"{settings.store.endpoint}/repositories/{settings.store.repository}"


@pytest.mark.asyncio
@pytest.mark.parametrize("allow_plain_text", [True, False])
async def test_ask_always_requests_sparql_results(allow_plain_text: bool) -> None:
    store = ScriptedStore(json_boolean(True))
    client = _client(store)

    assert await client.ask("ASK { ?s ?p ?o }", allow_plain_text=allow_plain_text) is True

    sent = store.requests[0]
    assert sent.headers["Accept"] == SPARQL_RESULTS_ACCEPT
    assert sent.method == "POST"
    assert parse_qs(sent.content.decode("utf-8"))["query"] == ["ASK { ?s ?p ?o }"]


@pytest.mark.asyncio
async def test_query_inside_transaction_uses_put_and_infer() -> None:
    tx_id = uuid.uuid4()
    store = ScriptedStore(begin_response(tx_id), _select(["s"], []))
    client = _client(store, infer=True)
    tx = await client.begin()

    result = await client.select("SELECT ?s WHERE { ?s ?p ?o }", transaction=tx)

    assert isinstance(result, SparqlResultSet) and len(result) == 0
    sent = store.requests[-1]
    assert sent.method == "PUT"
    assert sent.url.path.endswith(f"/transactions/{tx_id}")
    assert sent.url.params.get("action") == "QUERY"
    assert sent.url.params.get("infer") == "true"


@pytest.mark.asyncio
async def test_query_into_reports_classification() -> None:
    store = ScriptedStore(
        httpx.Response(200, text='<http://example.org/a> <http://example.org/p> "v" .', headers={"Content-Type": "application/n-triples"})
    )
    graph, results = RDFGraph(), SparqlResultSet()

    request = await _client(store).query_into("DESCRIBE <http://example.org/a>", graph, results)

    assert request.classification.kind is QueryKind.DESCRIBE
    assert len(graph) == 1
    assert not results.is_boolean


@pytest.mark.asyncio
async def test_operations_on_terminal_transaction_fail_before_network() -> None:
    store = ScriptedStore(begin_response(uuid.uuid4()), httpx.Response(200))
    client = _client(store)
    tx = await client.begin()
    await client.commit(tx)
    sent = len(store.requests)

    with pytest.raises(TransactionStateError):
        await client.query("ASK { ?s ?p ?o }", transaction=tx)
    with pytest.raises(TransactionStateError):
        await client.update("INSERT DATA { <a:s> <a:p> <a:o> }", transaction=tx)
    with pytest.raises(TransactionStateError):
        await client.update_graph(G, [T_NEW], [T_OLD], transaction=tx)
    with pytest.raises(TransactionStateError):
        await client.save_graph(NamedGraph(G, [T_NEW]), transaction=tx)
    with pytest.raises(TransactionStateError):
        await client.delete_graph(G, transaction=tx)
    with pytest.raises(TransactionStateError):
        await client.rollback(tx)

    assert len(store.requests) == sent


@pytest.mark.asyncio
async def test_update_requires_transaction() -> None:
    store = ScriptedStore()
    with pytest.raises(TransactionStateError) as exc:
        await _client(store).update("CLEAR ALL", transaction=None)  # type: ignore[arg-type]
    assert exc.value.operation == "update"
    assert store.requests == []


@pytest.mark.asyncio
async def test_update_sends_base_uri() -> None:
    store = ScriptedStore(begin_response(uuid.uuid4()), httpx.Response(204))
    client = _client(store)
    tx = await client.begin()

    await client.update("INSERT DATA { <a:s> <a:p> <a:o> }", transaction=tx, graph_iri=G)

    params = store.requests[-1].url.params
    assert params.get("action") == "UPDATE"
    assert params.get("baseUri") == G


@pytest.mark.asyncio
async def test_update_graph_sends_removals_then_additions() -> None:
    store = ScriptedStore(begin_response(uuid.uuid4()), *(httpx.Response(204) for _ in range(3)))
    client = _client(store)
    tx = await client.begin()
    t2 = Triple.of("http://example.org/s", "http://example.org/p", "newer")

    result = await client.update_graph(G, [T_NEW, t2], [T_OLD], transaction=tx)

    updates = [req.url.params.get("update") for req in store.requests[1:]]
    assert len(updates) == 3
    assert updates[0] == f"DELETE DATA {{ GRAPH <{G}> {{ {T_OLD.to_ntriples()} }} }}"
    assert updates[1].startswith("INSERT DATA") and T_NEW.to_ntriples() in updates[1]
    assert updates[2].startswith("INSERT DATA") and t2.to_ntriples() in updates[2]
    assert result.statements == 3


@pytest.mark.asyncio
async def test_save_graph_is_single_request() -> None:
    store = ScriptedStore(begin_response(uuid.uuid4()), httpx.Response(204))
    client = _client(store)
    tx = await client.begin()
    graph = NamedGraph(G, [T_OLD, T_NEW])

    await client.save_graph(graph, transaction=tx)

    assert len(store.requests) == 2
    sent = store.requests[-1]
    assert sent.url.params.get("action") == "ADD"
    assert sent.url.params.get("baseUri") == G
    assert sent.headers["Content-Type"] == "application/n-triples"
    assert sent.content.decode("utf-8").splitlines() == [T_OLD.to_ntriples(), T_NEW.to_ntriples()]


@pytest.mark.asyncio
async def test_delete_graph_params() -> None:
    store = ScriptedStore(begin_response(uuid.uuid4()), httpx.Response(204))
    client = _client(store)
    tx = await client.begin()

    await client.delete_graph(G, transaction=tx)

    params = store.requests[-1].url.params
    assert params.get("action") == "DELETE"
    assert params.get("baseURI") == G


@pytest.mark.asyncio
async def test_shape_mismatch_is_protocol_violation() -> None:
    store = ScriptedStore(_select(["s"], []), json_boolean(False))
    client = _client(store)

    with pytest.raises(ProtocolViolationError):
        await client.ask("ASK { ?s ?p ?o }")
    with pytest.raises(ProtocolViolationError):
        await client.construct("CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o }")


@pytest.mark.asyncio
async def test_list_graphs_and_is_empty() -> None:
    store = ScriptedStore(
        _select(
            ["g"],
            [
                {"g": {"type": "uri", "value": G}},
                {"g": {"type": "bnode", "value": "b0"}},
            ],
        ),
        json_boolean(False),
    )
    client = _client(store)

    assert await client.list_graphs() == [G]
    assert await client.is_empty(G) is True

    listed = parse_qs(store.requests[0].content.decode("utf-8"))["query"][0]
    assert listed == LIST_GRAPHS_QUERY
    asked = parse_qs(store.requests[1].content.decode("utf-8"))["query"][0]
    assert asked == f"ASK FROM <{G}> {{ ?s ?p ?o . }}"



@pytest.mark.asyncio
async def test_unrecognised_query_accepts_plain_text_boolean() -> None:
    store = ScriptedStore(httpx.Response(200, text="true", headers={"Content-Type": "text/boolean"}))

    result = await _client(store).query("vendor:probe <http://example.org/a>", allow_plain_text=True)

    assert isinstance(result, SparqlResultSet)
    assert result.ask is True
    assert "text/turtle" in store.requests[0].headers["Accept"]
