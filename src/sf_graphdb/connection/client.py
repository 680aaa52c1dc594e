"""GraphDB（RDF4J/Sesame HTTP 事务协议）客户端。

提供 :class:`TransactionalStore` 协议与 :class:`GraphDBClient` 实现。客户端以组合方式包装
通用的 SPARQL-HTTP 传输层，把无状态 REST 接口组织成显式边界的事务会话：

* begin/commit/rollback 由 :class:`TransactionManager` 维护本地状态机；
* 查询按类型协商 Accept 头，并由 :class:`ResponseParserChain` 解码多种响应编码；
* 命名图增删由 :class:`GraphUpdateBatcher` 拆分为单三元组更新；
* 所有失败统一翻译为 :mod:`sf_graphdb.common.exceptions` 中的异常。

每个操作恰好等待一次 HTTP 往返；同一事务对象不支持并发使用。"""
from __future__ import annotations

from typing import Any, Iterable, Protocol

import httpx
from rdflib import Graph as RDFGraph, URIRef

from sf_graphdb.common.config import ConfigManager
from sf_graphdb.common.config.settings import Settings
from sf_graphdb.common.exceptions import ProtocolViolationError, TransactionStateError
from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.connection.transport import SparqlHttpTransport
from sf_graphdb.converter.graph_formatter import GraphFormatter
from sf_graphdb.converter.result_parser import QueryOutput, ResponseParserChain
from sf_graphdb.converter.results import ResultType, SparqlResultSet
from sf_graphdb.graph.model import NamedGraph, Triple, format_iri
from sf_graphdb.query.builder import RequestBuilder
from sf_graphdb.query.dsl import QueryRequest, UpdateBatch
from sf_graphdb.transaction.batch import GraphUpdateBatcher, GraphUpdateResult
from sf_graphdb.transaction.manager import TransactionManager
from sf_graphdb.transaction.state import FinishedCallback, IsolationLevel, Transaction
from sf_graphdb.utils import resolve_graph_iri

LIST_GRAPHS_QUERY = "SELECT DISTINCT ?g WHERE { GRAPH ?g { ?s ?p ?o } }"


class TransactionalStore(Protocol):
    """事务化 RDF 存储的最小能力接口。"""

    async def begin(self, isolation_level: IsolationLevel = IsolationLevel.UNSPECIFIED, *, trace_id: str | None = None) -> Transaction:
        """开启事务，返回 ``ACTIVE`` 状态的事务句柄。"""

    async def commit(self, transaction: Transaction, *, on_finished: FinishedCallback | None = None, trace_id: str | None = None) -> None:
        """提交事务。"""

    async def rollback(self, transaction: Transaction, *, on_finished: FinishedCallback | None = None, trace_id: str | None = None) -> None:
        """回滚事务。"""

    async def query(self, sparql: str, *, transaction: Transaction | None = None, allow_plain_text: bool = True, infer: bool | None = None, timeout: int | None = None, trace_id: str | None = None) -> QueryOutput:
        """执行查询，返回结果集或图。"""

    async def update(self, sparql: str, *, transaction: Transaction, graph_iri: str | None = None, timeout: int | None = None, trace_id: str | None = None) -> None:
        """在事务内执行 SPARQL Update。"""

    async def save_graph(self, graph: NamedGraph | RDFGraph, *, transaction: Transaction, trace_id: str | None = None) -> None:
        """整体上传一个图。"""

    async def delete_graph(self, graph_iri: str, *, transaction: Transaction, trace_id: str | None = None) -> None:
        """删除命名图。"""


class GraphDBClient:
    """与 GraphDB 事务 REST 接口交互的客户端。"""

    def __init__(
        self,
        endpoint: str,
        repository: str,
        *,
        auth: tuple[str, str] | None = None,
        trace_header: str = "X-Trace-Id",
        default_timeout: int = 30,
        max_timeout: int = 120,
        repositories_prefix: str = "/repositories/",
        query_path: str = "",
        transactions_path: str = "/transactions",
        save_format: str = "application/n-triples",
        infer: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """构造客户端。

        参数：
            endpoint：GraphDB 服务地址。例如 ``"http://localhost:7200"``。
            repository：目标仓库名称。例如 ``"acl"``。
            auth：可选的 Basic Auth 凭据 ``("username", "password")``。
            trace_header：用于携带 ``trace_id`` 的 HTTP 请求头名称，默认 ``"X-Trace-Id"``。
            default_timeout：默认超时时间（秒），必须 >= 1。
            max_timeout：允许的最大超时上限（秒），必须 >= ``default_timeout``。
            repositories_prefix/query_path/transactions_path：仓库、查询与事务路径约定。
            save_format：保存图时的序列化 MIME 类型，默认 ``"application/n-triples"``。
            infer：查询默认是否启用推理。
            transport：可注入的 httpx 传输实现（测试用 ``httpx.MockTransport``）。"""

        self._builder = RequestBuilder(
            endpoint,
            repository,
            repositories_prefix=repositories_prefix,
            query_path=query_path,
            transactions_path=transactions_path,
        )
        self._transport = SparqlHttpTransport(
            auth=auth,
            trace_header=trace_header,
            default_timeout=default_timeout,
            max_timeout=max_timeout,
            transport=transport,
        )
        self._parsers = ResponseParserChain()
        self._transactions = TransactionManager(self._transport, self._builder)
        self._formatter = GraphFormatter(save_format)
        self._batcher = GraphUpdateBatcher(self.update)
        self._infer = infer
        self._logger = LoggerFactory.create_default_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GraphDBClient":
        """按配置快照创建客户端；缺省读取 ``ConfigManager.current()``。"""

        settings = settings or ConfigManager.current().settings
        store = settings.store
        auth: tuple[str, str] | None = None
        if store.auth.username and store.auth.password:
            auth = (store.auth.username, store.auth.password)
        return cls(
            endpoint=store.endpoint,
            repository=store.repository,
            auth=auth,
            trace_header=settings.security.trace_header,
            default_timeout=store.timeout.default,
            max_timeout=store.timeout.max,
            repositories_prefix=store.repositories_prefix,
            query_path=store.query_path,
            transactions_path=store.transactions_path,
            save_format=store.save_format,
            infer=store.infer,
            transport=transport,
        )

    @property
    def builder(self) -> RequestBuilder:
        return self._builder

    # ---- 事务 -----------------------------------------------------------

    async def begin(
        self,
        isolation_level: IsolationLevel = IsolationLevel.UNSPECIFIED,
        *,
        trace_id: str | None = None,
    ) -> Transaction:
        return await self._transactions.begin(isolation_level, trace_id=trace_id)

    async def commit(
        self,
        transaction: Transaction,
        *,
        on_finished: FinishedCallback | None = None,
        trace_id: str | None = None,
    ) -> None:
        await self._transactions.commit(transaction, on_finished=on_finished, trace_id=trace_id)

    async def rollback(
        self,
        transaction: Transaction,
        *,
        on_finished: FinishedCallback | None = None,
        trace_id: str | None = None,
    ) -> None:
        await self._transactions.rollback(transaction, on_finished=on_finished, trace_id=trace_id)

    # ---- 查询 -----------------------------------------------------------

    async def query_into(
        self,
        sparql: str,
        graph: RDFGraph,
        results: SparqlResultSet,
        *,
        transaction: Transaction | None = None,
        allow_plain_text: bool = True,
        infer: bool | None = None,
        timeout: int | None = None,
        trace_id: str | None = None,
    ) -> QueryRequest:
        """执行查询并把响应写入 ``graph``（RDF）或 ``results``（结果集）之一。

        返回：填好查询类型识别结果的 :class:`QueryRequest`。"""

        request = QueryRequest(
            sparql=sparql,
            allow_plain_text=allow_plain_text,
            infer=self._infer if infer is None else infer,
            transaction=transaction,
        )
        if transaction is not None:
            self._transactions.check(transaction, "query")

        negotiation = self._builder.negotiate(sparql, allow_plain_text)
        request.classification = negotiation.classification
        self._logger.debug(
            "查询类型 %s，Accept=%s，允许纯文本=%s",
            negotiation.classification.kind.value,
            negotiation.accept,
            negotiation.allow_plain_text,
            extra={"trace_id": trace_id},
        )
        http_request = self._builder.query(
            sparql,
            accept=negotiation.accept,
            infer=request.infer,
            transaction_id=transaction.id if transaction is not None else None,
        )
        response = await self._transport.send(http_request, timeout=timeout, trace_id=trace_id)
        self._parsers.decode(
            content_type=response.headers.get("Content-Type"),
            body=response.content,
            kind=negotiation.classification.kind,
            allow_plain_text=negotiation.allow_plain_text,
            graph=graph,
            results=results,
        )
        return request

    async def query(
        self,
        sparql: str,
        *,
        transaction: Transaction | None = None,
        allow_plain_text: bool = True,
        infer: bool | None = None,
        timeout: int | None = None,
        trace_id: str | None = None,
    ) -> QueryOutput:
        """执行查询：结果集类型非 ``UNKNOWN`` 时返回 :class:`SparqlResultSet`，否则返回 rdflib Graph。"""

        graph = RDFGraph()
        results = SparqlResultSet()
        await self.query_into(
            sparql,
            graph,
            results,
            transaction=transaction,
            allow_plain_text=allow_plain_text,
            infer=infer,
            timeout=timeout,
            trace_id=trace_id,
        )
        return results if results.result_type is not ResultType.UNKNOWN else graph

    async def ask(self, sparql: str, **kwargs: Any) -> bool:
        outcome = await self.query(sparql, **kwargs)
        if not isinstance(outcome, SparqlResultSet) or not outcome.is_boolean:
            raise ProtocolViolationError(message="ASK 查询未返回布尔结果", operation="query")
        return outcome.ask

    async def select(self, sparql: str, **kwargs: Any) -> SparqlResultSet:
        outcome = await self.query(sparql, **kwargs)
        if not isinstance(outcome, SparqlResultSet) or outcome.result_type is not ResultType.BINDINGS:
            raise ProtocolViolationError(message="SELECT 查询未返回变量绑定", operation="query")
        return outcome

    async def construct(self, sparql: str, **kwargs: Any) -> RDFGraph:
        outcome = await self.query(sparql, **kwargs)
        if not isinstance(outcome, RDFGraph):
            raise ProtocolViolationError(message="CONSTRUCT/DESCRIBE 查询未返回 RDF 图", operation="query")
        return outcome

    # ---- 更新 -----------------------------------------------------------

    async def update(
        self,
        sparql: str,
        *,
        transaction: Transaction,
        graph_iri: str | None = None,
        timeout: int | None = None,
        trace_id: str | None = None,
    ) -> None:
        """在事务内执行 SPARQL Update；``graph_iri`` 作为 ``baseUri`` 发送。"""

        self._require_transaction(transaction, "update")
        request = self._builder.update(sparql, transaction_id=transaction.id, base_uri=graph_iri)
        await self._transport.send(request, timeout=timeout, trace_id=trace_id)

    async def update_graph(
        self,
        graph_iri: str,
        additions: Iterable[Triple] = (),
        removals: Iterable[Triple] = (),
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> GraphUpdateResult:
        """把增删差集拆分为单三元组更新并依次发送（先删后增）。"""

        self._require_transaction(transaction, "update_graph")
        batch = UpdateBatch(
            graph_iri=str(graph_iri),
            transaction=transaction,
            additions=tuple(additions),
            removals=tuple(removals),
        )
        return await self._batcher.apply(batch, trace_id=trace_id)

    async def save_graph(
        self,
        graph: NamedGraph | RDFGraph,
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> None:
        """以单个请求上传完整序列化的图（action=ADD）。"""

        self._require_transaction(transaction, "save_graph")
        named = graph if isinstance(graph, NamedGraph) else NamedGraph.from_rdflib(graph)
        request = self._builder.save_graph(
            transaction_id=transaction.id,
            graph_iri=resolve_graph_iri(named),
            body=self._formatter.serialize(named),
            content_type=self._formatter.content_type,
        )
        await self._transport.send(request, trace_id=trace_id)

    async def delete_graph(
        self,
        graph_iri: str,
        *,
        transaction: Transaction,
        trace_id: str | None = None,
    ) -> None:
        self._require_transaction(transaction, "delete_graph")
        format_iri(str(graph_iri))
        request = self._builder.delete_graph(transaction_id=transaction.id, graph_iri=str(graph_iri))
        await self._transport.send(request, trace_id=trace_id)

    # ---- 辅助查询 -------------------------------------------------------

    async def list_graphs(
        self,
        *,
        transaction: Transaction | None = None,
        trace_id: str | None = None,
    ) -> list[str]:
        """列出包含数据的命名图 IRI；响应不是结果集时返回空列表。"""

        outcome = await self.query(
            LIST_GRAPHS_QUERY,
            transaction=transaction,
            allow_plain_text=False,
            infer=False,
            trace_id=trace_id,
        )
        if not isinstance(outcome, SparqlResultSet):
            return []
        graphs: list[str] = []
        for row in outcome:
            node = row.get("g")
            if isinstance(node, URIRef):
                graphs.append(str(node))
        return graphs

    async def is_empty(
        self,
        graph_iri: str,
        *,
        transaction: Transaction | None = None,
        trace_id: str | None = None,
    ) -> bool:
        query = f"ASK FROM {format_iri(str(graph_iri))} {{ ?s ?p ?o . }}"
        return not await self.ask(query, transaction=transaction, allow_plain_text=False, trace_id=trace_id)

    def _require_transaction(self, transaction: Transaction | None, operation: str) -> None:
        if transaction is None:
            raise TransactionStateError(message="该操作必须在事务内执行", operation=operation)
        self._transactions.check(transaction, operation)


__all__ = ["GraphDBClient", "TransactionalStore", "LIST_GRAPHS_QUERY"]
