"""HTTP 请求构建器。

为 RDF4J/Sesame 事务协议的七类操作（begin、commit、rollback、query、update、
graph-save、graph-delete）生成完整的 :class:`HttpRequest`，并负责查询结果的 Accept 协商：

1. 先识别查询类型（解析优先，失败则词法检查 ``ASK``）；
2. ASK/SELECT：不允许纯文本结果，Accept 请求 SPARQL 结果 MIME 组；
3. CONSTRUCT/DESCRIBE：Accept 请求 RDF MIME 组；
4. 无法识别：沿用调用方的 ``allow_plain_text`` 标志，Accept 同时覆盖 RDF 与 SPARQL 结果。

事务外查询以表单 POST 发送；事务内所有操作均以 PUT 发往事务资源，并用 ``action`` 参数区分。"""
from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlencode
from uuid import UUID

from sf_graphdb.query.classifier import Classification, QueryClassifier
from sf_graphdb.transaction.state import TransactionLocationTemplate

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"

SPARQL_RESULTS_ACCEPT = (
    "application/sparql-results+json,"
    "application/sparql-results+xml;q=0.9,"
    "text/csv;q=0.5,"
    "text/tab-separated-values;q=0.5"
)
RDF_ACCEPT = (
    "text/turtle,"
    "application/n-triples;q=0.9,"
    "application/rdf+xml;q=0.8,"
    "application/ld+json;q=0.7,"
    "text/n3;q=0.6,"
    "application/trig;q=0.5,"
    "application/n-quads;q=0.5"
)
GENERIC_ACCEPT = f"{SPARQL_RESULTS_ACCEPT},{RDF_ACCEPT},*/*;q=0.1"
ANY_ACCEPT = "*/*"


def escape_query(text: str) -> str:
    """对查询文本做传输前转义：非 ASCII 字符改写为 SPARQL 码点转义 ``\\uXXXX``/``\\UXXXXXXXX``。

    该步骤独立于 URL 编码，结果仍需作为表单参数再做 URL 编码。"""

    out: list[str] = []
    for ch in text:
        code = ord(ch)
        if code <= 0x7F:
            out.append(ch)
        elif code <= 0xFFFF:
            out.append(f"\\u{code:04X}")
        else:
            out.append(f"\\U{code:08X}")
    return "".join(out)


@dataclass(slots=True)
class HttpRequest:
    """一次待发送的 HTTP 请求。"""

    operation: str
    method: str
    url: str
    params: list[tuple[str, str]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None

    def param(self, name: str) -> str | None:
        for key, value in self.params:
            if key == name:
                return value
        return None


@dataclass(frozen=True, slots=True)
class Negotiation:
    """查询结果形态协商的结论。"""

    classification: Classification
    accept: str
    allow_plain_text: bool


class RequestBuilder:
    """按仓库路径约定构建各操作的请求。"""

    def __init__(
        self,
        endpoint: str,
        repository: str,
        *,
        repositories_prefix: str = "/repositories/",
        query_path: str = "",
        transactions_path: str = "/transactions",
        classifier: QueryClassifier | None = None,
    ) -> None:
        """参数：
            endpoint：服务地址，例如 ``"http://localhost:7200"``。
            repository：仓库名，例如 ``"acl"``。
            repositories_prefix：仓库路径前缀，默认 ``"/repositories/"``。
            query_path：仓库下的查询子路径，默认空串（即仓库地址本身）。
            transactions_path：事务集合子路径，默认 ``"/transactions"``。"""

        self.endpoint = endpoint.rstrip("/")
        self.repository = repository.strip("/")
        prefix = "/" + repositories_prefix.strip("/") + "/"
        self.repository_path = f"{prefix}{self.repository}"
        self.query_path = query_path
        self.transactions_path = f"{self.repository_path}/{transactions_path.strip('/')}"
        self.location_template = TransactionLocationTemplate(self.transactions_path)
        self._classifier = classifier or QueryClassifier()

    # ---- URL ------------------------------------------------------------

    @property
    def query_url(self) -> str:
        suffix = self.query_path.strip("/")
        base = f"{self.endpoint}{self.repository_path}"
        return f"{base}/{suffix}" if suffix else base

    @property
    def transactions_url(self) -> str:
        return f"{self.endpoint}{self.transactions_path}"

    def transaction_url(self, transaction_id: UUID) -> str:
        return f"{self.endpoint}{self.location_template.expand(transaction_id)}"

    # ---- 协商 -----------------------------------------------------------

    def negotiate(self, sparql: str, allow_plain_text: bool) -> Negotiation:
        classification = self._classifier.classify(sparql)
        if classification.kind.returns_results:
            return Negotiation(classification, SPARQL_RESULTS_ACCEPT, False)
        if classification.kind.returns_graph:
            return Negotiation(classification, RDF_ACCEPT, False)
        return Negotiation(classification, GENERIC_ACCEPT, allow_plain_text)

    # ---- 事务生命周期 ---------------------------------------------------

    def begin(self) -> HttpRequest:
        return HttpRequest("begin", "POST", self.transactions_url, headers={"Accept": ANY_ACCEPT})

    def commit(self, transaction_id: UUID) -> HttpRequest:
        return HttpRequest(
            "commit",
            "PUT",
            self.transaction_url(transaction_id),
            params=[("action", "COMMIT")],
            headers={"Accept": ANY_ACCEPT},
        )

    def rollback(self, transaction_id: UUID) -> HttpRequest:
        return HttpRequest(
            "rollback",
            "PUT",
            self.transaction_url(transaction_id),
            headers={"Accept": ANY_ACCEPT},
        )

    # ---- 查询与更新 -----------------------------------------------------

    def query(
        self,
        sparql: str,
        *,
        accept: str,
        infer: bool = False,
        transaction_id: UUID | None = None,
    ) -> HttpRequest:
        escaped = escape_query(sparql)
        headers = {"Accept": accept, "Content-Type": FORM_CONTENT_TYPE}
        if transaction_id is None:
            params = [("infer", "true")] if infer else []
            body = urlencode({"query": escaped}).encode("utf-8")
            return HttpRequest("query", "POST", self.query_url, params=params, headers=headers, content=body)

        params = [("action", "QUERY"), ("query", escaped)]
        if infer:
            params.append(("infer", "true"))
        return HttpRequest("query", "PUT", self.transaction_url(transaction_id), params=params, headers=headers)

    def update(self, sparql: str, *, transaction_id: UUID, base_uri: str | None = None) -> HttpRequest:
        params = [("action", "UPDATE"), ("update", escape_query(sparql))]
        if base_uri is not None:
            params.append(("baseUri", base_uri))
        return HttpRequest(
            "update",
            "PUT",
            self.transaction_url(transaction_id),
            params=params,
            headers={"Accept": ANY_ACCEPT, "Content-Type": FORM_CONTENT_TYPE},
        )

    # ---- 图操作 ---------------------------------------------------------

    def save_graph(
        self,
        *,
        transaction_id: UUID,
        graph_iri: str | None,
        body: bytes,
        content_type: str,
    ) -> HttpRequest:
        params = [("action", "ADD")]
        if graph_iri is not None:
            params.append(("baseUri", graph_iri))
        return HttpRequest(
            "save_graph",
            "PUT",
            self.transaction_url(transaction_id),
            params=params,
            headers={"Accept": ANY_ACCEPT, "Content-Type": content_type},
            content=body,
        )

    def delete_graph(self, *, transaction_id: UUID, graph_iri: str) -> HttpRequest:
        return HttpRequest(
            "delete_graph",
            "PUT",
            self.transaction_url(transaction_id),
            params=[("action", "DELETE"), ("baseURI", graph_iri)],
            headers={"Accept": ANY_ACCEPT},
        )


__all__ = [
    "RequestBuilder",
    "HttpRequest",
    "Negotiation",
    "escape_query",
    "FORM_CONTENT_TYPE",
    "SPARQL_RESULTS_ACCEPT",
    "RDF_ACCEPT",
    "GENERIC_ACCEPT",
    "ANY_ACCEPT",
]
