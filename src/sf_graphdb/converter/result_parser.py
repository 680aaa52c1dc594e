"""响应解码链。

根据响应声明的 ``Content-Type`` 与查询类型选择解码器，按固定顺序回退：

1. 仅凭内容类型与 ``allow_plain_text`` 选择 SPARQL 结果解码器；
2. 若 1 无法选择且内容类型属于 XML 家族，强制尝试 SPARQL Results XML；
3. 仍未解决时按内容类型选择 RDF 解码器：查询为 SELECT/ASK 时把 RDF 结果集词汇适配为
   结果集（服务端退化为返回 RDF），否则写入图；
4. 依旧失败则以 :class:`ProtocolViolationError` 抛出。

只有“无法选择解码器”（:class:`DecoderSelectionError`）会触发回退；已选中解码器后的解析错误
立即作为协议错误抛出。"""
from __future__ import annotations

import io
from typing import Callable, Union

from rdflib import Dataset, Graph as RDFGraph, Namespace
from rdflib.namespace import RDF
from rdflib.query import Result

from sf_graphdb.common.exceptions import ProtocolViolationError
from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.converter.results import ResultType, SparqlResultSet
from sf_graphdb.query.classifier import QueryKind

# str.index 会遮蔽同名属性，rs:index 须以下标方式取得
RS = Namespace("http://www.w3.org/2001/sw/DataAccess/tests/result-set#")
SPARQL_RESULTS_NS = b"http://www.w3.org/2005/sparql-results#"

QueryOutput = Union[SparqlResultSet, RDFGraph]

#: 内容类型 → rdflib 结果解析器格式名
RESULT_FORMATS = {
    "application/sparql-results+json": "json",
    "application/json": "json",
    "application/sparql-results+xml": "xml",
    "text/csv": "csv",
    "text/tab-separated-values": "tsv",
}
PLAIN_TEXT_TYPES = {"text/plain", "text/boolean"}
XML_FAMILY = {"application/xml", "text/xml"}

#: 内容类型 → rdflib RDF 解析器格式名
RDF_FORMATS = {
    "text/turtle": "turtle",
    "application/x-turtle": "turtle",
    "application/n-triples": "nt",
    "text/plain": "nt",
    "application/rdf+xml": "xml",
    "application/xml": "xml",
    "text/xml": "xml",
    "application/ld+json": "json-ld",
    "text/n3": "n3",
    "text/rdf+n3": "n3",
    "application/trig": "trig",
    "application/n-quads": "nquads",
    "application/trix": "trix",
}
QUAD_FORMATS = {"trig", "nquads", "trix"}


class DecoderSelectionError(Exception):
    """无法为给定内容类型选择解码器。"""

    def __init__(self, content_type: str, reason: str = "") -> None:
        self.content_type = content_type
        super().__init__(f"无法为内容类型 {content_type!r} 选择解码器{': ' + reason if reason else ''}")


def media_type(content_type: str | None) -> str:
    """去掉参数部分并小写，例如 ``"text/turtle; charset=utf-8"`` → ``"text/turtle"``。"""

    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


class ResponseParserChain:
    """按回退顺序解码查询响应。"""

    def __init__(self) -> None:
        self._logger = LoggerFactory.create_default_logger(__name__)

    def parse(
        self,
        *,
        content_type: str | None,
        body: bytes,
        kind: QueryKind,
        allow_plain_text: bool,
        operation: str = "query",
    ) -> QueryOutput:
        """解码并按输出规则返回：结果集类型非 ``UNKNOWN`` 时返回结果集，否则返回图。"""

        graph = RDFGraph()
        results = SparqlResultSet()
        self.decode(
            content_type=content_type,
            body=body,
            kind=kind,
            allow_plain_text=allow_plain_text,
            graph=graph,
            results=results,
            operation=operation,
        )
        return results if results.result_type is not ResultType.UNKNOWN else graph

    def decode(
        self,
        *,
        content_type: str | None,
        body: bytes,
        kind: QueryKind,
        allow_plain_text: bool,
        graph: RDFGraph,
        results: SparqlResultSet,
        operation: str = "query",
    ) -> None:
        """将响应写入 ``graph`` 或 ``results`` 之一。"""

        mime = media_type(content_type)
        try:
            decoder = self.select_results_decoder(mime, allow_plain_text)
            self._apply(decoder, body, results, operation, mime)
            return
        except DecoderSelectionError as exc:
            self._logger.debug("步骤 1 未选中结果解码器: %s", exc)

        if mime in XML_FAMILY:
            try:
                self._apply(self._sparql_xml_decoder, body, results, operation, mime)
                return
            except DecoderSelectionError as exc:
                self._logger.debug("步骤 2 强制 SPARQL XML 失败: %s", exc)

        try:
            rdf_format = self.select_rdf_format(mime)
        except DecoderSelectionError as exc:
            raise ProtocolViolationError(
                message=str(exc),
                operation=operation,
                details={"contentType": content_type},
            ) from exc

        if kind.returns_results:
            self._logger.warning("服务端以 RDF (%s) 返回 %s 查询结果，按结果集词汇适配", mime, kind.value)
            parsed = RDFGraph()
            self._parse_rdf(body, rdf_format, parsed, operation, mime)
            self._adapt_result_graph(parsed, results, operation)
        else:
            self._parse_rdf(body, rdf_format, graph, operation, mime)

    # ---- 解码器选择 -----------------------------------------------------

    def select_results_decoder(self, mime: str, allow_plain_text: bool) -> Callable[[bytes, SparqlResultSet], None]:
        fmt = RESULT_FORMATS.get(mime)
        if fmt == "xml":
            return self._sparql_xml_decoder
        if fmt is not None:
            return lambda body, results: results.load(Result.parse(io.BytesIO(body), format=fmt))
        if allow_plain_text and mime in PLAIN_TEXT_TYPES:
            return self._boolean_decoder
        raise DecoderSelectionError(mime, "非 SPARQL 结果类型")

    @staticmethod
    def select_rdf_format(mime: str) -> str:
        fmt = RDF_FORMATS.get(mime)
        if fmt is None:
            raise DecoderSelectionError(mime, "非 RDF 类型")
        return fmt

    # ---- 具体解码 -------------------------------------------------------

    @staticmethod
    def _sparql_xml_decoder(body: bytes, results: SparqlResultSet) -> None:
        if SPARQL_RESULTS_NS not in body:
            raise DecoderSelectionError("application/sparql-results+xml", "文档不是 SPARQL 结果 XML")
        results.load(Result.parse(io.BytesIO(body), format="xml"))

    @staticmethod
    def _boolean_decoder(body: bytes, results: SparqlResultSet) -> None:
        text = body.decode("utf-8", errors="replace").strip().lower()
        if text not in {"true", "false"}:
            raise DecoderSelectionError("text/plain", "内容不是布尔值")
        results.set_boolean(text == "true")

    def _apply(
        self,
        decoder: Callable[[bytes, SparqlResultSet], None],
        body: bytes,
        results: SparqlResultSet,
        operation: str,
        mime: str,
    ) -> None:
        try:
            decoder(body, results)
        except DecoderSelectionError:
            raise
        except Exception as exc:  # noqa: BLE001 - rdflib 解析器异常类型不统一
            raise ProtocolViolationError(
                message=f"SPARQL 结果解码失败: {exc}",
                operation=operation,
                details={"contentType": mime},
            ) from exc

    @staticmethod
    def _parse_rdf(body: bytes, rdf_format: str, target: RDFGraph, operation: str, mime: str) -> None:
        try:
            if rdf_format in QUAD_FORMATS:
                dataset = Dataset()
                dataset.parse(data=body, format=rdf_format)
                for s, p, o, _ in dataset.quads((None, None, None, None)):
                    target.add((s, p, o))
            else:
                target.parse(data=body, format=rdf_format)
        except Exception as exc:  # noqa: BLE001 - rdflib 解析器异常类型不统一
            raise ProtocolViolationError(
                message=f"RDF 解码失败: {exc}",
                operation=operation,
                details={"contentType": mime},
            ) from exc

    @staticmethod
    def _adapt_result_graph(graph: RDFGraph, results: SparqlResultSet, operation: str) -> None:
        """把 DAWG 结果集词汇（rs:ResultSet）表示的 RDF 图转换为结果集。"""

        result_set = graph.value(predicate=RDF.type, object=RS.ResultSet)
        if result_set is None:
            raise ProtocolViolationError(
                message="RDF 响应中缺少 rs:ResultSet，无法适配为结果集",
                operation=operation,
            )
        answer = graph.value(result_set, RS.boolean)
        if answer is not None:
            results.set_boolean(str(answer).strip().lower() in {"true", "1"})
            return

        results.set_variables(sorted({str(v) for v in graph.objects(result_set, RS.resultVariable)}))
        solutions = list(graph.objects(result_set, RS.solution))
        solutions.sort(key=lambda node: _index_of(graph, node))
        for solution in solutions:
            row = {}
            for binding in graph.objects(solution, RS.binding):
                variable = graph.value(binding, RS.variable)
                value = graph.value(binding, RS.value)
                if variable is not None and value is not None:
                    row[str(variable)] = value
            results.add_binding(row)


def _index_of(graph: RDFGraph, node) -> int:
    index = graph.value(node, RS["index"])
    try:
        return int(index) if index is not None else 0
    except (TypeError, ValueError):
        return 0


__all__ = [
    "ResponseParserChain",
    "DecoderSelectionError",
    "QueryOutput",
    "media_type",
    "RESULT_FORMATS",
    "RDF_FORMATS",
    "XML_FAMILY",
]
