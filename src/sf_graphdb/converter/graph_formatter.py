"""命名图序列化与反序列化。

``serialize`` 生成保存图（graph-save）请求体；N-Triples 使用与批量更新相同的规范格式化，
其余格式交给 rdflib 的 writer。``parse`` 把 RDF 文本读成 :class:`NamedGraph`。"""
from __future__ import annotations

from rdflib import Graph as RDFGraph

from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.converter.result_parser import RDF_FORMATS, media_type
from sf_graphdb.graph.model import NamedGraph

#: 支持作为保存格式的内容类型 → rdflib writer 名称
SERIALIZE_FORMATS = {
    "application/n-triples": "nt",
    "text/turtle": "turtle",
    "application/rdf+xml": "xml",
    "application/ld+json": "json-ld",
    "text/n3": "n3",
}


class GraphFormatter:
    """图数据格式化帮助类。无共享可变状态，可在并发环境中复用。"""

    def __init__(self, content_type: str = "application/n-triples") -> None:
        """参数：
            content_type：保存图时使用的 MIME 类型，例如 ``"text/turtle"``。

        异常：不支持的类型抛出 :class:`ValueError`。"""

        mime = media_type(content_type)
        if mime not in SERIALIZE_FORMATS:
            raise ValueError(f"Unsupported save format: {content_type}")
        self.content_type = mime
        self._format = SERIALIZE_FORMATS[mime]
        self._logger = LoggerFactory.create_default_logger(__name__)

    def serialize(self, graph: NamedGraph) -> bytes:
        if self._format == "nt":
            lines = [triple.to_ntriples() for triple in graph]
            return ("\n".join(lines) + "\n").encode("utf-8") if lines else b""
        data = graph.to_rdflib().serialize(format=self._format, encoding="utf-8")
        self._logger.debug("序列化图 %s 为 %s（%d 字节）", graph.iri, self.content_type, len(data))
        return data

    @staticmethod
    def parse(data: str | bytes, content_type: str, *, iri: str | None = None) -> NamedGraph:
        fmt = RDF_FORMATS.get(media_type(content_type))
        if fmt is None:
            raise ValueError(f"Unsupported RDF format: {content_type}")
        graph = RDFGraph()
        graph.parse(data=data, format=fmt)
        return NamedGraph.from_rdflib(graph, iri=iri)


__all__ = ["GraphFormatter", "SERIALIZE_FORMATS"]
