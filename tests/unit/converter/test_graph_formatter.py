from __future__ import annotations

"""GraphFormatter 模块单元测试。

覆盖内容：
- 默认 N-Triples 使用规范三元组格式
- Turtle 等格式交给 rdflib 且可回读
- 解析 RDF 文本为 NamedGraph
- 非法格式参数校验
"""

import pytest
from rdflib import Graph as RDFGraph, Literal, URIRef

from sf_graphdb.converter.graph_formatter import GraphFormatter
from sf_graphdb.graph.model import NamedGraph, Triple


class TestGraphFormatter:
    def setup_method(self) -> None:
        """准备被测实例与一个包含两条三元组的命名图。"""

        self.formatter = GraphFormatter()
        self.graph = NamedGraph(
            "http://example.com/g",
            [
                Triple.of("http://example.com/Person1", "http://example.com/name", "Alice"),
                Triple.of("http://example.com/Person1", "http://example.com/knows", URIRef("http://example.com/Person2")),
            ],
        )

    def test_ntriples_is_canonical(self) -> None:
        data = self.formatter.serialize(self.graph).decode("utf-8")
        assert data.splitlines() == [t.to_ntriples() for t in self.graph]
        assert data.endswith("\n")

    def test_empty_graph_serializes_to_empty_body(self) -> None:
        assert self.formatter.serialize(NamedGraph("http://example.com/g")) == b""

    def test_turtle_roundtrip(self) -> None:
        formatter = GraphFormatter("text/turtle; charset=utf-8")
        assert formatter.content_type == "text/turtle"
        data = formatter.serialize(self.graph)
        parsed = RDFGraph().parse(data=data, format="turtle")
        assert (URIRef("http://example.com/Person1"), URIRef("http://example.com/name"), Literal("Alice")) in parsed

    def test_parse_into_named_graph(self) -> None:
        text = '<http://example.com/a> <http://example.com/p> "v" .\n'
        graph = GraphFormatter.parse(text, "application/n-triples", iri="http://example.com/g")
        assert graph.iri == "http://example.com/g"
        assert Triple.of("http://example.com/a", "http://example.com/p", "v") in graph

    def test_invalid_format(self) -> None:
        with pytest.raises(ValueError):
            GraphFormatter("application/x-unknown")
        with pytest.raises(ValueError):
            GraphFormatter.parse("", "application/x-unknown")
