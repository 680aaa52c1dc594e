"""RDF 领域通用工具方法。"""
from __future__ import annotations

from typing import Optional, Union

from rdflib import Graph as RDFGraph, URIRef

from sf_graphdb.graph.model import NamedGraph, format_iri

GraphLike = Union[str, URIRef, NamedGraph, RDFGraph]


def resolve_graph_iri(graph: Optional[GraphLike]) -> Optional[str]:
    """从字符串、``URIRef``、:class:`NamedGraph` 或 rdflib Graph 中取出命名图 IRI。

    默认图（未命名、或 rdflib 以空白节点为标识）返回 ``None``；非法 IRI 抛出 :class:`ValueError`。"""

    if graph is None:
        return None
    if isinstance(graph, NamedGraph):
        iri = graph.iri
    elif isinstance(graph, RDFGraph):
        iri = str(graph.identifier) if isinstance(graph.identifier, URIRef) else None
    else:
        iri = str(graph)
    if iri is not None:
        format_iri(iri)
    return iri
