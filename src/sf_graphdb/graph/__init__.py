"""图相关模块的公共导出。

``NamedGraphManager`` 依赖客户端，请从 :mod:`sf_graphdb.graph.named_graph` 或包根导入。"""
from sf_graphdb.graph.model import NamedGraph, Triple, escape_literal, format_iri, format_term

__all__ = ["NamedGraph", "Triple", "escape_literal", "format_iri", "format_term"]
