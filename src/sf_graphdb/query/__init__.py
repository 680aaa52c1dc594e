"""查询类型识别、请求模型与 HTTP 请求构建器的便捷导出。"""
from sf_graphdb.query.classifier import Classification, QueryClassifier, QueryKind
from sf_graphdb.query.dsl import QueryRequest, UpdateBatch
from sf_graphdb.query.builder import HttpRequest, Negotiation, RequestBuilder, escape_query

__all__ = [
    "Classification",
    "QueryClassifier",
    "QueryKind",
    "QueryRequest",
    "UpdateBatch",
    "HttpRequest",
    "Negotiation",
    "RequestBuilder",
    "escape_query",
]
