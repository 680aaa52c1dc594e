"""结果集模型、响应解码链与格式转换工具。"""
from sf_graphdb.converter.results import ResultType, SparqlResultSet
from sf_graphdb.converter.result_parser import DecoderSelectionError, QueryOutput, ResponseParserChain
from sf_graphdb.converter.graph_formatter import GraphFormatter
from sf_graphdb.converter.result_mapper import ResultMapper

__all__ = [
    "ResultType",
    "SparqlResultSet",
    "DecoderSelectionError",
    "QueryOutput",
    "ResponseParserChain",
    "GraphFormatter",
    "ResultMapper",
]
