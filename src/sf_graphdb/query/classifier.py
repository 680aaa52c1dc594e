"""SPARQL 查询类型识别。

先用 rdflib 的 SPARQL 语法解析器做本地解析；解析失败时退化为词法检查，只识别以 ``ASK``
开头（允许前置 PREFIX/BASE 声明与注释）的查询。两者都失败时类型为 ``UNKNOWN``。"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from rdflib.plugins.sparql.parser import parseQuery

from sf_graphdb.common.logging import LoggerFactory


class QueryKind(str, Enum):
    ASK = "ASK"
    SELECT = "SELECT"
    CONSTRUCT = "CONSTRUCT"
    DESCRIBE = "DESCRIBE"
    UNKNOWN = "UNKNOWN"

    @property
    def returns_results(self) -> bool:
        """ASK/SELECT 返回 SPARQL 结果集。"""

        return self in (QueryKind.ASK, QueryKind.SELECT)

    @property
    def returns_graph(self) -> bool:
        """CONSTRUCT/DESCRIBE 返回 RDF 图。"""

        return self in (QueryKind.CONSTRUCT, QueryKind.DESCRIBE)


@dataclass(frozen=True, slots=True)
class Classification:
    """识别结果。

    属性：
        kind：查询类型。
        parsed：是否由语法解析器得出（``False`` 表示来自词法检查或未识别）。"""

    kind: QueryKind
    parsed: bool = False

    @property
    def recognized(self) -> bool:
        return self.kind is not QueryKind.UNKNOWN


_PARSER_KINDS = {
    "AskQuery": QueryKind.ASK,
    "SelectQuery": QueryKind.SELECT,
    "ConstructQuery": QueryKind.CONSTRUCT,
    "DescribeQuery": QueryKind.DESCRIBE,
}

_COMMENT_LINE = re.compile(r"^\s*#.*$", re.MULTILINE)
_LEXICAL_ASK = re.compile(
    r"^(?:\s*(?:PREFIX\s+[^\s:]*:\s*<[^>]*>|BASE\s*<[^>]*>))*\s*ASK\b",
    re.IGNORECASE,
)


class QueryClassifier:
    """按“解析优先、词法兜底”的顺序识别查询类型。"""

    def __init__(self) -> None:
        self._logger = LoggerFactory.create_default_logger(__name__)

    def classify(self, sparql: str) -> Classification:
        kind = self._parse(sparql)
        if kind is not None:
            return Classification(kind=kind, parsed=True)
        if self.looks_like_ask(sparql):
            return Classification(kind=QueryKind.ASK, parsed=False)
        return Classification(kind=QueryKind.UNKNOWN, parsed=False)

    def _parse(self, sparql: str) -> QueryKind | None:
        try:
            parsed = parseQuery(sparql)
        except Exception as exc:  # noqa: BLE001 - 解析失败即走词法兜底
            self._logger.debug("SPARQL 本地解析失败，使用词法检查: %s", exc)
            return None
        name = getattr(parsed[-1], "name", None)
        return _PARSER_KINDS.get(name, QueryKind.UNKNOWN)

    @staticmethod
    def looks_like_ask(sparql: str) -> bool:
        """词法检查：去掉整行注释后，查询形式关键字是否为 ``ASK``。"""

        stripped = _COMMENT_LINE.sub("", sparql)
        return _LEXICAL_ASK.match(stripped) is not None


__all__ = ["QueryKind", "Classification", "QueryClassifier"]
