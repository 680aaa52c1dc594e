"""SPARQL 结果映射工具。

`ResultMapper` 负责将 :class:`SparqlResultSet` 中的 rdflib 术语映射为便于序列化的统一格式：
每个变量都带有 `value`、`raw`、`type` 等元信息，方便上层业务进行二次处理或输出 JSON。
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from rdflib import BNode, Literal, URIRef
from rdflib.term import Identifier

from sf_graphdb.converter.results import SparqlResultSet


class ResultMapper:
    """将 SPARQL 绑定结果转换为规范 JSON 结构。

    - 支持常见的 XSD 数值、布尔、日期时间类型自动转换。
    - 保留原始文本（`raw`）以及语言标签和数据类型信息。
    - 遇到未知类型时保持原样，避免误报错或数据丢失。
    """

    #: 可被视为整数的 XSD 类型集合。
    _INT_TYPES = {
        "http://www.w3.org/2001/XMLSchema#integer",
        "http://www.w3.org/2001/XMLSchema#int",
        "http://www.w3.org/2001/XMLSchema#long",
        "http://www.w3.org/2001/XMLSchema#short",
        "http://www.w3.org/2001/XMLSchema#byte",
        "http://www.w3.org/2001/XMLSchema#nonNegativeInteger",
        "http://www.w3.org/2001/XMLSchema#positiveInteger",
        "http://www.w3.org/2001/XMLSchema#nonPositiveInteger",
        "http://www.w3.org/2001/XMLSchema#negativeInteger",
        "http://www.w3.org/2001/XMLSchema#unsignedInt",
        "http://www.w3.org/2001/XMLSchema#unsignedShort",
        "http://www.w3.org/2001/XMLSchema#unsignedByte",
    }

    #: 可被视为浮点或高精度小数的 XSD 类型集合。
    _DECIMAL_TYPES = {
        "http://www.w3.org/2001/XMLSchema#decimal",
        "http://www.w3.org/2001/XMLSchema#double",
        "http://www.w3.org/2001/XMLSchema#float",
    }

    _BOOL_TYPE = "http://www.w3.org/2001/XMLSchema#boolean"
    _DATETIME_TYPE = "http://www.w3.org/2001/XMLSchema#dateTime"

    def map_result_set(self, results: SparqlResultSet) -> list[dict[str, Any]] | bool:
        """转换整个结果集；布尔结果直接返回 ``bool``。

        返回:
            list[dict[str, Any]] | bool: 每行为 ``{变量名: {value, raw, type, ...}}``，
                该行缺失的变量值为 ``None``。
        """

        if results.is_boolean:
            return results.ask
        return [
            {var: self._convert_cell(row.get(var)) for var in results.variables}
            for row in results.bindings
        ]

    def _convert_cell(self, term: Identifier | None) -> dict[str, Any] | None:
        """将单个 rdflib 术语转换为标准结构。"""

        if term is None:
            return None
        if isinstance(term, URIRef):
            return {"value": str(term), "raw": str(term), "type": "uri"}
        if isinstance(term, BNode):
            return {"value": str(term), "raw": str(term), "type": "bnode"}
        raw = str(term)
        dtype = str(term.datatype) if isinstance(term, Literal) and term.datatype else None
        lang = term.language if isinstance(term, Literal) else None
        payload: dict[str, Any] = {
            "value": self._cast_value(raw, dtype),
            "raw": raw,
            "type": "literal",
        }
        if dtype:
            payload["datatype"] = dtype
        if lang:
            payload["lang"] = lang
        return payload

    def _cast_value(self, value: str, dtype: str | None) -> Any:
        """根据数据类型尝试做类型转换，无法转换时返回原值。"""

        if dtype is None:
            return value
        if dtype in self._INT_TYPES:
            try:
                return int(value)
            except (TypeError, ValueError):
                return value
        if dtype in self._DECIMAL_TYPES:
            try:
                return float(Decimal(value))
            except (TypeError, ValueError, ArithmeticError):
                return value
        if dtype == self._BOOL_TYPE:
            return value.lower() in {"true", "1"}
        if dtype == self._DATETIME_TYPE:
            return self._normalize_datetime(value)
        return value

    @staticmethod
    def _normalize_datetime(text: str) -> str:
        """将 XSD `dateTime` 文本统一为 ISO 8601 字符串；无时区时补 ``Z``。"""

        normalized = text.replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(normalized)
            if dt.tzinfo:
                return dt.isoformat()
            return f"{dt.isoformat()}Z"
        except ValueError:
            return text
