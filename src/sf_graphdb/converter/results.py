"""SPARQL 结果集模型。"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, Mapping

from rdflib.query import Result
from rdflib.term import Identifier


class ResultType(str, Enum):
    UNKNOWN = "UNKNOWN"
    BOOLEAN = "BOOLEAN"
    BINDINGS = "BINDINGS"


class SparqlResultSet:
    """ASK 的布尔答案或 SELECT 的变量绑定。

    初始类型为 ``UNKNOWN``；解码器写入后变为 ``BOOLEAN`` 或 ``BINDINGS``。
    查询输出规则依据该类型决定返回结果集还是图。"""

    def __init__(self) -> None:
        self.result_type = ResultType.UNKNOWN
        self.variables: list[str] = []
        self.bindings: list[dict[str, Identifier]] = []
        self.boolean: bool | None = None

    # ---- 写入（供解码器调用） -------------------------------------------

    def set_boolean(self, value: bool) -> None:
        self.result_type = ResultType.BOOLEAN
        self.boolean = bool(value)

    def set_variables(self, variables: list[str]) -> None:
        self.result_type = ResultType.BINDINGS
        self.variables = list(variables)

    def add_binding(self, binding: Mapping[str, Identifier]) -> None:
        self.result_type = ResultType.BINDINGS
        row = {str(name): term for name, term in binding.items() if term is not None}
        for name in row:
            if name not in self.variables:
                self.variables.append(name)
        self.bindings.append(row)

    def load(self, result: Result) -> None:
        """从 rdflib ``Result`` 复制 ASK/SELECT 结果。"""

        if result.type == "ASK":
            self.set_boolean(bool(result.askAnswer))
            return
        if result.type != "SELECT":
            raise ValueError(f"不是 SPARQL 结果集: {result.type}")
        self.set_variables([str(var) for var in (result.vars or [])])
        for binding in result.bindings:
            self.add_binding({str(var): term for var, term in binding.items()})

    # ---- 读取 -----------------------------------------------------------

    @property
    def is_boolean(self) -> bool:
        return self.result_type is ResultType.BOOLEAN

    @property
    def ask(self) -> bool:
        if self.boolean is None:
            raise ValueError("结果集不是布尔结果")
        return self.boolean

    def values(self, variable: str) -> list[Identifier]:
        return [row[variable] for row in self.bindings if variable in row]

    def __iter__(self) -> Iterator[dict[str, Identifier]]:
        return iter(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def __repr__(self) -> str:
        if self.is_boolean:
            return f"SparqlResultSet(boolean={self.boolean})"
        return f"SparqlResultSet(type={self.result_type.value}, vars={self.variables}, rows={len(self.bindings)})"


__all__ = ["ResultType", "SparqlResultSet"]
