"""查询与批量更新请求模型。

与配置模型不同，这里使用 dataclass：字段直接承载 rdflib 术语与事务句柄，无需 pydantic 校验。"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from sf_graphdb.graph.model import Triple, format_iri
from sf_graphdb.query.classifier import Classification

if TYPE_CHECKING:  # pragma: no cover - 仅用于类型提示
    from sf_graphdb.transaction.state import Transaction


@dataclass(slots=True)
class QueryRequest:
    """一次查询的输入。

    属性：
        sparql：查询文本。
        allow_plain_text：无法识别查询类型时是否接受纯文本（布尔）结果。
        infer：是否启用推理（发送 ``infer=true``）。
        transaction：可选的事务；为 ``None`` 时在事务外查询。
        classification：协商后填入的查询类型识别结果。"""

    sparql: str
    allow_plain_text: bool = True
    infer: bool = False
    transaction: "Transaction | None" = None
    classification: Classification | None = None


def _dedupe(triples: Iterable[Triple]) -> tuple[Triple, ...]:
    return tuple(dict.fromkeys(triples))


@dataclass(slots=True)
class UpdateBatch:
    """针对单个命名图的增删集合，必须绑定事务。

    ``additions`` 与 ``removals`` 各自去重并保留首次出现的顺序。"""

    graph_iri: str
    transaction: "Transaction"
    additions: tuple[Triple, ...] = field(default_factory=tuple)
    removals: tuple[Triple, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.transaction is None:
            raise ValueError("UpdateBatch 必须绑定事务")
        format_iri(self.graph_iri)
        self.additions = _dedupe(self.additions or ())
        self.removals = _dedupe(self.removals or ())

    @property
    def size(self) -> int:
        return len(self.additions) + len(self.removals)


__all__ = ["QueryRequest", "UpdateBatch"]
