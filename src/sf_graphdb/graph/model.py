"""RDF 三元组与命名图的值类型，以及规范的 N-Triples 风格格式化。

术语直接复用 rdflib 的 ``URIRef``/``BNode``/``Literal``：它们不可变、按结构比较相等。
``format_term``/``Triple.to_ntriples`` 输出在多次调用间保持稳定，批量更新与测试都依赖这一点。"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from rdflib import BNode, Graph as RDFGraph, Literal, URIRef
from rdflib.namespace import XSD

Subject = Union[URIRef, BNode]
Object = Union[URIRef, BNode, Literal]

# N-Triples IRIREF 中不允许出现的字符
_IRI_FORBIDDEN = set('<>"{}|^`\\ \n\r\t')

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def format_iri(value: str) -> str:
    """将 IRI 格式化为 ``<...>``，包含非法字符时抛出 :class:`ValueError`。"""

    if not value:
        raise ValueError("IRI 不能为空")
    bad = _IRI_FORBIDDEN.intersection(value)
    if bad:
        raise ValueError(f"IRI 包含非法字符 {sorted(bad)!r}: {value!r}")
    return f"<{value}>"


def escape_literal(value: str) -> str:
    """转义字面量中的反斜杠、双引号与控制字符。"""

    return "".join(_LITERAL_ESCAPES.get(ch, ch) for ch in value)


def format_term(term: Object) -> str:
    """返回单个 RDF 术语的规范文本表示。

    - IRI：``<http://example.org/a>``
    - 空白节点：``_:b0``
    - 字面量：``"v"``、``"v"@en``、``"1"^^<http://www.w3.org/2001/XMLSchema#integer>``；
      ``xsd:string`` 类型按简单字面量输出。"""

    if isinstance(term, URIRef):
        return format_iri(str(term))
    if isinstance(term, BNode):
        return f"_:{term}"
    if isinstance(term, Literal):
        lexical = escape_literal(str(term))
        if term.language:
            return f'"{lexical}"@{term.language}'
        if term.datatype is not None and term.datatype != XSD.string:
            return f'"{lexical}"^^{format_iri(str(term.datatype))}'
        return f'"{lexical}"'
    raise TypeError(f"不支持的 RDF 术语类型: {type(term).__name__}")


@dataclass(frozen=True, slots=True)
class Triple:
    """不可变的 (subject, predicate, object) 三元组。"""

    subject: Subject
    predicate: URIRef
    object: Object

    def __post_init__(self) -> None:
        if not isinstance(self.subject, (URIRef, BNode)):
            raise TypeError("subject 必须是 URIRef 或 BNode")
        if not isinstance(self.predicate, URIRef):
            raise TypeError("predicate 必须是 URIRef")
        if not isinstance(self.object, (URIRef, BNode, Literal)):
            raise TypeError("object 必须是 URIRef、BNode 或 Literal")

    @classmethod
    def of(cls, subject: str | Subject, predicate: str | URIRef, obj: str | Object) -> "Triple":
        """便捷构造：字符串主语/谓词视为 IRI（``_:`` 前缀视为空白节点），字符串宾语视为简单字面量。"""

        if not isinstance(obj, (URIRef, BNode, Literal)):
            obj = Literal(obj)
        return cls(_to_subject(subject), URIRef(str(predicate)), obj)

    def to_ntriples(self) -> str:
        """渲染为单行 N-Triples 语句（以 `` .`` 结尾）。"""

        return f"{format_term(self.subject)} {format_term(self.predicate)} {format_term(self.object)} ."

    def as_tuple(self) -> tuple[Subject, URIRef, Object]:
        return (self.subject, self.predicate, self.object)

    def __str__(self) -> str:
        return self.to_ntriples()


class NamedGraph:
    """以 IRI 命名（或未命名的默认图）的三元组集合，保持插入顺序并去重。"""

    def __init__(self, iri: str | None = None, triples: Iterable[Triple] = ()) -> None:
        self.iri = str(iri) if iri is not None else None
        self._triples: dict[Triple, None] = {}
        for triple in triples:
            self.add(triple)

    def add(self, triple: Triple) -> None:
        self._triples[triple] = None

    def discard(self, triple: Triple) -> None:
        self._triples.pop(triple, None)

    @property
    def triples(self) -> tuple[Triple, ...]:
        return tuple(self._triples)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples)

    def __len__(self) -> int:
        return len(self._triples)

    def __contains__(self, triple: object) -> bool:
        return triple in self._triples

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamedGraph):
            return NotImplemented
        return self.iri == other.iri and set(self._triples) == set(other._triples)

    def __repr__(self) -> str:
        return f"NamedGraph(iri={self.iri!r}, triples={len(self)})"

    @classmethod
    def from_rdflib(cls, graph: RDFGraph, iri: str | None = None) -> "NamedGraph":
        """由 rdflib Graph 构造；未显式给出 ``iri`` 时取非空白节点的图标识。"""

        if iri is None and isinstance(graph.identifier, URIRef):
            iri = str(graph.identifier)
        return cls(iri, (Triple(s, p, o) for s, p, o in graph))

    def to_rdflib(self) -> RDFGraph:
        graph = RDFGraph(identifier=URIRef(self.iri) if self.iri else None)
        for triple in self._triples:
            graph.add(triple.as_tuple())
        return graph


def _to_subject(value: str | Subject) -> Subject:
    if isinstance(value, (URIRef, BNode)):
        return value
    text = str(value)
    if text.startswith("_:"):
        return BNode(text[2:])
    return URIRef(text)


__all__ = ["Triple", "NamedGraph", "format_term", "format_iri", "escape_literal"]
