"""GraphDB 客户端异常体系。

所有异常均携带 ``code``（:class:`ErrorCode`）、``operation``（如 ``"begin"``、``"query"``）
以及可选的 ``status``/``body``，使失败在不开启请求追踪的情况下也可定位。"""
from __future__ import annotations

from typing import Any

from sf_graphdb.common.exceptions.codes import ErrorCode

#: 错误信息中服务端响应体的最大保留长度。
MAX_BODY_LENGTH = 1024


class GraphStoreError(Exception):
    """所有客户端异常的基类。"""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        code: ErrorCode | None = None,
        message: str = "",
        *,
        operation: str | None = None,
        status: int | None = None,
        body: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message
        self.operation = operation
        self.status = status
        self.body = body[:MAX_BODY_LENGTH] if body else body
        self.details: dict[str, Any] = dict(details or {})
        if operation is not None:
            self.details.setdefault("operation", operation)
        if status is not None:
            self.details.setdefault("status", status)
        if self.body:
            self.details.setdefault("message", self.body)
        super().__init__(self._render())

    def _render(self) -> str:
        parts = [f"[{self.code.value}]"]
        if self.operation:
            parts.append(f"{self.operation}:")
        parts.append(self.message)
        if self.status is not None:
            parts.append(f"(status={self.status})")
        return " ".join(parts)


class ExternalServiceError(GraphStoreError):
    """远端存储或传输层导致的失败。"""


class StoreConnectionError(ExternalServiceError):
    """无法连接存储（DNS、建连或超时）。"""

    default_code = ErrorCode.CONNECTION_ERROR


class AuthenticationError(ExternalServiceError):
    """存储返回 401/403。"""

    default_code = ErrorCode.UNAUTHENTICATED


class ProtocolViolationError(ExternalServiceError):
    """响应不符合协议约定，例如缺失或无法解析的事务 Location 头。"""

    default_code = ErrorCode.PROTOCOL_VIOLATION


class QueryError(ExternalServiceError):
    """4xx 且携带查询/更新诊断信息。"""

    default_code = ErrorCode.QUERY_ERROR


class UnknownStoreError(ExternalServiceError):
    """其他无法归类的失败，保留原始状态码与响应体。"""

    default_code = ErrorCode.UNKNOWN


class TransactionStateError(GraphStoreError):
    """对已结束事务发起操作；在任何网络访问之前抛出。"""

    default_code = ErrorCode.TRANSACTION_STATE


__all__ = [
    "ErrorCode",
    "MAX_BODY_LENGTH",
    "GraphStoreError",
    "ExternalServiceError",
    "StoreConnectionError",
    "AuthenticationError",
    "ProtocolViolationError",
    "QueryError",
    "UnknownStoreError",
    "TransactionStateError",
]
