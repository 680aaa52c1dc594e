"""统一错误码定义。"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """GraphDB 客户端对外暴露的错误码。

    取值与异常类型一一对应，便于日志检索与上层按错误类别分支处理。"""

    CONNECTION_ERROR = "GRAPHDB_CONNECTION_ERROR"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    PROTOCOL_VIOLATION = "GRAPHDB_PROTOCOL_VIOLATION"
    QUERY_ERROR = "GRAPHDB_QUERY_ERROR"
    TRANSACTION_STATE = "GRAPHDB_TRANSACTION_STATE"
    UNKNOWN = "GRAPHDB_UNKNOWN_ERROR"
