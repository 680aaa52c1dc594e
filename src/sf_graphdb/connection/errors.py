"""传输与协议失败到异常体系的映射。"""
from __future__ import annotations

import httpx

from sf_graphdb.common.exceptions import (
    AuthenticationError,
    ErrorCode,
    ExternalServiceError,
    QueryError,
    StoreConnectionError,
    UnknownStoreError,
)


class ErrorTranslator:
    """将 HTTP 错误响应或 httpx 异常转换为带操作名的统一异常。

    映射规则：
        * 401/403 → :class:`AuthenticationError`；
        * 其他 4xx 且响应体非空（查询/更新诊断信息）→ :class:`QueryError`；
        * 建连失败、DNS 失败、超时 → :class:`StoreConnectionError`；
        * 其余 → :class:`UnknownStoreError`，保留状态码与响应体。"""

    def from_response(self, operation: str, response: httpx.Response) -> ExternalServiceError:
        status = response.status_code
        body = response.text
        if status == 401:
            return AuthenticationError(ErrorCode.UNAUTHENTICATED, "存储拒绝认证", operation=operation, status=status, body=body)
        if status == 403:
            return AuthenticationError(ErrorCode.FORBIDDEN, "无权访问存储", operation=operation, status=status, body=body)
        if 400 <= status < 500 and body.strip():
            return QueryError(message="查询或更新被存储拒绝", operation=operation, status=status, body=body)
        return UnknownStoreError(message="存储返回错误响应", operation=operation, status=status, body=body)

    def from_exception(self, operation: str, exc: httpx.HTTPError) -> ExternalServiceError:
        url = str(exc.request.url) if _has_request(exc) else None
        details = {"endpoint": url, "error": str(exc)} if url else {"error": str(exc)}
        if isinstance(exc, (httpx.TimeoutException, httpx.ConnectError, httpx.NetworkError)):
            return StoreConnectionError(message="无法连接存储", operation=operation, details=details)
        return UnknownStoreError(message=f"请求失败: {exc.__class__.__name__}", operation=operation, details=details)

    @staticmethod
    def reason_for_status(status_code: int) -> str:
        """根据状态码映射统一的失败原因标签。"""

        if status_code in {401, 403}:
            return "unauthorized"
        if status_code >= 500:
            return "server_error"
        if status_code in {408}:
            return "timeout"
        if status_code in {409}:
            return "conflict"
        return "client_error"

    @staticmethod
    def reason_for_exception(exc: Exception) -> str:
        """将异常对象归类为标准原因标签。"""

        if isinstance(exc, httpx.ReadTimeout):
            return "timeout"
        if isinstance(exc, httpx.ConnectTimeout):
            return "connect_timeout"
        if isinstance(exc, httpx.ConnectError):
            return "connect_error"
        if isinstance(exc, httpx.NetworkError):
            return "network_error"
        return "unknown"


def _has_request(exc: httpx.HTTPError) -> bool:
    try:
        exc.request
    except RuntimeError:
        return False
    return True
