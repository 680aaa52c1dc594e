"""通用 SPARQL-over-HTTP 传输层。

每次调用新建一个 ``httpx.AsyncClient`` 并只等待一个响应：不做连接池复用、不重试、不在后台
运行任何任务。超时以外没有其它取消机制。"""
from __future__ import annotations

import time
from typing import TYPE_CHECKING

import httpx

from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.common.observability import observe_store_failure, observe_store_response
from sf_graphdb.connection.errors import ErrorTranslator

if TYPE_CHECKING:  # pragma: no cover - 仅用于类型提示
    from sf_graphdb.query.builder import HttpRequest


class SparqlHttpTransport:
    """执行 :class:`HttpRequest` 并把失败交给 :class:`ErrorTranslator`。"""

    def __init__(
        self,
        *,
        auth: tuple[str, str] | None = None,
        trace_header: str = "X-Trace-Id",
        default_timeout: int = 30,
        max_timeout: int = 120,
        transport: httpx.AsyncBaseTransport | None = None,
        translator: ErrorTranslator | None = None,
    ) -> None:
        """参数：
            auth：可选的 Basic Auth 凭据 ``("username", "password")``。
            trace_header：携带 ``trace_id`` 的请求头名称。
            default_timeout：默认超时（秒），必须 >= 1。
            max_timeout：超时上限（秒），必须 >= ``default_timeout``。
            transport：可注入的 httpx 传输实现，测试中传入 ``httpx.MockTransport``。"""

        if default_timeout < 1 or max_timeout < default_timeout:
            raise ValueError("超时配置非法：要求 1 <= default_timeout <= max_timeout")
        self._auth = httpx.BasicAuth(*auth) if auth else None
        self.trace_header = trace_header
        self._default_timeout = default_timeout
        self._max_timeout = max_timeout
        self._transport = transport
        self._translator = translator or ErrorTranslator()
        self._logger = LoggerFactory.create_default_logger(__name__)

    async def send(
        self,
        request: "HttpRequest",
        *,
        timeout: int | None = None,
        trace_id: str | None = None,
    ) -> httpx.Response:
        """发送请求并返回状态码 < 400 的响应；否则抛出翻译后的异常。"""

        headers = dict(request.headers)
        if trace_id:
            headers[self.trace_header] = trace_id
        operation = request.operation
        self._logger.debug(
            "GraphDB 请求 %s %s %s",
            operation,
            request.method,
            request.url,
            extra={"trace_id": trace_id},
        )

        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._resolve_timeout(timeout), transport=self._transport) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    params=request.params or None,
                    content=request.content,
                    headers=headers,
                    auth=self._auth,
                )
        except httpx.HTTPError as exc:
            observe_store_failure(operation, self._translator.reason_for_exception(exc))
            raise self._translator.from_exception(operation, exc) from exc

        duration = time.perf_counter() - start
        observe_store_response(operation, response.status_code, duration)
        if response.status_code >= 400:
            observe_store_failure(operation, self._translator.reason_for_status(response.status_code))
            raise self._translator.from_response(operation, response)
        return response

    def _resolve_timeout(self, timeout: int | None) -> httpx.Timeout:
        """计算本次请求使用的超时时间对象。"""

        if timeout is None:
            effective = self._default_timeout
        else:
            effective = max(1, min(timeout, self._max_timeout))
        return httpx.Timeout(effective, connect=effective)
