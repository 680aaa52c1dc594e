"""事务生命周期管理：begin / commit / rollback。"""
from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from sf_graphdb.common.exceptions import TransactionStateError
from sf_graphdb.common.logging import LoggerFactory
from sf_graphdb.common.observability import observe_transaction
from sf_graphdb.transaction.state import (
    FinishedCallback,
    IsolationLevel,
    Transaction,
    TransactionState,
)

if TYPE_CHECKING:  # pragma: no cover - 仅用于类型提示
    from sf_graphdb.connection.transport import SparqlHttpTransport
    from sf_graphdb.query.builder import RequestBuilder


class TransactionManager:
    """事务管理器，负责与存储交互完成事务的创建与终结，并维护本地状态机。

    commit/rollback 只有在传输层成功后才迁移到终态；请求失败时事务保持 ``ACTIVE``
    （结果对客户端未知），失败原样向上抛出。"""

    def __init__(self, transport: "SparqlHttpTransport", builder: "RequestBuilder") -> None:
        self._transport = transport
        self._builder = builder
        self._logger = LoggerFactory.create_default_logger(__name__)

    async def begin(
        self,
        isolation_level: IsolationLevel = IsolationLevel.UNSPECIFIED,
        *,
        trace_id: str | None = None,
    ) -> Transaction:
        """开启事务。

        参数：
            isolation_level：仅随事务对象保存，不发送给服务端。
            trace_id：链路追踪 ID。

        返回：处于 ``ACTIVE`` 状态的新事务。

        异常：``Location`` 头缺失或不符合事务地址模板时抛出 :class:`ProtocolViolationError`。"""

        response = await self._transport.send(self._builder.begin(), trace_id=trace_id)
        transaction_id = self._builder.location_template.match(response.headers.get("Location"))
        transaction = Transaction(transaction_id, self, isolation_level=isolation_level)
        observe_transaction("begin")
        self._logger.info("事务已开启: %s", transaction_id, extra={"trace_id": trace_id})
        return transaction

    async def commit(
        self,
        transaction: Transaction,
        *,
        on_finished: FinishedCallback | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.check(transaction, "commit")
        await self._transport.send(self._builder.commit(transaction.id), trace_id=trace_id)
        await self._finish(transaction, TransactionState.COMMITTED, "commit", on_finished, trace_id)

    async def rollback(
        self,
        transaction: Transaction,
        *,
        on_finished: FinishedCallback | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.check(transaction, "rollback")
        await self._transport.send(self._builder.rollback(transaction.id), trace_id=trace_id)
        await self._finish(transaction, TransactionState.ROLLED_BACK, "rollback", on_finished, trace_id)

    def check(self, transaction: Transaction, operation: str) -> None:
        """本地前置校验：事务必须归属本管理器且处于 ``ACTIVE``。"""

        if transaction.owner is not self:
            raise TransactionStateError(
                message=f"事务 {transaction.id} 不属于当前客户端",
                operation=operation,
                details={"transactionId": str(transaction.id)},
            )
        transaction.ensure_active(operation)

    async def _finish(
        self,
        transaction: Transaction,
        state: TransactionState,
        operation: str,
        on_finished: FinishedCallback | None,
        trace_id: str | None,
    ) -> None:
        transaction._transition(state, operation)  # noqa: SLF001
        observe_transaction(operation)
        self._logger.info("事务 %s 已%s", transaction.id, "提交" if operation == "commit" else "回滚", extra={"trace_id": trace_id})
        if on_finished is not None:
            outcome = on_finished(transaction)
            if inspect.isawaitable(outcome):
                await outcome
