"""事务状态机与事务地址模板。

状态迁移只有 ``ACTIVE → COMMITTED`` 与 ``ACTIVE → ROLLED_BACK`` 两条，终态不可再迁移。
对终态事务的任何操作都在发起网络请求前以 :class:`TransactionStateError` 失败。

注意：释放事务句柄（包括退出 ``async with``）不会自动回滚，服务端事务将保持打开；
调用方必须显式提交或回滚每一个已开启的事务。"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable
from urllib.parse import urlsplit
from uuid import UUID

from sf_graphdb.common.exceptions import ProtocolViolationError, TransactionStateError
from sf_graphdb.common.logging import LoggerFactory

if TYPE_CHECKING:  # pragma: no cover - 仅用于类型提示
    from sf_graphdb.transaction.manager import TransactionManager

FinishedCallback = Callable[["Transaction"], Any]


class TransactionState(str, Enum):
    ACTIVE = "ACTIVE"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"

    @property
    def terminal(self) -> bool:
        return self is not TransactionState.ACTIVE


class IsolationLevel(str, Enum):
    """隔离级别仅为接口对称而保留，不与服务端协商。"""

    UNSPECIFIED = "UNSPECIFIED"
    READ_UNCOMMITTED = "READ_UNCOMMITTED"
    READ_COMMITTED = "READ_COMMITTED"
    REPEATABLE_READ = "REPEATABLE_READ"
    SERIALIZABLE = "SERIALIZABLE"
    SNAPSHOT = "SNAPSHOT"


class TransactionLocationTemplate:
    """``{transactions_path}/{id}`` 路径模板。

    ``match`` 只接受路径尾部与模板逐段相等、且最后一段是合法 UUID 的地址，否则抛出
    :class:`ProtocolViolationError`；不做任何宽松回退。"""

    def __init__(self, transactions_path: str) -> None:
        self.transactions_path = "/" + transactions_path.strip("/")
        self._segments = self.transactions_path.strip("/").split("/")

    def expand(self, transaction_id: UUID) -> str:
        return f"{self.transactions_path}/{transaction_id}"

    def match(self, location: str | None) -> UUID:
        if not location:
            raise ProtocolViolationError(
                message="begin 响应缺少 Location 头",
                operation="begin",
            )
        path = urlsplit(location.strip()).path.rstrip("/")
        segments = path.strip("/").split("/")
        width = len(self._segments)
        if len(segments) < width + 1 or segments[-(width + 1):-1] != self._segments:
            raise ProtocolViolationError(
                message=f"事务地址不符合模板 {self.transactions_path}/{{id}}: {location}",
                operation="begin",
                details={"location": location},
            )
        try:
            return UUID(segments[-1])
        except ValueError as exc:
            raise ProtocolViolationError(
                message=f"事务标识不是合法 UUID: {segments[-1]!r}",
                operation="begin",
                details={"location": location},
            ) from exc


class Transaction:
    """由某个 :class:`TransactionManager` 创建并独占的服务端事务句柄。

    非线程安全：同一事务上的并发操作会在服务端产生竞争，需由调用方自行串行化。"""

    def __init__(
        self,
        transaction_id: UUID,
        owner: "TransactionManager",
        *,
        isolation_level: IsolationLevel = IsolationLevel.UNSPECIFIED,
    ) -> None:
        self._id = transaction_id
        self._owner = owner
        self._state = TransactionState.ACTIVE
        self.isolation_level = isolation_level
        self._logger = LoggerFactory.create_default_logger(__name__)

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def owner(self) -> "TransactionManager":
        return self._owner

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is TransactionState.ACTIVE

    def ensure_active(self, operation: str) -> None:
        if self._state is not TransactionState.ACTIVE:
            raise TransactionStateError(
                message=f"事务 {self._id} 已处于终态 {self._state.value}",
                operation=operation,
                details={"transactionId": str(self._id), "state": self._state.value},
            )

    def _transition(self, target: TransactionState, operation: str) -> None:
        self.ensure_active(operation)
        if not target.terminal:
            raise ValueError("只能迁移到终态")
        self._state = target

    def commit(self, *, on_finished: FinishedCallback | None = None) -> Awaitable[None]:
        return self._owner.commit(self, on_finished=on_finished)

    def rollback(self, *, on_finished: FinishedCallback | None = None) -> Awaitable[None]:
        return self._owner.rollback(self, on_finished=on_finished)

    async def __aenter__(self) -> "Transaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.is_active:
            self._logger.warning(
                "事务 %s 释放时仍处于 ACTIVE，服务端事务保持打开；请显式 commit/rollback",
                self._id,
            )

    def __repr__(self) -> str:
        return f"Transaction(id={self._id}, state={self._state.value})"


__all__ = [
    "Transaction",
    "TransactionState",
    "IsolationLevel",
    "TransactionLocationTemplate",
    "FinishedCallback",
]
