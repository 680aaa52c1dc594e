from sf_graphdb.transaction.state import (
    FinishedCallback,
    IsolationLevel,
    Transaction,
    TransactionLocationTemplate,
    TransactionState,
)
from sf_graphdb.transaction.manager import TransactionManager
from sf_graphdb.transaction.batch import (
    GraphUpdateBatcher,
    GraphUpdateResult,
    UpdateStatement,
)

__all__ = [
    "FinishedCallback",
    "IsolationLevel",
    "Transaction",
    "TransactionLocationTemplate",
    "TransactionState",
    "TransactionManager",
    "GraphUpdateBatcher",
    "GraphUpdateResult",
    "UpdateStatement",
]
