from .connection import GraphDBClient, TransactionalStore
from .query import QueryClassifier, QueryKind, QueryRequest, RequestBuilder, UpdateBatch
from .transaction import (
    GraphUpdateBatcher,
    GraphUpdateResult,
    IsolationLevel,
    Transaction,
    TransactionManager,
    TransactionState,
)
from .graph import NamedGraph, Triple
from .graph.named_graph import NamedGraphManager
from .converter import GraphFormatter, ResponseParserChain, ResultMapper, ResultType, SparqlResultSet
from .common.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    GraphStoreError,
    ProtocolViolationError,
    QueryError,
    StoreConnectionError,
    TransactionStateError,
    UnknownStoreError,
)

__all__ = [
    "GraphDBClient",
    "TransactionalStore",
    "QueryClassifier",
    "QueryKind",
    "QueryRequest",
    "RequestBuilder",
    "UpdateBatch",
    "GraphUpdateBatcher",
    "GraphUpdateResult",
    "IsolationLevel",
    "Transaction",
    "TransactionManager",
    "TransactionState",
    "NamedGraph",
    "Triple",
    "NamedGraphManager",
    "GraphFormatter",
    "ResponseParserChain",
    "ResultMapper",
    "ResultType",
    "SparqlResultSet",
    "AuthenticationError",
    "ExternalServiceError",
    "GraphStoreError",
    "ProtocolViolationError",
    "QueryError",
    "StoreConnectionError",
    "TransactionStateError",
    "UnknownStoreError",
]
