from sf_graphdb.connection.errors import ErrorTranslator
from sf_graphdb.connection.transport import SparqlHttpTransport
from sf_graphdb.connection.client import GraphDBClient, TransactionalStore

__all__ = ["ErrorTranslator", "SparqlHttpTransport", "GraphDBClient", "TransactionalStore"]
