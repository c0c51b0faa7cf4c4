"""Service layer exports."""

from .aggregator import merge, results_frame
from .name_resolver import PubChemNameResolver
from .persistence import PersistenceGateway
from .prediction import DLTKcatAdapter, PredictionAdapter, UniKPAdapter
from .query import QueryService
from .session import SessionStore

__all__ = [
    "DLTKcatAdapter",
    "PersistenceGateway",
    "PredictionAdapter",
    "PubChemNameResolver",
    "QueryService",
    "SessionStore",
    "UniKPAdapter",
    "merge",
    "results_frame",
]
