"""
Embedded document store with a MongoDB-like query and update language.
"""

from .config import StoreOptions
from .document import insert_document
from .engine import DocumentStore
from .errors import (
    ConfigError,
    DocumentValidationError,
    MongoletError,
    ProjectionError,
    QueryError,
    StorageError,
    StoreConflictError,
    StoreNotFoundError,
    UpdateError,
)
from .log import set_log_level, set_logger
from .projection import project
from .query import matches, select, select_one
from .registry import StoreRegistry
from .storage import JsonFileStorage
from .update import apply_update

__all__ = [
    "ConfigError",
    "DocumentStore",
    "DocumentValidationError",
    "JsonFileStorage",
    "MongoletError",
    "ProjectionError",
    "QueryError",
    "StorageError",
    "StoreConflictError",
    "StoreNotFoundError",
    "StoreOptions",
    "StoreRegistry",
    "UpdateError",
    "apply_update",
    "insert_document",
    "matches",
    "project",
    "select",
    "select_one",
    "set_log_level",
    "set_logger",
]
