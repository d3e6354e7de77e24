class MongoletError(Exception):
    """Base error for the project."""


class DocumentValidationError(MongoletError):
    """Raised when input documents fail basic validation."""


class QueryError(MongoletError):
    """Raised when a query uses an unknown operator or a bad operand."""


class UpdateError(MongoletError):
    """Raised when a single update operation cannot be applied to a field."""


class ProjectionError(MongoletError):
    """Raised when a projection is not a valid inclusion or exclusion mask."""


class StorageError(MongoletError):
    """Raised for persistence-level issues."""


class ConfigError(MongoletError):
    """Raised for invalid store options."""


class StoreNotFoundError(MongoletError):
    """Raised when opening a store that does not exist and may not be created."""


class StoreConflictError(MongoletError):
    """Raised when a name is already open as a different kind of store."""
