"""Exceptions for the fee store."""


class FeeStoreError(Exception):
    """Base exception for all fee store errors."""


class StoreNotConnectedError(FeeStoreError):
    """Raised when the database connection is not established."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class MigrationError(FeeStoreError):
    """Raised when a schema migration fails.

    Attributes:
        version: The migration version that failed.
    """

    def __init__(self, version: int, message: str) -> None:
        """Initialize the migration error.

        Args:
            version: The migration version that failed.
            message: Human-readable error message.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")


class DatabaseError(FeeStoreError):
    """Raised when SQLite or the filesystem fails a store operation.

    Attributes:
        operation: The store operation that failed.
    """

    def __init__(self, operation: str, message: str) -> None:
        """Initialize the database error.

        Args:
            operation: The store operation that failed.
            message: Underlying error message.
        """
        self.operation = operation
        super().__init__(f"Database {operation} failed: {message}")
