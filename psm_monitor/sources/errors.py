"""Error types for the data sources."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class SourceErrorClass(str, Enum):
    """Classification of source errors.

    - FETCH: HTTP request exhausted its retries
    - PARSE: Response body is not valid JSON
    - SCHEMA: Data doesn't match the expected shape
    - NO_RETURN: Well-formed response carried no usable result
    - QUERY_FAILED: Remote side reported the query as failed
    """

    FETCH = "FETCH"
    PARSE = "PARSE"
    SCHEMA = "SCHEMA"
    NO_RETURN = "NO_RETURN"
    QUERY_FAILED = "QUERY_FAILED"


class SourceError(Exception):
    """Base exception for source errors.

    Provides structured error information for logging and readings.
    """

    def __init__(
        self,
        error_class: SourceErrorClass,
        message: str,
        source_id: str | None = None,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        """Initialize the source error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source_id: Identifier of the source that failed.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source_id = source_id
        self.details = details or {}


class ParseError(SourceError):
    """Response body could not be decoded."""

    def __init__(self, message: str, source_id: str | None = None) -> None:
        super().__init__(SourceErrorClass.PARSE, message, source_id)


class SchemaError(SourceError):
    """Error when data doesn't match the expected shape.

    Raised when a required field is missing or has the wrong type.
    """

    def __init__(
        self,
        message: str,
        source_id: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize the schema error.

        Args:
            message: Human-readable error message.
            source_id: Identifier of the source that failed.
            field: Path of the offending field.
        """
        super().__init__(
            SourceErrorClass.SCHEMA,
            message,
            source_id,
            details={"field": field} if field is not None else None,
        )
        self.field = field


class NoReturnError(SourceError):
    """A contract call succeeded but returned nothing."""

    def __init__(self, source_id: str | None = None) -> None:
        super().__init__(SourceErrorClass.NO_RETURN, "net: no return data", source_id)


class QueryFailedError(SourceError):
    """A contract call was rejected by the node."""

    def __init__(self, source_id: str | None = None) -> None:
        super().__init__(SourceErrorClass.QUERY_FAILED, "net: query failed", source_id)


class ErrorRecord(BaseModel):
    """Serializable error record attached to a failed reading."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: SourceErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    source_id: str | None = Field(default=None, description="Source identifier")
    details: dict[str, str | int | float | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: SourceError) -> "ErrorRecord":
        """Create an ErrorRecord from a SourceError exception.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message,
            source_id=error.source_id,
            details=error.details,
        )
