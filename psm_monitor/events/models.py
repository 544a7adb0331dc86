"""Data models for the paginated event feed."""

from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class FeedLinks(BaseModel):
    """Links section of a feed page."""

    model_config = ConfigDict(extra="ignore")

    next: str = ""

    @field_validator("next", mode="before")
    @classmethod
    def coerce_null_next(cls, v: Any) -> Any:
        """Treat a null cursor as exhausted."""
        return "" if v is None else v


class FeedMeta(BaseModel):
    """Meta section of a feed page."""

    model_config = ConfigDict(extra="ignore")

    links: FeedLinks = Field(default_factory=FeedLinks)


class EventsPage(BaseModel):
    """Envelope of one feed page.

    Only the envelope is decoded; each event stays an opaque JSON object.
    """

    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]] = Field(default_factory=list)
    meta: FeedMeta = Field(default_factory=FeedMeta)

    @field_validator("data", "meta", mode="before")
    @classmethod
    def coerce_null_sections(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat null sections as empty."""
        if v is None:
            return [] if info.field_name == "data" else {}
        return v

    @property
    def next_cursor(self) -> str:
        """URL of the next page, or empty when the feed is exhausted."""
        return self.meta.links.next


class DrainErrorClass(str, Enum):
    """Reason a drain stopped before the cursor emptied.

    - HTTP_FAILED: A page request exhausted its retry budget
    - PARSE: A page body was not a valid feed envelope
    - PAGINATION_EXCEEDED: The page cap was reached
    - CURSOR_REPEATED: The feed pointed back to a page already fetched
    """

    HTTP_FAILED = "HTTP_FAILED"
    PARSE = "PARSE"
    PAGINATION_EXCEEDED = "PAGINATION_EXCEEDED"
    CURSOR_REPEATED = "CURSOR_REPEATED"


class DrainError(BaseModel):
    """Why a drain returned a partial result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: DrainErrorClass = Field(description="Classification of the stop")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]
    cursor: str = Field(default="", description="Cursor being followed at the stop")


class DrainResult(BaseModel):
    """Events accumulated by one drain, in page-arrival order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    events: list[dict[str, Any]] = Field(default_factory=list)
    pages: int = Field(default=0, ge=0, description="Pages decoded")
    error: DrainError | None = Field(
        default=None, description="Set when the drain stopped early"
    )

    @property
    def complete(self) -> bool:
        """Check if the drain followed the cursor to the end."""
        return self.error is None
