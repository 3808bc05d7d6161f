"""
PasteShare — Pydantic Paste Schemas
===================================

What:  Plain-data models handed from the paste engine to its callers
       (pastes, thread aggregates, pages, diffs) and the inbound
       submission payload.
How:   Response models are built from ORM rows with from_attributes=True;
       the submission model maps a submitted form into a new Paste row.

Absent optional fields stay None here. The "untitled" / "anonymous"
defaults are exposed as separate *_display fields for the presentation
layer, never written back into the core value.
"""

from datetime import datetime, timezone
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, computed_field

from pasteshare.exceptions import ValidationError
from pasteshare.models.paste import UNASSIGNED_ID, Paste
from pasteshare.pagination import page_count

REPLY_PREFIX = "Re: "


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PasteResponse(BaseModel):
    """
    A single paste as returned to callers.

    annotation_ordinal is the paste's 1-based position in its root's
    annotation thread, or 0 when the paste is top-level.
    """
    id: int = Field(description="Paste id")
    title: Optional[str] = Field(default=None)
    content: str = Field(description="Paste body")
    author: Optional[str] = Field(default=None)
    language: Optional[str] = Field(default=None, description="Language code")
    channel: Optional[str] = Field(default=None)
    annotates: Optional[int] = Field(default=None, description="Root paste id for annotations")
    private: bool = Field(default=False)
    created: datetime = Field(description="Insertion time (UTC)")
    annotation_ordinal: int = Field(default=0, description="Position within the annotation thread")

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def root_id(self) -> int:
        return self.annotates if self.annotates is not None else self.id

    @computed_field
    @property
    def title_display(self) -> str:
        return self.title if self.title is not None else "untitled"

    @computed_field
    @property
    def author_display(self) -> str:
        return self.author if self.author is not None else "anonymous"

    @computed_field
    @property
    def reply_title(self) -> str:
        """Title suggested for an annotation of this paste."""
        title = self.title_display
        if not title.startswith(REPLY_PREFIX):
            title = REPLY_PREFIX + title
        return title


class PasteAggregate(BaseModel):
    """A root paste plus its annotations in insertion (ascending id) order."""
    paste: PasteResponse
    annotations: List[PasteResponse] = Field(default_factory=list)


class PastePage(BaseModel):
    """
    One page of the public browse listing.

    start / end are 1-based absolute positions of the returned slice within
    the full result set; both are 0 when the page is empty.
    """
    total: int = Field(description="Number of eligible pastes matching the filters")
    start: int = Field(default=0)
    end: int = Field(default=0)
    pastes: List[PasteAggregate] = Field(default_factory=list)

    def page_count(self, page_size: int) -> int:
        return page_count(self.total, page_size)


class CreatedPasteResponse(BaseModel):
    """
    Returned after a paste or annotation is inserted.

    For annotations, url points at the root paste with an #a<ordinal>
    fragment addressing the new annotation within the thread.
    """
    id: int
    root_id: int
    annotation_ordinal: int = 0
    url: str


class DiffLine(BaseModel):
    """One output line of a diff: '-' left only, '+' right only, ' ' common."""
    marker: str = Field(description="One of '-', '+', ' '")
    line: str

    def __str__(self) -> str:
        return self.marker + self.line


class DiffResponse(BaseModel):
    left: PasteResponse
    right: PasteResponse
    lines: List[DiffLine]

    @computed_field
    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _optional(value: Optional[str], strip: bool = False) -> Optional[str]:
    if value is None:
        return None
    if strip:
        value = value.strip()
    return value or None


class PasteSubmission(BaseModel):
    """
    A submitted paste form.

    Form field names follow the submission form (Content, Title, Author,
    Language, Channel, Private); lowercase names are accepted as well.
    A Private value of "on" (checkbox) marks the paste private.
    """
    content: str
    title: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    channel: Optional[str] = None
    private: bool = False

    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "PasteSubmission":
        def field(name: str) -> Optional[str]:
            value = form.get(name.capitalize())
            if value is None:
                value = form.get(name)
            return value

        content = field("content")
        if not content:
            raise ValidationError(message="paste content is required", field="content")

        return cls(
            content=content,
            title=_optional(field("title"), strip=True),
            author=_optional(field("author"), strip=True),
            language=_optional(field("language")),
            channel=_optional(field("channel")),
            private=field("private") == "on",
        )

    def to_paste(self, parent: Optional[Paste] = None) -> Paste:
        """
        Build an unsaved Paste (id unassigned, created now).

        When annotating, the new paste points at the parent's thread root and
        inherits the parent's private flag.
        """
        paste = Paste(
            id=UNASSIGNED_ID,
            title=self.title,
            content=self.content,
            author=self.author,
            language=self.language,
            channel=self.channel,
            private=self.private,
            created=datetime.now(timezone.utc),
        )
        if parent is not None:
            paste.annotates = parent.root_id
            paste.private = parent.private
        return paste


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "invalid paste id 'abc'",
            "details": {"field": "paste_id"},
            "request_id": "1f0c9a2e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
