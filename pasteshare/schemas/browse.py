"""
PasteShare — Browse Query Schemas
=================================

What:  The browse request (page, page size, search terms) and the browse
       response handed back to the HTTP layer.
How:   BrowseQuery round-trips through a path encoding of alternating
       key/value segments, e.g. "author/alice/language/go/page/3".

Search terms:
    author, channel and language constrain the listing. Any other key is
    kept as an opaque term: it survives parsing and re-rendering so that
    presentation code can add facets, but it does not filter anything.
"""

import re
from typing import Dict, List, Optional, Sequence
from urllib.parse import quote_plus, unquote_plus

from pydantic import BaseModel, Field

from pasteshare.exceptions import ValidationError
from pasteshare.pagination import page_window
from pasteshare.schemas.paste import PasteAggregate

# Search keys the paginator turns into equality filters
FILTER_KEYS = ("author", "channel", "language")

DEFAULT_PAGE_SIZE = 50

PAGE_NUMBER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_page_number(value: str) -> int:
    """
    Parse a page number from caller input.

    Raises:
        ValidationError: value is not an integer, or is less than 1
    """
    if not isinstance(value, str) or not PAGE_NUMBER_PATTERN.fullmatch(value):
        raise ValidationError(message=f"invalid page number: {value}", field="page")
    page = int(value)
    if page < 1:
        raise ValidationError(message=f"invalid page number: {value}", field="page")
    return page


class BrowseQuery(BaseModel):
    """A page number, page size and an unordered set of search terms."""
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    search: Dict[str, str] = Field(default_factory=dict)

    @property
    def filters(self) -> Dict[str, str]:
        """The search terms that constrain the listing."""
        return {key: self.search[key] for key in FILTER_KEYS if key in self.search}

    @classmethod
    def from_path(
        cls,
        args: Sequence[str],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "BrowseQuery":
        """
        Parse alternating key/value path segments.

        A trailing key without a value is ignored. Keys and values are
        URL-unescaped; "page" must be a positive integer.
        """
        page = 1
        search: Dict[str, str] = {}
        for i in range(0, len(args) - 1, 2):
            key = unquote_plus(args[i])
            value = unquote_plus(args[i + 1])
            if key == "page":
                page = parse_page_number(value)
            else:
                search[key] = value
        return cls(page=page, page_size=page_size, search=search)

    def to_path(self) -> str:
        """Canonical path form: search keys sorted, page only when > 1."""
        parts: List[str] = []
        for key in sorted(self.search):
            parts.append(quote_plus(key))
            parts.append(quote_plus(self.search[key]))
        if self.page > 1:
            parts.extend(["page", str(self.page)])
        return "/".join(parts)

    def new_page(self, page: int) -> "BrowseQuery":
        return BrowseQuery(page=page, page_size=self.page_size, search=dict(self.search))

    def prev(self) -> Optional["BrowseQuery"]:
        if self.page <= 1:
            return None
        return self.new_page(self.page - 1)

    def next(self) -> "BrowseQuery":
        return self.new_page(self.page + 1)

    def nearby(self, window: int, max_page: int) -> List[int]:
        """Page numbers to link to around the current page."""
        return page_window(self.page, window, max_page)


class BrowseResponse(BaseModel):
    """A PastePage plus the navigation state derived from the query."""
    total: int
    start: int
    end: int
    page: int
    page_size: int
    page_count: int
    nearby: List[int]
    query: str = Field(description="Canonical browse path for this page")
    search: Dict[str, str] = Field(default_factory=dict)
    pastes: List[PasteAggregate] = Field(default_factory=list)
