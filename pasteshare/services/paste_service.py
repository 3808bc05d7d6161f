"""
PasteShare — Paste Service (Request-Level Orchestrator)
=======================================================

What:  The operations the HTTP layer calls: submit, annotate, view, raw,
       browse and diff.
How:   Composes PasteStore, ThreadResolver, Paginator and DiffEngine, and
       turns "absent" results into NotFoundError.
Who:   Called by route handlers; receives the request's database session.

Orchestration Flow (POST /api/pastes/{id}/annotations):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────────┐
    │  Parse   │───▶│ Fetch parent│───▶│ Insert paste │───▶│ Ordinal in   │
    │  id/form │    │ (Store.get) │    │ (Store, tx)  │    │ root thread  │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────────┘
"""

import logging
import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare.config import settings
from pasteshare.exceptions import NotFoundError, ValidationError
from pasteshare.models.paste import Paste
from pasteshare.pagination import page_count
from pasteshare.schemas.browse import BrowseQuery, BrowseResponse
from pasteshare.schemas.paste import (
    CreatedPasteResponse,
    DiffResponse,
    PasteAggregate,
    PasteResponse,
    PasteSubmission,
)
from pasteshare.services.allocator import IdentifierAllocator
from pasteshare.services.diff_engine import DiffEngine
from pasteshare.services.paginator import Paginator
from pasteshare.services.paste_store import PasteStore
from pasteshare.services.thread_resolver import ThreadResolver

logger = logging.getLogger(__name__)

# Route serving a paste aggregate; links handed out after a submission point here
PASTE_PATH = "/api/pastes/{paste_id}"

# Plain base-10: optional sign, ASCII digits only (no spaces or underscores)
PASTE_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

MIN_PASTE_ID = -(1 << 63)
MAX_PASTE_ID = (1 << 63) - 1


def parse_paste_id(value: str) -> int:
    """
    Parse a paste id from caller input.

    Raises:
        ValidationError: value is not a base-10 integer in the 64-bit signed range
    """
    if not isinstance(value, str) or not PASTE_ID_PATTERN.fullmatch(value):
        raise ValidationError(message=f"invalid paste id '{value}'", field="paste_id")
    paste_id = int(value)
    if not MIN_PASTE_ID <= paste_id <= MAX_PASTE_ID:
        raise ValidationError(message=f"invalid paste id '{value}'", field="paste_id")
    return paste_id


class PasteService:
    """
    Request-level paste operations.

    Args:
        store / resolver / paginator / differ: core components, built once at
            startup and shared across requests
        page_window: radius of the page-number window in browse responses
        base_url: prefix for links returned after a submission
    """

    def __init__(
        self,
        store: PasteStore,
        resolver: ThreadResolver,
        paginator: Paginator,
        differ: DiffEngine,
        page_window: int = 3,
        base_url: str = "",
    ):
        self.store = store
        self.resolver = resolver
        self.paginator = paginator
        self.differ = differ
        self.page_window = page_window
        self.base_url = base_url

    def paste_url(self, paste_id: int) -> str:
        return self.base_url + PASTE_PATH.format(paste_id=paste_id)

    async def _require(self, db: AsyncSession, paste_id: int) -> Paste:
        paste = await self.store.get(db, paste_id)
        if paste is None:
            raise NotFoundError(resource="paste", resource_id=str(paste_id))
        return paste

    async def create_paste(
        self,
        db: AsyncSession,
        submission: PasteSubmission,
        parent_id: Optional[int] = None,
    ) -> CreatedPasteResponse:
        """
        Insert a new top-level paste, or an annotation when parent_id is given.

        Annotating an annotation attaches the new paste to the same root.
        Annotations of a private paste are private.

        Raises:
            NotFoundError: parent_id does not exist
            StorageError: the insert failed (nothing was written)
        """
        parent = None
        if parent_id is not None:
            parent = await self._require(db, parent_id)

        paste = submission.to_paste(parent)
        paste_id = await self.store.insert(db, paste)

        if paste.annotates is None:
            return CreatedPasteResponse(
                id=paste_id,
                root_id=paste_id,
                url=self.paste_url(paste_id),
            )

        ordinal = await self.resolver.ordinal(db, paste_id)
        logger.info("Paste %d is annotation #%d of paste %d", paste_id, ordinal, paste.annotates)
        return CreatedPasteResponse(
            id=paste_id,
            root_id=paste.annotates,
            annotation_ordinal=ordinal,
            url=f"{self.paste_url(paste.annotates)}#a{ordinal}",
        )

    async def get_paste(self, db: AsyncSession, paste_id: int) -> PasteResponse:
        paste = await self._require(db, paste_id)
        await self.resolver.resolve(db, paste)
        return PasteResponse.model_validate(paste)

    async def get_paste_data(self, db: AsyncSession, paste_id: int) -> PasteAggregate:
        data = await self.paginator.get_paste_data(db, paste_id)
        if data is None:
            raise NotFoundError(resource="paste", resource_id=str(paste_id))
        return data

    async def get_raw(self, db: AsyncSession, paste_id: int) -> str:
        paste = await self._require(db, paste_id)
        return paste.content

    async def browse(self, db: AsyncSession, query: BrowseQuery) -> BrowseResponse:
        page = await self.paginator.list_pastes(db, query)
        pages = page_count(page.total, query.page_size)
        return BrowseResponse(
            total=page.total,
            start=page.start,
            end=page.end,
            page=query.page,
            page_size=query.page_size,
            page_count=pages,
            nearby=query.nearby(self.page_window, pages),
            query=query.to_path(),
            search=query.search,
            pastes=page.pastes,
        )

    async def diff(self, db: AsyncSession, left_id: int, right_id: int) -> DiffResponse:
        """
        Raises:
            NotFoundError: either paste does not exist
        """
        left = await self._require(db, left_id)
        right = await self._require(db, right_id)
        return DiffResponse(
            left=PasteResponse.model_validate(left),
            right=PasteResponse.model_validate(right),
            lines=self.differ.diff(left, right),
        )


def build_paste_service() -> PasteService:
    """Wire the core components from settings."""
    resolver = ThreadResolver()
    store = PasteStore(
        IdentifierAllocator(),
        allocation_attempts=settings.id_allocation_attempts,
    )
    return PasteService(
        store=store,
        resolver=resolver,
        paginator=Paginator(store, resolver),
        differ=DiffEngine(),
        page_window=settings.page_window,
        base_url=settings.external_base_url,
    )


# ── Singleton Instance ────────────────────────────────────────────────────
paste_service = build_paste_service()
