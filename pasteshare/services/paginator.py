"""
PasteShare — Browse Paginator
=============================

What:  Filtered, paginated listing of public top-level pastes, and assembly
       of paste + annotation aggregates.
How:   Two queries per page (COUNT over the filtered set, then the id-ordered
       slice) plus one batched annotation query for all roots on the page.
Who:   Called by PasteService for the browse and view endpoints.

Eligibility:
    Only pastes that are neither private nor annotations are listed.
    Filters are an AND of equality conditions on author, channel and
    language; other search keys on the query are ignored here.
    Newest first (descending id).

Query plan (no filters):
    SELECT COUNT(*) FROM pastes WHERE private IS false AND annotates IS NULL
    SELECT * FROM pastes WHERE private IS false AND annotates IS NULL
    ORDER BY id DESC LIMIT :page_size OFFSET :offset
    → idx_pastes_browse (private, annotates, id)
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare.exceptions import StorageError
from pasteshare.models.paste import Paste
from pasteshare.schemas.browse import BrowseQuery
from pasteshare.schemas.paste import PasteAggregate, PastePage, PasteResponse
from pasteshare.services.paste_store import PasteStore
from pasteshare.services.thread_resolver import ThreadResolver

logger = logging.getLogger(__name__)


def build_aggregate(root: Paste, annotations: List[Paste]) -> PasteAggregate:
    return PasteAggregate(
        paste=PasteResponse.model_validate(root),
        annotations=[PasteResponse.model_validate(a) for a in annotations],
    )


class Paginator:

    def __init__(self, store: PasteStore, resolver: ThreadResolver):
        self.store = store
        self.resolver = resolver

    def _conditions(self, query: BrowseQuery) -> list:
        conditions = [Paste.private.is_(False), Paste.annotates.is_(None)]
        for key, value in query.filters.items():
            conditions.append(getattr(Paste, key) == value)
        return conditions

    async def list_pastes(self, db: AsyncSession, query: BrowseQuery) -> PastePage:
        """
        One page of top-level public pastes matching the query's filters.

        Returns:
            PastePage with the total match count, the 1-based [start, end]
            range of the slice (0/0 when empty) and one aggregate per paste.
        """
        conditions = self._conditions(query)
        offset = (query.page - 1) * query.page_size

        try:
            count_result = await db.execute(
                select(func.count()).select_from(Paste).where(*conditions)
            )
            total = int(count_result.scalar_one())

            result = await db.execute(
                select(Paste)
                .where(*conditions)
                .order_by(Paste.id.desc())
                .limit(query.page_size)
                .offset(offset)
            )
            roots = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(
                message="error listing pastes",
                context={"search": query.search, "original_error": type(exc).__name__},
            ) from exc

        threads = await self.store.get_annotations_for(db, [root.id for root in roots])

        page = PastePage(total=total)
        for root in roots:
            page.pastes.append(build_aggregate(root, threads.get(root.id, [])))

        if page.pastes:
            page.start = offset + 1
            page.end = offset + len(page.pastes)

        logger.debug(
            "Browse page %d (size %d, search=%s): %d of %d",
            query.page, query.page_size, query.search, len(page.pastes), total,
        )
        return page

    async def get_paste_data(self, db: AsyncSession, paste_id: int) -> Optional[PasteAggregate]:
        """
        A paste and its annotations, or None when the paste does not exist.

        Asking for an annotation id returns that annotation (with its ordinal)
        and an empty thread, since annotations are never annotated themselves.
        """
        paste = await self.store.get(db, paste_id)
        if paste is None:
            return None

        await self.resolver.resolve(db, paste)
        annotations = await self.store.get_annotations(db, paste_id)
        return build_aggregate(paste, annotations)
