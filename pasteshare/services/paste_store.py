"""
PasteShare — Paste Store
========================

What:  Persists and retrieves individual paste rows.
How:   Async SQLAlchemy queries against the `pastes` table. Inserts run in a
       single transaction: allocate id → write row → commit, rolling back on
       any failure so readers never see a partial write.
Who:   Used by ThreadResolver, Paginator and PasteService.

Error policy:
    An absent paste is returned as None. Every SQLAlchemy failure is raised
    as StorageError with the original exception chained; nothing is logged
    and swallowed here.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from pasteshare.exceptions import StorageError
from pasteshare.models.paste import UNASSIGNED_ID, Paste
from pasteshare.services.allocator import IdentifierAllocator

logger = logging.getLogger(__name__)


def _number_thread(annotations: List[Paste]) -> List[Paste]:
    """Assign 1-based ordinals to annotations already sorted by ascending id."""
    for position, annotation in enumerate(annotations, start=1):
        annotation.annotation_ordinal = position
    return annotations


class PasteStore:
    """
    Insert and lookup operations for pastes.

    Args:
        allocator: Source of ids for pastes inserted with id == 0
        allocation_attempts: How many allocations an insert may try before a
            primary-key conflict is surfaced as StorageError
    """

    def __init__(self, allocator: IdentifierAllocator, allocation_attempts: int = 3):
        self.allocator = allocator
        self.allocation_attempts = allocation_attempts

    async def insert(self, db: AsyncSession, paste: Paste) -> int:
        """
        Durably insert a paste and return its final id.

        A paste with id 0 gets an id from the allocator; any other id is used
        as given (so a retried submission keeps its id). Allocated ids are
        retried on primary-key conflict; caller-supplied ids are not.

        Raises:
            StorageError: the row could not be written (transaction rolled back)
        """
        allocate = paste.id is None or paste.id == UNASSIGNED_ID
        attempts = self.allocation_attempts if allocate else 1

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                retry=retry_if_exception_type(IntegrityError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    await self._insert_once(db, paste, allocate)
        except SQLAlchemyError as exc:
            raise StorageError(
                message="error inserting new paste",
                context={"original_error": type(exc).__name__, "private": paste.private},
            ) from exc

        logger.info("Inserted paste %d (annotates=%s)", paste.id, paste.annotates)
        return paste.id

    async def _insert_once(self, db: AsyncSession, paste: Paste, allocate: bool) -> None:
        try:
            if allocate:
                paste.id = await self.allocator.allocate(db, paste.private)
            db.add(paste)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            if allocate:
                paste.id = UNASSIGNED_ID
            raise

    async def get(self, db: AsyncSession, paste_id: int) -> Optional[Paste]:
        """
        Fetch a single paste, or None when no row has this id.

        The returned paste's annotation_ordinal is not computed here; see
        ThreadResolver.resolve().
        """
        try:
            result = await db.execute(select(Paste).where(Paste.id == paste_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(
                message=f"error fetching paste {paste_id}",
                context={"paste_id": paste_id, "original_error": type(exc).__name__},
            ) from exc

    async def get_annotations(self, db: AsyncSession, root_id: int) -> List[Paste]:
        """
        All annotations of a root paste, ordered by ascending id, each with
        annotation_ordinal = 1 + its position in the list.
        """
        try:
            result = await db.execute(
                select(Paste).where(Paste.annotates == root_id).order_by(Paste.id)
            )
            annotations = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(
                message=f"error fetching annotations of paste {root_id}",
                context={"paste_id": root_id, "original_error": type(exc).__name__},
            ) from exc
        return _number_thread(annotations)

    async def get_annotations_for(
        self, db: AsyncSession, root_ids: Sequence[int]
    ) -> Dict[int, List[Paste]]:
        """
        Batch form of get_annotations(): one query for several roots.

        Returns a mapping root id → numbered annotations; roots without
        annotations are absent from the mapping.
        """
        if not root_ids:
            return {}
        try:
            result = await db.execute(
                select(Paste)
                .where(Paste.annotates.in_(list(root_ids)))
                .order_by(Paste.annotates, Paste.id)
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(
                message="error fetching annotations",
                context={"root_count": len(root_ids), "original_error": type(exc).__name__},
            ) from exc

        threads: Dict[int, List[Paste]] = {}
        for row in rows:
            threads.setdefault(row.annotates, []).append(row)
        for thread in threads.values():
            _number_thread(thread)
        return threads
