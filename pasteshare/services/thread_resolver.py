"""
PasteShare — Annotation Thread Resolver
=======================================

What:  Computes where an annotation sits in its root's thread.
How:   The ordinal of annotation P is the number of annotations of the same
       root whose id is <= P.id. Ids only grow, so an annotation's ordinal
       never changes once assigned.

Threads are one level deep: every annotation points at the root, and a
reply to an annotation joins the root's thread (see PasteSubmission.to_paste).
"""

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from pasteshare.exceptions import StorageError
from pasteshare.models.paste import Paste


class ThreadResolver:

    async def ordinal(self, db: AsyncSession, paste_id: int) -> int:
        """
        1-based rank of the paste among its root's annotations.

        Returns 0 when the paste is not an annotation or does not exist.

        Query plan:
            SELECT COUNT(o.id)
            FROM pastes p JOIN pastes o ON o.annotates = p.annotates AND o.id <= p.id
            WHERE p.id = :paste_id AND p.annotates IS NOT NULL
        """
        sibling = aliased(Paste)
        stmt = (
            select(func.count(sibling.id))
            .select_from(Paste)
            .join(
                sibling,
                and_(sibling.annotates == Paste.annotates, sibling.id <= Paste.id),
            )
            .where(Paste.id == paste_id, Paste.annotates.is_not(None))
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(
                message=f"error computing annotation ordinal of paste {paste_id}",
                context={"paste_id": paste_id, "original_error": type(exc).__name__},
            ) from exc
        return int(result.scalar_one())

    async def resolve(self, db: AsyncSession, paste: Paste) -> Paste:
        """Fill in paste.annotation_ordinal (0 for top-level pastes)."""
        if paste.is_annotation:
            paste.annotation_ordinal = await self.ordinal(db, paste.id)
        else:
            paste.annotation_ordinal = 0
        return paste
