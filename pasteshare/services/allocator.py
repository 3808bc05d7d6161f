"""
PasteShare — Identifier Allocator
=================================

What:  Chooses the id of a paste being inserted.
How:   Public pastes get one more than the current public maximum
       (0 when there are none). Private pastes get a random id in
       [2^62, 2^63), a range no public id can reach.
Who:   Called by PasteStore.insert() inside its transaction.

Collisions:
    Two concurrent public inserts can read the same maximum, and a private
    id can in principle repeat. Neither is detected here; the primary key
    rejects the second row and PasteStore retries with a fresh allocation.
"""

import logging
import secrets

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare.models.paste import PRIVATE_ID_BASE, Paste

logger = logging.getLogger(__name__)


class IdentifierAllocator:
    """Allocates public (sequential) and private (random) paste ids."""

    async def next_public_id(self, db: AsyncSession) -> int:
        """
        One greater than the largest public id, never reusing gaps below it.

        Query plan:
            SELECT COALESCE(MAX(id), 0) + 1 FROM pastes WHERE private IS false
        """
        result = await db.execute(
            select(func.coalesce(func.max(Paste.id), 0)).where(Paste.private.is_(False))
        )
        return int(result.scalar_one()) + 1

    def private_id(self) -> int:
        """A uniformly random id in [2^62, 2^63)."""
        return PRIVATE_ID_BASE + secrets.randbelow(PRIVATE_ID_BASE)

    async def allocate(self, db: AsyncSession, private: bool) -> int:
        if private:
            return self.private_id()
        paste_id = await self.next_public_id(db)
        logger.debug("Allocated public paste id %d", paste_id)
        return paste_id
