"""
PasteShare — Paste Store Tests
==============================

What we test:
    ✅ insert assigns ids to unassigned pastes and keeps caller-supplied ids
    ✅ get returns None for unknown ids
    ✅ Annotations come back in ascending id order with ordinals 1..n
    ✅ Allocated ids are retried on primary-key conflict
    ✅ Failures roll back and surface as StorageError with the cause chained
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from pasteshare.exceptions import StorageError
from pasteshare.models.paste import UNASSIGNED_ID, Paste
from pasteshare.services.allocator import IdentifierAllocator
from pasteshare.services.paste_store import PasteStore


async def count_pastes(session) -> int:
    result = await session.execute(select(func.count()).select_from(Paste))
    return result.scalar_one()


class TestInsertAndGet:

    @pytest.mark.asyncio
    async def test_insert_assigns_id(self, db_session, store, new_paste):
        paste = new_paste(content="hello", title="greeting")

        paste_id = await store.insert(db_session, paste)

        assert paste_id == 1
        assert paste.id == 1

        stored = await store.get(db_session, 1)
        assert stored is not None
        assert stored.content == "hello"
        assert stored.title == "greeting"
        assert stored.author is None
        assert stored.private is False

    @pytest.mark.asyncio
    async def test_insert_keeps_supplied_id(self, db_session, store, new_paste):
        paste_id = await store.insert(db_session, new_paste(paste_id=42))

        assert paste_id == 42
        assert await store.get(db_session, 42) is not None

    @pytest.mark.asyncio
    async def test_get_unknown_id_returns_none(self, db_session, store):
        assert await store.get(db_session, 999) is None

    @pytest.mark.asyncio
    async def test_content_is_stored_verbatim(self, db_session, store, new_paste):
        content = "line one\n\n  indented\ttab\nü unicode\n"
        paste_id = await store.insert(db_session, new_paste(content=content))

        stored = await store.get(db_session, paste_id)
        assert stored.content == content


class TestAnnotations:

    @pytest.mark.asyncio
    async def test_annotations_ordered_and_numbered(self, db_session, store, add_paste):
        root = await add_paste()
        other = await add_paste()
        first = await add_paste(annotates=root.id)
        await add_paste(annotates=other.id)
        second = await add_paste(annotates=root.id)

        annotations = await store.get_annotations(db_session, root.id)

        assert [a.id for a in annotations] == [first.id, second.id]
        assert [a.annotation_ordinal for a in annotations] == [1, 2]

    @pytest.mark.asyncio
    async def test_root_without_annotations(self, db_session, store, add_paste):
        root = await add_paste()

        assert await store.get_annotations(db_session, root.id) == []

    @pytest.mark.asyncio
    async def test_batched_annotations(self, db_session, store, add_paste):
        a = await add_paste()
        b = await add_paste()
        c = await add_paste()
        a1 = await add_paste(annotates=a.id)
        c1 = await add_paste(annotates=c.id)
        a2 = await add_paste(annotates=a.id)

        threads = await store.get_annotations_for(db_session, [a.id, b.id, c.id])

        assert b.id not in threads
        assert [(p.id, p.annotation_ordinal) for p in threads[a.id]] == [(a1.id, 1), (a2.id, 2)]
        assert [(p.id, p.annotation_ordinal) for p in threads[c.id]] == [(c1.id, 1)]

    @pytest.mark.asyncio
    async def test_batched_annotations_empty_input(self, mock_db_session, store):
        assert await store.get_annotations_for(mock_db_session, []) == {}
        mock_db_session.execute.assert_not_awaited()


class TestConflictsAndFailures:

    @pytest.mark.asyncio
    async def test_allocated_id_retried_on_conflict(
        self, db_session, session_factory, store, new_paste
    ):
        await store.insert(db_session, new_paste())

        # Another writer takes id 2 between our MAX(id) read and our insert
        real_next = store.allocator.next_public_id
        calls = []

        async def racing_next_public_id(db):
            calls.append(db)
            if len(calls) == 1:
                async with session_factory() as other:
                    other.add(new_paste(paste_id=2, content="concurrent"))
                    await other.commit()
                return 2
            return await real_next(db)

        store.allocator.next_public_id = racing_next_public_id

        paste = new_paste(content="mine")
        paste_id = await store.insert(db_session, paste)

        assert len(calls) == 2
        assert paste_id == 3
        assert paste.id == 3
        assert (await store.get(db_session, 3)).content == "mine"

    @pytest.mark.asyncio
    async def test_supplied_id_conflict_is_storage_error(
        self, db_session, session_factory, store, new_paste
    ):
        await store.insert(db_session, new_paste(paste_id=7, content="first"))

        async with session_factory() as other:
            with pytest.raises(StorageError) as exc_info:
                await store.insert(other, new_paste(paste_id=7, content="second"))

        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert await count_pastes(db_session) == 1
        assert (await store.get(db_session, 7)).content == "first"

    @pytest.mark.asyncio
    async def test_exhausted_attempts_roll_back_each_time(self, mock_db_session, new_paste):
        mock_db_session.commit.side_effect = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: pastes.id")
        )
        store = PasteStore(IdentifierAllocator(), allocation_attempts=3)
        paste = new_paste(private=True)

        with pytest.raises(StorageError) as exc_info:
            await store.insert(mock_db_session, paste)

        assert mock_db_session.commit.await_count == 3
        assert mock_db_session.rollback.await_count == 3
        assert paste.id == UNASSIGNED_ID
        assert exc_info.value.context["original_error"] == "IntegrityError"

    @pytest.mark.asyncio
    async def test_operational_error_is_not_retried(self, mock_db_session, new_paste):
        mock_db_session.commit.side_effect = OperationalError(
            "INSERT", {}, Exception("database is locked")
        )
        store = PasteStore(IdentifierAllocator(), allocation_attempts=3)

        with pytest.raises(StorageError) as exc_info:
            await store.insert(mock_db_session, new_paste(private=True))

        assert mock_db_session.commit.await_count == 1
        mock_db_session.rollback.assert_awaited_once()
        assert isinstance(exc_info.value.__cause__, OperationalError)

    @pytest.mark.asyncio
    async def test_get_wraps_database_errors(self, mock_db_session, store):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("no such table: pastes")
        )

        with pytest.raises(StorageError) as exc_info:
            await store.get(mock_db_session, 1)

        assert exc_info.value.context["paste_id"] == 1
        assert isinstance(exc_info.value.__cause__, OperationalError)
