"""
PasteShare — Paginator and Browse Query Tests
=============================================

What we test:
    ✅ Only public top-level pastes are listed, newest first
    ✅ total / start / end describe the slice within the full result set
    ✅ Pages past the end are empty, not errors
    ✅ author / channel / language filters, unknown keys ignored
    ✅ page_count and the page-number window
    ✅ BrowseQuery path parsing and canonical rendering
"""

import pytest

from pasteshare.exceptions import InvariantViolationError, ValidationError
from pasteshare.pagination import page_count, page_window
from pasteshare.schemas.browse import BrowseQuery, parse_page_number
from pasteshare.schemas.paste import PastePage


async def seed_public(add_paste, count: int):
    return [await add_paste(content=f"paste {i}") for i in range(count)]


class TestListPastes:

    @pytest.mark.asyncio
    async def test_first_page(self, db_session, paginator, add_paste):
        await seed_public(add_paste, 25)

        page = await paginator.list_pastes(db_session, BrowseQuery(page=1, page_size=10))

        assert page.total == 25
        assert (page.start, page.end) == (1, 10)
        assert [agg.paste.id for agg in page.pastes] == list(range(25, 15, -1))

    @pytest.mark.asyncio
    async def test_last_partial_page(self, db_session, paginator, add_paste):
        await seed_public(add_paste, 25)

        page = await paginator.list_pastes(db_session, BrowseQuery(page=3, page_size=10))

        assert page.total == 25
        assert (page.start, page.end) == (21, 25)
        assert [agg.paste.id for agg in page.pastes] == [5, 4, 3, 2, 1]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, db_session, paginator, add_paste):
        await seed_public(add_paste, 25)

        page = await paginator.list_pastes(db_session, BrowseQuery(page=4, page_size=10))

        assert page.total == 25
        assert page.pastes == []
        assert (page.start, page.end) == (0, 0)

    @pytest.mark.asyncio
    async def test_empty_store(self, db_session, paginator):
        page = await paginator.list_pastes(db_session, BrowseQuery())

        assert page.total == 0
        assert page.pastes == []
        assert page.page_count(50) == 0

    @pytest.mark.asyncio
    async def test_private_and_annotations_are_excluded(self, db_session, paginator, add_paste):
        root = await add_paste()
        await add_paste(annotates=root.id)
        await add_paste(private=True)
        other = await add_paste()

        page = await paginator.list_pastes(db_session, BrowseQuery())

        assert page.total == 2
        assert [agg.paste.id for agg in page.pastes] == [other.id, root.id]

    @pytest.mark.asyncio
    async def test_pages_carry_their_threads(self, db_session, paginator, add_paste):
        root = await add_paste(title="question")
        reply = await add_paste(annotates=root.id, title="answer")

        page = await paginator.list_pastes(db_session, BrowseQuery())

        aggregate = page.pastes[0]
        assert aggregate.paste.id == root.id
        assert [a.id for a in aggregate.annotations] == [reply.id]
        assert aggregate.annotations[0].annotation_ordinal == 1

    @pytest.mark.asyncio
    async def test_filters(self, db_session, paginator, add_paste):
        alice_go = await add_paste(author="alice", language="go")
        await add_paste(author="bob", language="go")
        alice_py = await add_paste(author="alice", language="python", channel="#py")
        await add_paste(author="alice", private=True)

        by_author = await paginator.list_pastes(
            db_session, BrowseQuery(search={"author": "alice"})
        )
        by_both = await paginator.list_pastes(
            db_session, BrowseQuery(search={"author": "alice", "language": "go"})
        )
        by_channel = await paginator.list_pastes(
            db_session, BrowseQuery(search={"channel": "#py"})
        )

        assert [agg.paste.id for agg in by_author.pastes] == [alice_py.id, alice_go.id]
        assert [agg.paste.id for agg in by_both.pastes] == [alice_go.id]
        assert [agg.paste.id for agg in by_channel.pastes] == [alice_py.id]

    @pytest.mark.asyncio
    async def test_unknown_search_keys_do_not_filter(self, db_session, paginator, add_paste):
        await seed_public(add_paste, 3)

        page = await paginator.list_pastes(db_session, BrowseQuery(search={"color": "red"}))

        assert page.total == 3


class TestGetPasteData:

    @pytest.mark.asyncio
    async def test_missing_paste(self, db_session, paginator):
        assert await paginator.get_paste_data(db_session, 77) is None

    @pytest.mark.asyncio
    async def test_root_with_thread(self, db_session, paginator, add_paste):
        root = await add_paste()
        first = await add_paste(annotates=root.id)
        second = await add_paste(annotates=root.id)

        data = await paginator.get_paste_data(db_session, root.id)

        assert data.paste.id == root.id
        assert data.paste.annotation_ordinal == 0
        assert [(a.id, a.annotation_ordinal) for a in data.annotations] == [
            (first.id, 1),
            (second.id, 2),
        ]
        assert all(a.root_id == root.id for a in data.annotations)

    @pytest.mark.asyncio
    async def test_annotation_has_ordinal_and_no_thread(self, db_session, paginator, add_paste):
        root = await add_paste()
        await add_paste(annotates=root.id)
        second = await add_paste(annotates=root.id)

        data = await paginator.get_paste_data(db_session, second.id)

        assert data.paste.annotation_ordinal == 2
        assert data.paste.root_id == root.id
        assert data.annotations == []


class TestPageArithmetic:

    @pytest.mark.parametrize(
        "total, size, expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (25, 10, 3), (30, 10, 3), (31, 10, 4)],
    )
    def test_page_count(self, total, size, expected):
        assert page_count(total, size) == expected
        assert PastePage(total=total).page_count(size) == expected

    @pytest.mark.parametrize("size", [0, -5])
    def test_page_count_rejects_non_positive_size(self, size):
        with pytest.raises(InvariantViolationError):
            page_count(10, size)

    @pytest.mark.parametrize(
        "page, window, max_page, expected",
        [
            (1, 2, 10, [1, 2, 3, 4, 5]),
            (5, 2, 10, [3, 4, 5, 6, 7]),
            (10, 2, 10, [6, 7, 8, 9, 10]),
            (2, 2, 3, [1, 2, 3]),
            (1, 3, 0, []),
            (1, 0, 5, [1]),
        ],
    )
    def test_page_window(self, page, window, max_page, expected):
        assert page_window(page, window, max_page) == expected


class TestBrowseQuery:

    def test_parse_page_number(self):
        assert parse_page_number("3") == 3

    @pytest.mark.parametrize("value", ["0", "-1", "abc", "", "2.5", "1_0", " 2", "2 ", "+0"])
    def test_invalid_page_numbers(self, value):
        with pytest.raises(ValidationError):
            parse_page_number(value)

    def test_from_path(self):
        query = BrowseQuery.from_path(["author", "alice", "page", "3"], page_size=20)

        assert query.page == 3
        assert query.page_size == 20
        assert query.search == {"author": "alice"}
        assert query.filters == {"author": "alice"}

    def test_from_path_unescapes_and_ignores_trailing_key(self):
        query = BrowseQuery.from_path(["channel", "%23lisp", "author", "a+b", "language"])

        assert query.page == 1
        assert query.search == {"channel": "#lisp", "author": "a b"}

    def test_from_path_keeps_unknown_keys_without_filtering(self):
        query = BrowseQuery.from_path(["color", "red", "language", "go"])

        assert query.search == {"color": "red", "language": "go"}
        assert query.filters == {"language": "go"}

    def test_from_path_rejects_bad_page(self):
        with pytest.raises(ValidationError):
            BrowseQuery.from_path(["page", "x"])

    def test_to_path_is_canonical(self):
        query = BrowseQuery(page=2, search={"language": "go", "author": "a b"})

        assert query.to_path() == "author/a+b/language/go/page/2"
        assert BrowseQuery(search={"author": "x"}).to_path() == "author/x"
        assert BrowseQuery().to_path() == ""

    def test_path_round_trip(self):
        query = BrowseQuery(page=4, page_size=10, search={"channel": "#c", "author": "z"})

        parsed = BrowseQuery.from_path(query.to_path().split("/"), page_size=10)

        assert parsed == query

    def test_prev_and_next(self):
        query = BrowseQuery(page=1, page_size=5, search={"author": "alice"})

        assert query.prev() is None
        following = query.next()
        assert following.page == 2
        assert following.search == {"author": "alice"}
        assert following.page_size == 5
        assert following.prev().page == 1

    def test_new_page_does_not_share_search(self):
        query = BrowseQuery(search={"author": "alice"})
        other = query.new_page(3)
        other.search["language"] = "go"

        assert query.search == {"author": "alice"}

    def test_nearby(self):
        assert BrowseQuery(page=5).nearby(2, 10) == [3, 4, 5, 6, 7]
