import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recordhub.core.pagination import (
    PaginationConfig,
    build_page_request,
    paginate,
    paginate_with_search_callback,
)
from recordhub.features.records.models import Record


pytestmark = pytest.mark.asyncio

CONFIG = PaginationConfig(allowed_sort_fields=("id", "text_field", "created_at", "updated_at"))


async def add_records(db: AsyncSession, owner_id: str, texts: list[str]) -> None:
    db.add_all([Record(text_field=text, created_by=owner_id) for text in texts])
    await db.commit()


async def test_page_past_the_end_is_empty_with_real_totals(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, [f"Item {n:02d}" for n in range(20)])

    page = await paginate(db, select(Record), build_page_request({"per_page": "5", "page": "5"}, CONFIG))

    assert page.items == []
    assert (page.current_page, page.per_page, page.total, page.last_page) == (5, 5, 20, 4)


async def test_huge_page_is_empty_without_error(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["only"])

    page = await paginate(db, select(Record), build_page_request({"page": "99999999999999999999"}, CONFIG))

    assert page.items == []
    assert (page.total, page.last_page) == (1, 1)


async def test_sorting_and_offset(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["delta", "alpha", "charlie", "bravo"])

    params = build_page_request({"sort_field": "text_field", "sort_order": "asc", "per_page": "2", "page": "2"}, CONFIG)
    page = await paginate(db, select(Record), params)

    assert [record.text_field for record in page.items] == ["charlie", "delta"]
    assert page.last_page == 2


async def test_search_matches_substring_case_insensitively(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["Record 1", "Record 2", "Other"])

    page = await paginate(
        db, select(Record), build_page_request({"search": "Record 1"}, CONFIG), searchable_fields=["text_field"]
    )
    assert [record.text_field for record in page.items] == ["Record 1"]
    assert page.total == 1

    page = await paginate(
        db, select(Record), build_page_request({"search": "record"}, CONFIG), searchable_fields=["text_field"]
    )
    assert page.total == 2


async def test_search_wildcards_are_literal(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["100% done", "1000 done"])

    page = await paginate(
        db, select(Record), build_page_request({"search": "100%"}, CONFIG), searchable_fields=["text_field"]
    )
    assert [record.text_field for record in page.items] == ["100% done"]


async def test_search_without_searchable_fields_is_ignored(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["a", "b"])

    page = await paginate(db, select(Record), build_page_request({"search": "zzz"}, CONFIG))
    assert page.total == 2


async def test_existing_constraints_are_kept(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    other = await make_user()
    await add_records(db, owner.id, ["mine 1", "mine 2"])
    await add_records(db, other.id, ["theirs"])

    page = await paginate(db, select(Record).where(Record.created_by == owner.id), build_page_request({}, CONFIG))
    assert page.total == 2
    assert {record.created_by for record in page.items} == {owner.id}


async def test_empty_result_has_one_page(db: AsyncSession, make_user) -> None:
    page = await paginate(db, select(Record), build_page_request({}, CONFIG))
    assert (page.items, page.total, page.last_page) == ([], 0, 1)


async def test_same_request_twice_is_identical(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, [f"Row {n}" for n in range(7)])
    params = build_page_request({"per_page": "3", "page": "2", "sort_field": "text_field"}, CONFIG)

    first = await paginate(db, select(Record), params)
    second = await paginate(db, select(Record), params)

    assert [record.id for record in first.items] == [record.id for record in second.items]
    assert (first.total, first.last_page) == (second.total, second.last_page)


async def test_search_callback(db: AsyncSession, make_user) -> None:
    owner = await make_user()
    await add_records(db, owner.id, ["apple", "banana", "apricot"])
    calls = []

    def starts_with(query, search):
        calls.append(search)
        return query.where(Record.text_field.startswith(search))

    page = await paginate_with_search_callback(
        db, select(Record), build_page_request({"search": "ap"}, CONFIG), starts_with
    )
    assert sorted(record.text_field for record in page.items) == ["apple", "apricot"]

    page = await paginate_with_search_callback(db, select(Record), build_page_request({}, CONFIG), starts_with)
    assert page.total == 3
    assert calls == ["ap"]
