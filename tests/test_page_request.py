import pytest

from recordhub.core.pagination import Page, PageRequest, PaginationConfig, build_page_request, page_meta


def test_defaults_for_empty_input() -> None:
    request = build_page_request({})

    assert request == PageRequest(
        page=1,
        per_page=15,
        sort_field="id",
        sort_order="desc",
        search=None,
        filters={},
    )
    assert request.offset == 0
    assert not request.has_search()
    assert not request.has_filters()


def test_out_of_range_values_are_clamped() -> None:
    config = PaginationConfig(max_per_page=50, default_sort_field="id", allowed_sort_fields=("id",))

    request = build_page_request({"page": -5, "per_page": 99999, "sort_field": "unknown_field"}, config)

    assert (request.page, request.per_page, request.sort_field) == (1, 50, "id")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"per_page": "0"}, 1),
        ({"per_page": "-3"}, 1),
        ({"per_page": "25"}, 25),
        ({"perPage": "7"}, 7),
        ({"per_page": "lots"}, 1),
        ({"per_page": "2.5"}, 2),
        ({"per_page": "12abc"}, 12),
        ({"per_page": None}, 15),
        ({"per_page": True}, 1),
    ],
)
def test_per_page_parsing(raw: dict, expected: int) -> None:
    assert build_page_request(raw).per_page == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"page": "3"}, 3),
        ({"page": "0"}, 1),
        ({"page": "abc"}, 1),
        ({"page": 2.0}, 2),
        ({"page": "4.9"}, 4),
    ],
)
def test_page_parsing(raw: dict, expected: int) -> None:
    assert build_page_request(raw).page == expected


@pytest.mark.parametrize("page", ["99999999999999999999", "9" * 5000, 10 ** 30])
def test_huge_page_keeps_the_offset_within_64_bits(page) -> None:
    request = build_page_request({"page": page, "per_page": "15"})

    assert request.page > 1
    assert request.offset <= 2 ** 63 - 1


def test_sort_order_is_case_insensitive_and_validated() -> None:
    assert build_page_request({"sort_order": "ASC"}).sort_order == "asc"
    assert build_page_request({"sort_order": "sideways"}).sort_order == "desc"
    assert build_page_request({"sort_order": 1}).sort_order == "desc"


def test_sort_field_must_be_whitelisted() -> None:
    config = PaginationConfig(allowed_sort_fields=("id", "text_field"), default_sort_field="text_field")

    assert build_page_request({"sort_field": "id"}, config).sort_field == "id"
    assert build_page_request({"sort_field": "password_hash"}, config).sort_field == "text_field"


def test_search_and_filters() -> None:
    request = build_page_request({"search": "Record 1", "filters": {"kind": "a"}})

    assert request.has_search()
    assert request.search == "Record 1"
    assert request.has_filters()
    assert request.get_filter("kind") == "a"
    assert request.get_filter("missing", "default") == "default"


def test_non_string_search_and_non_mapping_filters_are_dropped() -> None:
    request = build_page_request({"search": ["a"], "filters": "kind=a"})

    assert request.search is None
    assert request.filters == {}


def test_custom_search_param() -> None:
    config = PaginationConfig(search_param="q")
    assert build_page_request({"q": "abc", "search": "ignored"}, config).search == "abc"


def test_offset() -> None:
    assert build_page_request({"page": "3", "per_page": "10"}).offset == 20


def test_page_map_keeps_metadata() -> None:
    page = Page(items=[1, 2], current_page=2, per_page=2, total=5, last_page=3)

    mapped = page.map(str)

    assert mapped.items == ["1", "2"]
    assert page_meta(mapped).model_dump() == {"current_page": 2, "per_page": 2, "total": 5, "last_page": 3}
