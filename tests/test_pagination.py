"""Tests for page/limit arithmetic."""

from gateway_registry.pagination import MAX_LIMIT, StoreQuery, to_response, to_store_query


def test_store_query_offsets_by_whole_pages() -> None:
    assert to_store_query(1, 10) == StoreQuery(offset=0, limit=10)
    assert to_store_query(3, 25) == StoreQuery(offset=50, limit=25)


def test_store_query_clamps_page_and_limit() -> None:
    assert to_store_query(0, 10) == StoreQuery(offset=0, limit=10)
    assert to_store_query(-4, 0) == StoreQuery(offset=0, limit=1)
    assert to_store_query(2, 1000) == StoreQuery(offset=MAX_LIMIT, limit=MAX_LIMIT)


def test_last_page_has_previous_but_no_next() -> None:
    page = to_response(["x"] * 5, total=25, page=3, limit=10)
    assert page.total_pages == 3
    assert page.has_next is False
    assert page.has_previous is True
    assert len(page.items) == 5


def test_middle_page_has_both_neighbours() -> None:
    page = to_response([], total=25, page=2, limit=10)
    assert page.has_next is True
    assert page.has_previous is True


def test_empty_collection_has_no_pages() -> None:
    page = to_response([], total=0, page=1, limit=10)
    assert page.total_pages == 0
    assert page.has_next is False
    assert page.has_previous is False


def test_empty_collection_past_first_page_has_no_previous() -> None:
    page = to_response([], total=0, page=4, limit=10)
    assert page.total_pages == 0
    assert page.has_previous is False


def test_response_reports_clamped_limit() -> None:
    page = to_response([], total=250, page=1, limit=500)
    assert page.limit == MAX_LIMIT
    assert page.total_pages == 3
