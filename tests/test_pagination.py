"""Tests for the list payload shape adapters."""

from __future__ import annotations

from opsdash.core.pagination import detect_shape, parse_page, unwrap_list


def test_nested_and_flat_shapes_agree():
    rows = [{"id": i} for i in range(10)]
    nested = {
        "data": rows,
        "meta": {"pagination": {"page": 2, "pageSize": 10, "totalCount": 47, "totalPages": 5}},
    }
    flat = {"data": rows, "page": 2, "pageSize": 10, "totalCount": 47, "totalPages": 5}

    nested_rows, nested_page = parse_page(nested, requested_page=2)
    flat_rows, flat_page = parse_page(flat, requested_page=2)

    assert detect_shape(nested) == "nested"
    assert detect_shape(flat) == "flat"
    assert nested_rows == flat_rows == rows
    assert nested_page == flat_page
    assert nested_page.current_page == 2
    assert nested_page.total_pages == 5
    assert nested_page.total_count == 47
    assert nested_page.has_next and nested_page.has_previous


def test_bare_list_is_single_page():
    rows, page = parse_page([{"id": 1}, {"id": 2}, {"id": 3}], requested_page=4)
    assert len(rows) == 3
    assert page.current_page == 1
    assert page.total_pages == 1
    assert page.total_count == 3
    assert not page.has_next


def test_data_envelope_without_pagination_is_bare():
    rows, page = parse_page({"statusCode": 200, "data": [{"id": 1}]})
    assert rows == [{"id": 1}]
    assert page.total_count == 1


def test_total_pages_derived_from_count():
    _, page = parse_page({"data": [], "page": 1, "pageSize": 20, "totalCount": 41})
    assert page.total_pages == 3


def test_unwrap_list_key_order():
    assert unwrap_list([1, 2]) == [1, 2]
    assert unwrap_list({"items": [1], "data": [2]}) == [2]
    assert unwrap_list({"result": [3]}) == [3]
    assert unwrap_list({"sites": [4]}) == [4]
    assert unwrap_list({"other": "x", "rows": [5]}) == [5]


def test_unwrap_list_malformed_payloads_are_empty():
    assert unwrap_list(None) == []
    assert unwrap_list("oops") == []
    assert unwrap_list({"data": {"not": "a list"}}) == []
    rows, page = parse_page(None)
    assert rows == []
    assert page.total_count == 0
