"""分页参数解析的单元测试."""

import pytest

from adminkit.utils.pagination_utils import count_pages, page_window, resolve_page, resolve_page_size


@pytest.mark.unit
def test_resolve_page_applies_lower_bound() -> None:
    assert resolve_page({}) == 1
    assert resolve_page({"page": "5"}) == 5
    assert resolve_page({"page": "-3"}) == 1
    assert resolve_page({"page": "abc"}) == 1


@pytest.mark.unit
def test_resolve_page_size_prefers_page_size_then_legacy_keys() -> None:
    assert resolve_page_size({}) == 20
    assert resolve_page_size({"page_size": "15", "limit": "30"}) == 15
    assert resolve_page_size({"per_page": "30"}) == 30
    assert resolve_page_size({"limit": "0"}) == 1
    assert resolve_page_size({"page_size": "999"}, maximum=100) == 100


@pytest.mark.unit
def test_count_pages_and_window() -> None:
    assert count_pages(0, 10) == 0
    assert count_pages(21, 10) == 3
    assert list(page_window(1, 10)) == [1, 2, 3]
    assert list(page_window(9, 10)) == [7, 8, 9, 10]
    assert list(page_window(2, 2, radius=5)) == [1, 2]
