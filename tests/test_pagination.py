"""
Tests for the pagination calculator.
"""
import pytest

from storefront.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from storefront.pagination import normalize, offset_for, paginate


class TestNormalize:

    @pytest.mark.parametrize("page, size, expected", [
        (0, 0, (1, DEFAULT_PAGE_SIZE)),
        (-3, -1, (1, DEFAULT_PAGE_SIZE)),
        (2, 5, (2, 5)),
        (1, MAX_PAGE_SIZE + 50, (1, MAX_PAGE_SIZE)),
    ])
    def test_normalize(self, page, size, expected):
        assert normalize(page, size) == expected

    def test_offset(self):
        assert offset_for(1, 10) == 0
        assert offset_for(3, 10) == 20


class TestPaginate:

    def test_zero_inputs_are_normalized(self):
        paging = paginate(page=0, size=0, total_rows=25)
        assert paging.page == 1
        assert paging.size == 10
        assert paging.total_rows == 25
        assert paging.total_pages == 3

    def test_empty_result_has_no_pages(self):
        paging = paginate(page=1, size=10, total_rows=0)
        assert paging.total_pages == 0
        assert paging.total_rows == 0

    @pytest.mark.parametrize("total_rows, expected_pages", [(1, 1), (10, 1), (11, 2), (20, 2), (21, 3)])
    def test_ceiling_division(self, total_rows, expected_pages):
        assert paginate(1, 10, total_rows).total_pages == expected_pages

    def test_page_beyond_last_is_kept(self):
        paging = paginate(page=9, size=10, total_rows=15)
        assert paging.page == 9
        assert paging.total_pages == 2
