"""Unit tests for pagination metadata."""

import pytest

from imessage_archive.pagination import create_pagination_metadata, paginate_list


class TestCreatePaginationMetadata:

    def test_first_page_of_two(self):
        meta = create_pagination_metadata(total=176, limit=100, offset=0)
        assert meta.has_more is True
        assert meta.page == 1
        assert meta.total_pages == 2

    def test_last_page(self):
        meta = create_pagination_metadata(total=176, limit=100, offset=100)
        assert meta.has_more is False
        assert meta.page == 2
        assert meta.total_pages == 2

    def test_exact_fit_has_no_more(self):
        meta = create_pagination_metadata(total=100, limit=50, offset=50)
        assert meta.has_more is False
        assert meta.total_pages == 2

    def test_empty_result(self):
        meta = create_pagination_metadata(total=0, limit=50, offset=0)
        assert meta.has_more is False
        assert meta.page == 1
        assert meta.total_pages == 0

    def test_unaligned_offset(self):
        """Page is derived by integer division, even mid-page."""
        meta = create_pagination_metadata(total=30, limit=10, offset=15)
        assert meta.page == 2
        assert meta.has_more is True

    def test_offset_past_end(self):
        meta = create_pagination_metadata(total=5, limit=10, offset=40)
        assert meta.has_more is False
        assert meta.page == 5

    @pytest.mark.parametrize("limit", [0, -1])
    def test_rejects_limit_below_one(self, limit):
        with pytest.raises(ValueError):
            create_pagination_metadata(total=10, limit=limit, offset=0)

    def test_to_dict_uses_wire_names(self):
        data = create_pagination_metadata(total=3, limit=2, offset=0).to_dict()
        assert data == {
            "total": 3,
            "limit": 2,
            "offset": 0,
            "hasMore": True,
            "page": 1,
            "totalPages": 2,
        }


class TestPaginateList:

    def test_slices_page(self):
        result = paginate_list(list(range(10)), limit=3, offset=3)
        assert result.data == [3, 4, 5]
        assert result.pagination.total == 10
        assert result.pagination.page == 2

    def test_offset_past_end_returns_empty_page(self):
        result = paginate_list(["a", "b"], limit=5, offset=10)
        assert result.data == []
        assert result.pagination.total == 2
