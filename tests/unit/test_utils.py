"""
Unit tests for input validation and batching helpers.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tover.utils.batching import chunked, unique_in_order
from tover.utils.validation import (
    ValidationError,
    validate_days,
    validate_limit,
    validate_offset,
    validate_workspace_id,
)


class TestWorkspaceIdValidation:
    """Tests for workspace ID validation"""

    def test_valid_workspace_ids(self):
        """Test ids are opaque text, not restricted to a charset"""
        assert validate_workspace_id("shop-1") == "shop-1"
        assert validate_workspace_id("  shop_1.eu  ") == "shop_1.eu"
        assert validate_workspace_id("4f1c2b1e-9a7d-4d3e-8c55-0b6a1f2e3d4c")
        assert validate_workspace_id("sklep one") == "sklep one"
        assert validate_workspace_id("shop;łódź") == "shop;łódź"

    @pytest.mark.parametrize("value", ["", "   ", None, "shop\x00one", "shop\none", "x" * 256])
    def test_invalid_workspace_ids(self, value):
        with pytest.raises(ValidationError):
            validate_workspace_id(value)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_workspace_id("")


class TestPaginationValidation:
    """Tests for limit/offset/days validation"""

    def test_limit_bounds(self):
        assert validate_limit(1) == 1
        assert validate_limit(1000) == 1000

        with pytest.raises(ValidationError, match="at least 1"):
            validate_limit(0)
        with pytest.raises(ValidationError, match="must not exceed 1000"):
            validate_limit(1001)

    @pytest.mark.parametrize("value", [True, "10", 2.5, None])
    def test_limit_type(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            validate_limit(value)

    def test_offset(self):
        assert validate_offset(0) == 0
        with pytest.raises(ValidationError, match="non-negative"):
            validate_offset(-1)

    def test_days(self):
        assert validate_days(14) == 14
        with pytest.raises(ValidationError, match="lookback must be at least 1"):
            validate_days(0, "lookback")
        with pytest.raises(ValidationError):
            validate_days(366)


class TestBatching:
    """Tests for batching helpers"""

    def test_chunked(self):
        assert list(chunked(range(5), 2)) == [[0, 1], [2, 3], [4]]

    def test_chunked_empty(self):
        assert list(chunked([], 3)) == []

    @pytest.mark.parametrize("size", [0, -1])
    def test_chunked_rejects_bad_size(self, size):
        with pytest.raises(ValueError):
            list(chunked([1], size))

    def test_unique_in_order(self):
        assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @given(st.lists(st.integers()), st.integers(min_value=1, max_value=10))
    def test_property_chunks_cover_input(self, items, size):
        """Property test: chunks are bounded and preserve every item in order"""
        chunks = list(chunked(items, size))

        assert all(1 <= len(c) <= size for c in chunks)
        assert [x for c in chunks for x in c] == items
