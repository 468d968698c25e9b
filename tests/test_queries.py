"""
Tests for sort expression compiling and pagination helpers.
"""

import pytest
from types import SimpleNamespace

from budget_ledger.accounts import ACCOUNT_SORT_FIELDS
from budget_ledger.errors import InvalidDirectionError, InvalidFieldError, ValidationError
from budget_ledger.queries import (
    SortDirection,
    SortKey,
    apply_sort,
    build_pageable,
    compile_sort,
    format_sort,
    paginate,
    resolve_limit,
)


class TestCompileSort:
    """Tests for compile_sort."""

    def test_primary_key_first(self):
        """Test that token order is preserved and direction defaults to asc."""
        keys = compile_sort("budget:asc,name", {"name", "budget"})
        assert keys == [("budget", "asc"), ("name", "asc")]
        assert keys[0] == SortKey("budget", SortDirection.ASC)

    def test_unknown_field(self):
        """Test that a non-whitelisted field is rejected."""
        with pytest.raises(InvalidFieldError) as exc_info:
            compile_sort("unknownField", {"name"})
        assert exc_info.value.code == "2006"

    def test_unknown_direction(self):
        """Test that a direction other than asc/desc is rejected."""
        with pytest.raises(InvalidDirectionError) as exc_info:
            compile_sort("name:up", {"name"})
        assert exc_info.value.code == "2008"

    def test_empty_direction_is_invalid(self):
        """Test that a trailing colon counts as a bad direction."""
        with pytest.raises(InvalidDirectionError):
            compile_sort("name:", {"name"})

    @pytest.mark.parametrize("expression", [None, "", "   ", ",,"])
    def test_empty_expression(self, expression):
        """Test that an empty expression means no sort."""
        assert compile_sort(expression, {"name"}) == []

    def test_direction_case_insensitive(self):
        """Test that DESC and Desc are accepted."""
        assert compile_sort("name:DESC, budget:Asc", {"name", "budget"}) == [
            ("name", "desc"),
            ("budget", "asc"),
        ]

    def test_whitespace_around_tokens(self):
        """Test that spaces around fields and directions are ignored."""
        assert compile_sort(" name : desc ", {"name"}) == [("name", "desc")]

    def test_snake_case_alias(self):
        """Test that snake_case spellings map onto API names."""
        keys = compile_sort("is_favorite:desc,currentBalance", ACCOUNT_SORT_FIELDS)
        assert keys == [("isFavorite", "desc"), ("currentBalance", "asc")]

    def test_repeated_fields_kept(self):
        """Test that repeated fields are not de-duplicated."""
        keys = compile_sort("name:desc,name:asc", {"name"})
        assert keys == [("name", "desc"), ("name", "asc")]

    def test_format_sort(self):
        """Test the log-friendly rendering of compiled keys."""
        assert format_sort(compile_sort("budget,name:desc", {"name", "budget"})) == "budget:asc,name:desc"


class TestApplySort:
    """Tests for apply_sort."""

    def setup_method(self):
        self.items = [
            SimpleNamespace(label="a", budget=300, is_favorite=False),
            SimpleNamespace(label="b", budget=100, is_favorite=True),
            SimpleNamespace(label="c", budget=300, is_favorite=True),
            SimpleNamespace(label="d", budget=None, is_favorite=False),
        ]

    def labels(self, items):
        return [item.label for item in items]

    def test_single_key_ascending(self):
        """Test ascending sort with None last."""
        result = apply_sort(self.items, [SortKey("budget", SortDirection.ASC)])
        assert self.labels(result) == ["b", "a", "c", "d"]

    def test_descending_is_stable(self):
        """Test that ties keep input order when descending."""
        result = apply_sort(
            [item for item in self.items if item.budget is not None],
            [SortKey("budget", SortDirection.DESC)],
        )
        assert self.labels(result) == ["a", "c", "b"]

    def test_multi_key(self):
        """Test that the first key is primary and camelCase names resolve."""
        keys = compile_sort("isFavorite:desc,budget:desc", {"isFavorite", "budget"})
        result = apply_sort(self.items[:3], keys)
        assert self.labels(result) == ["c", "b", "a"]

    def test_repeated_field_first_wins(self):
        """Test that a repeated field never changes the order."""
        items = self.items[:3]
        once = apply_sort(items, compile_sort("budget:desc", {"budget"}))
        twice = apply_sort(items, compile_sort("budget:desc,budget:asc", {"budget"}))
        assert self.labels(once) == self.labels(twice)

    def test_no_keys_keeps_order(self):
        """Test that an empty key list leaves items untouched."""
        assert self.labels(apply_sort(self.items, [])) == ["a", "b", "c", "d"]


class TestPageable:
    """Tests for build_pageable, paginate and resolve_limit."""

    def test_build_pageable_passthrough(self):
        """Test that metadata is echoed unchanged."""
        pageable = build_pageable(limit=2, offset=0, total=5)
        assert (pageable.limit, pageable.offset, pageable.total) == (2, 0, 5)

    def test_offset_beyond_total_is_allowed(self):
        """Test that no clamping happens."""
        pageable = build_pageable(limit=10, offset=50, total=3)
        assert pageable.offset == 50

    @pytest.mark.parametrize("limit,offset", [(-1, 0), (10, -5), (True, 0), (2.5, 0)])
    def test_build_pageable_rejects(self, limit, offset):
        """Test that negative or non-integer values are rejected."""
        with pytest.raises(ValidationError):
            build_pageable(limit=limit, offset=offset, total=5)

    def test_paginate_window(self):
        """Test slicing one window."""
        assert paginate([1, 2, 3, 4, 5], limit=2, offset=2) == [3, 4]

    def test_paginate_out_of_range(self):
        """Test that an out-of-range offset yields an empty page."""
        assert paginate([1, 2, 3], limit=2, offset=10) == []

    def test_paginate_zero_limit(self):
        """Test that limit 0 yields an empty page."""
        assert paginate([1, 2, 3], limit=0, offset=0) == []

    def test_resolve_limit_default(self):
        """Test that a missing limit falls back to the default."""
        assert resolve_limit(None, 20) == 20
        assert resolve_limit(5, 20, 500) == 5

    def test_resolve_limit_maximum(self):
        """Test that limits above the maximum are rejected."""
        with pytest.raises(ValidationError):
            resolve_limit(1000, 20, 500)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
