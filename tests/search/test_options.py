"""Tests for typed search options."""

import logging

import msgspec
import pytest

from projectsearch.search.options import (
    DEFAULT_FACET_LIMIT,
    DEFAULT_PER_PAGE,
    SearchOptions,
    normalize_filters,
    split_values,
)


class TestDefaults:
    def test_documented_defaults(self):
        options = SearchOptions()

        assert options.filters == {}
        assert options.sort is None
        assert options.order is None
        assert options.facet_limit == DEFAULT_FACET_LIMIT == 36
        assert options.prefix is False
        assert options.api is False
        assert options.page == 1
        assert options.per_page == DEFAULT_PER_PAGE == 30

    def test_options_are_immutable(self):
        options = SearchOptions()

        with pytest.raises(AttributeError):
            options.page = 2


class TestSplitValues:
    """Test filter value splitting."""

    def test_comma_joined_string(self):
        assert split_values("Ruby, Python") == ("Python", "Ruby")

    def test_list_of_strings(self):
        assert split_values(["MIT", "Apache-2.0,MIT"]) == ("Apache-2.0", "MIT")

    def test_numeric_scalars(self):
        assert split_values(5) == ("5",)
        assert split_values([5, "7"]) == ("5", "7")

    @pytest.mark.parametrize("value", [None, "", " , ", [], [""]])
    def test_blank_values(self, value):
        assert split_values(value) == ()


class TestNormalizeFilters:
    def test_drops_empty_fields(self):
        assert normalize_filters({"language": "", "platform": "NPM"}) == {
            "platform": ("NPM",)
        }

    def test_orders_fields_by_name(self):
        normalized = normalize_filters({"platform": "NPM", "language": "Go"})

        assert list(normalized) == ["language", "platform"]

    def test_none(self):
        assert normalize_filters(None) == {}

    def test_json_decoded_numbers(self):
        assert normalize_filters({"stars": 5}) == {"stars": ("5",)}


class TestFromParams:
    """Test parsing of loosely typed transport parameters."""

    def test_full_parameters(self):
        options = SearchOptions.from_params(
            {
                "filters": {"language": "Ruby,Python"},
                "sort": "stars",
                "order": "asc",
                "facet_limit": "10",
                "prefix": "true",
                "api": "0",
                "page": "2",
                "per_page": 50,
            }
        )

        assert options == SearchOptions(
            filters={"language": ("Python", "Ruby")},
            sort="stars",
            order="asc",
            facet_limit=10,
            prefix=True,
            api=False,
            page=2,
            per_page=50,
        )

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("true", True),
            ("TRUE", True),
            ("1", True),
            ("yes", True),
            ("on", True),
            ("false", False),
            ("0", False),
            ("", False),
            (True, True),
            (None, False),
        ],
    )
    def test_bool_like_values(self, value, expected):
        assert SearchOptions.from_params({"prefix": value}).prefix is expected

    def test_blank_sort_is_none(self):
        assert SearchOptions.from_params({"sort": ""}).sort is None

    def test_non_numeric_falls_back_to_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            options = SearchOptions.from_params({"facet_limit": "many"})

        assert options.facet_limit == DEFAULT_FACET_LIMIT
        assert "facet_limit" in caplog.text

    def test_empty_params(self):
        assert SearchOptions.from_params(None) == SearchOptions()


class TestCacheKey:
    """Cache keys are structural, not string-stripped."""

    def test_equal_options_share_key(self):
        first = SearchOptions(filters={"language": "Ruby,Python"})
        second = SearchOptions(filters={"language": ["Python", "Ruby"]})

        assert first.cache_key() == second.cache_key()

    def test_distinct_options_get_distinct_keys(self):
        """Values that only differ in punctuation stay distinct."""
        first = SearchOptions(filters={"keywords_array": "c++"})
        second = SearchOptions(filters={"keywords_array": "c"})

        assert first.cache_key() != second.cache_key()

    def test_field_boundaries_are_unambiguous(self):
        first = SearchOptions(filters={"ab": "c"})
        second = SearchOptions(filters={"a": "bc"})

        assert first.cache_key() != second.cache_key()

    def test_prefix(self):
        key = SearchOptions().cache_key("search")

        assert key.startswith("search:")
        assert len(key.split(":", 1)[1]) == 64

    def test_normalized_encodes_deterministically(self):
        options = SearchOptions(filters={"platform": "NPM", "language": "Go"})

        assert msgspec.json.encode(options.normalized()) == msgspec.json.encode(
            options.normalized()
        )
