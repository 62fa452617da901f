"""
Tests for request parsing, filter normalisation and display helpers.
"""

from datetime import datetime

import pytest

from propertyhub.repositories.property import build_filter_conditions
from propertyhub.schemas.blog import BlogListParams, BlogPostWrite
from propertyhub.schemas.property import PropertyCreate, PropertySearchFilters
from propertyhub.schemas.user import split_name
from propertyhub.services.blog import count_terms
from propertyhub.utils.exceptions import MissingFieldsError, ValidationError
from propertyhub.utils.formatting import format_area, format_long_date, format_price, reading_time, slugify
from propertyhub.utils.validators import (
    parse_bool,
    parse_json_list,
    parse_number,
    parse_string_list,
    require_fields,
)


class TestPropertySearchFilters:
    """Test lenient query parsing for the property listing."""

    def test_defaults(self):
        filters = PropertySearchFilters.from_query({})

        assert filters.page == 1
        assert filters.limit == 9
        assert filters.sort_by == "created_at"
        assert filters.sort_order == "desc"
        assert build_filter_conditions(filters) == []

    def test_each_filter_adds_one_predicate(self):
        """Eight recognised parameters give eight predicates."""
        filters = PropertySearchFilters.from_query({
            "type": "villa",
            "status": "for-sale",
            "isOffplan": "false",
            "minPrice": "100",
            "maxPrice": "200",
            "bedrooms": "2",
            "location": "Marina",
            "search": "pool",
        })

        assert len(build_filter_conditions(filters)) == 8
        assert filters.is_offplan is False

    def test_unusable_values_are_dropped(self):
        """Non-numeric, infinite and blank values never become predicates."""
        filters = PropertySearchFilters.from_query({
            "minPrice": "cheap",
            "maxPrice": "inf",
            "bedrooms": "",
            "location": "   ",
            "developerId": "x1",
        })

        assert filters.min_price is None
        assert filters.max_price is None
        assert filters.bedrooms is None
        assert filters.location is None
        assert filters.developer_id is None
        assert build_filter_conditions(filters) == []

    def test_out_of_range_integers_are_dropped(self):
        """Integers too large for the column never reach the query."""
        filters = PropertySearchFilters.from_query({
            "developerId": "1e30",
            "yearBuilt": "1e30",
            "bedrooms": "-1e12",
            "page": "1e20",
        })

        assert filters.developer_id is None
        assert filters.year_built is None
        assert filters.bedrooms is None
        assert filters.page == 1
        assert build_filter_conditions(filters) == []

    @pytest.mark.parametrize("raw,expected", [
        ("0", 9),
        ("-3", 9),
        ("abc", 9),
        ("500", 100),
        ("12", 12),
    ])
    def test_limit_bounds(self, raw, expected):
        assert PropertySearchFilters.from_query({"limit": raw}).limit == expected

    def test_page_and_offset(self):
        filters = PropertySearchFilters.from_query({"page": "3", "limit": "10"})

        assert filters.offset == 20
        assert PropertySearchFilters.from_query({"page": "0"}).page == 1

    def test_sort_field_allow_list(self):
        """camelCase sort names are accepted; unknown ones fall back."""
        assert PropertySearchFilters.from_query({"sortBy": "yearBuilt"}).sort_by == "year_built"
        assert PropertySearchFilters.from_query({"sortBy": "title"}).sort_by == "created_at"
        assert PropertySearchFilters.from_query({"sortOrder": "ASC"}).sort_order == "asc"
        assert PropertySearchFilters.from_query({"sortOrder": "sideways"}).sort_order == "desc"

    def test_echo_uses_query_names(self):
        echo = PropertySearchFilters.from_query({"type": "villa", "page": "2"}).echo()

        assert echo["type"] == "villa"
        assert "page" not in echo
        assert "limit" not in echo


class TestPropertyCreate:

    def test_area_required_only_for_ready_properties(self):
        assert "area" in PropertyCreate.required_fields({})
        assert "area" not in PropertyCreate.required_fields({"isOffplan": "true"})

    def test_defaults_applied(self):
        prop = PropertyCreate.model_validate({
            "title": "T",
            "description": "D",
            "price": "10",
            "location": "L",
            "propertyType": "villa",
        })

        assert prop.status.value == "for-sale"
        assert prop.is_offplan is False
        assert prop.features == []
        assert prop.bedrooms == 0


class TestValidators:
    """Test boundary parsing helpers."""

    @pytest.mark.parametrize("raw,expected", [
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("nan", None),
        ("-inf", None),
        ("", None),
        (None, None),
        (True, None),
        (3, 3.0),
    ])
    def test_parse_number(self, raw, expected):
        assert parse_number(raw) == expected

    def test_parse_bool(self):
        assert parse_bool("Yes") is True
        assert parse_bool("on") is True
        assert parse_bool("false") is False
        assert parse_bool("whatever") is False
        assert parse_bool(None) is None

    def test_require_fields_lists_all_missing(self):
        with pytest.raises(MissingFieldsError) as exc_info:
            require_fields({"title": "x", "content": " "}, ("title", "content", "excerpt"))

        assert exc_info.value.missing_fields == ["content", "excerpt"]
        assert exc_info.value.extra["missingFields"] == ["content", "excerpt"]
        assert exc_info.value.status_code == 400

    def test_string_lists(self):
        assert parse_string_list('["Pool", " Gym ", ""]') == ["Pool", "Gym"]
        assert parse_string_list("Pool, Gym,,") == ["Pool", "Gym"]
        assert parse_string_list(None) == []

    def test_json_list_rejects_objects(self):
        with pytest.raises(ValidationError):
            parse_json_list('{"a": 1}', "features")
        with pytest.raises(ValidationError):
            parse_json_list("[broken", "features")


class TestFormatting:
    """Test display helpers."""

    @pytest.mark.parametrize("value,expected", [
        (1250000, "$1,250,000"),
        (1234.5, "$1,234.5"),
        (99.99, "$99.99"),
        (0, "$0"),
        (None, None),
    ])
    def test_format_price(self, value, expected):
        assert format_price(value) == expected

    def test_format_area(self):
        assert format_area(1200.0) == "1200 sq ft"
        assert format_area(850.5) == "850.5 sq ft"

    def test_slugify(self):
        assert slugify("  Luxury Villa: Palm & Sea!  ") == "luxury-villa-palm-sea"
        assert slugify("") == ""

    def test_reading_time(self):
        assert reading_time("") == "1 min read"
        assert reading_time("word " * 401) == "3 min read"

    def test_long_date(self):
        assert format_long_date(datetime(2024, 3, 5)) == "March 5, 2024"

    def test_split_name(self):
        assert split_name("Amira Al Haddad") == ("Amira", "Al Haddad")
        assert split_name("Cher") == ("Cher", "")
        assert split_name("") == ("", "")


class TestBlogParsing:

    def test_count_terms_orders_by_frequency_then_name(self):
        terms = count_terms(["market", " tips", "", None, "tips", "guides", "market"])

        assert terms == [
            {"name": "market", "count": 2},
            {"name": "tips", "count": 2},
            {"name": "guides", "count": 1},
        ]

    def test_blog_list_params(self):
        params = BlogListParams.model_validate({"featured": "true", "sortBy": "viewCount", "limit": "0"})

        assert params.featured is True
        assert params.sort_by == "view_count"
        assert params.limit == 10

    def test_tags_are_stored_comma_separated(self):
        post = BlogPostWrite.model_validate({
            "title": "T",
            "content": "C",
            "excerpt": "E",
            "tags": '["market", "tips"]',
            "status": "",
        })

        assert post.tags == "market, tips"
        assert post.status.value == "draft"
