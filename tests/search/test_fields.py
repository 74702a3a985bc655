"""Tests for the projects index schema."""

import pytest

from projectsearch.search.indexing.fields import (
    PROJECT_SCHEMA,
    FieldConfiguration,
    FieldDefinition,
    FieldType,
)


class TestFieldDefinition:
    def test_weighted_name_with_boost(self):
        field = FieldDefinition("name", FieldType.TEXT, "stemming", boost=2)

        assert field.weighted_name == "name^2"

    def test_weighted_name_without_boost(self):
        assert FieldDefinition("homepage", FieldType.TEXT).weighted_name == "homepage"

    def test_fractional_boost(self):
        field = FieldDefinition("x", FieldType.TEXT, boost=1.5)

        assert field.weighted_name == "x^1.5"


class TestProjectSchema:
    """Test the default field table."""

    def test_scored_fields_in_table_order(self):
        assert PROJECT_SCHEMA.scored_fields() == [
            "name",
            "exact_name",
            "extra_searchable_names",
            "repo_name",
            "description",
            "homepage",
            "language",
            "keywords_array",
            "normalized_licenses",
            "platform",
        ]

    def test_boosted_fields(self):
        weighted = PROJECT_SCHEMA.weighted_fields()

        assert [f for f in weighted if "^" in f] == [
            "name^2",
            "exact_name^2",
            "extra_searchable_names^2",
        ]

    def test_status_is_not_scored(self):
        assert "status" in PROJECT_SCHEMA
        assert "status" not in PROJECT_SCHEMA.scored_fields()
        assert PROJECT_SCHEMA.get_analyzer("status") == "exact"

    def test_facet_fields(self):
        assert PROJECT_SCHEMA.facet_fields() == [
            "language",
            "keywords_array",
            "normalized_licenses",
            "platform",
        ]

    def test_numeric_and_date_fields(self):
        assert PROJECT_SCHEMA.numeric_fields() == [
            "rank",
            "stars",
            "dependents_count",
            "dependent_repos_count",
            "contributions_count",
        ]
        assert PROJECT_SCHEMA.date_fields() == [
            "created_at",
            "updated_at",
            "latest_release_published_at",
        ]

    def test_unknown_field(self):
        assert PROJECT_SCHEMA.get_field("nope") is None
        assert PROJECT_SCHEMA.get_analyzer("nope") is None

    def test_schema_is_read_only(self):
        with pytest.raises(TypeError):
            PROJECT_SCHEMA.fields["extra"] = FieldDefinition("extra", FieldType.TEXT)


class TestMapping:
    def test_mapping_types(self):
        properties = PROJECT_SCHEMA.mapping()["properties"]

        assert properties["name"] == {"type": "text", "analyzer": "snowball"}
        assert properties["repo_name"] == {"type": "text"}
        assert properties["exact_name"] == {"type": "keyword"}
        assert properties["created_at"] == {"type": "date"}
        assert properties["rank"] == {"type": "integer"}

    def test_custom_schema(self):
        schema = FieldConfiguration((FieldDefinition("title", FieldType.TEXT),))

        assert schema.mapping() == {"properties": {"title": {"type": "text"}}}
        assert schema.scored_fields() == []
