"""Tests for the column schema deriver."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from vector_results.models.results import ColumnConfig
from vector_results.schema.deriver import (
    attribute_columns,
    default_columns,
    derive_columns,
    find_column,
    set_attribute_columns_visibility,
    set_column_visibility,
    system_columns,
    visibility_key,
)


def names(columns):
    return [column.name for column in columns]


class TestDefaultColumns:
    """Tests for the permanent system columns."""

    def test_system_columns_first(self):
        columns = default_columns()

        assert names(columns) == ["element", "score"]
        assert all(column.origin == "system" for column in columns)
        assert all(column.visible for column in columns)

    def test_visibility_from_lookup(self):
        columns = default_columns(lambda name, default: name != "score")

        assert find_column(columns, "score").visible is False
        assert find_column(columns, "element").visible is True


class TestDeriveColumns:
    """Tests for append-only column derivation."""

    def test_appends_new_fields_in_order(self):
        columns = derive_columns(default_columns(), ["color", "size"])

        assert names(columns) == ["element", "score", "color", "size"]
        assert [column.origin for column in attribute_columns(columns)] == ["attribute", "attribute"]

    def test_existing_columns_untouched(self):
        columns = set_column_visibility(derive_columns(default_columns(), ["color"]), "color", False)

        grown = derive_columns(columns, ["color", "size"], lambda name, default: True)

        assert find_column(grown, "color").visible is False
        assert names(grown) == ["element", "score", "color", "size"]

    def test_never_removes_columns(self):
        columns = derive_columns(default_columns(), ["color", "size"])

        assert names(derive_columns(columns, [])) == names(columns)

    def test_new_column_visibility_from_lookup(self):
        hidden = {"secret"}

        columns = derive_columns(
            default_columns(), ["secret", "public"], lambda name, default: name not in hidden
        )

        assert find_column(columns, "secret").visible is False
        assert find_column(columns, "public").visible is True

    def test_duplicate_field_names_added_once(self):
        columns = derive_columns(default_columns(), ["a", "a", "b"])

        assert names(columns) == ["element", "score", "a", "b"]

    @pytest.mark.parametrize("name", ["element", "score"])
    def test_field_named_like_system_column_gets_own_column(self, name):
        columns = derive_columns(default_columns(), [name, "color"])

        assert [(column.name, column.origin) for column in columns] == [
            ("element", "system"),
            ("score", "system"),
            (name, "attribute"),
            ("color", "attribute"),
        ]
        assert derive_columns(columns, [name]) == columns

    def test_shadowing_column_uses_own_preference(self):
        hidden = {"attribute:score"}

        columns = derive_columns(
            default_columns(), ["score"], lambda key, default: key not in hidden
        )

        assert find_column(columns, "score").visible is True
        assert find_column(columns, "score", "attribute").visible is False


class TestVisibilityUpdates:
    """Tests for local visibility updates."""

    def test_set_column_visibility(self):
        columns = derive_columns(default_columns(), ["color"])

        updated = set_column_visibility(columns, "color", False)

        assert find_column(updated, "color").visible is False
        # Input tuple is not modified
        assert find_column(columns, "color").visible is True

    def test_unknown_column_ignored(self):
        columns = default_columns()

        assert set_column_visibility(columns, "missing", False) == columns

    def test_origin_narrows_the_match(self):
        columns = derive_columns(default_columns(), ["score"])

        updated = set_column_visibility(columns, "score", False, "attribute")

        assert find_column(updated, "score", "system").visible is True
        assert find_column(updated, "score", "attribute").visible is False

    def test_visibility_keys(self):
        assert visibility_key("score", "system") == "score"
        assert visibility_key("score", "attribute") == "attribute:score"
        assert visibility_key("color", "attribute") == "color"

    def test_set_all_attribute_columns(self):
        columns = derive_columns(default_columns(), ["a", "b"])

        hidden = set_attribute_columns_visibility(columns, False)

        assert all(column.visible for column in system_columns(hidden))
        assert not any(column.visible for column in attribute_columns(hidden))


@settings(max_examples=100, deadline=None)
@given(
    batches=st.lists(
        st.lists(st.from_regex(r"[a-z_][a-z0-9_]{0,8}", fullmatch=True), max_size=6),
        max_size=8,
    )
)
def test_columns_only_grow(batches):
    """Once a field name has been seen it keeps a column, whatever arrives later."""
    columns = default_columns()
    seen: list[str] = []
    for field_names in batches:
        previous = names(columns)
        columns = derive_columns(columns, field_names)
        seen.extend(field_names)

        assert names(columns)[: len(previous)] == previous
        assert names(columns)[:2] == ["element", "score"]
        assert set(seen) <= set(names(columns))
        keys = [(column.name, column.origin) for column in columns]
        assert len(keys) == len(set(keys))


def test_column_config_defaults():
    column = ColumnConfig(name="color")

    assert column.visible is True
    assert column.is_system is False
