"""Dynamic column schema."""

from vector_results.schema.deriver import (
    Columns,
    VisibilityLookup,
    attribute_columns,
    default_columns,
    derive_columns,
    find_column,
    set_attribute_columns_visibility,
    set_column_visibility,
    system_columns,
    visibility_key,
)

__all__ = [
    "Columns",
    "VisibilityLookup",
    "attribute_columns",
    "default_columns",
    "derive_columns",
    "find_column",
    "set_attribute_columns_visibility",
    "set_column_visibility",
    "system_columns",
    "visibility_key",
]
