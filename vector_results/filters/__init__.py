"""Filter expression field handling."""

from vector_results.filters.field_filter import (
    apply_visibility_override,
    compute_filtered_field_values,
    extract_filter_fields,
    format_attribute_value,
    is_override_active,
)

__all__ = [
    "apply_visibility_override",
    "compute_filtered_field_values",
    "extract_filter_fields",
    "format_attribute_value",
    "is_override_active",
]
