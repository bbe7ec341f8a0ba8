"""Field references in filter expressions and the filtered-only column overlay."""

import json
import re
from collections.abc import Callable, Iterable
from dataclasses import replace

from vector_results.models.results import AttributeValue, ColumnConfig, ParsedAttributes, ResultRow

# Field references look like ``.name`` inside an expression such as
# ``.color == "red" and .size > 3``
FIELD_REFERENCE_PATTERN = re.compile(r"\.([A-Za-z_][A-Za-z0-9_]*)")

ARRAY_PLACEHOLDER = "[...]"


def extract_filter_fields(expression: str | None) -> list[str]:
    """Return referenced field names, de-duplicated in order of first use.

    Args:
        expression: Structured filter expression, possibly empty

    Returns:
        Field names without the leading marker
    """
    if not expression:
        return []
    return list(dict.fromkeys(FIELD_REFERENCE_PATTERN.findall(expression)))


def is_override_active(
    show_attributes: bool,
    filtered_only: bool,
    fields: Iterable[str],
) -> bool:
    """True while filtered-only mode actually restricts attribute columns."""
    return show_attributes and filtered_only and bool(list(fields))


def apply_visibility_override(
    columns: Iterable[ColumnConfig],
    fields: Iterable[str],
    *,
    show_attributes: bool,
    filtered_only: bool,
) -> tuple[ColumnConfig, ...]:
    """Compute effective column visibility.

    System columns keep their stored visibility. Attribute columns are
    hidden when attribute display is off, shown iff referenced by the filter
    while the filtered-only override is active, and otherwise keep their
    stored visibility. The input columns are not modified.
    """
    fields = list(fields)
    referenced = set(fields)
    override = is_override_active(show_attributes, filtered_only, fields)

    effective = []
    for column in columns:
        if column.is_system:
            effective.append(column)
        elif not show_attributes:
            effective.append(replace(column, visible=False))
        elif override:
            effective.append(replace(column, visible=column.name in referenced))
        else:
            effective.append(column)
    return tuple(effective)


def format_attribute_value(value: AttributeValue) -> str:
    """Render one attribute value as a table cell string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ARRAY_PLACEHOLDER
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def compute_filtered_field_values(
    rows: Iterable[ResultRow],
    parsed_lookup: Callable[[str], ParsedAttributes | None],
    fields: Iterable[str],
) -> dict[str, dict[str, str]]:
    """Display value of every referenced field for every row.

    Args:
        rows: Result rows to compute values for
        parsed_lookup: Parsed attributes of an element, or None
        fields: Referenced field names

    Returns:
        ``{element: {field: display string}}``; absent values are ``""``
    """
    fields = list(fields)
    if not fields:
        return {}

    values: dict[str, dict[str, str]] = {}
    for row in rows:
        attributes = parsed_lookup(row.element) or {}
        values[row.element] = {
            name: format_attribute_value(attributes.get(name)) for name in fields
        }
    return values
