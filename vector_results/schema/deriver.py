"""Derive the results table column schema from observed attribute fields.

Columns are an append-only ordered tuple: the two system columns first,
then one attribute column per field name in the order the field was first
seen. An attribute field named like a system column (``score``, ``element``)
gets its own attribute column next to the system one. Every function here
is pure and returns a new tuple.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace

from vector_results.models.results import SYSTEM_COLUMN_NAMES, ColumnConfig, ColumnOrigin

VisibilityLookup = Callable[[str, bool], bool]

Columns = tuple[ColumnConfig, ...]


def visibility_key(name: str, origin: ColumnOrigin) -> str:
    """Preference key for a column's persisted visibility.

    Attribute columns that share a system column's name are stored under
    ``attribute:<name>`` so the two never hide each other.
    """
    if origin == "attribute" and name in SYSTEM_COLUMN_NAMES:
        return f"attribute:{name}"
    return name


def default_columns(lookup: VisibilityLookup | None = None) -> Columns:
    """The permanent system columns with their persisted visibility."""
    return tuple(
        ColumnConfig(
            name=name,
            visible=lookup(name, True) if lookup else True,
            origin="system",
        )
        for name in SYSTEM_COLUMN_NAMES
    )


def derive_columns(
    columns: Iterable[ColumnConfig],
    field_names: Iterable[str],
    lookup: VisibilityLookup | None = None,
) -> Columns:
    """Append an attribute column for every field name without one.

    Existing columns, including ones no cached element carries any more,
    are kept untouched.

    Args:
        columns: Current columns
        field_names: Every field name in the currently known attributes
        lookup: Persisted visibility for ``(key, default)``; defaults to visible

    Returns:
        The grown column tuple
    """
    derived = list(columns)
    known = {column.name for column in derived if not column.is_system}
    for name in field_names:
        if name in known:
            continue
        known.add(name)
        key = visibility_key(name, "attribute")
        derived.append(
            ColumnConfig(
                name=name,
                visible=lookup(key, True) if lookup else True,
                origin="attribute",
            )
        )
    return tuple(derived)


def set_column_visibility(
    columns: Iterable[ColumnConfig],
    name: str,
    visible: bool,
    origin: ColumnOrigin | None = None,
) -> Columns:
    """Set the stored visibility of matching columns; unknown names are ignored.

    ``origin`` narrows the match when an attribute shares a system column's name.
    """
    return tuple(
        replace(column, visible=visible) if _matches(column, name, origin) else column
        for column in columns
    )


def set_attribute_columns_visibility(columns: Iterable[ColumnConfig], visible: bool) -> Columns:
    """Show or hide every attribute column at once."""
    return tuple(
        column if column.is_system else replace(column, visible=visible)
        for column in columns
    )


def system_columns(columns: Iterable[ColumnConfig]) -> Columns:
    return tuple(column for column in columns if column.is_system)


def attribute_columns(columns: Iterable[ColumnConfig]) -> Columns:
    return tuple(column for column in columns if not column.is_system)


def find_column(
    columns: Iterable[ColumnConfig],
    name: str,
    origin: ColumnOrigin | None = None,
) -> ColumnConfig | None:
    """First column called ``name``, optionally restricted to one origin."""
    for column in columns:
        if _matches(column, name, origin):
            return column
    return None


def _matches(column: ColumnConfig, name: str, origin: ColumnOrigin | None) -> bool:
    return column.name == name and (origin is None or column.origin == origin)
