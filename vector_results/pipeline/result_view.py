"""Free-text filtering and single-column sorting of raw results.

Element sorting collates with ``locale.strxfrm`` and so follows the
process's ``LC_COLLATE``. Setting the locale is process-wide and left to
the host application; under the default ``C`` locale the order is plain
code point order of the case-folded ids.
"""

import locale
from collections.abc import Iterable

from vector_results.models.results import ResultRow, SortColumn, SortState


def _element_sort_key(row: ResultRow) -> tuple[str, str]:
    # Case-insensitive locale collation first, exact collation breaks ties
    return locale.strxfrm(row.element.casefold()), locale.strxfrm(row.element)


def filter_results(results: Iterable[ResultRow], filter_text: str | None) -> list[ResultRow]:
    """Keep rows whose element contains ``filter_text``, ignoring case."""
    rows = list(results)
    if not filter_text or not filter_text.strip():
        return rows
    needle = filter_text.casefold()
    return [row for row in rows if needle in row.element.casefold()]


def sort_results(results: Iterable[ResultRow], sort_state: SortState) -> list[ResultRow]:
    """Sort rows by the active column; ``"none"`` keeps the given order."""
    rows = list(results)
    if not sort_state.is_active:
        return rows

    reverse = sort_state.direction == "desc"
    if sort_state.column == "element":
        return sorted(rows, key=_element_sort_key, reverse=reverse)
    return sorted(rows, key=lambda row: row.score, reverse=reverse)


def apply(
    raw_results: Iterable[ResultRow],
    filter_text: str | None,
    sort_state: SortState,
) -> list[ResultRow]:
    """Filter then sort raw results into the order shown to the user.

    Args:
        raw_results: Rows in upstream insertion order
        filter_text: Free-text element filter, applied when non-blank
        sort_state: Active sort

    Returns:
        New list; the input is never reordered in place
    """
    return sort_results(filter_results(raw_results, filter_text), sort_state)


def next_sort_state(state: SortState, column: SortColumn) -> SortState:
    """Advance the asc -> desc -> none cycle for a header click."""
    if column == "none":
        return SortState()
    if state.column != column:
        return SortState(column=column, direction="asc")
    if state.direction == "asc":
        return SortState(column=column, direction="desc")
    return SortState()
