"""Result view pipeline."""

from vector_results.pipeline.result_view import (
    apply,
    filter_results,
    next_sort_state,
    sort_results,
)

__all__ = [
    "apply",
    "filter_results",
    "next_sort_state",
    "sort_results",
]
