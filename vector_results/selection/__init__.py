"""Selection management."""

from vector_results.selection.selection_set import SelectionSet

__all__ = ["SelectionSet"]
