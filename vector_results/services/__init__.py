"""Service layer for the results view."""

from vector_results.services.results_service import (
    ATTRIBUTE_LOAD_ERROR,
    ResultsViewService,
    SingleAttributeCommit,
)

__all__ = [
    "ATTRIBUTE_LOAD_ERROR",
    "ResultsViewService",
    "SingleAttributeCommit",
]
