"""Models for the vector results view engine."""

from vector_results.models.commands import (
    AttributeBatch,
    CommandResponse,
    MetadataBatch,
)
from vector_results.models.diagnostics import (
    AttributeDiagnostic,
    DiagnosticKind,
    DisplaySettings,
)
from vector_results.models.results import (
    SYSTEM_COLUMN_NAMES,
    AttributeValue,
    ColumnConfig,
    ParsedAttributes,
    RenderRow,
    ResultRow,
    SortColumn,
    SortDirection,
    SortState,
)

__all__ = [
    # Result models
    "ResultRow",
    "RenderRow",
    "ColumnConfig",
    "SortState",
    "SortColumn",
    "SortDirection",
    "AttributeValue",
    "ParsedAttributes",
    "SYSTEM_COLUMN_NAMES",
    # Command models
    "AttributeBatch",
    "MetadataBatch",
    "CommandResponse",
    # Diagnostics and settings
    "AttributeDiagnostic",
    "DiagnosticKind",
    "DisplaySettings",
]
