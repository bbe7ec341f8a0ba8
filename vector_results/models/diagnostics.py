"""Diagnostic and persisted display settings models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class DiagnosticKind(str, Enum):
    """Kind of recoverable failure recorded while loading attributes."""

    PARSE = "parse"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    PREFERENCES = "preferences"


class AttributeDiagnostic(BaseModel):
    """A recoverable failure surfaced to the rendering layer."""

    kind: DiagnosticKind
    message: str
    element: str | None = Field(default=None, description="Element the failure is isolated to")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class DisplaySettings(BaseModel):
    """Persisted display preferences for the results table."""

    show_attributes: bool = True
    show_only_filtered_attributes: bool = False
    column_visibility: dict[str, bool] = Field(default_factory=dict)
