"""Result, column and sort models shared by the view pipeline."""

from dataclasses import dataclass, field
from typing import Any, Literal

SortColumn = Literal["element", "score", "none"]
SortDirection = Literal["asc", "desc"]
ColumnOrigin = Literal["system", "attribute"]

AttributeValue = str | int | float | bool | list[Any] | dict[str, Any] | None
ParsedAttributes = dict[str, AttributeValue]

SYSTEM_COLUMN_NAMES: tuple[str, ...] = ("element", "score")


@dataclass(frozen=True)
class ResultRow:
    """A scored element returned by a vector similarity query.

    Attributes:
        element: Unique element identifier within the vector set
        score: Similarity score reported by the index
    """

    element: str
    score: float

    @classmethod
    def from_tuple(cls, row: tuple[str, float] | list[Any]) -> "ResultRow":
        """Build a row from an ``(element, score)`` pair."""
        element, score = row[0], row[1]
        return cls(element=str(element), score=float(score))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {"element": self.element, "score": self.score}


@dataclass(frozen=True)
class ColumnConfig:
    """A table column and its stored (user or persisted) visibility."""

    name: str
    visible: bool = True
    origin: ColumnOrigin = "attribute"

    @property
    def is_system(self) -> bool:
        return self.origin == "system"


@dataclass(frozen=True)
class SortState:
    """Active single-column sort. ``column == "none"`` means insertion order."""

    column: SortColumn = "none"
    direction: SortDirection = "asc"

    @property
    def is_active(self) -> bool:
        return self.column != "none"


@dataclass
class RenderRow:
    """A fully resolved table row ready for rendering.

    Attributes:
        element: Element identifier
        score: Similarity score
        selected: Whether the element is in the selection set
        cells: Display string per visible attribute column
        has_attributes: Whether parsed attributes are cached for the element
    """

    element: str
    score: float
    selected: bool = False
    cells: dict[str, str] = field(default_factory=dict)
    has_attributes: bool = False
