"""Multi-selection over the current result view."""

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class SelectionSet:
    """Selected element ids for the current dataset.

    The selection never holds an element that is absent from the latest raw
    result list: :meth:`retain` prunes it whenever new results arrive and
    :meth:`toggle` ignores elements outside that list.
    """

    def __init__(self) -> None:
        self._active = False
        self._selected: set[str] = set()
        self._known: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def active(self) -> bool:
        """Whether selection mode is on."""
        return self._active

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    @property
    def count(self) -> int:
        return len(self._selected)

    def is_selected(self, element: str) -> bool:
        return element in self._selected

    def enter(self) -> None:
        """Turn selection mode on."""
        self._active = True

    def toggle(self, element: str) -> bool:
        """Flip membership of ``element``; returns the new membership."""
        if element not in self._known_set():
            logger.debug(f"Ignoring selection toggle for unknown element '{element}'")
            return False
        if element in self._selected:
            self._selected.discard(element)
            return False
        self._selected.add(element)
        return True

    def select_all(self, visible_elements: Iterable[str]) -> None:
        """Select exactly the elements currently visible after filter and sort."""
        known = self._known_set()
        self._selected = {element for element in visible_elements if element in known}

    def deselect_all(self) -> None:
        self._selected.clear()

    def exit(self) -> None:
        """Leave selection mode and forget the selection."""
        self._selected.clear()
        self._active = False

    def reset(self) -> None:
        """Forget everything; used when the dataset changes."""
        self.exit()
        self._known = []

    def retain(self, elements: Iterable[str]) -> None:
        """Track the latest raw result list and drop selections outside it."""
        self._known = list(dict.fromkeys(elements))
        known = set(self._known)
        dropped = self._selected - known
        if dropped:
            logger.debug(f"Dropped {len(dropped)} selected element(s) no longer in results")
        self._selected &= known

    def take_for_bulk_delete(self) -> list[str]:
        """Return the selection in result order and clear it."""
        chosen = [element for element in self._known if element in self._selected]
        self._selected.clear()
        return chosen

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _known_set(self) -> set[str]:
        return set(self._known)
