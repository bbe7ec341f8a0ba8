"""Persisted display preferences for the results table."""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from vector_results.config import Settings, get_settings
from vector_results.models.diagnostics import DisplaySettings

logger = logging.getLogger(__name__)


@runtime_checkable
class VisibilityPreferenceStore(Protocol):
    """Capability the engine uses to read and persist column visibility."""

    def get(self, name: str, default: bool) -> bool: ...

    def set(self, name: str, visible: bool) -> None: ...

    def load_display_settings(self) -> DisplaySettings: ...

    def save_display_settings(self, settings: DisplaySettings) -> None: ...


class InMemoryPreferenceStore:
    """Preference store kept in process memory."""

    def __init__(self, settings: DisplaySettings | None = None):
        self._settings = settings or DisplaySettings()

    def get(self, name: str, default: bool) -> bool:
        return self._settings.column_visibility.get(name, default)

    def set(self, name: str, visible: bool) -> None:
        self._settings.column_visibility[name] = visible

    def load_display_settings(self) -> DisplaySettings:
        return self._settings.model_copy(deep=True)

    def save_display_settings(self, settings: DisplaySettings) -> None:
        self._settings = settings.model_copy(deep=True)


class JsonFilePreferenceStore:
    """Preference store backed by a JSON file.

    The file is read once on construction. Writes are fire-and-forget: an
    I/O failure is logged and the in-memory copy stays authoritative for
    the rest of the session.
    """

    def __init__(self, path: Path | str, defaults: DisplaySettings | None = None):
        """Initialize the store.

        Args:
            path: JSON file holding the display settings
            defaults: Settings used when the file is missing or unreadable
        """
        self.path = Path(path)
        self._defaults = defaults or DisplaySettings()
        self._settings = self._read()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "JsonFilePreferenceStore":
        """Create a store at the configured path with configured defaults."""
        settings = settings or get_settings()
        defaults = DisplaySettings(
            show_attributes=settings.show_attributes_default,
            show_only_filtered_attributes=settings.show_only_filtered_attributes_default,
        )
        return cls(settings.preferences_path, defaults=defaults)

    def _read(self) -> DisplaySettings:
        if not self.path.exists():
            return self._defaults.model_copy(deep=True)
        try:
            return DisplaySettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable preferences file '{self.path}': {e}")
            return self._defaults.model_copy(deep=True)

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self._settings.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to persist preferences to '{self.path}': {e}")

    def get(self, name: str, default: bool) -> bool:
        return self._settings.column_visibility.get(name, default)

    def set(self, name: str, visible: bool) -> None:
        self._settings.column_visibility[name] = visible
        self._write()

    def load_display_settings(self) -> DisplaySettings:
        return self._settings.model_copy(deep=True)

    def save_display_settings(self, settings: DisplaySettings) -> None:
        self._settings = settings.model_copy(deep=True)
        self._write()
