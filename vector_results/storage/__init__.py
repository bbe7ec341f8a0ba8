"""Preference storage components."""

from vector_results.storage.preferences import (
    InMemoryPreferenceStore,
    JsonFilePreferenceStore,
    VisibilityPreferenceStore,
)

__all__ = [
    "InMemoryPreferenceStore",
    "JsonFilePreferenceStore",
    "VisibilityPreferenceStore",
]
