"""Pytest configuration and shared fixtures."""

import asyncio
import json

import pytest

from vector_results.config import Settings
from vector_results.errors import TransportError
from vector_results.models.commands import AttributeBatch, MetadataBatch
from vector_results.storage.preferences import InMemoryPreferenceStore


class FakeStore:
    """In-process stand-in for the bulk command endpoints.

    Records every batch it receives. ``gate`` lets a test hold a fetch open
    while it changes state, ``error`` makes the next calls fail.
    """

    def __init__(self, attributes: dict[str, dict | str | None] | None = None):
        self.attributes = attributes or {}
        self.metadata: dict[str, dict] = {}
        self.batches: list[AttributeBatch] = []
        self.metadata_batches: list[MetadataBatch] = []
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None

    def _payload(self, element: str) -> str | None:
        value = self.attributes.get(element)
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)

    async def fetch_attributes(self, batch: AttributeBatch) -> list[str | None]:
        self.batches.append(batch)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [self._payload(element) for element in batch.elements]

    async def fetch_metadata(self, batch: MetadataBatch) -> list[dict]:
        self.metadata_batches.append(batch)
        if self.error is not None:
            raise self.error
        return [self.metadata.get(key_name, {}) for key_name in batch.key_names]


class FailingPreferenceStore(InMemoryPreferenceStore):
    """Preference store whose writes always fail."""

    def set(self, name: str, visible: bool) -> None:
        raise OSError("preferences are read-only")


@pytest.fixture
def fake_store():
    """Fake store preloaded with heterogeneous attributes."""
    return FakeStore(
        {
            "e1": {"color": "red", "size": 3},
            "e2": {"color": "blue", "tags": ["a", "b"]},
            "e3": None,
            "e4": "not json",
            "e5": {"size": 7.0, "active": True},
        }
    )


@pytest.fixture
def preferences():
    """Empty in-memory preference store."""
    return InMemoryPreferenceStore()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, preferences_path=tmp_path / "settings.json")


@pytest.fixture
def transport_error():
    return TransportError("connection refused")
