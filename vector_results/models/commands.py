"""Bulk command request models for the remote vector store."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AttributeBatch(BaseModel):
    """One bulk ``VGETATTR`` request covering many elements of one key."""

    model_config = ConfigDict(frozen=True)

    key_name: str = Field(serialization_alias="keyName", description="Vector set key")
    elements: list[str] = Field(min_length=1, description="Elements to look up, in order")
    return_command_only: bool = Field(
        default=False,
        serialization_alias="returnCommandOnly",
        description="Build the commands without executing them",
    )

    @property
    def commands(self) -> list[list[str]]:
        """One ``VGETATTR`` sub-command per element, in input order."""
        return [["VGETATTR", self.key_name, element] for element in self.elements]

    @property
    def identifiers(self) -> list[str]:
        return list(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def to_payload(self) -> dict[str, Any]:
        """Request body understood by the command API."""
        return self.model_dump(by_alias=True)


class MetadataBatch(BaseModel):
    """One bulk ``VINFO`` request covering many keys."""

    model_config = ConfigDict(frozen=True)

    key_names: list[str] = Field(
        min_length=1, serialization_alias="keyNames", description="Keys to describe, in order"
    )
    return_command_only: bool = Field(
        default=False,
        serialization_alias="returnCommandOnly",
        description="Build the commands without executing them",
    )

    @property
    def commands(self) -> list[list[str]]:
        """One ``VINFO`` sub-command per key name, in input order."""
        return [["VINFO", key_name] for key_name in self.key_names]

    @property
    def identifiers(self) -> list[str]:
        return list(self.key_names)

    def __len__(self) -> int:
        return len(self.key_names)

    def to_payload(self) -> dict[str, Any]:
        """Request body understood by the command API."""
        return self.model_dump(by_alias=True)


class CommandResponse(BaseModel):
    """Envelope returned by the command API for bulk commands."""

    success: bool
    result: Any = None
    error: str | None = None
