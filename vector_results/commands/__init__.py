"""Bulk command construction."""

from vector_results.commands.batcher import (
    build_attribute_batch,
    build_metadata_batch,
    validate_key_name,
    zip_results,
)

__all__ = [
    "build_attribute_batch",
    "build_metadata_batch",
    "validate_key_name",
    "zip_results",
]
