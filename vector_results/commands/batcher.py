"""Translate element and key lists into bulk store commands."""

import logging
import unicodedata
from collections.abc import Sequence
from typing import Any

from vector_results.errors import TransportError, ValidationError
from vector_results.models.commands import AttributeBatch, MetadataBatch

logger = logging.getLogger(__name__)

MAX_KEY_NAME_LENGTH = 1024


def validate_key_name(key_name: Any) -> bool:
    """Check whether ``key_name`` is a legal vector set key.

    A legal key is a non-blank string of at most ``MAX_KEY_NAME_LENGTH``
    characters without control characters.

    Args:
        key_name: Candidate key name

    Returns:
        True if the key name can be sent to the store
    """
    if not isinstance(key_name, str):
        return False
    if not key_name.strip():
        return False
    if len(key_name) > MAX_KEY_NAME_LENGTH:
        return False
    return not any(unicodedata.category(ch) == "Cc" for ch in key_name)


def build_attribute_batch(
    key_name: str,
    elements: Sequence[str],
    return_command_only: bool = False,
) -> AttributeBatch:
    """Build a single ``VGETATTR`` batch for many elements of one key.

    Args:
        key_name: Vector set key the elements belong to
        elements: Element identifiers, in the order results are expected
        return_command_only: Only build the commands, do not execute them

    Returns:
        AttributeBatch: One request carrying one sub-command per element

    Raises:
        ValidationError: If the element list is empty, an element is not a
            non-empty string, or the key name is invalid
    """
    if not elements:
        raise ValidationError("Elements array is required and must not be empty")
    if not validate_key_name(key_name):
        raise ValidationError(f"Invalid key name: {key_name!r}")
    for element in elements:
        if not isinstance(element, str) or element == "":
            raise ValidationError(f"Invalid element: {element!r}")

    batch = AttributeBatch(
        key_name=key_name,
        elements=list(elements),
        return_command_only=return_command_only,
    )
    logger.debug(f"Built VGETATTR batch for {len(batch)} element(s) of '{key_name}'")
    return batch


def build_metadata_batch(
    key_names: Sequence[str],
    return_command_only: bool = False,
) -> MetadataBatch:
    """Build a single ``VINFO`` batch for many keys.

    Every key name is validated before anything is built; one bad entry
    rejects the whole batch.

    Args:
        key_names: Keys to describe, in the order results are expected
        return_command_only: Only build the commands, do not execute them

    Returns:
        MetadataBatch: One request carrying one sub-command per key

    Raises:
        ValidationError: If the list is empty or any key name is invalid
    """
    if not key_names:
        raise ValidationError("Key names array is required and must not be empty")
    for key_name in key_names:
        if not validate_key_name(key_name):
            raise ValidationError(f"Invalid key name: {key_name!r}")

    return MetadataBatch(
        key_names=list(key_names),
        return_command_only=return_command_only,
    )


def zip_results(
    batch: AttributeBatch | MetadataBatch,
    results: Sequence[Any],
) -> dict[str, Any]:
    """Map positional bulk results back onto the batch identifiers.

    Raises:
        TransportError: If the store returned a different number of results
    """
    identifiers = batch.identifiers
    if len(results) != len(identifiers):
        raise TransportError(
            f"Expected {len(identifiers)} results, store returned {len(results)}"
        )
    return dict(zip(identifiers, results))
