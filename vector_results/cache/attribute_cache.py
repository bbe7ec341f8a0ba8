"""Generation-scoped cache of raw and parsed element attributes."""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Protocol

from vector_results.commands.batcher import build_attribute_batch, zip_results
from vector_results.errors import ParseError, TransportError, ValidationError
from vector_results.models.commands import AttributeBatch
from vector_results.models.diagnostics import AttributeDiagnostic, DiagnosticKind
from vector_results.models.results import ParsedAttributes

logger = logging.getLogger(__name__)


class BulkAttributeFetcher(Protocol):
    """Capability returning one raw payload (or None) per batch element."""

    async def fetch_attributes(self, batch: AttributeBatch) -> list[str | None]: ...


@dataclass
class FetchOutcome:
    """What a call to :meth:`AttributeCache.fetch_missing` did.

    Attributes:
        generation: Generation the fetch was started for
        requested: Elements actually sent to the store
        applied: False when the result was discarded as stale
        parse_failures: Elements whose payload could not be parsed
        superseded: Elements edited while the fetch was waiting, left as edited
    """

    generation: int
    requested: list[str] = field(default_factory=list)
    applied: bool = True
    parse_failures: list[str] = field(default_factory=list)
    superseded: list[str] = field(default_factory=list)


def parse_attributes(element: str, raw: str) -> ParsedAttributes:
    """Parse one raw attribute payload.

    Raises:
        ParseError: If the payload is not valid JSON or not a JSON object
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseError(element, str(e)) from e
    if not isinstance(parsed, dict):
        raise ParseError(element, f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


class AttributeCache:
    """Raw and parsed attributes for the elements of one dataset.

    Every dataset activation starts a new generation. A fetch remembers the
    generation it was started for and its results are dropped if a newer
    generation became active while it was waiting on the store.

    Within a generation each element also carries a write version, bumped by
    :meth:`update_one`. A fetch leaves alone any element whose version moved
    while it was waiting, so an edit is never overwritten by older data.
    """

    def __init__(self, fetcher: BulkAttributeFetcher):
        """Initialize attribute cache.

        Args:
            fetcher: Bulk attribute lookup capability
        """
        self.fetcher = fetcher
        self._key_name: str | None = None
        self._generation = 0
        self._raw: dict[str, str | None] = {}
        self._parsed: dict[str, ParsedAttributes] = {}
        self._in_flight: set[str] = set()
        self._versions: dict[str, int] = {}
        self._diagnostics: list[AttributeDiagnostic] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def key_name(self) -> str | None:
        return self._key_name

    @property
    def is_loading(self) -> bool:
        return bool(self._in_flight)

    @property
    def diagnostics(self) -> list[AttributeDiagnostic]:
        return list(self._diagnostics)

    def activate(self, key_name: str) -> int:
        """Switch to a new dataset and return its generation."""
        self.invalidate()
        self._key_name = key_name
        logger.info(f"Attribute cache activated for '{key_name}' (generation {self._generation})")
        return self._generation

    def invalidate(self) -> None:
        """Drop every cached entry and orphan any fetch still in flight."""
        self._raw.clear()
        self._parsed.clear()
        self._in_flight.clear()
        self._versions.clear()
        self._diagnostics.clear()
        self._generation += 1

    def __contains__(self, element: str) -> bool:
        return element in self._raw

    def __len__(self) -> int:
        return len(self._raw)

    def raw(self, element: str) -> str | None:
        return self._raw.get(element)

    def parsed(self, element: str) -> ParsedAttributes | None:
        return self._parsed.get(element)

    def raw_items(self) -> dict[str, str | None]:
        return dict(self._raw)

    def parsed_items(self) -> dict[str, ParsedAttributes]:
        return dict(self._parsed)

    def field_names(self) -> list[str]:
        """All parsed field names, in first-seen order."""
        return list(dict.fromkeys(self._iter_field_names()))

    def _iter_field_names(self) -> Iterator[str]:
        for attributes in self._parsed.values():
            yield from attributes.keys()

    def missing(self, elements: Iterable[str]) -> list[str]:
        """Elements neither cached nor currently being fetched."""
        return [
            element
            for element in dict.fromkeys(elements)
            if element not in self._raw and element not in self._in_flight
        ]

    async def fetch_missing(
        self,
        elements: Iterable[str],
        generation: int | None = None,
    ) -> FetchOutcome:
        """Fetch attributes for elements not cached yet, in one batch.

        Args:
            elements: Elements currently shown
            generation: Generation the caller observed; defaults to current

        Returns:
            FetchOutcome describing what was requested and applied

        Raises:
            ValidationError: If no dataset is active or the batch is malformed
            TransportError: If the bulk lookup failed; the cache is unchanged
        """
        started_for = self._generation if generation is None else generation
        if started_for != self._generation:
            logger.info(
                f"Skipping fetch for stale generation {started_for} "
                f"(current {self._generation})"
            )
            return FetchOutcome(generation=started_for, applied=False)

        if self._key_name is None:
            raise ValidationError("No dataset is active")

        to_fetch = self.missing(elements)
        if not to_fetch:
            return FetchOutcome(generation=started_for)

        batch = build_attribute_batch(self._key_name, to_fetch)
        versions = {element: self._versions.get(element, 0) for element in to_fetch}
        self._in_flight.update(to_fetch)
        try:
            payloads = await self.fetcher.fetch_attributes(batch)
        except TransportError as e:
            if started_for != self._generation:
                logger.info(f"Ignoring failure of superseded fetch: {e}")
                return FetchOutcome(generation=started_for, requested=to_fetch, applied=False)
            raise
        finally:
            if started_for == self._generation:
                self._in_flight.difference_update(to_fetch)

        if started_for != self._generation:
            logger.info(
                f"Discarding attributes for {len(to_fetch)} element(s): generation "
                f"{started_for} superseded by {self._generation}"
            )
            return FetchOutcome(generation=started_for, requested=to_fetch, applied=False)

        by_element = zip_results(batch, payloads)
        outcome = FetchOutcome(generation=started_for, requested=to_fetch)
        for element in to_fetch:
            if self._versions.get(element, 0) != versions[element]:
                outcome.superseded.append(element)
                continue
            if not self._store(element, by_element[element]):
                outcome.parse_failures.append(element)

        logger.info(
            f"Cached attributes for {len(to_fetch) - len(outcome.superseded)} element(s) "
            f"({len(outcome.parse_failures)} unparseable, "
            f"{len(outcome.superseded)} edited meanwhile)"
        )
        return outcome

    def update_one(self, element: str, raw_payload: str | None) -> ParsedAttributes | None:
        """Replace one element's payload after an external edit.

        A fetch already in flight for ``element`` will not overwrite this
        payload when it completes.

        Returns:
            The parsed attributes, or None if the payload is empty or invalid
        """
        self._versions[element] = self._versions.get(element, 0) + 1
        self._store(element, raw_payload)
        return self._parsed.get(element)

    def _store(self, element: str, raw_payload: str | None) -> bool:
        """Store raw payload and parsed form; False if parsing failed."""
        self._raw[element] = raw_payload
        if raw_payload is None:
            self._parsed.pop(element, None)
            return True
        try:
            self._parsed[element] = parse_attributes(element, raw_payload)
        except ParseError as e:
            self._parsed.pop(element, None)
            logger.warning(str(e))
            self._record(DiagnosticKind.PARSE, str(e), element=element)
            return False
        return True

    def _record(self, kind: DiagnosticKind, message: str, element: str | None = None) -> None:
        self._diagnostics.append(AttributeDiagnostic(kind=kind, message=message, element=element))
