"""Attribute caching."""

from vector_results.cache.attribute_cache import (
    AttributeCache,
    BulkAttributeFetcher,
    FetchOutcome,
    parse_attributes,
)

__all__ = [
    "AttributeCache",
    "BulkAttributeFetcher",
    "FetchOutcome",
    "parse_attributes",
]
