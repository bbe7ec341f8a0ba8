"""Attribute cache, dynamic schema and view engine for vector search results."""

__version__ = "0.1.0"
