"""Clients for the remote vector store."""

from vector_results.clients.store_client import StoreClient

__all__ = ["StoreClient"]
