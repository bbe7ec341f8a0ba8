"""HTTP client for bulk commands against the vector store command API."""

import asyncio
import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from vector_results.config import Settings, get_settings
from vector_results.errors import TransportError
from vector_results.models.commands import AttributeBatch, CommandResponse, MetadataBatch

logger = logging.getLogger(__name__)


class _RetryableError(Exception):
    """Internal marker for failures worth another attempt."""


class StoreClient:
    """Client for the bulk command endpoints with retry logic.

    Implements both bulk capabilities used by the engine: attribute lookup
    for many elements of one key, and metadata lookup for many keys. Each
    batch is sent as exactly one HTTP request.
    """

    ATTRIBUTES_PATH = "/api/redis/command/vgetattr_multi"
    METADATA_PATH = "/api/redis/command/vinfo_multi"

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 30.0,
        max_retries: int = 3,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize store client.

        Args:
            base_url: Base URL of the command API
            timeout: Request timeout in seconds (default: 30.0)
            max_retries: Maximum number of attempts (default: 3)
            http_client: Preconfigured httpx client (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StoreClient":
        """Create a client configured from engine settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.store_base_url,
            timeout=settings.store_timeout,
            max_retries=settings.store_max_retries,
        )

    async def _retry_with_backoff(
        self,
        func,
        *args,
        **kwargs,
    ) -> Any:
        """Execute function with exponential backoff retry logic.

        Retries up to max_retries times with exponentially increasing delays:
        1s, 2s, 4s, etc.

        Raises:
            TransportError: If all attempts fail
        """
        last_exception: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                return await func(*args, **kwargs)
            except _RetryableError as e:
                last_exception = e

                if attempt < self.max_retries - 1:
                    delay = 2 ** attempt
                    logger.warning(
                        f"Store command failed (attempt {attempt + 1}/{self.max_retries}): "
                        f"{e}. Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        f"Store command failed after {self.max_retries} attempts: {e}"
                    )

        raise TransportError(str(last_exception))

    async def _execute(self, path: str, payload: dict[str, Any]) -> Any:
        """POST one bulk command and unwrap the response envelope."""

        async def _post():
            try:
                response = await self.client.post(path, json=payload)
            except httpx.TransportError as e:
                raise _RetryableError(f"{type(e).__name__}: {e}") from e

            if response.status_code >= 500:
                raise _RetryableError(f"HTTP {response.status_code} from {path}")
            if response.status_code >= 400:
                raise TransportError(f"HTTP {response.status_code} from {path}")

            try:
                envelope = CommandResponse.model_validate(response.json())
            except (json.JSONDecodeError, PydanticValidationError) as e:
                raise TransportError(f"Malformed response from {path}: {e}") from e

            if not envelope.success:
                raise TransportError(envelope.error or f"Command at {path} failed")
            return envelope.result

        return await self._retry_with_backoff(_post)

    async def fetch_attributes(self, batch: AttributeBatch) -> list[Any]:
        """Fetch raw attribute payloads for every element in the batch.

        Args:
            batch: Attribute batch built by the command batcher

        Returns:
            One JSON string (or None when the element has no attributes) per
            element, in batch order. When the batch only asks for commands,
            the ``VGETATTR`` commands are returned instead.

        Raises:
            TransportError: If the call fails; there are no partial results
        """
        if batch.return_command_only:
            return batch.commands

        result = await self._execute(self.ATTRIBUTES_PATH, batch.to_payload())
        if not isinstance(result, list) or len(result) != len(batch):
            raise TransportError(
                f"Expected {len(batch)} attribute results for '{batch.key_name}', "
                f"got {len(result) if isinstance(result, list) else type(result).__name__}"
            )

        payloads: list[str | None] = []
        for value in result:
            if value is None or isinstance(value, str):
                payloads.append(value)
            else:
                # Some proxies decode the attribute JSON before returning it
                payloads.append(json.dumps(value))

        logger.info(f"Fetched attributes for {len(payloads)} element(s) of '{batch.key_name}'")
        return payloads

    async def fetch_metadata(self, batch: MetadataBatch) -> list[Any]:
        """Fetch ``VINFO`` metadata for every key in the batch, in order.

        Raises:
            TransportError: If the call fails
        """
        if batch.return_command_only:
            return batch.commands

        result = await self._execute(self.METADATA_PATH, batch.to_payload())
        if not isinstance(result, list) or len(result) != len(batch):
            raise TransportError(
                f"Expected {len(batch)} metadata results from the store"
            )
        return result

    async def close(self):
        """Close the client connection."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
