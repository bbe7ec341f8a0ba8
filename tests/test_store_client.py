"""Unit tests for the store client."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from vector_results.clients.store_client import StoreClient
from vector_results.commands.batcher import build_attribute_batch, build_metadata_batch
from vector_results.config import Settings
from vector_results.errors import TransportError


def make_client(handler, max_retries: int = 3) -> StoreClient:
    """Create a store client whose HTTP calls go to ``handler``."""
    http_client = httpx.AsyncClient(
        base_url="http://store.test",
        transport=httpx.MockTransport(handler),
    )
    return StoreClient(
        base_url="http://store.test",
        max_retries=max_retries,
        http_client=http_client,
    )


@pytest.fixture
def no_sleep():
    """Skip backoff delays."""
    with patch("vector_results.clients.store_client.asyncio.sleep", new=AsyncMock()) as mock:
        yield mock


def test_from_settings():
    """Test client configuration from settings."""
    config = Settings(_env_file=None, store_base_url="https://store.example.com", store_max_retries=5)

    client = StoreClient.from_settings(config)

    assert client.base_url == "https://store.example.com"
    assert client.max_retries == 5


@pytest.mark.asyncio
async def test_fetch_attributes_sends_one_request():
    """Test that a batch of many elements is one HTTP request."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={"success": True, "result": [f'{{"id": "{e}"}}' for e in body["elements"]]},
        )

    async with make_client(handler) as client:
        batch = build_attribute_batch("vectors", ["e1", "e2", "e3"])
        result = await client.fetch_attributes(batch)

    assert len(requests) == 1
    assert requests[0].url.path == StoreClient.ATTRIBUTES_PATH
    assert json.loads(requests[0].content) == {
        "keyName": "vectors",
        "elements": ["e1", "e2", "e3"],
        "returnCommandOnly": False,
    }
    assert result == ['{"id": "e1"}', '{"id": "e2"}', '{"id": "e3"}']


@pytest.mark.asyncio
async def test_fetch_attributes_keeps_nulls_and_encodes_objects():
    """Test that missing attributes stay None and decoded objects are re-encoded."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "result": [None, {"a": 1}]})

    async with make_client(handler) as client:
        result = await client.fetch_attributes(build_attribute_batch("vectors", ["e1", "e2"]))

    assert result[0] is None
    assert json.loads(result[1]) == {"a": 1}


@pytest.mark.asyncio
async def test_return_command_only_skips_network():
    """Test that command-only batches never reach the store."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with make_client(handler) as client:
        batch = build_attribute_batch("vectors", ["e1"], return_command_only=True)
        result = await client.fetch_attributes(batch)

    assert result == [["VGETATTR", "vectors", "e1"]]


@pytest.mark.asyncio
async def test_unsuccessful_envelope_raises_transport_error():
    """Test that success=false fails the whole call."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "WRONGTYPE"})

    async with make_client(handler) as client:
        with pytest.raises(TransportError, match="WRONGTYPE"):
            await client.fetch_attributes(build_attribute_batch("vectors", ["e1"]))


@pytest.mark.asyncio
async def test_result_length_mismatch_raises():
    """Test that a short result list is treated as a failed call."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "result": ["{}"]})

    async with make_client(handler) as client:
        with pytest.raises(TransportError, match="Expected 2"):
            await client.fetch_attributes(build_attribute_batch("vectors", ["e1", "e2"]))


@pytest.mark.asyncio
async def test_malformed_body_raises():
    """Test that a non-JSON body raises TransportError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    async with make_client(handler) as client:
        with pytest.raises(TransportError, match="Malformed response"):
            await client.fetch_attributes(build_attribute_batch("vectors", ["e1"]))


@pytest.mark.asyncio
async def test_retries_server_errors_then_succeeds(no_sleep):
    """Test retry with exponential backoff on 5xx."""
    responses = [
        httpx.Response(503),
        httpx.Response(502),
        httpx.Response(200, json={"success": True, "result": ["{}"]}),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    async with make_client(handler, max_retries=3) as client:
        result = await client.fetch_attributes(build_attribute_batch("vectors", ["e1"]))

    assert result == ["{}"]
    assert [call.args[0] for call in no_sleep.await_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_connection_errors_exhaust_retries(no_sleep):
    """Test that persistent connection failures raise TransportError."""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler, max_retries=3) as client:
        with pytest.raises(TransportError, match="ConnectError"):
            await client.fetch_attributes(build_attribute_batch("vectors", ["e1"]))

    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(no_sleep):
    """Test that 4xx responses fail immediately."""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(400, json={"success": False})

    async with make_client(handler) as client:
        with pytest.raises(TransportError, match="HTTP 400"):
            await client.fetch_attributes(build_attribute_batch("vectors", ["e1"]))

    assert len(attempts) == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_fetch_metadata():
    """Test bulk VINFO lookup."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == StoreClient.METADATA_PATH
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={"success": True, "result": [{"size": len(k)} for k in body["keyNames"]]},
        )

    async with make_client(handler) as client:
        result = await client.fetch_metadata(build_metadata_batch(["a", "bbb"]))

    assert result == [{"size": 1}, {"size": 3}]
