from __future__ import annotations

import io
import json

import httpx
import pytest

from shoal.core.client import BlakeClient, Dataset, RetryConfig
from shoal.core.config import ApiConfig
from shoal.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    NetworkError,
)
from shoal.core.logging import configure_logging

FUNDING_URL = "https://blake.test/funding"
LISTINGS_URL = "https://blake.test/listings"
PARITY_URL = "https://blake.test/parity"


def _config(api_key: str | None = "secret") -> ApiConfig:
    return ApiConfig(funding_url=FUNDING_URL, listings_url=LISTINGS_URL, parity_url=PARITY_URL, api_key=api_key)


def _client(handler, *, api_key: str | None = "secret", retry: RetryConfig | None = None) -> BlakeClient:
    transport = httpx.MockTransport(handler)
    return BlakeClient(
        _config(api_key),
        client=httpx.AsyncClient(transport=transport),
        retry=retry or RetryConfig(backoff_factor=0),
    )


@pytest.mark.asyncio
async def test_fetch_posts_empty_body_with_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"Name": "Acme"}])

    async with _client(handler) as client:
        records = await client.fetch_funding()

    assert records == [{"Name": "Acme"}]
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == FUNDING_URL
    assert request.headers["x-api-key"] == "secret"
    assert json.loads(request.content) == {}


@pytest.mark.asyncio
async def test_each_dataset_has_its_own_endpoint() -> None:
    urls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        await client.fetch_listings()
        await client.fetch_parity()

    assert urls == [LISTINGS_URL, PARITY_URL]
    assert client.endpoint(Dataset.FUNDING) == FUNDING_URL


@pytest.mark.asyncio
async def test_missing_api_key_is_a_configuration_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with _client(handler, api_key=None) as client:
        with pytest.raises(ConfigurationError) as exc_info:
            await client.fetch_funding()

    assert exc_info.value.details["setting"] == "BLAKE_API_KEY"


@pytest.mark.asyncio
async def test_missing_url_is_a_configuration_error() -> None:
    client = BlakeClient(ApiConfig(funding_url="", api_key="secret"))

    with pytest.raises(ConfigurationError):
        await client.fetch_funding()
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_credentials(status: int) -> None:
    async with _client(lambda request: httpx.Response(status)) as client:
        with pytest.raises(AuthenticationError) as exc_info:
            await client.fetch_funding()

    assert exc_info.value.error_code == "AUTHENTICATION_ERROR"
    assert exc_info.value.details["status_code"] == status


@pytest.mark.asyncio
async def test_non_success_status_is_a_network_error() -> None:
    async with _client(lambda request: httpx.Response(500, text="boom")) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.fetch_parity()

    assert exc_info.value.details["status_code"] == 500
    assert exc_info.value.provider_name == "blake"


@pytest.mark.asyncio
async def test_retries_transient_statuses() -> None:
    responses = iter([httpx.Response(503), httpx.Response(502), httpx.Response(200, json=[{"ticker": "JUP"}])])

    async with _client(lambda request: next(responses)) as client:
        records = await client.fetch_listings()

    assert records == [{"ticker": "JUP"}]


@pytest.mark.asyncio
async def test_gives_up_after_max_retries() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    async with _client(handler, retry=RetryConfig(max_retries=1, backoff_factor=0)) as client:
        with pytest.raises(NetworkError):
            await client.fetch_listings()

    assert calls == 2


@pytest.mark.asyncio
async def test_connection_failures_are_network_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler, retry=RetryConfig(max_retries=0)) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.fetch_funding()

    assert exc_info.value.details["error_type"] == "ConnectError"


@pytest.mark.asyncio
async def test_invalid_json_is_a_validation_error() -> None:
    async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
        with pytest.raises(DataValidationError):
            await client.fetch_funding()


@pytest.mark.asyncio
async def test_non_array_payload_is_a_validation_error() -> None:
    async with _client(lambda request: httpx.Response(200, json={"error": "nope"})) as client:
        with pytest.raises(DataValidationError) as exc_info:
            await client.fetch_funding()

    assert exc_info.value.details["validation_errors"] == {"type": "dict"}


def test_retry_config_rejects_negative_values() -> None:
    with pytest.raises(ValueError):
        RetryConfig(max_retries=-1)


@pytest.mark.asyncio
async def test_fetch_logs_carry_the_dataset() -> None:
    buffer = io.StringIO()
    configure_logging(stream=buffer)

    try:
        async with _client(lambda request: httpx.Response(200, json=[{}, {}])) as client:
            await client.fetch(Dataset.LISTINGS)
    finally:
        configure_logging()

    records = [json.loads(line) for line in buffer.getvalue().splitlines()]
    fetched = next(record for record in records if record["message"] == "Fetched 2 listings records")
    assert fetched["dataset"] == "listings"
