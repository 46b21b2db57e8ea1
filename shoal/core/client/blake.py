"""
Async client for the Blake market-intelligence API.

Every dataset (funding rounds, exchange listings, exchange parity) is served
from its own endpoint. All of them take an empty JSON ``POST`` body,
authenticate with an ``x-api-key`` header and answer with a JSON array of
raw records.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
from loguru import logger

from shoal.core.config import ApiConfig
from shoal.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DataValidationError,
    NetworkError,
)
from shoal.core.logging import log_context

PROVIDER_NAME = "blake"


class Dataset(str, Enum):
    FUNDING = "funding"
    LISTINGS = "listings"
    PARITY = "parity"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    backoff_factor: float = 0.5
    retry_on_status: list[int] = field(default_factory=lambda: [502, 503, 504])

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.backoff_factor < 0:
            raise ValueError("backoff_factor must be non-negative")


class BlakeClient:
    """Fetches raw dashboard datasets.

    An ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise one is created lazily and closed by
    :meth:`close` or on leaving the ``async with`` block.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        client: httpx.AsyncClient | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        self.config = config
        self.retry = retry or RetryConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> BlakeClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def endpoint(self, dataset: Dataset) -> str:
        urls = {
            Dataset.FUNDING: self.config.funding_url,
            Dataset.LISTINGS: self.config.listings_url,
            Dataset.PARITY: self.config.parity_url,
        }
        return urls[dataset]

    def _headers(self) -> dict[str, str]:
        if not self.config.api_key:
            raise ConfigurationError("Blake API key is not configured", setting="BLAKE_API_KEY")
        return {
            "x-api-key": self.config.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _post(self, url: str, headers: dict[str, str]) -> httpx.Response:
        client = self._ensure_client()
        attempt = 0
        while True:
            try:
                response = await client.post(url, json={}, headers=headers)
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if attempt < self.retry.max_retries:
                    delay = self.retry.backoff_factor * 2**attempt
                    logger.warning("Request to {} failed with {}, retrying in {}s", url, type(exc).__name__, delay)
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue
                raise NetworkError(
                    f"Request to Blake API failed: {exc}",
                    PROVIDER_NAME,
                    details={"url": url, "error_type": type(exc).__name__},
                ) from exc
            except httpx.HTTPError as exc:
                raise NetworkError(
                    f"Request to Blake API failed: {exc}",
                    PROVIDER_NAME,
                    details={"url": url, "error_type": type(exc).__name__},
                ) from exc

            if response.status_code in self.retry.retry_on_status and attempt < self.retry.max_retries:
                delay = self.retry.backoff_factor * 2**attempt
                logger.warning("Blake API answered {}, retrying in {}s", response.status_code, delay)
                await asyncio.sleep(delay)
                attempt += 1
                continue
            return response

    async def fetch(self, dataset: Dataset) -> list[dict[str, Any]]:
        """POST to the dataset endpoint and return its JSON array."""

        with log_context(dataset=dataset.value):
            return await self._fetch(dataset)

    async def _fetch(self, dataset: Dataset) -> list[dict[str, Any]]:
        url = self.endpoint(dataset)
        if not url:
            raise ConfigurationError(f"Blake API URL for {dataset.value} is not configured", setting="BLAKE_API_URL")
        headers = self._headers()

        logger.debug("Fetching {} from {}", dataset.value, url)
        response = await self._post(url, headers)

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Blake API rejected credentials for {dataset.value}",
                PROVIDER_NAME,
                status_code=response.status_code,
            )
        if not response.is_success:
            raise NetworkError(
                f"Blake API request failed: {response.status_code}",
                PROVIDER_NAME,
                status_code=response.status_code,
                details={"url": url},
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataValidationError(
                f"Blake API returned invalid JSON for {dataset.value}",
                details={"url": url},
            ) from exc
        if not isinstance(payload, list):
            raise DataValidationError(
                f"Expected a JSON array from the {dataset.value} endpoint",
                validation_errors={"type": type(payload).__name__},
            )

        logger.info("Fetched {} {} records", len(payload), dataset.value)
        return payload

    async def fetch_funding(self) -> list[dict[str, Any]]:
        return await self.fetch(Dataset.FUNDING)

    async def fetch_listings(self) -> list[dict[str, Any]]:
        return await self.fetch(Dataset.LISTINGS)

    async def fetch_parity(self) -> list[dict[str, Any]]:
        return await self.fetch(Dataset.PARITY)


__all__ = ["BlakeClient", "Dataset", "PROVIDER_NAME", "RetryConfig"]
