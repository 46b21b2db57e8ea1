"""Upstream API access."""

from shoal.core.client.blake import PROVIDER_NAME, BlakeClient, Dataset, RetryConfig
from shoal.core.client.samples import (
    sample_funding_records,
    sample_listing_records,
    sample_parity_records,
)

__all__ = [
    "BlakeClient",
    "Dataset",
    "PROVIDER_NAME",
    "RetryConfig",
    "sample_funding_records",
    "sample_listing_records",
    "sample_parity_records",
]
