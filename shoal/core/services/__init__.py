"""Dashboard transformers and orchestration."""

from shoal.core.services.funding import process_funding_data, process_funding_record
from shoal.core.services.listings import (
    calculate_momentum,
    deduplicate_by_ticker,
    process_listing_record,
    process_listings_data,
)
from shoal.core.services.parity import (
    calculate_coverage,
    filter_tokens,
    filter_tokens_by_comparison,
    process_parity_data,
)

__all__ = [
    "calculate_coverage",
    "calculate_momentum",
    "deduplicate_by_ticker",
    "filter_tokens",
    "filter_tokens_by_comparison",
    "process_funding_data",
    "process_funding_record",
    "process_listing_record",
    "process_listings_data",
    "process_parity_data",
]
