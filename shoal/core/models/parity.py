"""Exchange parity models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from shoal.core.models.base import (
    DashboardModel,
    RawModel,
    coerce_flag,
    coerce_optional_float,
    coerce_optional_text,
    coerce_text,
)

CONTRACT_CHAINS = ("ethereum", "bsc", "polygon", "arbitrum", "optimism", "avalanche", "solana")


class RawParityRecord(RawModel):
    """Token coverage row as returned upstream."""

    id: str = ""
    symbol: str = ""
    name: str = ""
    rank: int | None = None
    market_cap: float | None = None
    volume_24h: float | None = None
    is_on_coinbase: bool = Field(False, alias="isOnCoinbase")
    is_on_binance: bool = Field(False, alias="isOnBinance")
    is_on_kraken: bool = Field(False, alias="isOnKraken")
    is_on_mexc: bool = Field(False, alias="isOnMEXC")
    is_on_gate: bool = Field(False, alias="isOnGate")
    listing_opportunities: float | None = None
    all_exchanges: str | list[str] | None = Field(None, validation_alias=AliasChoices("all_exchanges", "allExchanges"))
    contract_address_ethereum: str | None = None
    contract_address_bsc: str | None = None
    contract_address_polygon: str | None = None
    contract_address_arbitrum: str | None = None
    contract_address_optimism: str | None = None
    contract_address_avalanche: str | None = None
    contract_address_solana: str | None = None

    @field_validator("id", "symbol", "name", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return coerce_text(value).strip()

    @field_validator("market_cap", "volume_24h", "listing_opportunities", mode="before")
    @classmethod
    def _as_number(cls, value: Any) -> float | None:
        return coerce_optional_float(value)

    @field_validator("rank", mode="before")
    @classmethod
    def _as_rank(cls, value: Any) -> int | None:
        number = coerce_optional_float(value)
        return None if number is None else int(number)

    @field_validator("is_on_coinbase", "is_on_binance", "is_on_kraken", "is_on_mexc", "is_on_gate", mode="before")
    @classmethod
    def _as_flag(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("all_exchanges", mode="before")
    @classmethod
    def _as_exchanges(cls, value: Any) -> str | list[str] | None:
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value if item]
        if isinstance(value, str):
            return value
        return None

    @field_validator(*(f"contract_address_{chain}" for chain in CONTRACT_CHAINS), mode="before")
    @classmethod
    def _as_address(cls, value: Any) -> str | None:
        return coerce_optional_text(value)


class ExchangePresence(DashboardModel):
    """Per-exchange availability of a token, one flag per tracked exchange."""

    binance: bool = False
    coinbase: bool = False
    kraken: bool = False
    okx: bool = False
    bybit: bool = False
    kucoin: bool = False
    huobi: bool = False
    gate: bool = False
    mexc: bool = False


class Coverage(DashboardModel):
    count: int
    percentage: int
    ratio: str
    missing: list[str]
    is_on_base: bool


class ContractAddresses(DashboardModel):
    ethereum: str | None = None
    bsc: str | None = None
    polygon: str | None = None
    arbitrum: str | None = None
    optimism: str | None = None
    avalanche: str | None = None
    solana: str | None = None


class ProcessedParityRecord(DashboardModel):
    id: str = ""
    symbol: str = ""
    name: str = ""
    rank: int | None = None
    market_cap: float = 0
    market_cap_display: str
    volume_24h: float = 0
    volume_24h_display: str
    exchanges: ExchangePresence
    coverage_count: int
    coverage_percentage: int
    coverage_ratio: str
    is_on_base: bool = False
    listing_opportunities: float = 0
    all_exchanges: list[str] = Field(default_factory=list)
    is_missing: bool
    missing_exchanges: list[str] = Field(default_factory=list)
    contract_addresses: ContractAddresses = Field(default_factory=ContractAddresses)


class MissingExchange(DashboardModel):
    exchange: str
    missing_count: int
    percentage: int


class CoverageOverview(DashboardModel):
    tokens_missing: int
    total_tokens: int
    average_coverage: int
    exclusive_listings: int
    coverage_rate: int
    top_missing_exchanges: list[MissingExchange]


class ParityDashboardData(DashboardModel):
    coverage_overview: CoverageOverview
    tokens: list[ProcessedParityRecord]
    total_records: int
    base_exchange: str


class ComparisonMode(str, Enum):
    """How a primary exchange is compared against a set of other exchanges."""

    OPPORTUNITY = "opportunity"
    GAP = "gap"


__all__ = [
    "CONTRACT_CHAINS",
    "ComparisonMode",
    "ContractAddresses",
    "Coverage",
    "CoverageOverview",
    "ExchangePresence",
    "MissingExchange",
    "ParityDashboardData",
    "ProcessedParityRecord",
    "RawParityRecord",
]
