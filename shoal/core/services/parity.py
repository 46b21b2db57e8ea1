"""Exchange parity: per-token coverage across the tracked exchanges."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from shoal.core.models.base import parse_raw_records
from shoal.core.models.parity import (
    CONTRACT_CHAINS,
    ComparisonMode,
    ContractAddresses,
    Coverage,
    CoverageOverview,
    ExchangePresence,
    MissingExchange,
    ParityDashboardData,
    ProcessedParityRecord,
    RawParityRecord,
)
from shoal.core.services.formatting import format_amount, js_round

ALL_EXCHANGES = "all"
EXCLUSIVE_COVERAGE_LIMIT = 2
TOP_MISSING_EXCHANGES = 5


@dataclass(frozen=True)
class ExchangeSpec:
    """A tracked exchange: presence key, display name and alternate names."""

    key: str
    display: str
    aliases: tuple[str, ...] = ()
    flag: str | None = None

    @property
    def names(self) -> tuple[str, ...]:
        return (self.key, self.display.lower(), *(alias.lower() for alias in self.aliases))


# Display order of the coverage matrix.
EXCHANGES: tuple[ExchangeSpec, ...] = (
    ExchangeSpec("binance", "Binance", flag="is_on_binance"),
    ExchangeSpec("coinbase", "Coinbase", flag="is_on_coinbase"),
    ExchangeSpec("kraken", "Kraken", flag="is_on_kraken"),
    ExchangeSpec("okx", "OKX", aliases=("OKEx",)),
    ExchangeSpec("bybit", "Bybit"),
    ExchangeSpec("kucoin", "KuCoin"),
    ExchangeSpec("huobi", "Huobi", aliases=("HTX",)),
    ExchangeSpec("gate", "Gate.io", aliases=("Gate",), flag="is_on_gate"),
    ExchangeSpec("mexc", "MEXC", flag="is_on_mexc"),
)
_BY_NAME = {name: spec for spec in EXCHANGES for name in spec.names}


def resolve_exchange_key(name: str) -> str | None:
    """Map a display name, key or alias to a presence key (``"Gate.io"`` -> ``"gate"``)."""

    spec = _BY_NAME.get(name.strip().lower())
    return spec.key if spec else None


def exchange_display_name(key: str) -> str:
    spec = _BY_NAME.get(key.lower())
    return spec.display if spec else key


def parse_all_exchanges(value: str | Sequence[str] | None) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = (str(item) for item in value if item)
    return [part.strip() for part in parts if part.strip()]


# Venue names carry suffixes and regional variants ("OKX Spot", "HuobiGlobal",
# "Binance.US"); a name counts when it starts a word of the listed venue.
_NAME_PATTERNS = {
    spec.key: re.compile(r"(?<![a-z0-9])(?:" + "|".join(re.escape(name) for name in spec.names) + ")")
    for spec in EXCHANGES
}


def _matches(listed: str, spec: ExchangeSpec) -> bool:
    return _NAME_PATTERNS[spec.key].search(listed.strip().lower()) is not None


def detect_exchange_presence(raw: RawParityRecord | Mapping[str, Any]) -> ExchangePresence:
    """Presence per exchange: its upstream flag when it has one, or a name in ``all_exchanges``."""

    if not isinstance(raw, RawParityRecord):
        raw = RawParityRecord.model_validate(dict(raw))
    listed = parse_all_exchanges(raw.all_exchanges)

    presence: dict[str, bool] = {}
    for spec in EXCHANGES:
        flagged = bool(getattr(raw, spec.flag)) if spec.flag else False
        presence[spec.key] = flagged or any(_matches(name, spec) for name in listed)
    return ExchangePresence(**presence)


def _normalise_base(base_exchange: str) -> str:
    if base_exchange.strip().lower() == ALL_EXCHANGES:
        return ALL_EXCHANGES
    key = resolve_exchange_key(base_exchange)
    if key is None:
        logger.warning("Unknown base exchange {!r}, using all exchanges", base_exchange)
        return ALL_EXCHANGES
    return key


def calculate_coverage(presence: ExchangePresence, base_exchange: str = ALL_EXCHANGES) -> Coverage:
    """Coverage of a token across the exchanges other than ``base_exchange``.

    With ``"all"`` every tracked exchange counts and ``is_on_base`` reports
    whether the token trades anywhere.
    """

    base = _normalise_base(base_exchange)
    considered = [spec for spec in EXCHANGES if spec.key != base]
    available = [spec for spec in considered if getattr(presence, spec.key)]
    total = len(considered)
    count = len(available)
    is_on_base = count > 0 if base == ALL_EXCHANGES else bool(getattr(presence, base))

    return Coverage(
        count=count,
        percentage=js_round(count / total * 100),
        ratio=f"{count}/{total}",
        missing=[spec.display for spec in considered if not getattr(presence, spec.key)],
        is_on_base=is_on_base,
    )


def process_parity_record(
    raw: RawParityRecord | Mapping[str, Any],
    base_exchange: str = ALL_EXCHANGES,
) -> ProcessedParityRecord:
    if not isinstance(raw, RawParityRecord):
        raw = RawParityRecord.model_validate(dict(raw))

    presence = detect_exchange_presence(raw)
    coverage = calculate_coverage(presence, base_exchange)
    market_cap = raw.market_cap or 0.0
    volume = raw.volume_24h or 0.0

    return ProcessedParityRecord(
        id=raw.id,
        symbol=raw.symbol,
        name=raw.name,
        rank=raw.rank,
        market_cap=market_cap,
        market_cap_display=format_amount(market_cap),
        volume_24h=volume,
        volume_24h_display=format_amount(volume),
        exchanges=presence,
        coverage_count=coverage.count,
        coverage_percentage=coverage.percentage,
        coverage_ratio=coverage.ratio,
        is_on_base=coverage.is_on_base,
        listing_opportunities=raw.listing_opportunities or 0.0,
        all_exchanges=parse_all_exchanges(raw.all_exchanges),
        is_missing=bool(coverage.missing),
        missing_exchanges=coverage.missing,
        contract_addresses=ContractAddresses(
            **{chain: getattr(raw, f"contract_address_{chain}") for chain in CONTRACT_CHAINS}
        ),
    )


def calculate_coverage_overview(tokens: Sequence[ProcessedParityRecord]) -> CoverageOverview:
    """Aggregate statistics over processed tokens; an empty list yields zeros."""

    total = len(tokens)
    if not total:
        return CoverageOverview(
            tokens_missing=0,
            total_tokens=0,
            average_coverage=0,
            exclusive_listings=0,
            coverage_rate=0,
            top_missing_exchanges=[],
        )

    tokens_missing = sum(1 for token in tokens if token.is_missing)
    missing_counts: dict[str, int] = {}
    for token in tokens:
        for exchange in token.missing_exchanges:
            missing_counts[exchange] = missing_counts.get(exchange, 0) + 1
    ranked = sorted(missing_counts.items(), key=lambda item: item[1], reverse=True)

    return CoverageOverview(
        tokens_missing=tokens_missing,
        total_tokens=total,
        average_coverage=js_round(sum(token.coverage_percentage for token in tokens) / total),
        exclusive_listings=sum(1 for token in tokens if token.coverage_count <= EXCLUSIVE_COVERAGE_LIMIT),
        coverage_rate=js_round((total - tokens_missing) / total * 100),
        top_missing_exchanges=[
            MissingExchange(exchange=exchange, missing_count=count, percentage=js_round(count / total * 100))
            for exchange, count in ranked[:TOP_MISSING_EXCHANGES]
        ],
    )


def process_parity_data(
    raw_records: Iterable[RawParityRecord | Mapping[str, Any]],
    base_exchange: str = ALL_EXCHANGES,
) -> ParityDashboardData:
    """Build the parity dashboard for ``base_exchange``."""

    base = _normalise_base(base_exchange)
    rows = parse_raw_records(RawParityRecord, raw_records)
    tokens = [process_parity_record(row, base) for row in rows]
    logger.debug("Processed {} parity rows against {}", len(tokens), base)
    return ParityDashboardData(
        coverage_overview=calculate_coverage_overview(tokens),
        tokens=tokens,
        total_records=len(tokens),
        base_exchange=base,
    )


def is_token_on_exchange(token: ProcessedParityRecord, exchange: str) -> bool:
    """Unknown exchange names are never present."""

    key = resolve_exchange_key(exchange)
    return bool(getattr(token.exchanges, key)) if key else False


def _matches_search(token: ProcessedParityRecord, search: str | None) -> bool:
    if not search or not search.strip():
        return True
    query = search.strip().lower()
    return query in token.name.lower() or query in token.symbol.lower()


def filter_tokens(
    tokens: Iterable[ProcessedParityRecord],
    selected: Sequence[str],
    search: str | None = None,
) -> list[ProcessedParityRecord]:
    """Tokens matching ``search`` that are missing from any selected exchange."""

    selected_keys = [key for key in (resolve_exchange_key(name) for name in selected) if key]
    return [
        token
        for token in tokens
        if _matches_search(token, search)
        and (not selected or any(not getattr(token.exchanges, key) for key in selected_keys))
    ]


def filter_tokens_by_comparison(
    tokens: Iterable[ProcessedParityRecord],
    primary: str,
    compare: Sequence[str],
    search: str | None = None,
    mode: ComparisonMode = ComparisonMode.OPPORTUNITY,
) -> list[ProcessedParityRecord]:
    """Compare a primary exchange against a set of others.

    ``OPPORTUNITY`` keeps tokens listed on any comparison exchange but not on
    the primary one. ``GAP`` keeps tokens on the primary exchange that are
    missing from at least one comparison exchange.
    """

    kept: list[ProcessedParityRecord] = []
    for token in tokens:
        if not _matches_search(token, search):
            continue
        if not compare:
            kept.append(token)
            continue
        on_primary = is_token_on_exchange(token, primary)
        listed = [is_token_on_exchange(token, exchange) for exchange in compare]
        if mode is ComparisonMode.GAP:
            keep = on_primary and not all(listed)
        else:
            keep = any(listed) and not on_primary
        if keep:
            kept.append(token)
    return kept


__all__ = [
    "ALL_EXCHANGES",
    "EXCHANGES",
    "ExchangeSpec",
    "calculate_coverage",
    "calculate_coverage_overview",
    "detect_exchange_presence",
    "exchange_display_name",
    "filter_tokens",
    "filter_tokens_by_comparison",
    "is_token_on_exchange",
    "parse_all_exchanges",
    "process_parity_data",
    "process_parity_record",
    "resolve_exchange_key",
]
