"""Bundled raw payloads served when the upstream API is unavailable in development.

Funding rows mirror the upstream quirk of shipping the amount under ``Date``
and the date under ``Amount Raised``.
"""

from __future__ import annotations

import copy
from typing import Any

SAMPLE_FUNDING: list[dict[str, Any]] = [
    {
        "Name": "Example Protocol",
        "Date": "$25M",
        "Amount Raised": "7 Aug 2025",
        "Round": "Series A",
        "Category": "Layer 2",
        "ClassifiedCategory": "Infrastructure",
        "Description": "Rollup infrastructure for application chains.",
        "Lead Investor": "a16z crypto",
        "Other Investors": "Paradigm, Coinbase Ventures",
        "Link": "https://example.com/protocol",
        "Valuation": "$250M",
        "Chains": "Ethereum",
    },
    {
        "Name": "Yield Garden",
        "Date": "$9.5m",
        "Amount Raised": "2 Aug 2025",
        "Round": "Seed",
        "Category": "Lending",
        "ClassifiedCategory": "DeFi",
        "Description": "Fixed rate lending markets.",
        "Lead Investor": "Paradigm",
        "Other Investors": "Variant, Robot Ventures",
        "Link": "https://example.com/yield-garden",
        "Valuation": "",
        "Chains": "Arbitrum, Base",
    },
    {
        "Name": "Pixel Realms",
        "Date": "$12M",
        "Amount Raised": "28 Jul 2025",
        "Round": "Series A",
        "Category": "Games",
        "ClassifiedCategory": "Gaming",
        "Description": "On-chain strategy game studio.",
        "Lead Investor": "Animoca Brands",
        "Other Investors": "Delphi Ventures",
        "Link": "https://example.com/pixel-realms",
        "Valuation": "$80M",
        "Chains": "Immutable",
    },
    {
        "Name": "Agent Mesh",
        "Date": "$4M",
        "Amount Raised": "15 Jul 2025",
        "Round": "Pre-Seed",
        "Category": "AI Agents",
        "ClassifiedCategory": "AI",
        "Description": "Coordination layer for autonomous agents.",
        "Lead Investor": "Coinbase Ventures",
        "Other Investors": "",
        "Link": "https://example.com/agent-mesh",
        "Valuation": "",
        "Chains": "Base",
    },
    {
        "Name": "Depth Book",
        "Date": "$1.2B",
        "Amount Raised": "3 Jul 2025",
        "Round": "Strategic",
        "Category": "Exchange",
        "ClassifiedCategory": "Trading",
        "Description": "Institutional order book venue.",
        "Lead Investor": "a16z crypto",
        "Other Investors": "Paradigm",
        "Link": "https://example.com/depth-book",
        "Valuation": "$5B",
        "Chains": "Solana",
    },
]

SAMPLE_LISTINGS: list[dict[str, Any]] = [
    {
        "sourceMessage": "Binance will list Jupiter (JUP)",
        "ticker": "JUP",
        "id": "jupiter-exchange-solana",
        "name": "Jupiter",
        "symbol": "jup",
        "price_usd": 0.65,
        "market_cap_usd": 845000000,
        "volume_24h_usd": 248000000,
        "price_change_24h": 0.07,
        "price_change_pct_24h": 12.5,
        "platforms": {"solana": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"},
        "all_exchanges": "Binance, Coinbase, OKX, Bybit, KuCoin, Gate.io",
        "coingecko_url": "https://www.coingecko.com/en/coins/jupiter-exchange-solana",
        "last_updated": "2025-08-07T12:00:00Z",
        "scraped_at": "2025-08-07T12:05:00Z",
        "listingDate": 1754568000,
        "exchange": "Binance",
        "type": "spot",
    },
    {
        "sourceMessage": "Bybit lists PYTH perpetual futures",
        "ticker": "PYTH",
        "id": "pyth-network",
        "name": "Pyth Network",
        "symbol": "pyth",
        "price_usd": 0.38,
        "market_cap_usd": 1380000000,
        "volume_24h_usd": 95000000,
        "price_change_24h": -0.01,
        "price_change_pct_24h": -3.2,
        "platforms": {},
        "all_exchanges": "Binance, OKX, Bybit",
        "coingecko_url": "https://www.coingecko.com/en/coins/pyth-network",
        "last_updated": "2025-08-06T09:00:00Z",
        "scraped_at": "2025-08-06T09:10:00Z",
        "listingDate": 1754470800,
        "exchange": "Bybit",
        "type": "futures",
    },
    {
        "sourceMessage": "Kraken adds support for WIF",
        "ticker": "WIF",
        "id": "dogwifcoin",
        "name": "dogwifhat",
        "symbol": "wif",
        "price_usd": 2.45,
        "market_cap_usd": 2450000000,
        "volume_24h_usd": 410000000,
        "price_change_24h": 0.55,
        "price_change_pct_24h": 28.9,
        "platforms": {},
        "all_exchanges": "Kraken",
        "coingecko_url": "https://www.coingecko.com/en/coins/dogwifcoin",
        "last_updated": "2025-08-05T18:00:00Z",
        "scraped_at": "2025-08-05T18:02:00Z",
        "listingDate": 1754416800,
        "exchange": "Kraken",
        "type": "spot",
    },
    {
        "sourceMessage": "OKX will list Jupiter (JUP) margin pairs",
        "ticker": "JUP",
        "id": "jupiter-exchange-solana",
        "name": "Jupiter",
        "symbol": "jup",
        "price_usd": 0.64,
        "market_cap_usd": 840000000,
        "volume_24h_usd": 240000000,
        "price_change_24h": 0.05,
        "price_change_pct_24h": 9.1,
        "platforms": {},
        "all_exchanges": "Binance, Coinbase, OKX, Bybit, KuCoin, Gate.io",
        "coingecko_url": "https://www.coingecko.com/en/coins/jupiter-exchange-solana",
        "last_updated": "2025-08-04T08:00:00Z",
        "scraped_at": "2025-08-04T08:01:00Z",
        "listingDate": 1754294400,
        "exchange": "OKX",
        "type": "spot",
    },
]

SAMPLE_PARITY: list[dict[str, Any]] = [
    {
        "id": "bitcoin",
        "symbol": "BTC",
        "name": "Bitcoin",
        "rank": 1,
        "market_cap": 1200000000000,
        "volume_24h": 35000000000,
        "isOnCoinbase": True,
        "isOnBinance": True,
        "isOnKraken": True,
        "isOnMEXC": True,
        "isOnGate": True,
        "listing_opportunities": 0,
        "allExchanges": "Binance, Coinbase, Kraken, OKX, Bybit, KuCoin, HTX, Gate, MEXC",
    },
    {
        "id": "jupiter-exchange-solana",
        "symbol": "JUP",
        "name": "Jupiter",
        "rank": 58,
        "market_cap": 845000000,
        "volume_24h": 248000000,
        "isOnCoinbase": True,
        "isOnBinance": True,
        "isOnKraken": False,
        "isOnMEXC": True,
        "isOnGate": True,
        "listing_opportunities": 2,
        "allExchanges": "Binance, Coinbase, OKX, Bybit, KuCoin, Gate, MEXC",
        "contract_address_solana": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
    },
    {
        "id": "dogwifcoin",
        "symbol": "WIF",
        "name": "dogwifhat",
        "rank": 40,
        "market_cap": 2450000000,
        "volume_24h": 410000000,
        "isOnCoinbase": False,
        "isOnBinance": True,
        "isOnKraken": True,
        "isOnMEXC": True,
        "isOnGate": False,
        "listing_opportunities": 5,
        "allExchanges": "Binance, Kraken, MEXC, Bybit",
    },
    {
        "id": "tiny-token",
        "symbol": "TINY",
        "name": "Tiny Token",
        "rank": 1450,
        "market_cap": 4200000,
        "volume_24h": 310000,
        "isOnCoinbase": False,
        "isOnBinance": False,
        "isOnKraken": False,
        "isOnMEXC": True,
        "isOnGate": False,
        "listing_opportunities": 8,
        "allExchanges": "MEXC",
    },
]


def sample_funding_records() -> list[dict[str, Any]]:
    return copy.deepcopy(SAMPLE_FUNDING)


def sample_listing_records() -> list[dict[str, Any]]:
    return copy.deepcopy(SAMPLE_LISTINGS)


def sample_parity_records() -> list[dict[str, Any]]:
    return copy.deepcopy(SAMPLE_PARITY)


__all__ = [
    "SAMPLE_FUNDING",
    "SAMPLE_LISTINGS",
    "SAMPLE_PARITY",
    "sample_funding_records",
    "sample_listing_records",
    "sample_parity_records",
]
