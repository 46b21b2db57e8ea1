"""Pytest configuration for the shoal test suite."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--shoal-run-integration",
        action="store_true",
        default=False,
        help="Run shoal integration tests that require the live upstream API.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for shoal tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks shoal tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--shoal-run-integration"):
        return

    shoal_skip_integration = pytest.mark.skip(
        reason="integration tests require --shoal-run-integration",
    )
    for shoal_item in items:
        if "integration" in shoal_item.keywords:
            shoal_item.add_marker(shoal_skip_integration)


@pytest.fixture()
def now() -> datetime:
    """Fixed reference time used by every time-dependent transformer test."""

    return datetime(2025, 8, 10, 12, 0, 0, tzinfo=UTC)
