"""Pytest configuration and shared fixtures for the quotefit test suite."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from datetime import date, datetime, timedelta
from typing import Any

import pytest
from loguru import logger

from quotefit.core.models.quote import TimeSeriesPoint, TimeSeriesTable

RawResponse = dict[str, Any]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--quotefit-run-integration",
        action="store_true",
        default=False,
        help="Run quotefit integration tests that call the live quote service.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: marks quotefit tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--quotefit-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --quotefit-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Remove log sinks installed during a test."""

    yield
    logger.remove()


def _daily_meta(symbol: str) -> dict[str, str]:
    return {
        "1. Information": "Daily Prices (open, high, low, close) and Volumes",
        "2. Symbol": symbol,
        "3. Last Refreshed": "2024-03-01",
        "4. Output Size": "Compact",
        "5. Time Zone": "US/Eastern",
    }


def _daily_record(close: float, volume: int = 1_000_000) -> dict[str, str]:
    return {
        "1. open": f"{close - 0.5:.4f}",
        "2. high": f"{close + 1.0:.4f}",
        "3. low": f"{close - 1.0:.4f}",
        "4. close": f"{close:.4f}",
        "5. volume": str(volume),
    }


def _adjusted_record(close: float, adjusted: float) -> dict[str, str]:
    return {
        "1. open": f"{close - 0.5:.4f}",
        "2. high": f"{close + 1.0:.4f}",
        "3. low": f"{close - 1.0:.4f}",
        "4. close": f"{close:.4f}",
        "5. adjusted close": f"{adjusted:.4f}",
        "6. volume": "250000",
        "7. dividend amount": "0.0000",
        "8. split coefficient": "1.0",
    }


def curve_close(index: int) -> float:
    return 100.0 + 8.0 * math.sin(index / 6.0) + 0.25 * index


@pytest.fixture
def daily_response() -> Callable[..., RawResponse]:
    """Factory for a daily response, newest first like the live service."""

    def factory(days: int = 40, symbol: str = "IBM", start: date = date(2024, 1, 1)) -> RawResponse:
        series = {
            (start + timedelta(days=offset)).isoformat(): _daily_record(curve_close(offset))
            for offset in reversed(range(days))
        }
        return {"Meta Data": _daily_meta(symbol), "Time Series (Daily)": series}

    return factory


@pytest.fixture
def adjusted_response() -> RawResponse:
    """Three adjusted rows whose adjusted closes differ from the raw closes."""

    series = {
        "2024-01-03": _adjusted_record(11.0, 5.5),
        "2024-01-02": _adjusted_record(12.0, 6.0),
        "2024-01-01": _adjusted_record(10.0, 5.0),
    }
    meta = {
        "1. Information": "Daily Time Series with Splits and Dividend Events",
        "2. Symbol": "IBM",
        "3. Last Refreshed": "2024-01-03",
        "4. Output Size": "Compact",
        "5. Time Zone": "US/Eastern",
    }
    return {"Meta Data": meta, "Time Series (Daily)": series}


@pytest.fixture
def intraday_response() -> RawResponse:
    meta = {
        "1. Information": "Intraday (5min) open, high, low, close prices and volume",
        "2. Symbol": "IBM",
        "3. Last Refreshed": "2024-01-02 10:00:00",
        "4. Interval": "5min",
        "5. Output Size": "Compact",
        "6. Time Zone": "US/Eastern",
    }
    series = {
        "2024-01-02 10:00:00": _daily_record(101.0, 500),
        "2024-01-02 09:55:00": _daily_record(100.5, 400),
        "2024-01-02 09:50:00": _daily_record(100.0, 300),
    }
    return {"Meta Data": meta, "Time Series (5min)": series}


@pytest.fixture
def make_table() -> Callable[..., TimeSeriesTable]:
    """Build a table directly from close prices, one row per day."""

    def factory(closes: list[float], start: date = date(2024, 1, 1)) -> TimeSeriesTable:
        base = datetime(start.year, start.month, start.day)
        return TimeSeriesTable.from_points(
            TimeSeriesPoint(
                timestamp=base + timedelta(days=offset),
                open=close,
                high=close + 1.0,
                low=close - 1.0,
                close=close,
                volume=1000.0,
            )
            for offset, close in enumerate(closes)
        )

    return factory


@pytest.fixture
def curve_table(make_table: Callable[..., TimeSeriesTable]) -> TimeSeriesTable:
    return make_table([curve_close(offset) for offset in range(40)])
