"""Time and close-price range filtering."""

from __future__ import annotations

import math
from datetime import date, datetime

import pandas as pd

from quotefit.core.exceptions import InvalidRangeError
from quotefit.core.models.quote import TimeSeriesTable

TimeBound = datetime | date | str | pd.Timestamp


def _to_timestamp(value: TimeBound, name: str) -> pd.Timestamp:
    try:
        stamp = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRangeError(f"{name} is not a valid datetime: {value!r}") from exc
    if pd.isna(stamp):
        raise InvalidRangeError(f"{name} is not a valid datetime: {value!r}")
    # 表中时间戳不带时区
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert(None)
    return stamp


def _to_price(value: float, name: str) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRangeError(f"{name} is not a number: {value!r}") from exc
    if math.isnan(price):
        raise InvalidRangeError(f"{name} is NaN")
    return price


def validate_ranges(
    x_range: tuple[TimeBound, TimeBound],
    y_range: tuple[float, float],
) -> tuple[tuple[pd.Timestamp, pd.Timestamp], tuple[float, float]]:
    """校验并规范化时间与价格区间 (闭区间)."""
    t_lo, t_hi = (_to_timestamp(value, name) for value, name in zip(x_range, ("t_lo", "t_hi"), strict=True))
    p_lo, p_hi = (_to_price(value, name) for value, name in zip(y_range, ("p_lo", "p_hi"), strict=True))

    if t_lo > t_hi:
        raise InvalidRangeError(
            f"Datetime range is inverted: {t_lo.isoformat()} > {t_hi.isoformat()}",
            {"t_lo": t_lo.isoformat(), "t_hi": t_hi.isoformat()},
        )
    if p_lo > p_hi:
        raise InvalidRangeError(f"Price range is inverted: {p_lo} > {p_hi}", {"p_lo": p_lo, "p_hi": p_hi})
    return (t_lo, t_hi), (p_lo, p_hi)


def filter_table(
    table: TimeSeriesTable,
    x_range: tuple[TimeBound, TimeBound],
    y_range: tuple[float, float],
) -> TimeSeriesTable:
    """Keep rows inside both the datetime and the close-price interval.

    Bounds are inclusive. The result keeps the input order and may be
    empty; applying the same bounds again returns an equal table.
    """

    (t_lo, t_hi), (p_lo, p_hi) = validate_ranges(x_range, y_range)
    if table.is_empty:
        return table

    timestamps = table.timestamps
    closes = table.closes
    mask = (timestamps >= t_lo) & (timestamps <= t_hi) & (closes >= p_lo) & (closes <= p_hi)
    return table.select(mask)


__all__ = ["filter_table", "validate_ranges"]
