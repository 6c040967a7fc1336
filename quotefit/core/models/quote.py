"""Quote metadata, points and the canonical time-series table."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from quotefit.core.exceptions import DuplicateTimestampError, ShapeMismatchError

VALUE_COLUMNS: tuple[str, ...] = ("open", "high", "low", "close", "volume")
TABLE_COLUMNS: tuple[str, ...] = ("timestamp", *VALUE_COLUMNS)


class MetaData(BaseModel):
    """响应元数据.

    ``aux_field`` is whatever the service put in the fourth metadata slot.
    Intraday endpoints use it for the interval, daily ones for the output
    size and weekly/monthly ones for the time zone, so it carries no
    guaranteed meaning.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    aux_field: str = ""
    extra: dict[str, str] = Field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TimeSeriesPoint:
    """Single OHLCV observation."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


def _empty_frame() -> pd.DataFrame:
    frame = pd.DataFrame({column: pd.Series(dtype="float64") for column in VALUE_COLUMNS})
    frame.insert(0, "timestamp", pd.Series(dtype="datetime64[ns]"))
    return frame


class TimeSeriesTable:
    """Immutable, timestamp-ordered OHLCV table.

    Rows are strictly increasing by timestamp and every value column is a
    finite float64. The wrapped frame is never handed out directly; ``frame``
    returns a copy.
    """

    __slots__ = ("_frame",)

    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = self._validate(frame)

    @classmethod
    def empty(cls) -> TimeSeriesTable:
        return cls(_empty_frame())

    @classmethod
    def from_points(cls, points: Iterable[TimeSeriesPoint]) -> TimeSeriesTable:
        rows = [
            {
                "timestamp": point.timestamp,
                "open": point.open,
                "high": point.high,
                "low": point.low,
                "close": point.close,
                "volume": point.volume,
            }
            for point in points
        ]
        if not rows:
            return cls.empty()
        return cls(pd.DataFrame(rows, columns=list(TABLE_COLUMNS)))

    @staticmethod
    def _validate(frame: pd.DataFrame) -> pd.DataFrame:
        missing = [column for column in TABLE_COLUMNS if column not in frame.columns]
        if missing:
            raise ShapeMismatchError(
                f"Time-series table is missing columns: {', '.join(missing)}",
                {"missing_columns": missing},
            )

        validated = frame.loc[:, list(TABLE_COLUMNS)].copy()
        validated["timestamp"] = pd.to_datetime(validated["timestamp"])
        validated[list(VALUE_COLUMNS)] = validated[list(VALUE_COLUMNS)].astype("float64")
        validated = validated.reset_index(drop=True)

        values = validated[list(VALUE_COLUMNS)].to_numpy()
        if values.size and not np.isfinite(values).all():
            raise ShapeMismatchError("Time-series table contains non-finite values")

        timestamps = validated["timestamp"]
        duplicated = timestamps[timestamps.duplicated()]
        if not duplicated.empty:
            first = duplicated.iloc[0].to_pydatetime()
            raise DuplicateTimestampError(f"Duplicate timestamp {first.isoformat()}", timestamp=first)
        if not timestamps.is_monotonic_increasing:
            raise ShapeMismatchError("Time-series table rows must be sorted by timestamp")
        return validated

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def timestamps(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self._frame["timestamp"])

    @property
    def closes(self) -> np.ndarray:
        return self._frame["close"].to_numpy(copy=True)

    @property
    def is_empty(self) -> bool:
        return self._frame.empty

    def select(self, mask: Any) -> TimeSeriesTable:
        """Return the order-preserving subsequence selected by a boolean mask."""

        return TimeSeriesTable(self._frame.loc[np.asarray(mask, dtype=bool)])

    def equals(self, other: TimeSeriesTable) -> bool:
        return isinstance(other, TimeSeriesTable) and self._frame.equals(other._frame)

    def __len__(self) -> int:
        return len(self._frame)

    def __iter__(self) -> Iterator[TimeSeriesPoint]:
        for row in self._frame.itertuples(index=False):
            yield TimeSeriesPoint(
                timestamp=row.timestamp.to_pydatetime(),
                open=row.open,
                high=row.high,
                low=row.low,
                close=row.close,
                volume=row.volume,
            )

    def __repr__(self) -> str:
        if self.is_empty:
            return "TimeSeriesTable(rows=0)"
        first, last = self._frame["timestamp"].iloc[[0, -1]]
        return f"TimeSeriesTable(rows={len(self)}, first={first.isoformat()}, last={last.isoformat()})"


__all__ = ["MetaData", "TimeSeriesPoint", "TimeSeriesTable", "TABLE_COLUMNS", "VALUE_COLUMNS"]
