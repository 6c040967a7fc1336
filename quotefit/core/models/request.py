"""Request and run-parameter models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quotefit.core.models.quote import TimeSeriesTable


class QuoteFunction(str, Enum):
    """行情服务端点类型."""

    INTRADAY = "TIME_SERIES_INTRADAY"
    DAILY = "TIME_SERIES_DAILY"
    DAILY_ADJUSTED = "TIME_SERIES_DAILY_ADJUSTED"
    WEEKLY = "TIME_SERIES_WEEKLY"
    WEEKLY_ADJUSTED = "TIME_SERIES_WEEKLY_ADJUSTED"
    MONTHLY = "TIME_SERIES_MONTHLY"
    MONTHLY_ADJUSTED = "TIME_SERIES_MONTHLY_ADJUSTED"


INTRADAY_INTERVALS: frozenset[str] = frozenset({"1min", "5min", "15min", "30min", "60min"})


class QuoteRequest(BaseModel):
    """单次行情请求, 按值传入获取器."""

    model_config = ConfigDict(frozen=True)

    function: QuoteFunction = QuoteFunction.DAILY
    symbol: str = Field(min_length=1)
    apikey: str = Field(default="", repr=False)
    interval: str | None = None

    @model_validator(mode="after")
    def _check_interval(self) -> QuoteRequest:
        if self.function is QuoteFunction.INTRADAY:
            if self.interval not in INTRADAY_INTERVALS:
                allowed = ", ".join(sorted(INTRADAY_INTERVALS))
                raise ValueError(f"intraday requests need an interval in: {allowed}")
        elif self.interval is not None:
            raise ValueError(f"{self.function.value} does not accept an interval")
        return self

    @property
    def cache_key(self) -> tuple[str, str, str | None]:
        return (self.symbol.upper(), self.function.value, self.interval)


class RunParameters(BaseModel):
    """One set of control-surface parameters.

    Bounds are accepted as given; the range filter and regression engine
    validate them so that callers get typed errors from the stage at fault.
    """

    model_config = ConfigDict(frozen=True)

    x_range: tuple[datetime, datetime]
    y_range: tuple[float, float]
    spline_count: int

    @classmethod
    def covering(cls, table: TimeSeriesTable, spline_count: int) -> RunParameters:
        """Parameters spanning every row of ``table``."""

        if table.is_empty:
            now = datetime.now()
            return cls(x_range=(now, now), y_range=(0.0, 0.0), spline_count=spline_count)
        timestamps = table.timestamps
        closes = table.closes
        return cls(
            x_range=(timestamps[0].to_pydatetime(), timestamps[-1].to_pydatetime()),
            y_range=(float(closes.min()), float(closes.max())),
            spline_count=spline_count,
        )


__all__ = ["QuoteFunction", "QuoteRequest", "RunParameters", "INTRADAY_INTERVALS"]
