"""Natural-spline least-squares fit of close price against time.

Time enters the model as a float ordinal (days since the Unix epoch). The
basis is patsy's natural cubic regression spline ``cr`` with ``spline_count``
degrees of freedom, centred so that it does not collide with the intercept.
One degree of freedom is the linear term itself. The design therefore has ``spline_count + 1`` columns and needs at least that
many distinct timestamps.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
import patsy
import statsmodels.api as sm
from loguru import logger

from quotefit.core.exceptions import (
    InsufficientDataError,
    InvalidParameterError,
    UnderdeterminedModelError,
)
from quotefit.core.models.quote import TimeSeriesTable

_EPOCH = pd.Timestamp("1970-01-01")
_MIN_ROWS = 2


def time_ordinal(timestamps: pd.DatetimeIndex) -> np.ndarray:
    """Days since the epoch as float64, monotonic in the timestamps."""

    return np.asarray((timestamps - _EPOCH) / pd.Timedelta(days=1), dtype="float64")


def spline_formula(spline_count: int) -> str:
    # 单自由度的自然样条即线性项
    if spline_count == 1:
        return "t"
    return f"cr(t, df={spline_count}, constraints='center')"


@dataclass(frozen=True)
class SplineFit:
    """Fitted spline model and its predictions on the observed timestamps."""

    spline_count: int
    grid: pd.Series
    params: pd.Series
    r_squared: float
    residual_std_error: float
    df_resid: int

    @property
    def timestamps(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self.grid.index)


def _check_spline_count(spline_count: int) -> None:
    if isinstance(spline_count, bool) or not isinstance(spline_count, (int, np.integer)):
        raise InvalidParameterError(
            f"spline_count must be an integer, got {type(spline_count).__name__}",
            {"spline_count": repr(spline_count)},
        )
    if spline_count < 1:
        raise InvalidParameterError(f"spline_count must be positive, got {spline_count}", {"spline_count": int(spline_count)})


def _diagnostics(close: np.ndarray, fitted: np.ndarray, df_resid: int) -> tuple[float, float]:
    ssr = float(np.sum((close - fitted) ** 2))
    tss = float(np.sum((close - close.mean()) ** 2))
    r_squared = 1.0 - ssr / tss if tss > 0 else math.nan
    residual_std_error = math.sqrt(ssr / df_resid) if df_resid > 0 else math.nan
    return r_squared, residual_std_error


def fit_spline(view: TimeSeriesTable, spline_count: int) -> SplineFit:
    """Fit close ~ natural spline(time) and predict at every observed timestamp.

    Raises:
        InvalidParameterError: ``spline_count`` is not a positive integer.
        InsufficientDataError: fewer than two rows.
        UnderdeterminedModelError: ``spline_count`` is not below the number
            of distinct timestamps, or the basis comes out rank deficient.
    """

    _check_spline_count(spline_count)
    spline_count = int(spline_count)

    if len(view) < _MIN_ROWS:
        raise InsufficientDataError(
            f"Need at least {_MIN_ROWS} rows to fit, got {len(view)}",
            row_count=len(view),
        )

    timestamps = view.timestamps
    distinct = int(timestamps.nunique())
    if spline_count >= distinct:
        raise UnderdeterminedModelError(
            f"spline_count={spline_count} needs at least {spline_count + 1} distinct timestamps, got {distinct}",
            spline_count=spline_count,
            distinct_timestamps=distinct,
        )

    data = {"t": time_ordinal(timestamps)}
    close = view.closes
    try:
        design = patsy.dmatrix(spline_formula(spline_count), data, return_type="dataframe")
    except patsy.PatsyError as exc:
        raise UnderdeterminedModelError(
            f"Cannot build a spline basis with df={spline_count}: {exc}",
            spline_count=spline_count,
            distinct_timestamps=distinct,
        ) from exc

    if np.linalg.matrix_rank(design.to_numpy()) < design.shape[1]:
        raise UnderdeterminedModelError(
            f"Spline basis with df={spline_count} is rank deficient",
            spline_count=spline_count,
            distinct_timestamps=distinct,
        )

    try:
        results = sm.OLS(close, design).fit()
    except np.linalg.LinAlgError as exc:
        raise UnderdeterminedModelError(
            f"Least-squares fit failed: {exc}",
            spline_count=spline_count,
            distinct_timestamps=distinct,
        ) from exc

    grid_timestamps = timestamps.unique()
    grid_design = patsy.build_design_matrices(
        [design.design_info], {"t": time_ordinal(grid_timestamps)}, return_type="dataframe"
    )[0]
    predicted = np.asarray(grid_design.to_numpy() @ results.params.to_numpy(), dtype="float64")
    grid = pd.Series(predicted, index=pd.DatetimeIndex(grid_timestamps, name="timestamp"), name="predicted_close")

    df_resid = len(view) - design.shape[1]
    r_squared, residual_std_error = _diagnostics(close, np.asarray(results.fittedvalues, dtype="float64"), df_resid)

    logger.debug(
        "Fitted spline df={} on {} rows (r_squared={:.4f})",
        spline_count,
        len(view),
        r_squared,
    )
    return SplineFit(
        spline_count=spline_count,
        grid=grid,
        params=results.params.copy(),
        r_squared=r_squared,
        residual_std_error=residual_std_error,
        df_resid=df_resid,
    )


__all__ = ["SplineFit", "fit_spline", "spline_formula", "time_ordinal"]
