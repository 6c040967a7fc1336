"""Residuals of a filtered view against its prediction grid."""

from __future__ import annotations

import pandas as pd

from quotefit.core.exceptions import JoinError
from quotefit.core.models.quote import TimeSeriesTable
from quotefit.core.models.results import ResidualRecord


def _aligned_predictions(view: TimeSeriesTable, grid: pd.Series) -> pd.Series:
    timestamps = view.timestamps
    missing = timestamps.difference(pd.DatetimeIndex(grid.index))
    if len(missing):
        raise JoinError(
            f"{len(missing)} timestamp(s) in the view have no prediction",
            missing_timestamps=[stamp.to_pydatetime() for stamp in missing],
        )
    return grid.reindex(timestamps)


def compute_residuals(view: TimeSeriesTable, grid: pd.Series) -> tuple[ResidualRecord, ...]:
    """One record per view row, ``residual = actual_close - predicted_close``."""

    predicted = _aligned_predictions(view, grid).to_numpy(dtype="float64")
    return tuple(
        ResidualRecord(
            timestamp=point.timestamp,
            actual_close=point.close,
            predicted_close=float(prediction),
            residual=point.close - float(prediction),
        )
        for point, prediction in zip(view, predicted, strict=True)
    )


def annotate(view: TimeSeriesTable, residuals: tuple[ResidualRecord, ...]) -> pd.DataFrame:
    """Copy of the view's frame with ``predicted_close`` and ``residual`` columns."""

    frame = view.frame
    frame["predicted_close"] = [record.predicted_close for record in residuals]
    frame["residual"] = [record.residual for record in residuals]
    return frame


__all__ = ["annotate", "compute_residuals"]
