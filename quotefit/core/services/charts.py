"""Data behind the three exploratory charts of a pipeline run."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.nonparametric.bandwidths import bw_normal_reference

from quotefit.core.config.settings import ModelConfig
from quotefit.core.models.results import PipelineResult


@dataclass(frozen=True)
class ResidualDensity:
    bin_edges: np.ndarray
    histogram: np.ndarray
    support: np.ndarray | None = None
    kde: np.ndarray | None = None

    @property
    def has_kde(self) -> bool:
        return self.kde is not None


@dataclass(frozen=True)
class ChartViews:
    trend: pd.DataFrame
    residual_scatter: pd.DataFrame
    residual_density: ResidualDensity


def trend_overlay(result: PipelineResult) -> pd.DataFrame:
    """Actual closes with the fitted curve, one row per timestamp."""

    frame = result.annotated
    return pd.DataFrame(
        {
            "timestamp": frame["timestamp"],
            "close": frame["close"],
            "fitted": frame["predicted_close"],
        }
    ).reset_index(drop=True)


def residual_scatter(result: PipelineResult) -> pd.DataFrame:
    frame = result.annotated
    return frame.loc[:, ["timestamp", "residual"]].reset_index(drop=True)


def residual_density(residuals: np.ndarray, bins: int = 30, grid_size: int = 200) -> ResidualDensity:
    """Histogram density plus a Gaussian KDE.

    The KDE is left out when the normal-reference bandwidth is not positive,
    which happens for constant residuals and for residuals whose
    interquartile range is zero.
    """

    values = np.asarray(residuals, dtype="float64")
    if values.size == 0:
        return ResidualDensity(bin_edges=np.array([]), histogram=np.array([]))

    histogram, bin_edges = np.histogram(values, bins=bins, density=True)
    if values.size < 2:
        return ResidualDensity(bin_edges=bin_edges, histogram=histogram.astype("float64"))
    bandwidth = float(bw_normal_reference(values))
    if not (math.isfinite(bandwidth) and bandwidth > 0.0):
        return ResidualDensity(bin_edges=bin_edges, histogram=histogram.astype("float64"))

    kde = sm.nonparametric.KDEUnivariate(values)
    kde.fit(kernel="gau", bw=bandwidth, fft=True, gridsize=grid_size)
    return ResidualDensity(
        bin_edges=bin_edges,
        histogram=histogram.astype("float64"),
        support=np.asarray(kde.support, dtype="float64"),
        kde=np.asarray(kde.density, dtype="float64"),
    )


def build_chart_views(result: PipelineResult, config: ModelConfig | None = None) -> ChartViews:
    config = config or ModelConfig()
    residuals = result.annotated["residual"].to_numpy(dtype="float64")
    return ChartViews(
        trend=trend_overlay(result),
        residual_scatter=residual_scatter(result),
        residual_density=residual_density(residuals, bins=config.density_bins, grid_size=config.density_grid_size),
    )


__all__ = ["ChartViews", "ResidualDensity", "build_chart_views", "residual_density", "residual_scatter", "trend_overlay"]
