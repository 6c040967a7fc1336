"""Filtering, regression, residual and orchestration services."""

from quotefit.core.services.charts import ChartViews, ResidualDensity, build_chart_views
from quotefit.core.services.pipeline import QuotePipeline, run_on_table
from quotefit.core.services.range_filter import filter_table, validate_ranges
from quotefit.core.services.regression import SplineFit, fit_spline
from quotefit.core.services.residuals import annotate, compute_residuals

__all__ = [
    "ChartViews",
    "ResidualDensity",
    "build_chart_views",
    "QuotePipeline",
    "run_on_table",
    "filter_table",
    "validate_ranges",
    "SplineFit",
    "fit_spline",
    "annotate",
    "compute_residuals",
]
