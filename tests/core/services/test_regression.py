"""Tests for the natural-spline regression engine."""

from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from quotefit.core.exceptions import (
    InsufficientDataError,
    InvalidParameterError,
    ModelError,
    UnderdeterminedModelError,
)
from quotefit.core.models.quote import TimeSeriesTable
from quotefit.core.services.regression import fit_spline, time_ordinal


def test_grid_keys_match_view_timestamps(curve_table: TimeSeriesTable) -> None:
    fit = fit_spline(curve_table, 5)

    assert fit.grid.index.equals(curve_table.timestamps)
    assert fit.grid.name == "predicted_close"
    assert np.isfinite(fit.grid.to_numpy()).all()


def test_more_degrees_of_freedom_fit_at_least_as_well(curve_table: TimeSeriesTable) -> None:
    coarse = fit_spline(curve_table, 2)
    fine = fit_spline(curve_table, 8)

    assert fine.r_squared >= coarse.r_squared
    assert fine.r_squared > 0.9


def test_straight_line_is_recovered(make_table) -> None:
    closes = [50.0 + 2.0 * index for index in range(12)]
    table = make_table(closes)

    fit = fit_spline(table, 3)

    np.testing.assert_allclose(fit.grid.to_numpy(), closes, atol=1e-5)


def test_single_degree_of_freedom_on_two_rows(make_table) -> None:
    fit = fit_spline(make_table([10.0, 12.0]), 1)

    np.testing.assert_allclose(fit.grid.to_numpy(), [10.0, 12.0], atol=1e-9)
    assert len(fit.params) == 2
    assert fit.df_resid == 0


def test_single_degree_of_freedom_is_least_squares_line(curve_table: TimeSeriesTable) -> None:
    fit = fit_spline(curve_table, 1)

    assert fit.grid.index.equals(curve_table.timestamps)
    slope, intercept = np.polyfit(time_ordinal(curve_table.timestamps), curve_table.closes, 1)
    expected = intercept + slope * time_ordinal(curve_table.timestamps)
    np.testing.assert_allclose(fit.grid.to_numpy(), expected, rtol=1e-7)


def test_single_degree_of_freedom_at_minute_spacing() -> None:
    stamps = pd.date_range("2024-01-02 09:30", periods=6, freq="min")
    closes = [100.0, 100.5, 100.2, 100.9, 101.1, 101.0]
    table = TimeSeriesTable(
        pd.DataFrame(
            {"timestamp": stamps, "open": closes, "high": closes, "low": closes, "close": closes, "volume": 10.0}
        )
    )

    fit = fit_spline(table, 1)

    assert fit.grid.index.equals(table.timestamps)
    assert np.allclose(np.diff(fit.grid.to_numpy(), n=2), 0.0, atol=1e-8)


def test_parameter_count_is_spline_count_plus_intercept(curve_table: TimeSeriesTable) -> None:
    fit = fit_spline(curve_table, 4)

    assert len(fit.params) == 5
    assert fit.df_resid == len(curve_table) - 5
    assert fit.residual_std_error >= 0.0


def test_spline_count_equal_to_distinct_timestamps_is_underdetermined(make_table) -> None:
    with pytest.raises(UnderdeterminedModelError) as excinfo:
        fit_spline(make_table([10.0, 12.0, 11.0]), 3)

    assert excinfo.value.distinct_timestamps == 3
    assert excinfo.value.spline_count == 3


def test_largest_allowed_spline_count_interpolates(make_table) -> None:
    closes = [10.0, 12.0, 11.0, 13.0]
    fit = fit_spline(make_table(closes), 3)

    np.testing.assert_allclose(fit.grid.to_numpy(), closes, atol=1e-6)
    assert fit.df_resid == 0
    assert math.isnan(fit.residual_std_error)


def test_empty_view_is_insufficient() -> None:
    with pytest.raises(InsufficientDataError) as excinfo:
        fit_spline(TimeSeriesTable.empty(), 3)

    assert excinfo.value.row_count == 0
    assert isinstance(excinfo.value, ModelError)


def test_single_row_is_insufficient(make_table) -> None:
    with pytest.raises(InsufficientDataError):
        fit_spline(make_table([10.0]), 1)


@pytest.mark.parametrize("spline_count", [0, -2, 2.5, True, "3"])
def test_invalid_spline_count(curve_table: TimeSeriesTable, spline_count) -> None:
    with pytest.raises(InvalidParameterError):
        fit_spline(curve_table, spline_count)


def test_time_ordinal_is_days_since_epoch() -> None:
    ordinal = time_ordinal(pd.DatetimeIndex(["1970-01-02", "1970-01-02 12:00:00"]))

    np.testing.assert_allclose(ordinal, [1.0, 1.5])
