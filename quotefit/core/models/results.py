"""Pipeline stage and result types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import pandas as pd

from quotefit.core.models.quote import MetaData, TimeSeriesTable

if TYPE_CHECKING:
    from quotefit.core.services.regression import SplineFit


class PipelineStage(str, Enum):
    """流水线状态."""

    FETCHED = "fetched"
    NORMALIZED = "normalized"
    FILTERED = "filtered"
    FITTED = "fitted"
    RESIDUAL_COMPUTED = "residual_computed"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class ResidualRecord:
    """Actual vs. predicted close at one timestamp."""

    timestamp: datetime
    actual_close: float
    predicted_close: float
    residual: float

    def as_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "actual_close": self.actual_close,
            "predicted_close": self.predicted_close,
            "residual": self.residual,
        }


@dataclass(frozen=True)
class PipelineResult:
    """Everything a chart assembler needs from one completed run."""

    metadata: MetaData
    view: TimeSeriesTable
    fit: SplineFit
    residuals: tuple[ResidualRecord, ...]
    annotated: pd.DataFrame
    stage: PipelineStage = PipelineStage.READY

    @property
    def grid(self) -> pd.Series:
        return self.fit.grid


__all__ = ["PipelineStage", "ResidualRecord", "PipelineResult"]
