"""Core data models."""

from quotefit.core.models.fields import REQUIRED_ROLES, FieldRole
from quotefit.core.models.quote import (
    TABLE_COLUMNS,
    VALUE_COLUMNS,
    MetaData,
    TimeSeriesPoint,
    TimeSeriesTable,
)
from quotefit.core.models.request import (
    INTRADAY_INTERVALS,
    QuoteFunction,
    QuoteRequest,
    RunParameters,
)
from quotefit.core.models.results import PipelineResult, PipelineStage, ResidualRecord

__all__ = [
    "FieldRole",
    "REQUIRED_ROLES",
    "MetaData",
    "TimeSeriesPoint",
    "TimeSeriesTable",
    "TABLE_COLUMNS",
    "VALUE_COLUMNS",
    "QuoteFunction",
    "QuoteRequest",
    "RunParameters",
    "INTRADAY_INTERVALS",
    "PipelineStage",
    "ResidualRecord",
    "PipelineResult",
]
