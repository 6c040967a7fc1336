"""Exception handling module."""

from quotefit.core.exceptions.base import (
    ConfigurationError,
    DuplicateTimestampError,
    FetchError,
    InsufficientDataError,
    InvalidParameterError,
    InvalidRangeError,
    JoinError,
    MissingFieldError,
    ModelError,
    NormalizationError,
    ParseError,
    QuoteFitError,
    ShapeMismatchError,
    UnderdeterminedModelError,
)
from quotefit.core.exceptions.codes import ErrorCode

__all__ = [
    "QuoteFitError",
    "ConfigurationError",
    "FetchError",
    "NormalizationError",
    "MissingFieldError",
    "ShapeMismatchError",
    "DuplicateTimestampError",
    "ParseError",
    "InvalidRangeError",
    "InvalidParameterError",
    "ModelError",
    "InsufficientDataError",
    "UnderdeterminedModelError",
    "JoinError",
    "ErrorCode",
]
