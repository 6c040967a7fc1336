"""quotefit核心异常类."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from quotefit.core.exceptions.codes import ErrorCode


class QuoteFitError(Exception):
    """quotefit基础异常类."""

    code: ErrorCode = ErrorCode.GENERAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            details: 额外详情
        """
        super().__init__(message)
        self.message = message
        self.error_code = self.code.value
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.error_code,
            "message": self.message,
            "details": {key: _jsonable(value) for key, value in self.details.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return value


class ConfigurationError(QuoteFitError):
    """配置异常."""

    code = ErrorCode.CONFIGURATION_ERROR


class FetchError(QuoteFitError):
    """远程行情获取失败 (网络, 认证或服务端错误)."""

    code = ErrorCode.FETCH_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, super_details)
        self.status_code = status_code


class NormalizationError(QuoteFitError):
    """响应规范化阶段异常的基类."""


class MissingFieldError(NormalizationError):
    """某个时间戳无法解析出全部OHLCV字段."""

    code = ErrorCode.MISSING_FIELD

    def __init__(
        self,
        message: str,
        timestamp: str | None = None,
        missing_roles: Iterable[str] = (),
    ):
        missing = sorted(missing_roles)
        super().__init__(message, {"timestamp": timestamp, "missing_roles": missing})
        self.timestamp = timestamp
        self.missing_roles = missing


class ShapeMismatchError(NormalizationError):
    """响应结构与预期不符."""

    code = ErrorCode.SHAPE_MISMATCH


class DuplicateTimestampError(NormalizationError):
    """同一时间戳出现多次."""

    code = ErrorCode.DUPLICATE_TIMESTAMP

    def __init__(self, message: str, timestamp: datetime | None = None):
        super().__init__(message, {"timestamp": timestamp})
        self.timestamp = timestamp


class ParseError(NormalizationError):
    """字段值或时间戳无法解析."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, message: str, label: str | None = None, raw_value: Any = None):
        super().__init__(message, {"label": label, "raw_value": None if raw_value is None else str(raw_value)})
        self.label = label
        self.raw_value = raw_value


class InvalidRangeError(QuoteFitError):
    """过滤区间非法."""

    code = ErrorCode.INVALID_RANGE


class InvalidParameterError(QuoteFitError):
    """模型参数非法."""

    code = ErrorCode.INVALID_PARAMETER


class ModelError(QuoteFitError):
    """拟合阶段异常的基类."""


class InsufficientDataError(ModelError):
    """可用行数不足以拟合."""

    code = ErrorCode.INSUFFICIENT_DATA

    def __init__(self, message: str, row_count: int = 0):
        super().__init__(message, {"row_count": row_count})
        self.row_count = row_count


class UnderdeterminedModelError(ModelError):
    """样条自由度超过可用的不同时间戳."""

    code = ErrorCode.UNDERDETERMINED_MODEL

    def __init__(self, message: str, spline_count: int, distinct_timestamps: int):
        super().__init__(
            message,
            {"spline_count": spline_count, "distinct_timestamps": distinct_timestamps},
        )
        self.spline_count = spline_count
        self.distinct_timestamps = distinct_timestamps


class JoinError(ModelError):
    """预测网格与过滤视图的时间戳不一致."""

    code = ErrorCode.JOIN_ERROR

    def __init__(self, message: str, missing_timestamps: Iterable[datetime] = ()):
        missing = list(missing_timestamps)
        super().__init__(message, {"missing_timestamps": missing})
        self.missing_timestamps = missing
