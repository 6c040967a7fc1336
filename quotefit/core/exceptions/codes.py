"""Standardised error codes."""

from enum import Enum


class ErrorCode(str, Enum):
    """quotefit错误代码."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # 获取
    FETCH_ERROR = "FETCH_ERROR"

    # 规范化
    MISSING_FIELD = "MISSING_FIELD"
    SHAPE_MISMATCH = "SHAPE_MISMATCH"
    DUPLICATE_TIMESTAMP = "DUPLICATE_TIMESTAMP"
    PARSE_ERROR = "PARSE_ERROR"

    # 参数
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_PARAMETER = "INVALID_PARAMETER"

    # 模型
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    UNDERDETERMINED_MODEL = "UNDERDETERMINED_MODEL"
    JOIN_ERROR = "JOIN_ERROR"


__all__ = ["ErrorCode"]
