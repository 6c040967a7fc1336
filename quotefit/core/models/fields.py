"""Canonical field roles."""

from enum import Enum


class FieldRole(str, Enum):
    """字段角色枚举."""

    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"
    UNCLASSIFIED = "unclassified"


# 每个时间点必须解析出的角色, 按OHLCV顺序
REQUIRED_ROLES: tuple[FieldRole, ...] = (
    FieldRole.OPEN,
    FieldRole.HIGH,
    FieldRole.LOW,
    FieldRole.CLOSE,
    FieldRole.VOLUME,
)
