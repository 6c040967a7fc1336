"""Normalization of nested quote responses into :class:`TimeSeriesTable`."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from math import isfinite
from typing import Any

from loguru import logger

from quotefit.core.data.classifier import FieldClassifier, strip_ordinal
from quotefit.core.exceptions import (
    DuplicateTimestampError,
    MissingFieldError,
    ParseError,
    ShapeMismatchError,
)
from quotefit.core.models.fields import REQUIRED_ROLES, FieldRole
from quotefit.core.models.quote import MetaData, TimeSeriesPoint, TimeSeriesTable

_SYMBOL_SLOT = 1
_AUX_SLOT = 3


@dataclass(frozen=True)
class NormalizedQuote:
    """规范化结果: 元数据与时间序列表."""

    metadata: MetaData
    table: TimeSeriesTable


def parse_timestamp(raw: str) -> datetime:
    """解析 ``YYYY-MM-DD`` 或 ``YYYY-MM-DD HH:MM:SS`` 格式的时间戳."""
    if not isinstance(raw, str):
        raise ParseError(f"Timestamp key must be a string, got {type(raw).__name__}", label="timestamp", raw_value=raw)
    text = raw.strip()
    try:
        if " " in text:
            return datetime.strptime(text, "%Y-%m-%d %H:%M:%S")
        return datetime.strptime(text, "%Y-%m-%d")
    except ValueError as exc:
        raise ParseError(f"Unparseable timestamp {raw!r}", label="timestamp", raw_value=raw) from exc


def parse_number(raw: Any, label: str) -> float:
    """把十进制字符串解析为有限的64位浮点数."""
    if isinstance(raw, bool):
        raise ParseError(f"Field {label!r} holds a boolean, not a number", label=label, raw_value=raw)
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError as exc:
            raise ParseError(f"Field {label!r} is not numeric: {raw!r}", label=label, raw_value=raw) from exc
    else:
        raise ParseError(f"Field {label!r} has unsupported type {type(raw).__name__}", label=label, raw_value=raw)

    if not isfinite(value):
        raise ParseError(f"Field {label!r} is not finite: {raw!r}", label=label, raw_value=raw)
    return value


class ResponseNormalizer:
    """Turns one raw response into metadata plus a sorted OHLCV table.

    The response must hold exactly two top-level mappings: metadata first,
    then the timestamp-keyed series. Any failure aborts the whole response;
    no partially built table is returned.
    """

    def __init__(self, classifier: FieldClassifier | None = None) -> None:
        self.classifier = classifier or FieldClassifier()

    def normalize(self, raw: Mapping[str, Any]) -> NormalizedQuote:
        meta_section, series_section = self._split_sections(raw)
        metadata = self.extract_metadata(meta_section)

        points = [self._build_point(key, record) for key, record in series_section.items()]
        points.sort(key=lambda point: point.timestamp)
        for previous, current in zip(points, points[1:]):
            if previous.timestamp == current.timestamp:
                raise DuplicateTimestampError(
                    f"Duplicate timestamp {current.timestamp.isoformat()} for {metadata.symbol}",
                    timestamp=current.timestamp,
                )

        table = TimeSeriesTable.from_points(points)
        logger.debug("Normalized {} rows for {}", len(table), metadata.symbol)
        return NormalizedQuote(metadata=metadata, table=table)

    @staticmethod
    def _split_sections(raw: Mapping[str, Any]) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
        if not isinstance(raw, Mapping):
            raise ShapeMismatchError(f"Response must be a mapping, got {type(raw).__name__}")
        if len(raw) != 2:
            raise ShapeMismatchError(
                f"Response must have exactly two top-level entries, got {len(raw)}",
                {"keys": list(raw.keys())},
            )
        (meta_key, meta_section), (series_key, series_section) = raw.items()
        for key, section in ((meta_key, meta_section), (series_key, series_section)):
            if not isinstance(section, Mapping):
                raise ShapeMismatchError(f"Top-level entry {key!r} is not a mapping", {"key": key})
        return meta_section, series_section

    @staticmethod
    def extract_metadata(section: Mapping[str, Any]) -> MetaData:
        entries = list(section.items())
        if len(entries) <= _SYMBOL_SLOT:
            raise MissingFieldError("Metadata has no symbol entry", missing_roles=["symbol"])

        aux_field = str(entries[_AUX_SLOT][1]) if len(entries) > _AUX_SLOT else ""
        return MetaData(
            symbol=str(entries[_SYMBOL_SLOT][1]),
            aux_field=aux_field,
            extra={strip_ordinal(label): str(value) for label, value in entries},
        )

    def _build_point(self, key: str, record: Any) -> TimeSeriesPoint:
        if not isinstance(record, Mapping):
            raise ShapeMismatchError(f"Series entry {key!r} is not a mapping", {"timestamp": key})

        timestamp = parse_timestamp(key)
        labels = self.classifier.resolve(record.keys(), timestamp=key)
        values: dict[FieldRole, float] = {role: parse_number(record[label], label) for role, label in labels.items()}

        if len(values) != len(REQUIRED_ROLES):
            raise ShapeMismatchError(
                f"Series entry {key!r} resolved {len(values)} fields, expected {len(REQUIRED_ROLES)}",
                {"timestamp": key},
            )
        return TimeSeriesPoint(
            timestamp=timestamp,
            open=values[FieldRole.OPEN],
            high=values[FieldRole.HIGH],
            low=values[FieldRole.LOW],
            close=values[FieldRole.CLOSE],
            volume=values[FieldRole.VOLUME],
        )


def normalize_response(raw: Mapping[str, Any]) -> NormalizedQuote:
    return ResponseNormalizer().normalize(raw)


__all__ = ["NormalizedQuote", "ResponseNormalizer", "normalize_response", "parse_number", "parse_timestamp"]
