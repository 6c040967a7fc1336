"""Column-aware renderers for quote tables and residual records."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table


class ColumnKind(str, Enum):
    TIMESTAMP = "timestamp"
    PRICE = "price"
    VOLUME = "volume"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class Column:
    """One output column: the row key it reads and how its values print."""

    key: str
    kind: ColumnKind = ColumnKind.TEXT

    @property
    def numeric(self) -> bool:
        return self.kind in (ColumnKind.PRICE, ColumnKind.VOLUME)

    def json_value(self, value: object) -> object:
        if value is None:
            return None
        if self.kind is ColumnKind.TIMESTAMP:
            return value.isoformat() if isinstance(value, datetime) else str(value)
        if self.kind is ColumnKind.PRICE:
            return float(value)
        if self.kind is ColumnKind.VOLUME:
            return int(round(float(value)))
        return str(value)

    def text(self, value: object, price_digits: int) -> str:
        if value is None:
            return "-"
        rendered = self.json_value(value)
        if self.kind is ColumnKind.PRICE:
            return f"{rendered:.{price_digits}f}"
        if self.kind is ColumnKind.VOLUME:
            return f"{rendered:,d}"
        return str(rendered)


LABEL_COLUMNS: tuple[Column, ...] = (Column("label"), Column("role"))
QUOTE_COLUMNS: tuple[Column, ...] = (
    Column("timestamp", ColumnKind.TIMESTAMP),
    Column("open", ColumnKind.PRICE),
    Column("high", ColumnKind.PRICE),
    Column("low", ColumnKind.PRICE),
    Column("close", ColumnKind.PRICE),
    Column("volume", ColumnKind.VOLUME),
)
RESIDUAL_COLUMNS: tuple[Column, ...] = (
    Column("timestamp", ColumnKind.TIMESTAMP),
    Column("actual_close", ColumnKind.PRICE),
    Column("predicted_close", ColumnKind.PRICE),
    Column("residual", ColumnKind.PRICE),
)


class OutputFormatter:
    """Base class for CLI output formatters."""

    name: str

    def render(self, rows: Sequence[Mapping[str, object]], columns: Sequence[Column], *, stream: TextIO) -> None:
        raise NotImplementedError


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Rich table with right-aligned numeric columns."""

    name: str = "table"
    no_color: bool = False
    price_digits: int = 4

    def render(self, rows: Sequence[Mapping[str, object]], columns: Sequence[Column], *, stream: TextIO) -> None:
        console = Console(file=stream, color_system=None if self.no_color else "auto", no_color=self.no_color, width=160)
        table = Table(box=SIMPLE, show_lines=False)
        for column in columns:
            table.add_column(
                column.key,
                header_style="" if self.no_color else "bold",
                justify="right" if column.numeric else "left",
            )
        for row in rows:
            table.add_row(*(column.text(row.get(column.key), self.price_digits) for column in columns))
        console.print(table)
        if not rows:
            console.print("No rows.")


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """One JSON object per row, keys in column order."""

    name: str = "jsonl"

    def render(self, rows: Sequence[Mapping[str, object]], columns: Sequence[Column], *, stream: TextIO) -> None:
        for row in rows:
            json.dump({column.key: column.json_value(row.get(column.key)) for column in columns}, stream, ensure_ascii=False)
            stream.write("\n")
        stream.flush()


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Instantiate a formatter by name."""

    normalized = name.strip().lower()
    if normalized == "table":
        return TableFormatter(no_color=no_color)
    if normalized == "jsonl":
        return JSONLFormatter()
    raise ValueError(f"Unsupported format '{name}'. Available formats: table, jsonl.")


__all__ = [
    "Column",
    "ColumnKind",
    "JSONLFormatter",
    "LABEL_COLUMNS",
    "OutputFormatter",
    "QUOTE_COLUMNS",
    "RESIDUAL_COLUMNS",
    "TableFormatter",
    "create_formatter",
]
