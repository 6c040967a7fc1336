"""Quote commands: classify labels, normalize responses and run fits."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from quotefit.core.config import ConfigManager, QuoteFitConfig
from quotefit.core.data.classifier import classify_label
from quotefit.core.data.normalizer import NormalizedQuote, normalize_response
from quotefit.core.data.providers import AlphaVantageFetcher, QuoteFetcher
from quotefit.core.exceptions import (
    ConfigurationError,
    FetchError,
    InvalidParameterError,
    InvalidRangeError,
    ModelError,
    NormalizationError,
    QuoteFitError,
)
from quotefit.core.models.request import QuoteFunction, QuoteRequest, RunParameters
from quotefit.core.services.pipeline import QuotePipeline, run_on_table

from .constants import FETCH_EXIT_CODE, MODEL_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import LABEL_COLUMNS, QUOTE_COLUMNS, RESIDUAL_COLUMNS, Column, create_formatter
from .utils import emit_error, output_stream, report_error

_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M:%S"]

_EXIT_CODES: tuple[tuple[type[QuoteFitError], int], ...] = (
    (NormalizationError, VALIDATION_EXIT_CODE),
    (InvalidRangeError, VALIDATION_EXIT_CODE),
    (InvalidParameterError, VALIDATION_EXIT_CODE),
    (ConfigurationError, VALIDATION_EXIT_CODE),
    (FetchError, FETCH_EXIT_CODE),
    (ModelError, MODEL_EXIT_CODE),
)


def register(app: typer.Typer) -> None:
    """Register quote commands on the provided application."""

    app.command("classify")(classify_command)
    app.command("normalize")(normalize_command)
    app.command("fit")(fit_command)


def get_config() -> QuoteFitConfig:
    """Factory hook for the active configuration."""

    return ConfigManager().get_config()


def get_fetcher(config: QuoteFitConfig) -> QuoteFetcher:
    """Factory hook for the remote quote fetcher."""

    return AlphaVantageFetcher(config.fetch)


@contextmanager
def _exit_on_error() -> Iterator[None]:
    try:
        yield
    except QuoteFitError as error:
        report_error(error)
        code = next((code for kind, code in _EXIT_CODES if isinstance(error, kind)), SYSTEM_EXIT_CODE)
        raise typer.Exit(code=code) from error
    except ValidationError as error:
        emit_error(str(error), "VALIDATION_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from error


def _render(ctx: typer.Context, rows: Sequence[Mapping[str, object]], columns: Sequence[Column]) -> None:
    options = ctx.ensure_object(dict)
    formatter = create_formatter(options.get("format", "table"), no_color=options.get("no_color", False))
    with output_stream(options.get("output_path")) as stream:
        formatter.render(rows, columns, stream=stream)


def _load_response(source: Path) -> Mapping[str, Any]:
    try:
        with open(source, encoding="utf-8") as file:
            return json.load(file)
    except OSError as exc:
        emit_error(f"Unable to read '{source}': {exc}", "RESPONSE_FILE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    except json.JSONDecodeError as exc:
        emit_error(f"'{source}' is not valid JSON: {exc}", "RESPONSE_FILE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc


def _table_rows(normalized: NormalizedQuote) -> list[dict[str, object]]:
    return normalized.table.frame.to_dict(orient="records")


def classify_command(
    ctx: typer.Context,
    labels: list[str] = typer.Argument(..., help="Raw field labels, e.g. '4. close'."),
) -> None:
    """Show the role each label is classified as."""

    rows = [{"label": label, "role": classify_label(label).value} for label in labels]
    _render(ctx, rows, LABEL_COLUMNS)


def normalize_command(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Saved JSON response to normalize."),
) -> None:
    """Normalize a saved response and print its time-series rows."""

    raw = _load_response(source)
    with _exit_on_error():
        normalized = normalize_response(raw)
    _render(ctx, _table_rows(normalized), QUOTE_COLUMNS)


def fit_command(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="Saved JSON response; omit to fetch live."),
    symbol: str | None = typer.Option(None, "--symbol", help="Symbol to fetch."),
    function: QuoteFunction = typer.Option(QuoteFunction.DAILY, "--function", help="Time-series endpoint."),
    interval: str | None = typer.Option(None, "--interval", help="Intraday interval, e.g. 5min."),
    api_key: str | None = typer.Option(None, "--api-key", envvar="QUOTEFIT_API_KEY", help="Service API key."),
    start: datetime | None = typer.Option(None, "--start", formats=_DATE_FORMATS, help="Earliest timestamp."),
    end: datetime | None = typer.Option(None, "--end", formats=_DATE_FORMATS, help="Latest timestamp."),
    min_price: float | None = typer.Option(None, "--min-price", help="Lowest close to keep."),
    max_price: float | None = typer.Option(None, "--max-price", help="Highest close to keep."),
    splines: int | None = typer.Option(None, "--splines", help="Spline degrees of freedom."),
) -> None:
    """Filter, fit and print per-timestamp residuals."""

    if source is None and not symbol:
        emit_error("Provide a response file or --symbol.", "SOURCE_MISSING")
        raise typer.Exit(code=VALIDATION_EXIT_CODE)

    with _exit_on_error():
        config = get_config()
        if source is not None:
            normalized = normalize_response(_load_response(source))
        else:
            request = QuoteRequest(function=function, symbol=symbol, apikey=api_key or "", interval=interval)
            with get_fetcher(config) as fetcher:
                normalized = QuotePipeline(fetcher).load(request)

        spline_count = splines if splines is not None else config.model.default_spline_count
        defaults = RunParameters.covering(normalized.table, spline_count)
        parameters = RunParameters(
            x_range=(start or defaults.x_range[0], end or defaults.x_range[1]),
            y_range=(
                defaults.y_range[0] if min_price is None else min_price,
                defaults.y_range[1] if max_price is None else max_price,
            ),
            spline_count=spline_count,
        )
        result = run_on_table(normalized.metadata, normalized.table, parameters)

    _render(ctx, [record.as_dict() for record in result.residuals], RESIDUAL_COLUMNS)


__all__ = ["register", "classify_command", "normalize_command", "fit_command", "get_config", "get_fetcher"]
