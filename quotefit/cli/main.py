"""Main entry point for the quotefit command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from quotefit.core.exceptions import QuoteFitError
from quotefit.core.logging import configure_logging

from . import quote as quote_commands
from .constants import VALIDATION_EXIT_CODE
from .formatters import create_formatter
from .utils import report_error

_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def create_app() -> typer.Typer:
    """Create a Typer application instance for quotefit."""

    app = typer.Typer(add_completion=False, help="quotefit command line interface")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Logging level for stderr diagnostics (defaults to the configured level).",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        try:
            settings = quote_commands.get_config().logging
        except QuoteFitError as error:
            report_error(error)
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

        level = (log_level or settings.level).upper()
        if level not in _LOG_LEVELS:
            allowed = ", ".join(_LOG_LEVELS)
            raise typer.BadParameter(f"Unsupported log level '{level}'. Allowed values: {allowed}", param_hint="--log-level")
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "log_level": level,
                "no_color": no_color,
            }
        )
        configure_logging(
            level,
            serialize=settings.serialize,
            file_output=settings.file is not None,
            file_path=settings.file,
        )

    quote_commands.register(app)
    return app


app = create_app()
