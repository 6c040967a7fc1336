"""Error reporting and output-stream helpers shared by CLI commands."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import typer

from quotefit.core.exceptions import QuoteFitError

from .constants import VALIDATION_EXIT_CODE


def emit_error(message: str, code: str, *, details: Mapping[str, object] | None = None) -> None:
    """Print a structured error payload to stderr."""

    payload: dict[str, object] = {"code": code, "message": message}
    if details:
        payload["details"] = dict(details)
    typer.echo(json.dumps(payload, ensure_ascii=False, default=str), err=True)


def report_error(error: QuoteFitError) -> None:
    payload = error.to_payload()
    emit_error(payload["message"], payload["code"], details=payload["details"])


@contextmanager
def output_stream(path: Path | None) -> Iterator[TextIO]:
    """Yield stdout, or ``path`` opened for writing when one was given."""

    if path is None:
        yield sys.stdout
        return
    try:
        file = open(path, "w", encoding="utf-8")
    except OSError as exc:
        emit_error(f"Unable to open '{path}': {exc}", "OUTPUT_WRITE_ERROR")
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    with file:
        yield file


__all__ = ["emit_error", "output_stream", "report_error"]
