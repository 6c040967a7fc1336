from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from quotefit.cli import quote as quote_module
from quotefit.cli.main import create_app
from quotefit.core.config import LoggingConfig, QuoteFitConfig
from quotefit.core.data.providers.base import StaticFetcher
from quotefit.core.models import QuoteRequest


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def response_file(tmp_path: Path, daily_response) -> Path:
    path = tmp_path / "ibm_daily.json"
    path.write_text(json.dumps(daily_response(days=30)), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def default_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(quote_module, "get_config", lambda: QuoteFitConfig())


def _jsonl(output: str) -> list[dict[str, object]]:
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def test_classify_table_output(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["classify", "4. close", "5. adjusted close"])

    assert result.exit_code == 0, result.output
    assert "close" in result.stdout
    assert "unclassified" in result.stdout


def test_classify_jsonl_output(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "classify", "1. open", "6. volume"])

    assert result.exit_code == 0, result.output
    assert _jsonl(result.stdout) == [
        {"label": "1. open", "role": "open"},
        {"label": "6. volume", "role": "volume"},
    ]


def test_normalize_file(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "normalize", str(response_file)])

    assert result.exit_code == 0, result.output
    rows = _jsonl(result.stdout)
    assert len(rows) == 30
    assert rows[0]["timestamp"] == "2024-01-01T00:00:00"
    assert set(rows[0]) == {"timestamp", "open", "high", "low", "close", "volume"}


def test_normalize_reports_parse_error(runner: CliRunner, tmp_path: Path, daily_response) -> None:
    raw = daily_response(days=3)
    next(iter(raw["Time Series (Daily)"].values()))["4. close"] = "?"
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(raw), encoding="utf-8")

    result = runner.invoke(create_app(), ["normalize", str(path)])

    assert result.exit_code == 10
    assert "PARSE_ERROR" in result.output


def test_normalize_missing_file(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(create_app(), ["normalize", str(tmp_path / "nope.json")])

    assert result.exit_code == 10
    assert "RESPONSE_FILE_ERROR" in result.output


def test_fit_from_file(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "fit", str(response_file), "--splines", "4", "--start", "2024-01-05"],
    )

    assert result.exit_code == 0, result.output
    rows = _jsonl(result.stdout)
    assert len(rows) == 26
    assert set(rows[0]) == {"timestamp", "actual_close", "predicted_close", "residual"}
    for row in rows:
        assert abs(row["actual_close"] - row["predicted_close"] - row["residual"]) <= 1e-9


def test_fit_empty_price_window_exits_with_model_code(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(
        create_app(),
        ["fit", str(response_file), "--min-price", "1000", "--max-price", "2000"],
    )

    assert result.exit_code == 30
    assert "INSUFFICIENT_DATA" in result.output


def test_fit_underdetermined(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(
        create_app(),
        ["fit", str(response_file), "--start", "2024-01-01", "--end", "2024-01-03", "--splines", "3"],
    )

    assert result.exit_code == 30
    assert "UNDERDETERMINED_MODEL" in result.output


def test_fit_inverted_range(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(create_app(), ["fit", str(response_file), "--min-price", "200", "--max-price", "100"])

    assert result.exit_code == 10
    assert "INVALID_RANGE" in result.output


def test_fit_live_uses_fetcher(runner: CliRunner, monkeypatch: pytest.MonkeyPatch, daily_response) -> None:
    fetcher = StaticFetcher.single(QuoteRequest(symbol="IBM"), daily_response(days=20))
    monkeypatch.setattr(quote_module, "get_fetcher", lambda config: fetcher)

    result = runner.invoke(create_app(), ["--format", "jsonl", "fit", "--symbol", "IBM", "--api-key", "k"])

    assert result.exit_code == 0, result.output
    assert len(_jsonl(result.stdout)) == 20
    assert fetcher.calls[0].apikey == "k"
    assert fetcher.closed


def test_fit_live_fetch_error(runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
    fetcher = StaticFetcher({})
    monkeypatch.setattr(quote_module, "get_fetcher", lambda config: fetcher)

    result = runner.invoke(create_app(), ["fit", "--symbol", "MSFT"])

    assert result.exit_code == 20
    assert "FETCH_ERROR" in result.output
    assert fetcher.closed


def test_fit_intraday_without_interval(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["fit", "--symbol", "IBM", "--function", "TIME_SERIES_INTRADAY"])

    assert result.exit_code == 10
    assert "VALIDATION_ERROR" in result.output


def test_fit_requires_a_source(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["fit"])

    assert result.exit_code == 10
    assert "SOURCE_MISSING" in result.output


def test_invalid_format(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--format", "xml", "classify", "1. open"])

    assert result.exit_code != 0


def test_configured_log_file_receives_stages(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, response_file: Path
) -> None:
    log_path = tmp_path / "logs" / "quotefit.jsonl"
    config = QuoteFitConfig(logging=LoggingConfig(file=str(log_path)))
    monkeypatch.setattr(quote_module, "get_config", lambda: config)

    result = runner.invoke(create_app(), ["--log-level", "debug", "fit", str(response_file), "--splines", "4"])

    assert result.exit_code == 0, result.output
    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert "ready" in {record["stage"] for record in records}
    assert {record["symbol"] for record in records if record["stage"]} == {"IBM"}


def test_invalid_log_level(runner: CliRunner) -> None:
    result = runner.invoke(create_app(), ["--log-level", "chatty", "classify", "1. open"])

    assert result.exit_code == 2


def test_fit_with_one_spline_degree(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "fit", str(response_file), "--splines", "1"])

    assert result.exit_code == 0, result.output
    assert len(_jsonl(result.stdout)) == 30


def test_normalize_jsonl_volume_is_integer(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(create_app(), ["--format", "jsonl", "normalize", str(response_file)])

    first = _jsonl(result.stdout)[0]
    assert first["volume"] == 1_000_000
    assert isinstance(first["volume"], int)
    assert first["close"] == pytest.approx(100.0)


def test_normalize_table_formats_columns(runner: CliRunner, response_file: Path) -> None:
    result = runner.invoke(create_app(), ["--no-color", "normalize", str(response_file)])

    assert result.exit_code == 0, result.output
    assert "2024-01-01T00:00:00" in result.stdout
    assert "100.0000" in result.stdout
    assert "1,000,000" in result.stdout


def test_output_option_writes_file(runner: CliRunner, response_file: Path, tmp_path: Path) -> None:
    target = tmp_path / "residuals.jsonl"

    result = runner.invoke(
        create_app(),
        ["--format", "jsonl", "--output", str(target), "fit", str(response_file), "--splines", "4"],
    )

    assert result.exit_code == 0, result.output
    assert _jsonl(result.stdout) == []
    assert len(_jsonl(target.read_text(encoding="utf-8"))) == 30
