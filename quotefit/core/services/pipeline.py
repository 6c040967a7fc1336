"""Filter, fit, predict and residual orchestration.

A run moves through ``FETCHED -> NORMALIZED -> FILTERED -> FITTED ->
RESIDUAL_COMPUTED -> READY``. Normalized tables are cached per request so a
parameter change only repeats the stages after ``NORMALIZED``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from quotefit.core.data.normalizer import NormalizedQuote, ResponseNormalizer
from quotefit.core.data.providers.base import QuoteFetcher
from quotefit.core.exceptions import FetchError, QuoteFitError
from quotefit.core.logging import log_context
from quotefit.core.models.quote import MetaData, TimeSeriesTable
from quotefit.core.models.request import QuoteRequest, RunParameters
from quotefit.core.models.results import PipelineResult, PipelineStage
from quotefit.core.services.range_filter import filter_table
from quotefit.core.services.regression import fit_spline
from quotefit.core.services.residuals import annotate, compute_residuals


def _enter(stage: PipelineStage, **fields: Any) -> None:
    logger.bind(stage=stage.value).debug("Entered {}", stage.value, **fields)


def run_on_table(metadata: MetaData, table: TimeSeriesTable, parameters: RunParameters) -> PipelineResult:
    """Run the stages after normalization against an already built table."""

    with log_context(symbol=metadata.symbol):
        view = filter_table(table, parameters.x_range, parameters.y_range)
        _enter(PipelineStage.FILTERED, rows=len(view), source_rows=len(table))

        fit = fit_spline(view, parameters.spline_count)
        _enter(PipelineStage.FITTED, spline_count=fit.spline_count)

        residuals = compute_residuals(view, fit.grid)
        _enter(PipelineStage.RESIDUAL_COMPUTED, residuals=len(residuals))

        result = PipelineResult(
            metadata=metadata,
            view=view,
            fit=fit,
            residuals=residuals,
            annotated=annotate(view, residuals),
            stage=PipelineStage.READY,
        )
        logger.bind(stage=PipelineStage.READY.value).info(
            "Pipeline ready: {} rows, spline_count={}", len(view), fit.spline_count
        )
        return result


class QuotePipeline:
    """数据流水线编排器.

    The only state kept between runs is the normalized table per
    ``(symbol, function, interval)``.
    """

    def __init__(self, fetcher: QuoteFetcher, normalizer: ResponseNormalizer | None = None) -> None:
        self.fetcher = fetcher
        self.normalizer = normalizer or ResponseNormalizer()
        self._normalized: dict[tuple[str, str, str | None], NormalizedQuote] = {}

    def _fetch(self, request: QuoteRequest) -> Mapping[str, Any]:
        try:
            raw = self.fetcher.fetch(request)
        except QuoteFitError:
            raise
        except Exception as exc:
            raise FetchError(f"{self.fetcher.name} failed for {request.symbol}: {exc}") from exc
        _enter(PipelineStage.FETCHED, function=request.function.value)
        return raw

    def load(self, request: QuoteRequest) -> NormalizedQuote:
        """获取并规范化, 命中缓存时直接返回."""
        key = request.cache_key
        cached = self._normalized.get(key)
        if cached is not None:
            logger.debug("Reusing normalized table for {}", request.symbol)
            return cached

        with log_context(symbol=request.symbol, function=request.function.value):
            normalized = self.normalizer.normalize(self._fetch(request))
            _enter(PipelineStage.NORMALIZED, rows=len(normalized.table))
        self._normalized[key] = normalized
        return normalized

    def invalidate(self, request: QuoteRequest | None = None) -> None:
        if request is None:
            self._normalized.clear()
        else:
            self._normalized.pop(request.cache_key, None)

    def is_cached(self, request: QuoteRequest) -> bool:
        return request.cache_key in self._normalized

    def run(self, request: QuoteRequest, parameters: RunParameters) -> PipelineResult:
        normalized = self.load(request)
        return run_on_table(normalized.metadata, normalized.table, parameters)


__all__ = ["QuotePipeline", "run_on_table"]
