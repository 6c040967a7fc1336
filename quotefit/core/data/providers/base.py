"""Quote fetcher abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from quotefit.core.exceptions import FetchError
from quotefit.core.models.request import QuoteRequest


class QuoteFetcher(ABC):
    """行情获取器抽象基类.

    Implementations return the raw nested response and raise
    :class:`~quotefit.core.exceptions.FetchError` for anything that goes
    wrong on the way (network, authentication, service errors).
    """

    name: str = "fetcher"

    def __enter__(self) -> QuoteFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """释放连接等资源."""

    @abstractmethod
    def fetch(self, request: QuoteRequest) -> Mapping[str, Any]:
        """获取原始响应."""


class StaticFetcher(QuoteFetcher):
    """Serves pre-recorded responses, keyed by request cache key."""

    name = "static"

    def __init__(self, responses: Mapping[tuple[str, str, str | None], Mapping[str, Any]]) -> None:
        self._responses = dict(responses)
        self.calls: list[QuoteRequest] = []
        self.closed = False

    @classmethod
    def single(cls, request: QuoteRequest, response: Mapping[str, Any]) -> StaticFetcher:
        return cls({request.cache_key: response})

    def close(self) -> None:
        self.closed = True

    def fetch(self, request: QuoteRequest) -> Mapping[str, Any]:
        self.calls.append(request)
        try:
            return self._responses[request.cache_key]
        except KeyError as exc:
            raise FetchError(f"No recorded response for {request.symbol} {request.function.value}") from exc


__all__ = ["QuoteFetcher", "StaticFetcher"]
