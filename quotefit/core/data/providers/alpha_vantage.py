"""Alpha Vantage行情获取器实现."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from quotefit.core.config.settings import FetchConfig
from quotefit.core.data.providers.base import QuoteFetcher
from quotefit.core.exceptions import FetchError
from quotefit.core.models.request import QuoteRequest

# 服务端以200状态返回的错误负载
_SERVICE_MESSAGE_KEYS = ("Error Message", "Note", "Information")


class AlphaVantageFetcher(QuoteFetcher):
    """Alpha Vantage时间序列获取器."""

    name = "alpha_vantage"

    def __init__(self, config: FetchConfig | None = None, client: httpx.Client | None = None) -> None:
        """初始化获取器.

        Args:
            config: 服务配置
            client: 可注入的HTTP客户端, 主要用于测试
        """
        self.config = config or FetchConfig()
        self._client = client
        self._owns_client = client is None

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"User-Agent": "quotefit/0.1.0"},
            )
        return self._client

    def build_params(self, request: QuoteRequest) -> dict[str, str]:
        """构建请求参数."""
        apikey = request.apikey or self.config.api_key
        if not apikey:
            raise FetchError("An API key is required for Alpha Vantage requests", details={"provider": self.name})

        params = {
            "function": request.function.value,
            "symbol": request.symbol,
            "apikey": apikey,
            "outputsize": self.config.output_size,
        }
        if request.interval:
            params["interval"] = request.interval
        return params

    def fetch(self, request: QuoteRequest) -> Mapping[str, Any]:
        params = self.build_params(request)
        logger.info("Fetching {} for {}", request.function.value, request.symbol)

        try:
            response = self.client.get(self.config.base_url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"Alpha Vantage returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
                details={"provider": self.name},
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Alpha Vantage request failed: {exc}", details={"provider": self.name}) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError("Alpha Vantage returned a non-JSON body", status_code=response.status_code) from exc

        if not isinstance(payload, dict):
            raise FetchError("Alpha Vantage returned an unexpected payload", status_code=response.status_code)

        for key in _SERVICE_MESSAGE_KEYS:
            if key in payload:
                raise FetchError(
                    f"Alpha Vantage API error: {payload[key]}",
                    status_code=response.status_code,
                    details={"provider": self.name, "service_message": key},
                )
        return payload


__all__ = ["AlphaVantageFetcher"]
