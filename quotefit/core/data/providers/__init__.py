"""Quote fetchers."""

from quotefit.core.data.providers.alpha_vantage import AlphaVantageFetcher
from quotefit.core.data.providers.base import QuoteFetcher, StaticFetcher

__all__ = ["QuoteFetcher", "StaticFetcher", "AlphaVantageFetcher"]
