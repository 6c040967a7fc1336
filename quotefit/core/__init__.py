"""quotefit core package."""
