"""Response classification and normalization."""

from quotefit.core.data.classifier import FieldClassifier, RoleMatcher, classify_label
from quotefit.core.data.normalizer import NormalizedQuote, ResponseNormalizer, normalize_response

__all__ = [
    "FieldClassifier",
    "RoleMatcher",
    "classify_label",
    "NormalizedQuote",
    "ResponseNormalizer",
    "normalize_response",
]
