"""Classification of ordinal-prefixed quote labels into OHLCV roles.

Matchers run in a fixed order and the first one that accepts a label wins.
Open, high, low and volume are plain case-insensitive substring tests. The
close matcher is stricter and only accepts ``"<ordinal>. close"``, so that
``"5. adjusted close"`` falls through to ``UNCLASSIFIED`` instead of
competing with ``"4. close"``. Reordering the matchers changes results.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from quotefit.core.exceptions import MissingFieldError, ShapeMismatchError
from quotefit.core.models.fields import REQUIRED_ROLES, FieldRole

LabelMatcher = Callable[[str], bool]

_CLOSE_PATTERN = re.compile(r"^\d+\. close$", re.IGNORECASE)
_ORDINAL_PREFIX = re.compile(r"^\s*\d+[a-z]?\.\s*", re.IGNORECASE)


def _contains(token: str) -> LabelMatcher:
    def matcher(label: str) -> bool:
        return token in label.lower()

    matcher.__name__ = f"contains_{token}"
    return matcher


def is_close_label(label: str) -> bool:
    return _CLOSE_PATTERN.match(label.strip()) is not None


@dataclass(frozen=True, slots=True)
class RoleMatcher:
    role: FieldRole
    matches: LabelMatcher


DEFAULT_MATCHERS: tuple[RoleMatcher, ...] = (
    RoleMatcher(FieldRole.OPEN, _contains("open")),
    RoleMatcher(FieldRole.HIGH, _contains("high")),
    RoleMatcher(FieldRole.LOW, _contains("low")),
    RoleMatcher(FieldRole.CLOSE, is_close_label),
    RoleMatcher(FieldRole.VOLUME, _contains("volume")),
)


def strip_ordinal(label: str) -> str:
    """``"4. Interval"`` -> ``"Interval"``."""

    return _ORDINAL_PREFIX.sub("", label, count=1).strip()


class FieldClassifier:
    """Maps raw labels to :class:`FieldRole` values."""

    def __init__(self, matchers: Iterable[RoleMatcher] = DEFAULT_MATCHERS) -> None:
        self._matchers = tuple(matchers)

    def classify(self, label: str) -> FieldRole:
        for matcher in self._matchers:
            if matcher.matches(label):
                return matcher.role
        return FieldRole.UNCLASSIFIED

    def classify_all(self, labels: Iterable[str]) -> dict[str, FieldRole]:
        return {label: self.classify(label) for label in labels}

    def resolve(self, labels: Iterable[str], *, timestamp: str | None = None) -> dict[FieldRole, str]:
        """Pick the label carrying each required role for one record.

        Raises:
            ShapeMismatchError: two labels claim the same role.
            MissingFieldError: a required role has no label.
        """

        resolved: dict[FieldRole, str] = {}
        for label, role in self.classify_all(labels).items():
            if role is FieldRole.UNCLASSIFIED:
                continue
            if role in resolved:
                raise ShapeMismatchError(
                    f"Labels {resolved[role]!r} and {label!r} both classify as {role.value}",
                    {"timestamp": timestamp, "role": role.value, "labels": [resolved[role], label]},
                )
            resolved[role] = label

        missing = [role.value for role in REQUIRED_ROLES if role not in resolved]
        if missing:
            where = f" at {timestamp}" if timestamp else ""
            raise MissingFieldError(
                f"Could not resolve {', '.join(missing)}{where}",
                timestamp=timestamp,
                missing_roles=missing,
            )
        return resolved


_default_classifier = FieldClassifier()


def classify_label(label: str) -> FieldRole:
    return _default_classifier.classify(label)


__all__ = [
    "FieldClassifier",
    "RoleMatcher",
    "DEFAULT_MATCHERS",
    "classify_label",
    "is_close_label",
    "strip_ordinal",
]
