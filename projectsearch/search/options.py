"""Typed search options and their transport parsing."""

import hashlib
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import msgspec

logger = logging.getLogger(__name__)

DEFAULT_FACET_LIMIT = 36
DEFAULT_PER_PAGE = 30

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})

FilterValues = str | int | float | Iterable[str | int | float] | None


class SearchOptions(msgspec.Struct, frozen=True, kw_only=True):
    """Options of a single search request.

    Attributes:
        filters: Field name to the set of accepted values. Values may be
            given comma-joined; see ``normalize_filters``.
        sort: Explicit sort field; None keeps the mode's default ordering.
        order: Sort direction for ``sort`` (``asc``/``desc``, default ``desc``).
        facet_limit: Maximum buckets per facet.
        prefix: Autocomplete mode, prefix match on the exact name.
        api: Lightweight API call, no aggregations or suggestion.
        page: 1-based results page.
        per_page: Results per page.
    """

    filters: dict[str, Any] = msgspec.field(default_factory=dict)
    sort: str | None = None
    order: str | None = None
    facet_limit: int = DEFAULT_FACET_LIMIT
    prefix: bool = False
    api: bool = False
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None) -> "SearchOptions":
        """Create options from loosely typed request parameters.

        Args:
            params: Mapping with any of the option keys; booleans may be
                bool-like strings and numbers may be numeric strings.

        Returns:
            Normalized SearchOptions
        """
        params = params or {}
        return cls(
            filters=normalize_filters(params.get("filters")),
            sort=params.get("sort") or None,
            order=params.get("order") or None,
            facet_limit=_to_int(
                params.get("facet_limit"), DEFAULT_FACET_LIMIT, "facet_limit"
            ),
            prefix=_to_bool(params.get("prefix")),
            api=_to_bool(params.get("api")),
            page=_to_int(params.get("page"), 1, "page"),
            per_page=_to_int(params.get("per_page"), DEFAULT_PER_PAGE, "per_page"),
        )

    def normalized(self) -> "SearchOptions":
        """Copy with normalized, stably ordered filters."""
        return msgspec.structs.replace(self, filters=normalize_filters(self.filters))

    def cache_key(self, prefix: str = "facets") -> str:
        """Structurally unambiguous cache key for these options.

        Equal option values always map to the same key and distinct values
        never share one, unlike keys made by stripping punctuation from a
        string rendering.
        """
        encoded = msgspec.json.encode(self.normalized())
        return f"{prefix}:{hashlib.sha256(encoded).hexdigest()}"


def split_values(value: FilterValues) -> tuple[str, ...]:
    """Split a filter value into its distinct, non-blank values.

    Strings and other scalars are split on ``,``; iterables are flattened
    the same way.
    The result is sorted so equal value sets compare equal.
    """
    if value is None:
        return ()

    if isinstance(value, Iterable) and not isinstance(value, str):
        items = list(value)
    else:
        items = [value]
    values = set()
    for item in items:
        for part in str(item).split(","):
            part = part.strip()
            if part:
                values.add(part)
    return tuple(sorted(values))


def normalize_filters(
    filters: Mapping[str, FilterValues] | None,
) -> dict[str, tuple[str, ...]]:
    """Normalize a filter mapping.

    Fields with empty or blank values are dropped entirely so they never
    become an impossible "value in empty set" clause. Fields are ordered
    by name.
    """
    if not filters:
        return {}

    normalized = {}
    for field in sorted(filters):
        values = split_values(filters[field])
        if values:
            normalized[field] = values
    return normalized


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _to_int(value: Any, default: int, name: str) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {name}: {value!r}")
        return default
