"""Safe nested-field access over loosely structured records.

Every lookup in the catalog goes through :func:`get`, so the notion of "no data"
lives in exactly one place: :func:`is_empty`.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

MISSING_SENTINEL = "N/A"

RISK_SCALE_CODE_KEYS = ("sigla", "code")
RISK_SCALE_DESCRIPTION_KEYS = ("descricao", "description")

_NOT_FOUND = object()


def _has_any(entry: Mapping, keys: Sequence[str]) -> bool:
    return any(not _is_blank(entry.get(key)) for key in keys)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_risk_scale(value: Any) -> bool:
    """True for a non-empty list whose every entry carries a code and a description."""
    if not isinstance(value, list) or not value:
        return False
    return all(
        isinstance(entry, Mapping)
        and _has_any(entry, RISK_SCALE_CODE_KEYS)
        and _has_any(entry, RISK_SCALE_DESCRIPTION_KEYS)
        for entry in value
    )


def is_empty(value: Any) -> bool:
    """Return True when ``value`` carries no data.

    Missing, ``None``, whitespace-only strings, the ``"N/A"`` placeholder, and empty
    lists or mappings are all empty. Any non-empty list, a risk scale included, is
    data and comes back untouched.
    """
    if value is _NOT_FOUND or value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return not stripped or stripped == MISSING_SENTINEL
    if isinstance(value, (list, tuple, Mapping)):
        return not value
    return False


def _step(container: Any, segment: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(segment, _NOT_FOUND)
    if isinstance(container, list) and segment.isascii() and segment.isdigit():
        index = int(segment)
        return container[index] if index < len(container) else _NOT_FOUND
    return _NOT_FOUND


def resolve(record: Any, path: str) -> Any:
    """Walk ``path`` through ``record``; returns an internal marker when any hop fails."""
    if not isinstance(path, str) or not path:
        return _NOT_FOUND
    current = record
    for segment in path.split("."):
        current = _step(current, segment)
        if current is _NOT_FOUND or current is None:
            return _NOT_FOUND
    return current


def get(record: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted ``path`` against ``record`` or return ``default``.

    >>> get({"habitat": {"descricao": "  "}}, "habitat.descricao", "unknown")
    'unknown'
    """
    value = resolve(record, path)
    if is_empty(value):
        return default
    return value
