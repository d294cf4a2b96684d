"""Helpers for deduplicating and trimming lists of strings.

All functions return new lists and leave their arguments untouched.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

__all__ = [
    "unique_strings",
    "trim",
    "trim_stable",
    "trim_stable_unique",
    "trim_unique",
    "string_in_slice",
    "unique_resources_ids",
    "trim_unique_ids",
]


def _as_list(values: Iterable[str] | None) -> list[str]:
    return list(values) if values is not None else []


def unique_strings(values: Iterable[str] | None) -> list[str]:
    """Return the distinct values, in order of first appearance."""
    return list(dict.fromkeys(values or ()))


def trim(origin: Iterable[str] | None, trim_from: Iterable[str] | None) -> list[str]:
    """Remove every element found in ``trim_from``.

    A removed element is replaced by the current last element, so the
    order of the remaining elements may change.
    """
    items = _as_list(origin)
    drop = set(trim_from or ())
    if not items or not drop:
        return items

    length = len(items)
    i = 0
    while i < length:
        if items[i] in drop:
            length -= 1
            items[i] = items[length]
            continue
        i += 1
    return items[:length]


def trim_stable(origin: Iterable[str] | None, trim_from: Iterable[str] | None) -> list[str]:
    """Remove every element found in ``trim_from``, keeping the original order."""
    items = _as_list(origin)
    drop = set(trim_from or ())
    if not items or not drop:
        return items
    return [value for value in items if value not in drop]


def trim_stable_unique(origin: Iterable[str] | None, trim_from: Iterable[str] | None) -> list[str]:
    """Deduplicate and trim in one pass, keeping the original order.

    When either list is empty, ``origin`` is returned as it is, without
    deduplication.
    """
    items = _as_list(origin)
    drop = set(trim_from or ())
    if not items or not drop:
        return items

    seen: set[str] = set()
    result: list[str] = []
    for value in items:
        if value in seen:
            continue
        seen.add(value)
        if value not in drop:
            result.append(value)
    return result


def trim_unique(origin: Iterable[str] | None, trim_from: Iterable[str] | None) -> list[str]:
    """Trim elements found in ``trim_from`` on their first occurrence.

    Removal swaps in the last element, so the order may change. Only the
    first sighting of each value is checked against ``trim_from``.
    """
    items = _as_list(origin)
    drop = set(trim_from or ())
    if not items or not drop:
        return items

    seen: set[str] = set()
    length = len(items)
    i = 0
    while i < length:
        value = items[i]
        if value not in seen:
            seen.add(value)
            if value in drop:
                length -= 1
                items[i] = items[length]
                continue
        i += 1
    return items[:length]


def string_in_slice(haystack: Sequence[str] | None, needle: str) -> bool:
    """Tell whether ``needle`` is one of the strings in ``haystack``."""
    return needle in (haystack or ())


def unique_resources_ids(ids: Iterable[str] | None) -> list[str]:
    """Return the distinct resource IDs, in order of first appearance."""
    return unique_strings(ids)


def trim_unique_ids(origin: Iterable[str] | None, trim_from: Iterable[str] | None) -> list[str]:
    """Keep only the IDs of ``origin`` that are absent from ``trim_from``.

    Used when the same resource appears in more than one status list.
    """
    return trim_stable(origin, trim_from)