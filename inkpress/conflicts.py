from __future__ import annotations

from collections.abc import Iterable

from .content import ContentFile


def find_conflicts(content: Iterable[ContentFile]) -> dict[str, list[ContentFile]] | None:
    """Group content by URL and keep only the URLs claimed more than once.

    Returns ``None`` when every URL is unique.
    """
    groups: dict[str, list[ContentFile]] = {}
    for item in content:
        groups.setdefault(item.url, []).append(item)
    conflicts = {url: items for url, items in groups.items() if len(items) > 1}
    return conflicts or None


def find_conflicts_for(candidate: ContentFile, content: Iterable[ContentFile]) -> list[ContentFile] | None:
    """Return everything sharing ``candidate``'s URL, candidate included.

    ``candidate`` may already be part of ``content``; items are de-duplicated
    by identity key first so a file never conflicts with itself.
    """
    unique: dict[str, ContentFile] = {}
    for item in [*content, candidate]:
        unique.setdefault(item.key, item)
    url = candidate.url
    matches = [item for item in unique.values() if item.url == url]
    if len(matches) <= 1:
        return None
    return matches
