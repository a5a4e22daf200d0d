"""Explicit provider-field to article-field mapping tables.

Each adapter declares one ``FieldMapping``: for every canonical article
field, the ordered list of provider field paths to read. The first path
holding a non-empty value wins, which keeps the normalization contract of
each provider in one auditable place.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def lookup(item: Mapping[str, Any], path: str) -> Any:
    """Read a dotted path (``source.name``) from nested dicts.

    Integer segments index into lists (``thumbnails.0.url``). Missing keys
    yield None.
    """
    current: Any = item
    for segment in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, dict)) and not value)


@dataclass(frozen=True)
class FieldMapping:
    """Ordered provider paths for each canonical article field."""

    title: tuple[str, ...] = ("title",)
    summary: tuple[str, ...] = ()
    content: tuple[str, ...] = ()
    image: tuple[str, ...] = ()
    source: tuple[str, ...] = ()
    published_at: tuple[str, ...] = ()
    url: tuple[str, ...] = ()
    external_id: tuple[str, ...] = ()

    def resolve(self, item: Mapping[str, Any], field_name: str) -> Any:
        """First non-empty value among the paths mapped to ``field_name``."""
        paths: tuple[str, ...] = getattr(self, field_name)
        for path in paths:
            value = lookup(item, path)
            if not _is_empty(value):
                return value
        return None

    def resolve_all(self, item: Mapping[str, Any]) -> dict[str, Any]:
        return {
            field_name: self.resolve(item, field_name)
            for field_name in (
                "title",
                "summary",
                "content",
                "image",
                "source",
                "published_at",
                "url",
                "external_id",
            )
        }
