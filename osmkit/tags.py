"""Key/value tags attached to OSM nodes, ways and relations."""

from __future__ import annotations

import json
from dataclasses import dataclass

# Tags that, when they are the only ones present, do not make an element
# worth displaying on its own.
UNINTERESTING_TAGS = frozenset(
    {
        "source",
        "source_ref",
        "source:ref",
        "history",
        "attribution",
        "created_by",
        "tiger:county",
        "tiger:tlid",
        "tiger:upload_uuid",
    }
)


@dataclass(frozen=True)
class Tag:
    """A single key/value pair."""

    key: str
    value: str = ""


class Tags(list[Tag]):
    """An ordered collection of tags with lookup helpers."""

    def find(self, key: str) -> str:
        """Return the value for ``key``, or an empty string if missing."""
        return next((t.value for t in self if t.key == key), "")

    def find_tag(self, key: str) -> Tag | None:
        """Return the first tag with ``key``, or None if missing."""
        return next((t for t in self if t.key == key), None)

    def has_tag(self, key: str) -> bool:
        """Return True if a tag with ``key`` exists, even with an empty value."""
        return any(t.key == key for t in self)

    def to_map(self) -> dict[str, str]:
        """Return the tags as a key/value dictionary."""
        return {t.key: t.value for t in self}

    def any_interesting(self) -> bool:
        """Return True if at least one tag is not in UNINTERESTING_TAGS."""
        return any(t.key not in UNINTERESTING_TAGS for t in self)

    def to_json(self) -> str:
        """Encode the tags as a JSON object with sorted keys."""
        return json.dumps(
            self.to_map(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> Tags:
        """Decode tags from a JSON object of string keys and values."""
        obj = json.loads(data)
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise ValueError("tags json must be an object")
        tags = cls()
        for key, value in obj.items():
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ValueError(f"tag value for {key!r} is not a string")
            tags.append(Tag(key, value))
        return tags

    def sort_by_key_value(self) -> None:
        """Sort in place by key, then by value."""
        self.sort(key=lambda t: (t.key, t.value))