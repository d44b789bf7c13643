"""OSM ways: ordered collections of nodes."""

from __future__ import annotations

import json
import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .tags import Tags
from .update import ZERO_TIME, Update, UpdateIndexOutOfRangeError, Updates
from .user import _format_float, _format_time, _json_number

Point = tuple[float, float]
Bound = tuple[Point, Point]

_MAX_FLOAT = sys.float_info.max


def _dumps(obj: Any) -> str:
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


@dataclass
class WayNode:
    """A node reference within a way, optionally annotated with its location."""

    id: int = 0
    version: int = 0
    changeset_id: int = 0
    lat: float = 0.0
    lon: float = 0.0

    def point(self) -> Point:
        """Return the (lon, lat) location; (0, 0) when not annotated."""
        return (self.lon, self.lat)

    @property
    def annotated(self) -> bool:
        return self.version != 0 or self.lon != 0 or self.lat != 0


class WayNodes(list[WayNode]):
    """The ordered nodes of a way."""

    def bound(self) -> Bound:
        """Return ((min_lon, min_lat), (max_lon, max_lat)) of the nodes."""
        min_lon = min((n.lon for n in self), default=_MAX_FLOAT)
        min_lat = min((n.lat for n in self), default=_MAX_FLOAT)
        max_lon = max((n.lon for n in self), default=-_MAX_FLOAT)
        max_lat = max((n.lat for n in self), default=-_MAX_FLOAT)
        return ((min_lon, min_lat), (max_lon, max_lat))

    def node_ids(self) -> list[int]:
        """Return the node ids in order."""
        return [n.id for n in self]

    def to_json(self) -> str:
        """Encode the nodes as a JSON array of node ids."""
        return _dumps(self.node_ids())

    @classmethod
    def from_json(cls, data: str | bytes) -> WayNodes:
        """Decode nodes from a JSON array of node ids."""
        ids = json.loads(data)
        if ids is None:
            return cls()
        if not isinstance(ids, list):
            raise ValueError("way nodes json must be an array")
        nodes = cls()
        for raw in ids:
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise ValueError(f"invalid node id: {raw!r}")
            nodes.append(WayNode(id=raw))
        return nodes


def _update_json(u: Update) -> dict[str, Any]:
    obj: dict[str, Any] = {
        "index": u.index,
        "version": u.version,
        "timestamp": _format_time(u.timestamp),
    }
    if u.changeset_id:
        obj["changeset"] = u.changeset_id
    if u.lat:
        obj["lat"] = _json_number(u.lat)
    if u.lon:
        obj["lon"] = _json_number(u.lon)
    if u.reverse:
        obj["reverse"] = True
    return obj


@dataclass
class Way:
    """An OSM way."""

    id: int = 0
    user: str = ""
    user_id: int = 0
    visible: bool = False
    version: int = 0
    changeset_id: int = 0
    timestamp: datetime = ZERO_TIME
    nodes: WayNodes = field(default_factory=WayNodes)
    tags: Tags = field(default_factory=Tags)
    committed: datetime | None = None
    updates: Updates = field(default_factory=Updates)

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, WayNodes):
            self.nodes = WayNodes(self.nodes or [])
        if not isinstance(self.tags, Tags):
            self.tags = Tags(self.tags or [])
        if not isinstance(self.updates, Updates):
            self.updates = Updates(self.updates or [])

    def committed_at(self) -> datetime:
        """Best estimate of when this way was committed to the database."""
        return self.committed if self.committed is not None else self.timestamp

    def tag_map(self) -> dict[str, str]:
        """Return the tags as a key/value dictionary."""
        return self.tags.to_map()

    def apply_updates_up_to(self, t: datetime) -> None:
        """Apply the updates up to and including ``t``; keep the rest."""
        not_applied = Updates()
        for u in self.updates:
            if u.timestamp > t:
                not_applied.append(u)
                continue
            self.apply_update(u)
        self.updates = not_applied

    def apply_update(self, update: Update) -> None:
        """Apply one update to its node; raise if the index is out of range."""
        if not 0 <= update.index < len(self.nodes):
            raise UpdateIndexOutOfRangeError(update.index)
        node = self.nodes[update.index]
        node.version = update.version
        node.changeset_id = update.changeset_id
        node.lat = update.lat
        node.lon = update.lon

    def line_string(self) -> list[Point]:
        """Return the locations of the annotated nodes."""
        return [n.point() for n in self.nodes if n.annotated]

    def line_string_at(self, t: datetime) -> list[Point]:
        """Return the annotated locations with updates up to ``t`` applied."""
        points = [n.point() for n in self.nodes]
        for u in self.updates:
            if u.timestamp > t:
                break
            if 0 <= u.index < len(points):
                points[u.index] = (u.lon, u.lat)
        return [p for p, n in zip(points, self.nodes) if n.annotated]

    def to_json(self) -> str:
        """Encode the way as an osmjson object."""
        obj: dict[str, Any] = {"type": "way", "id": self.id}
        if self.user:
            obj["user"] = self.user
        if self.user_id:
            obj["uid"] = self.user_id
        obj["visible"] = self.visible
        if self.version:
            obj["version"] = self.version
        if self.changeset_id:
            obj["changeset"] = self.changeset_id
        obj["timestamp"] = _format_time(self.timestamp)
        obj["nodes"] = self.nodes.node_ids()
        if self.tags:
            obj["tags"] = dict(sorted(self.tags.to_map().items()))
        if self.committed is not None:
            obj["committed"] = _format_time(self.committed)
        if self.updates:
            obj["updates"] = [_update_json(u) for u in self.updates]
        return _dumps(obj)

    def to_xml(self) -> str:
        """Encode the way as a ``<way>`` element."""
        attrs = {
            "id": str(self.id),
            "user": self.user,
            "uid": str(self.user_id),
            "visible": "true" if self.visible else "false",
            "version": str(self.version),
            "changeset": str(self.changeset_id),
            "timestamp": _format_time(self.timestamp),
        }
        if self.committed is not None:
            attrs["committed"] = _format_time(self.committed)
        root = ET.Element("way", attrs)

        for n in self.nodes:
            nd: dict[str, str] = {}
            if n.id:
                nd["ref"] = str(n.id)
            if n.version:
                nd["version"] = str(n.version)
            if n.changeset_id:
                nd["changeset"] = str(n.changeset_id)
            if n.lat:
                nd["lat"] = _format_float(n.lat)
            if n.lon:
                nd["lon"] = _format_float(n.lon)
            ET.SubElement(root, "nd", nd)

        for tag in self.tags:
            ET.SubElement(root, "tag", {"k": tag.key, "v": tag.value})

        for u in self.updates:
            up = {
                "index": str(u.index),
                "version": str(u.version),
                "timestamp": _format_time(u.timestamp),
            }
            if u.changeset_id:
                up["changeset"] = str(u.changeset_id)
            if u.lat:
                up["lat"] = _format_float(u.lat)
            if u.lon:
                up["lon"] = _format_float(u.lon)
            if u.reverse:
                up["reverse"] = "true"
            ET.SubElement(root, "update", up)

        return ET.tostring(root, encoding="unicode", short_empty_elements=False)


class Ways(list[Way]):
    """A list of ways."""

    def ids(self) -> list[int]:
        """Return the ids of all the ways."""
        return [w.id for w in self]

    def sort_by_id_version(self) -> None:
        """Sort in place by id, then version, ascending."""
        self.sort(key=lambda w: (w.id, w.version))