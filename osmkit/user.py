"""Registered OSM users."""

from __future__ import annotations

import json
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


def _parse_time(text: str | None) -> datetime:
    if not text:
        return _ZERO_TIME
    match = _TIME_RE.match(text.strip())
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second, frac, zone = match.groups()
    micro = int((frac or "").ljust(6, "0")[:6])
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone.utc if not offset else timezone(sign * offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


def _format_time(dt: datetime) -> str:
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    offset = dt.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _format_float(value: float) -> str:
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _json_number(value: float) -> int | float:
    if math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    return value


def _int(elem: ET.Element | None, name: str) -> int:
    if elem is None:
        return 0
    raw = (elem.get(name) or "").strip()
    return int(raw) if raw else 0


def _float(elem: ET.Element | None, name: str) -> float:
    if elem is None:
        return 0.0
    raw = (elem.get(name) or "").strip()
    return float(raw) if raw else 0.0


def _find(elem: ET.Element | None, path: str) -> ET.Element | None:
    return None if elem is None else elem.find(path)


@dataclass
class User:
    """A registered OSM user and their account statistics."""

    id: int = 0
    name: str = ""
    description: str = ""
    img_href: str = ""
    changesets_count: int = 0
    traces_count: int = 0
    home_lat: float = 0.0
    home_lon: float = 0.0
    home_zoom: int = 0
    languages: list[str] = field(default_factory=list)
    blocks_received: int = 0
    blocks_active: int = 0
    messages_received: int = 0
    messages_unread: int = 0
    messages_sent: int = 0
    created_at: datetime = _ZERO_TIME

    @classmethod
    def from_xml(cls, data: str | bytes) -> User:
        """Parse a ``<user>`` element."""
        root = ET.fromstring(data.strip())
        if root.tag != "user":
            raise ValueError(f"expected element <user> but have <{root.tag}>")

        description = root.find("description")
        img = root.find("img")
        home = root.find("home")
        languages = root.find("languages")
        blocks_received = _find(root.find("blocks"), "received")
        messages = root.find("messages")
        messages_received = _find(messages, "received")

        return cls(
            id=_int(root, "id"),
            name=root.get("display_name", ""),
            description="" if description is None else "".join(description.itertext()),
            img_href="" if img is None else img.get("href", ""),
            changesets_count=_int(root.find("changesets"), "count"),
            traces_count=_int(root.find("traces"), "count"),
            home_lat=_float(home, "lat"),
            home_lon=_float(home, "lon"),
            home_zoom=_int(home, "zoom"),
            languages=[]
            if languages is None
            else ["".join(lang.itertext()) for lang in languages.findall("lang")],
            blocks_received=_int(blocks_received, "count"),
            blocks_active=_int(blocks_received, "active"),
            messages_received=_int(messages_received, "count"),
            messages_unread=_int(messages_received, "unread"),
            messages_sent=_int(_find(messages, "sent"), "count"),
            created_at=_parse_time(root.get("account_created")),
        )

    def to_xml(self) -> str:
        """Encode the user as a ``<user>`` element."""
        root = ET.Element(
            "user",
            {
                "id": str(self.id),
                "display_name": self.name,
                "account_created": _format_time(self.created_at),
            },
        )
        ET.SubElement(root, "description").text = self.description
        ET.SubElement(root, "img", {"href": self.img_href})
        ET.SubElement(root, "changesets", {"count": str(self.changesets_count)})
        ET.SubElement(root, "traces", {"count": str(self.traces_count)})
        ET.SubElement(
            root,
            "home",
            {
                "lat": _format_float(self.home_lat),
                "lon": _format_float(self.home_lon),
                "zoom": str(self.home_zoom),
            },
        )
        if self.languages:
            languages = ET.SubElement(root, "languages")
            for lang in self.languages:
                ET.SubElement(languages, "lang").text = lang
        blocks = ET.SubElement(root, "blocks")
        ET.SubElement(
            blocks,
            "received",
            {"count": str(self.blocks_received), "active": str(self.blocks_active)},
        )
        messages = ET.SubElement(root, "messages")
        ET.SubElement(
            messages,
            "received",
            {"count": str(self.messages_received), "unread": str(self.messages_unread)},
        )
        ET.SubElement(messages, "sent", {"count": str(self.messages_sent)})
        return ET.tostring(root, encoding="unicode", short_empty_elements=False)

    def to_json(self) -> str:
        """Encode the user as a JSON object."""
        obj: dict[str, object] = {"type": "user", "id": self.id, "name": self.name}
        if self.description:
            obj["description"] = self.description
        obj.update(
            {
                "img": {"href": self.img_href},
                "changesets": {"count": self.changesets_count},
                "traces": {"count": self.traces_count},
                "home": {
                    "lat": _json_number(self.home_lat),
                    "lon": _json_number(self.home_lon),
                    "zoom": self.home_zoom,
                },
                "languages": list(self.languages) or None,
                "blocks": {
                    "received": {
                        "count": self.blocks_received,
                        "active": self.blocks_active,
                    }
                },
                "messages": {
                    "received": {
                        "count": self.messages_received,
                        "unread": self.messages_unread,
                    },
                    "sent": {"count": self.messages_sent},
                },
                "created_at": _format_time(self.created_at),
            }
        )
        text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        return (
            text.replace("<", "\\u003c")
            .replace(">", "\\u003e")
            .replace("&", "\\u0026")
            .replace("\u2028", "\\u2028")
            .replace("\u2029", "\\u2029")
        )