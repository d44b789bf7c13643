"""Where replication data is fetched from, and the shared state type."""

from __future__ import annotations

import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..update import ZERO_TIME

BASE_URL = "https://planet.osm.org"

DEFAULT_TIMEOUT = 30 * 60.0

# The time formats seen in replication state files.
_TIME_PATTERNS = (
    re.compile(
        r"(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2})(?:\.(\d+))? (?:Z|\+00:00)"
    ),
    re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2})\\:(\d{2})\\:(\d{2})(?:\.(\d+))?Z"),
)


@dataclass
class State:
    """Information about a replication state."""

    seq_num: int = 0
    timestamp: datetime = ZERO_TIME
    txn_max: int = 0
    txn_max_queried: int = 0


class UnexpectedStatusCodeError(Exception):
    """Raised when the server answers with a status other than 200."""

    def __init__(self, code: int, url: str = "") -> None:
        super().__init__(
            f"replication: unexpected status code of {code} for url {url}"
        )
        self.code = code
        self.url = url


def not_found(err: BaseException | None) -> bool:
    """Return True if ``err`` means the file was not found on the remote host."""
    return isinstance(err, UnexpectedStatusCodeError) and err.code == 404


def decode_time(s: str) -> datetime:
    """Parse a replication timestamp in any of the known formats, as UTC."""
    for pattern in _TIME_PATTERNS:
        match = pattern.fullmatch(s)
        if match is None:
            continue
        year, month, day, hour, minute, second, frac = match.groups()
        micro = int((frac or "")[:6].ljust(6, "0"))
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second),
            micro,
            tzinfo=timezone.utc,
        )
    raise ValueError(f"replication: cannot parse time {s!r}")


@dataclass
class Datasource:
    """The server and HTTP settings used for replication requests."""

    base_url: str = BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    opener: urllib.request.OpenerDirector = field(
        default_factory=urllib.request.build_opener, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.base_url:
            self.base_url = BASE_URL

    def fetch(self, url: str) -> bytes:
        """GET ``url`` and return the body; raise on any status but 200."""
        request = urllib.request.Request(url, method="GET")
        try:
            with self.opener.open(request, timeout=self.timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            exc.close()
            raise UnexpectedStatusCodeError(exc.code, url) from None
        if status != 200:
            raise UnexpectedStatusCodeError(status, url)
        return body


DEFAULT_DATASOURCE = Datasource()