"""Minutely, hourly and daily diff replication states."""

from __future__ import annotations

import re

from .datasource import DEFAULT_DATASOURCE, Datasource, State, decode_time

_INT_RE = re.compile(r"[+-]?\d+")


class SeqNum(int):
    """A replication sequence number within one replication directory."""

    DIR = ""

    def __new__(cls, value: int = 0) -> SeqNum:
        number = int(value)
        if number < 0:
            raise ValueError(f"sequence number must not be negative: {number}")
        return super().__new__(cls, number)

    @property
    def dir(self) -> str:
        """The directory of this data on the planet server."""
        return self.DIR

    def __str__(self) -> str:
        return f"{self.DIR}/{int(self)}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class MinuteSeqNum(SeqNum):
    """Sequence number of the minutely diff replication."""

    DIR = "minute"


class HourSeqNum(SeqNum):
    """Sequence number of the hourly diff replication."""

    DIR = "hour"


class DaySeqNum(SeqNum):
    """Sequence number of the daily diff replication."""

    DIR = "day"


# The first sequence numbers holding valid data.
MINUTE_SEQ_START = MinuteSeqNum(4)
HOUR_SEQ_START = HourSeqNum(11)
DAY_SEQ_START = DaySeqNum(1)


def _atoi(text: str) -> int:
    value = text.strip()
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    return int(value)


def _value(parts: list[str], key: str) -> str:
    if len(parts) < 2:
        raise ValueError(f"replication: missing value for {key}")
    return parts[1].strip()


def decode_interval_state(data: str | bytes) -> State:
    """Decode a ``state.txt`` file of an interval replication."""
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    state = State()
    for line in text.split("\n"):
        parts = line.split("=")
        key = parts[0]
        if key == "sequenceNumber":
            state.seq_num = _atoi(_value(parts, key))
        elif key == "txnMax":
            state.txn_max = _atoi(_value(parts, key))
        elif key == "txnMaxQueried":
            state.txn_max_queried = _atoi(_value(parts, key))
        elif key == "timestamp":
            state.timestamp = decode_time(_value(parts, key))
    return state


def _source(datasource: Datasource | None) -> Datasource:
    return DEFAULT_DATASOURCE if datasource is None else datasource


def base_seq_url(n: SeqNum, datasource: Datasource | None = None) -> str:
    """Return the URL of sequence ``n`` without its file extension."""
    value = int(n)
    return (
        f"{_source(datasource).base_url}/replication/{n.dir}/"
        f"{value // 1000000:03d}/{(value % 1000000) // 1000:03d}/{value % 1000:03d}"
    )


def change_url(n: SeqNum, datasource: Datasource | None = None) -> str:
    """Return the URL of the gzipped change file of sequence ``n``."""
    return base_seq_url(n, datasource) + ".osc.gz"


def fetch_state(n: SeqNum, datasource: Datasource | None = None) -> State:
    """Fetch the state of sequence ``n``; zero means the current state."""
    ds = _source(datasource)
    if int(n) != 0:
        url = base_seq_url(n, ds) + ".state.txt"
    else:
        url = f"{ds.base_url}/replication/{n.dir}/state.txt"
    return decode_interval_state(ds.fetch(url))


def minute_state(n: int, datasource: Datasource | None = None) -> State:
    """Return the state of the given minutely replication."""
    return fetch_state(MinuteSeqNum(n), datasource)


def hour_state(n: int, datasource: Datasource | None = None) -> State:
    """Return the state of the given hourly replication."""
    return fetch_state(HourSeqNum(n), datasource)


def day_state(n: int, datasource: Datasource | None = None) -> State:
    """Return the state of the given daily replication."""
    return fetch_state(DaySeqNum(n), datasource)


def current_minute_state(
    datasource: Datasource | None = None,
) -> tuple[MinuteSeqNum, State]:
    """Return the current sequence number and state of the minutely replication."""
    state = minute_state(0, datasource)
    return MinuteSeqNum(state.seq_num), state


def current_hour_state(
    datasource: Datasource | None = None,
) -> tuple[HourSeqNum, State]:
    """Return the current sequence number and state of the hourly replication."""
    state = hour_state(0, datasource)
    return HourSeqNum(state.seq_num), state


def current_day_state(
    datasource: Datasource | None = None,
) -> tuple[DaySeqNum, State]:
    """Return the current sequence number and state of the daily replication."""
    state = day_state(0, datasource)
    return DaySeqNum(state.seq_num), state