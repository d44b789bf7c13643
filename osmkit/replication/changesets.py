"""Changeset replication states."""

from __future__ import annotations

import re

from .datasource import DEFAULT_DATASOURCE, Datasource, State, decode_time
from .interval import SeqNum, base_seq_url

_UINT_RE = re.compile(r"\d+")


class ChangesetSeqNum(SeqNum):
    """Sequence number of the changeset replication."""

    DIR = "changesets"

    def __str__(self) -> str:
        return f"changeset/{int(self)}"


def _source(datasource: Datasource | None) -> Datasource:
    return DEFAULT_DATASOURCE if datasource is None else datasource


def decode_changeset_state(data: str | bytes) -> State:
    """Decode a changeset replication ``state.yaml`` / ``.state.txt`` file."""
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    lines = text.split("\n")
    if len(lines) < 3:
        raise ValueError("replication: changeset state is too short")

    time_text = ":".join(lines[1].split(":")[1:]).strip()
    timestamp = decode_time(time_text)

    parts = lines[2].split(":")
    if len(parts) < 2:
        raise ValueError("replication: changeset state has no sequence")
    raw = parts[1].strip()
    if not _UINT_RE.fullmatch(raw):
        raise ValueError(f"replication: invalid sequence number {raw!r}")

    return State(seq_num=int(raw), timestamp=timestamp)


def base_changeset_url(n: int, datasource: Datasource | None = None) -> str:
    """Return the URL of changeset sequence ``n`` without its file extension."""
    return base_seq_url(ChangesetSeqNum(n), datasource)


def _fetch_changeset_state(n: ChangesetSeqNum, datasource: Datasource) -> State:
    if int(n) != 0:
        url = base_changeset_url(n, datasource) + ".state.txt"
    else:
        url = f"{datasource.base_url}/replication/{n.dir}/state.yaml"

    state = decode_changeset_state(datasource.fetch(url))

    # The sequence number inside a state file is one less than the name of
    # the file it lives in; the file name is the correct one.
    if int(n) == 0:
        state.seq_num += 1
    else:
        state.seq_num = int(n)
    return state


def changeset_state(n: int, datasource: Datasource | None = None) -> State:
    """Return the state of the given changeset replication sequence."""
    return _fetch_changeset_state(ChangesetSeqNum(n), _source(datasource))


def current_changeset_state(
    datasource: Datasource | None = None,
) -> tuple[ChangesetSeqNum, State]:
    """Return the current sequence number and state of the changeset replication."""
    state = _fetch_changeset_state(ChangesetSeqNum(0), _source(datasource))
    return ChangesetSeqNum(state.seq_num), state