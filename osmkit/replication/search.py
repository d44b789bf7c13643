"""Binary search of replication states by timestamp."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .changesets import ChangesetSeqNum, changeset_state, current_changeset_state
from .datasource import Datasource, State, not_found
from .interval import (
    DaySeqNum,
    HourSeqNum,
    MinuteSeqNum,
    current_day_state,
    current_hour_state,
    current_minute_state,
    day_state,
    hour_state,
    minute_state,
)

# The smallest valid sequence numbers on the planet server.
MIN_MINUTE = 1
MIN_HOUR = 1
MIN_DAY = 1
# There are changesets before this, but no state files.
MIN_CHANGESET = 2007990


@dataclass
class Stater:
    """How to fetch the current state and the state of a sequence number."""

    min_seq: int
    current: Callable[[], State]
    state: Callable[[int], State]

    def try_state(self, n: int) -> State | None:
        """Return the state of ``n``, or None if it does not exist."""
        try:
            return self.state(n)
        except Exception as exc:
            if not_found(exc):
                return None
            raise


def search_timestamp(stater: Stater, timestamp: datetime) -> State:
    """Return the first state written after ``timestamp``, or the latest one."""
    upper = stater.current()
    if timestamp > upper.timestamp:
        return upper

    lower = stater.try_state(stater.min_seq)
    if lower is None:
        lower, upper = find_bound(stater, upper, timestamp)

    if lower.seq_num + 1 >= upper.seq_num:
        return lower

    return find_in_range(stater, lower, upper, timestamp)


def find_bound(stater: Stater, upper: State, timestamp: datetime) -> tuple[State, State]:
    """Find an existing lower bound state, narrowing ``upper`` on the way."""
    lower_id = 1
    lower: State | None = None

    while lower is None:
        lower = stater.try_state(lower_id)

        if lower is not None and lower.timestamp > timestamp:
            if lower.seq_num + 1 >= upper.seq_num:
                return lower, upper
            # the candidate is a better upper bound
            upper = lower
            lower = None
            lower_id = 1

        if lower is not None:
            break

        new_id = (lower_id + upper.seq_num) // 2
        if new_id <= lower_id:
            # nothing suitable below, upper is the best available
            return upper, upper
        lower_id = new_id

    return lower, upper


def find_in_range(
    stater: Stater, lower: State, upper: State, timestamp: datetime
) -> State:
    """Binary search between two states for the one holding ``timestamp``."""
    while lower.seq_num + 1 < upper.seq_num:
        split_id = (lower.seq_num + upper.seq_num) // 2
        split = stater.try_state(split_id)

        if split is None:
            # file missing, look towards lower
            s_id = split_id - 1
            while split is None and s_id > lower.seq_num:
                split = stater.try_state(s_id)
                s_id -= 1

        if split is None:
            # still missing, look towards upper
            s_id = split_id + 1
            while split is None and s_id < upper.seq_num:
                split = stater.try_state(s_id)
                s_id += 1

        if split is None:
            return lower

        if timestamp > split.timestamp:
            lower = split
        else:
            upper = split

    return upper


def minute_state_at(
    timestamp: datetime, datasource: Datasource | None = None
) -> tuple[MinuteSeqNum, State]:
    """Return the minutely state holding data for ``timestamp``."""
    stater = Stater(
        min_seq=MIN_MINUTE,
        current=lambda: current_minute_state(datasource)[1],
        state=lambda n: minute_state(n, datasource),
    )
    state = search_timestamp(stater, timestamp)
    return MinuteSeqNum(state.seq_num), state


def hour_state_at(
    timestamp: datetime, datasource: Datasource | None = None
) -> tuple[HourSeqNum, State]:
    """Return the hourly state holding data for ``timestamp``."""
    stater = Stater(
        min_seq=MIN_HOUR,
        current=lambda: current_hour_state(datasource)[1],
        state=lambda n: hour_state(n, datasource),
    )
    state = search_timestamp(stater, timestamp)
    return HourSeqNum(state.seq_num), state


def day_state_at(
    timestamp: datetime, datasource: Datasource | None = None
) -> tuple[DaySeqNum, State]:
    """Return the daily state holding data for ``timestamp``."""
    stater = Stater(
        min_seq=MIN_DAY,
        current=lambda: current_day_state(datasource)[1],
        state=lambda n: day_state(n, datasource),
    )
    state = search_timestamp(stater, timestamp)
    return DaySeqNum(state.seq_num), state


def changeset_state_at(
    timestamp: datetime, datasource: Datasource | None = None
) -> tuple[ChangesetSeqNum, State]:
    """Return the changeset state holding data for ``timestamp``."""
    stater = Stater(
        min_seq=MIN_DAY,
        current=lambda: current_changeset_state(datasource)[1],
        state=lambda n: changeset_state(n, datasource),
    )
    state = search_timestamp(stater, timestamp)
    return ChangesetSeqNum(state.seq_num), state