import email.message
import io
import urllib.request
import urllib.response
from datetime import datetime, timezone

import pytest

from osmkit.replication.changesets import (
    ChangesetSeqNum,
    base_changeset_url,
    changeset_state,
    current_changeset_state,
    decode_changeset_state,
)
from osmkit.replication.datasource import (
    Datasource,
    UnexpectedStatusCodeError,
    not_found,
)

BASE = "https://replication.example.com"


class _Pages(urllib.request.BaseHandler):
    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    def https_open(self, request):
        url = request.full_url
        self.requested.append(url)
        body = self.pages.get(url)
        code = 200 if body is not None else 404
        return urllib.response.addinfourl(
            io.BytesIO(body or b""), email.message.Message(), url, code
        )


def _datasource(pages):
    handler = _Pages(pages)
    opener = urllib.request.OpenerDirector()
    opener.add_handler(handler)
    return Datasource(base_url=BASE, opener=opener), handler


def test_decode_changeset_state():
    data = b"---\nlast_run: 2016-07-02 22:46:01.422137422 Z\nsequence: 1912325\n"
    state = decode_changeset_state(data)
    assert ChangesetSeqNum(state.seq_num) == 1912325
    assert state.timestamp == datetime(2016, 7, 2, 22, 46, 1, 422137, tzinfo=timezone.utc)


def test_decode_changeset_state_offset_format():
    data = "---\nlast_run: 2016-07-02 22:46:01.5 +00:00\nsequence: 7\n"
    state = decode_changeset_state(data)
    assert state.seq_num == 7
    assert state.timestamp == datetime(2016, 7, 2, 22, 46, 1, 500000, tzinfo=timezone.utc)


def test_decode_changeset_state_bad_sequence():
    with pytest.raises(ValueError):
        decode_changeset_state("---\nlast_run: 2016-07-02 22:46:01 Z\nsequence: x\n")


def test_decode_changeset_state_too_short():
    with pytest.raises(ValueError):
        decode_changeset_state("---\n")


def test_base_changeset_url():
    assert (
        base_changeset_url(123456789)
        == "https://planet.osm.org/replication/changesets/123/456/789"
    )


def test_seq_num_string_and_dir():
    n = ChangesetSeqNum(42)
    assert str(n) == "changeset/42"
    assert n.dir == "changesets"
    assert int(n) == 42


def test_current_changeset_state_adds_one():
    ds, handler = _datasource(
        {
            f"{BASE}/replication/changesets/state.yaml": (
                b"---\nlast_run: 2016-07-02 22:46:01.0 Z\nsequence: 100\n"
            )
        }
    )
    n, state = current_changeset_state(ds)
    assert n == 101
    assert isinstance(n, ChangesetSeqNum)
    assert state.seq_num == 101
    assert handler.requested == [f"{BASE}/replication/changesets/state.yaml"]


def test_changeset_state_uses_file_name_number():
    url = f"{BASE}/replication/changesets/005/001/990.state.txt"
    ds, handler = _datasource(
        {url: b"---\nlast_run: 2018-01-01 00:00:00.0 Z\nsequence: 5001989\n"}
    )
    state = changeset_state(5001990, ds)
    assert state.seq_num == 5001990
    assert state.timestamp == datetime(2018, 1, 1, tzinfo=timezone.utc)
    assert handler.requested == [url]


def test_changeset_state_not_found():
    ds, _ = _datasource({})
    with pytest.raises(UnexpectedStatusCodeError) as info:
        changeset_state(12, ds)
    assert not_found(info.value)
    assert info.value.url == f"{BASE}/replication/changesets/000/000/012.state.txt"