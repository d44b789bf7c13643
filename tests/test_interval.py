import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from osmkit.replication.datasource import (
    BASE_URL,
    Datasource,
    UnexpectedStatusCodeError,
    not_found,
)
from osmkit.replication.interval import (
    DaySeqNum,
    HourSeqNum,
    MinuteSeqNum,
    base_seq_url,
    change_url,
    current_day_state,
    current_hour_state,
    current_minute_state,
    day_state,
    decode_interval_state,
    fetch_state,
    hour_state,
    minute_state,
)

STATE_TEXT = b"""#Sat Jul 16 06:28:03 UTC 2016
txnMaxQueried=836441250
sequenceNumber=2010594
timestamp=2016-07-16T06\\:28\\:02Z
txnReadyList=
txnMax=836441259
txnActiveList=836441203
"""

ROUTES = {
    "/replication/minute/state.txt": STATE_TEXT,
    "/replication/minute/002/010/594.state.txt": STATE_TEXT,
    "/replication/hour/state.txt": STATE_TEXT,
    "/replication/hour/002/010/594.state.txt": STATE_TEXT,
    "/replication/day/state.txt": STATE_TEXT,
    "/replication/day/002/010/594.state.txt": STATE_TEXT,
}


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        body = ROUTES.get(self.path)
        if body is None:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def datasource():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield Datasource(base_url=f"http://127.0.0.1:{server.server_address[1]}", timeout=5)
    finally:
        server.shutdown()
        server.server_close()


def test_decode_interval_state():
    state = decode_interval_state(STATE_TEXT)
    assert MinuteSeqNum(state.seq_num) == 2010594
    assert state.timestamp == datetime(2016, 7, 16, 6, 28, 2, tzinfo=timezone.utc)
    assert state.txn_max == 836441259
    assert state.txn_max_queried == 836441250


def test_decode_interval_state_accepts_text():
    state = decode_interval_state(STATE_TEXT.decode())
    assert state.seq_num == 2010594


def test_decode_interval_state_bad_number():
    with pytest.raises(ValueError):
        decode_interval_state("sequenceNumber=abc\n")


def test_seq_num_strings():
    assert str(MinuteSeqNum(5)) == "minute/5"
    assert str(HourSeqNum(5)) == "hour/5"
    assert str(DaySeqNum(5)) == "day/5"
    assert MinuteSeqNum(5).dir == "minute"
    assert int(DaySeqNum(7)) == 7


def test_seq_num_negative():
    with pytest.raises(ValueError):
        MinuteSeqNum(-1)


def test_base_seq_url():
    assert (
        base_seq_url(MinuteSeqNum(123456789))
        == "https://planet.osm.org/replication/minute/123/456/789"
    )
    assert change_url(HourSeqNum(123456789)) == (
        BASE_URL + "/replication/hour/123/456/789.osc.gz"
    )


def test_base_seq_url_custom_datasource():
    ds = Datasource(base_url="http://localhost")
    assert base_seq_url(DaySeqNum(2010594), ds) == "http://localhost/replication/day/002/010/594"


def test_fetch_state_by_number(datasource):
    state = fetch_state(MinuteSeqNum(2010594), datasource)
    assert state.seq_num == 2010594
    assert state.txn_max == 836441259


@pytest.mark.parametrize("fetch", [minute_state, hour_state, day_state])
def test_state_functions(datasource, fetch):
    assert fetch(2010594, datasource).seq_num == 2010594


@pytest.mark.parametrize(
    "current, kind",
    [
        (current_minute_state, MinuteSeqNum),
        (current_hour_state, HourSeqNum),
        (current_day_state, DaySeqNum),
    ],
)
def test_current_state(datasource, current, kind):
    n, state = current(datasource)
    assert isinstance(n, kind)
    assert n == 2010594
    assert state.timestamp == datetime(2016, 7, 16, 6, 28, 2, tzinfo=timezone.utc)


def test_missing_state_raises(datasource):
    with pytest.raises(UnexpectedStatusCodeError) as info:
        minute_state(42, datasource)
    assert not_found(info.value)
    assert info.value.url.endswith("/replication/minute/000/000/042.state.txt")