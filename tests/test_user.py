from datetime import datetime, timezone

import pytest

from osmkit.user import User

RAW_XML = """
<user id="91499" display_name="pm" account_created="2009-01-13T19:49:59Z">
  <description>mapper</description>
  <img href="image url"/>
  <changesets count="2638"/>
  <traces count="1"/>
  <blocks>
    <received count="5" active="6"/>
  </blocks>
  <home lat="37.793" lon="-122.2712" zoom="3"/>
  <languages>
    <lang>en-UK</lang>
    <lang>en</lang>
  </languages>
  <messages>
    <received count="15" unread="3"/>
    <sent count="7"/>
  </messages>
</user>"""


@pytest.fixture
def user():
    return User.from_xml(RAW_XML)


def test_from_xml_fields(user):
    assert user.id == 91499
    assert user.name == "pm"
    assert user.description == "mapper"
    assert user.img_href == "image url"
    assert user.changesets_count == 2638
    assert user.traces_count == 1


def test_from_xml_home(user):
    assert user.home_lat == 37.793
    assert user.home_lon == -122.2712
    assert user.home_zoom == 3


def test_from_xml_languages(user):
    assert user.languages == ["en-UK", "en"]


def test_from_xml_blocks_and_messages(user):
    assert user.blocks_received == 5
    assert user.blocks_active == 6
    assert user.messages_received == 15
    assert user.messages_unread == 3
    assert user.messages_sent == 7


def test_from_xml_created_at(user):
    assert user.created_at == datetime(2009, 1, 13, 19, 49, 59, tzinfo=timezone.utc)


def test_xml_round_trip(user):
    assert User.from_xml(user.to_xml()) == user


def test_xml_round_trip_bytes(user):
    assert User.from_xml(user.to_xml().encode("utf-8")) == user


def test_to_xml_attributes(user):
    data = user.to_xml()
    assert data.startswith(
        '<user id="91499" display_name="pm" account_created="2009-01-13T19:49:59Z">'
    )
    assert '<home lat="37.793" lon="-122.2712" zoom="3"></home>' in data


def test_from_xml_wrong_root():
    with pytest.raises(ValueError):
        User.from_xml('<way id="1"/>')


def test_from_xml_bad_number():
    with pytest.raises(ValueError):
        User.from_xml('<user id="abc"/>')


def test_from_xml_fractional_time():
    u = User.from_xml('<user id="1" account_created="2016-07-02T22:46:01.5Z"/>')
    assert u.created_at == datetime(2016, 7, 2, 22, 46, 1, 500000, tzinfo=timezone.utc)
    assert 'account_created="2016-07-02T22:46:01.5Z"' in u.to_xml()


def test_to_json():
    u = User(id=123, name="user")
    assert u.to_json() == (
        '{"type":"user","id":123,"name":"user","img":{"href":""},'
        '"changesets":{"count":0},"traces":{"count":0},'
        '"home":{"lat":0,"lon":0,"zoom":0},"languages":null,'
        '"blocks":{"received":{"count":0,"active":0}},'
        '"messages":{"received":{"count":0,"unread":0},"sent":{"count":0}},'
        '"created_at":"0001-01-01T00:00:00Z"}'
    )


def test_to_json_with_description_and_languages(user):
    data = user.to_json()
    assert '"description":"mapper"' in data
    assert '"languages":["en-UK","en"]' in data
    assert '"home":{"lat":37.793,"lon":-122.2712,"zoom":3}' in data