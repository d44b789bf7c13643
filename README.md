# osmkit

Plain-Python data types for OpenStreetMap elements: tags, child updates,
users and ways. It also has helpers for reading the state files of the planet
replication feeds, which cover minutely, hourly and daily diffs and changesets.
It uses only the standard library.

The test suite uses pytest, which the `test` extra installs.

## Tags

```python
from osmkit.tags import Tag, Tags

tags = Tags([Tag("highway", "crossing"), Tag("source", "survey")])
tags.find("highway")       # "crossing"
tags.find("name")          # ""
tags.find_tag("highway")   # Tag(key='highway', value='crossing')
tags.has_tag("name")       # False
tags.any_interesting()     # True; "source" on its own would not be
tags.to_map()              # {"highway": "crossing", "source": "survey"}
tags.to_json()             # '{"highway":"crossing","source":"survey"}'

Tags.from_json('{"b":"2","a":"1"}')   # decode; order follows the JSON object
tags.sort_by_key_value()              # sorts in place by key, then value
```

`UNINTERESTING_TAGS` lists the keys, such as `source`, `created_by` and
`tiger:county`, that do not make an element worth showing on its own.

## Updates

An `Update` is a change to the child at `index` of a way or relation that
happened without a new version of the parent. `Updates` is a list of them:

- `up_to(t)` returns the updates with a timestamp at or before `t`.
- `sort_by_timestamp()` sorts in place by timestamp.
- `sort_by_index()` sorts in place by index, then by timestamp.

Timestamps are timezone-aware `datetime` values. The default is
`ZERO_TIME`, 0001-01-01 UTC.

## Ways

```python
from datetime import datetime, timezone
from osmkit.update import Update
from osmkit.way import Way, WayNode

way = Way(
    id=123,
    nodes=[WayNode(id=1, lat=1, lon=2), WayNode(id=2, lat=3, lon=4)],
    updates=[Update(index=0, lat=5, lon=6,
                    timestamp=datetime(2012, 1, 1, tzinfo=timezone.utc))],
)

way.line_string()      # [(2, 1), (4, 3)]: (lon, lat) of the annotated nodes
way.line_string_at(datetime(2013, 1, 1, tzinfo=timezone.utc))
                       # [(6, 5), (4, 3)]: updates up to the time applied
way.apply_updates_up_to(datetime(2013, 1, 1, tzinfo=timezone.utc))
                       # changes the nodes and keeps only the later updates
way.to_json()          # osmjson object, nodes as an array of ids
way.to_xml()           # <way ...><nd .../>...</way>
```

A node counts as annotated when it has a version or a non-zero location.
`apply_update` and `apply_updates_up_to` raise `UpdateIndexOutOfRangeError`
when an update's index is past the last node. `line_string_at` skips such
updates without raising.

`WayNodes` has `bound()`, which returns `((min_lon, min_lat), (max_lon, max_lat))`.
It also has `node_ids()`, plus `to_json()` and `from_json()`, which write and read
the nodes as a JSON array of ids. `Ways` has `ids()` and `sort_by_id_version()`.
`Way.committed_at()` returns `committed` if it is set and `timestamp` if not.

## Users

`User.from_xml(data)` reads a `<user>` element as the OSM API returns it.
`User.to_xml()` writes it back out, and `User.to_json()` writes it as a JSON
object.

## Replication

The functions in `osmkit.replication` take an optional `Datasource`. When it
is left out they use `DEFAULT_DATASOURCE`. Give a `Datasource` a `base_url`
to read from a mirror instead of `https://planet.osm.org`. You can also set
its `timeout` in seconds and its `opener`, a `urllib.request.OpenerDirector`.

```python
from datetime import datetime, timezone
from osmkit.replication.interval import MinuteSeqNum, base_seq_url, current_minute_state, minute_state
from osmkit.replication.search import minute_state_at

seq, state = current_minute_state()
print(seq, state.timestamp)          # e.g. "minute/2010594 2016-07-16 ..."

minute_state(2010594)                # State of one sequence number

base_seq_url(MinuteSeqNum(2010594))
# 'https://planet.osm.org/replication/minute/002/010/594'

seq, state = minute_state_at(datetime(2016, 7, 16, tzinfo=timezone.utc))
```

- `osmkit.replication.interval` has `MinuteSeqNum`, `HourSeqNum` and `DaySeqNum`.
  It also has `minute_state`, `hour_state` and `day_state`, together with their
  `current_*_state` forms, as well as `base_seq_url`, `change_url` and
  `decode_interval_state`.
- `osmkit.replication.changesets` has `ChangesetSeqNum`, `changeset_state`,
  `current_changeset_state`, `base_changeset_url` and `decode_changeset_state`.
  The sequence number written inside a changeset state file is one less than
  the file's own number. The returned `State` carries the file's number.
- `osmkit.replication.search` has `minute_state_at`, `hour_state_at`,
  `day_state_at` and `changeset_state_at`. Each returns the first state written
  after the timestamp, or the latest state if the timestamp is later than all of
  them. For other sources, build a `Stater` and call `search_timestamp`.

Finding the state for a timestamp is a binary search over the state files. A
single search can make 20 or more requests, so use it sparingly or run it
against a mirror.

When the server answers with a status other than 200, the functions raise
`UnexpectedStatusCodeError`. `not_found(err)` tells you whether the error was
a 404.

## What it does not do

- It finds replication states and builds the URLs of the diff files
  (`change_url`), but it does not download or decode the diff or changeset
  data itself.
- It has no node, relation or changeset types. It does not read OSM XML or PBF
  files as a whole; only single `<user>` elements are read from XML.
- It has no command-line program.