"""OpenStreetMap tags, updates, users and ways, with planet replication state helpers."""

__version__ = "0.1.0"