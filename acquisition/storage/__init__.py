"""Durable state: key-value stores and the typed views built on them."""

from acquisition.storage.app_settings import AppSettingsStore
from acquisition.storage.content_cache import ContentCache
from acquisition.storage.kv_store import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    ResilientStore,
)
from acquisition.storage.seen_items import SeenItemsStore

__all__ = [
    "AppSettingsStore",
    "ContentCache",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "ResilientStore",
    "SeenItemsStore",
]
