"""Persistence of breach notification flags."""

from .flag_store import (
    FlagKey,
    InMemoryFlagStore,
    NotificationFlagStore,
    SQLiteFlagStore,
    StoredFlag,
    create_flag_store,
)

__all__ = [
    "FlagKey",
    "InMemoryFlagStore",
    "NotificationFlagStore",
    "SQLiteFlagStore",
    "StoredFlag",
    "create_flag_store",
]
