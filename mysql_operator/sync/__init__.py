from mysql_operator.sync.base import (
    COMPONENTS,
    Component,
    EventReason,
    ResourceSyncer,
    SyncOutcome,
    SyncUnit,
    build_sync_units,
)

__all__ = [
    "COMPONENTS",
    "Component",
    "EventReason",
    "ResourceSyncer",
    "SyncOutcome",
    "SyncUnit",
    "build_sync_units",
]
