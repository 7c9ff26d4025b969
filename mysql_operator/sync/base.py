"""
Resource sync units.

A sync unit ensures one managed resource of a cluster matches its desired
state. Units are built fresh for every reconciliation from the COMPONENTS
table and a ResourceSyncer that knows how to converge each resource kind.
"""
import functools
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Protocol

from mysql_operator.models.cluster import MysqlCluster, ResourceName


class SyncOutcome(str, Enum):
    """Result of one sync unit invocation."""

    UP_TO_DATE = "up-to-date"
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skip"
    FAILED = "failed"

    @property
    def changed(self) -> bool:
        return self in (SyncOutcome.CREATED, SyncOutcome.UPDATED)


class EventReason(str, Enum):
    """Event reasons emitted while syncing managed resources."""

    DB_SECRET_FAILED = "DbSecretFailed"
    DB_SECRET_UPDATED = "DbSecretUpdated"
    CONFIG_MAP_FAILED = "ConfigMapFailed"
    CONFIG_MAP_UPDATED = "ConfigMapUpdated"
    SERVICE_FAILED = "ServiceFailed"
    SERVICE_UPDATED = "ServiceUpdated"
    STATEFUL_SET_FAILED = "StatefulSetFailed"
    STATEFUL_SET_UPDATED = "StatefulSetUpdated"
    CRON_JOB_FAILED = "CronJobFailed"
    CRON_JOB_UPDATED = "CronJobUpdated"


class ResourceSyncer(Protocol):
    """Converges one managed resource kind of a cluster; raises on failure."""

    async def sync(self, kind: ResourceName, cluster: MysqlCluster) -> SyncOutcome:
        ...


@dataclass(frozen=True)
class Component:
    """Static description of a managed resource."""

    alias: str
    kind: ResourceName
    reason_failed: EventReason
    reason_updated: EventReason


# Order matters: later resources depend on earlier ones (the statefulset
# references the headless service and the secret).
COMPONENTS: List[Component] = [
    Component(
        alias="cluster-secret",
        kind=ResourceName.SECRET,
        reason_failed=EventReason.DB_SECRET_FAILED,
        reason_updated=EventReason.DB_SECRET_UPDATED,
    ),
    Component(
        alias="config-map",
        kind=ResourceName.CONFIG_MAP,
        reason_failed=EventReason.CONFIG_MAP_FAILED,
        reason_updated=EventReason.CONFIG_MAP_UPDATED,
    ),
    Component(
        alias="headless-service",
        kind=ResourceName.HEADLESS_SERVICE,
        reason_failed=EventReason.SERVICE_FAILED,
        reason_updated=EventReason.SERVICE_UPDATED,
    ),
    Component(
        alias="statefulset",
        kind=ResourceName.STATEFUL_SET,
        reason_failed=EventReason.STATEFUL_SET_FAILED,
        reason_updated=EventReason.STATEFUL_SET_UPDATED,
    ),
    Component(
        alias="backup-cron-job",
        kind=ResourceName.BACKUP_CRON_JOB,
        reason_failed=EventReason.CRON_JOB_FAILED,
        reason_updated=EventReason.CRON_JOB_UPDATED,
    ),
]


@dataclass(frozen=True)
class SyncUnit:
    """A component bound to one cluster for one reconciliation."""

    component: Component
    name: str
    operation: Callable[[], Awaitable[SyncOutcome]]

    @property
    def alias(self) -> str:
        return self.component.alias


def resource_name_for(component: Component, cluster: MysqlCluster) -> str:
    """Return the object name a component manages for ``cluster``."""
    if component.kind is ResourceName.SECRET and cluster.spec.secret_name:
        return cluster.spec.secret_name
    return cluster.get_name_for_resource(component.kind)


def build_sync_units(cluster: MysqlCluster, syncer: ResourceSyncer) -> List[SyncUnit]:
    """Bind every component to ``cluster``, preserving COMPONENTS order."""
    return [
        SyncUnit(
            component=component,
            name=resource_name_for(component, cluster),
            operation=functools.partial(syncer.sync, component.kind, cluster),
        )
        for component in COMPONENTS
    ]
