"""
Cluster reconciler.

Drives the managed resources of one MySQL cluster towards their desired
state, in a fixed order, stopping at the first failure. When every resource
is in sync, ready members are registered with the topology authority.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from mysql_operator.config.logging import get_logger
from mysql_operator.core.cancellation import CancelToken
from mysql_operator.events import EventRecorder, EventType
from mysql_operator.exceptions import ClusterSyncError
from mysql_operator.models.cluster import MYSQL_PORT, MysqlCluster
from mysql_operator.sync.base import ResourceSyncer, SyncOutcome, SyncUnit, build_sync_units
from mysql_operator.topology.client import TopologyClientFactory

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComponentResult:
    alias: str
    name: str
    outcome: SyncOutcome


@dataclass
class SyncReport:
    """
    Result of a successful reconciliation.

    ``warnings`` collects best-effort failures (topology registration) that
    did not fail the reconciliation.
    """

    cluster: str
    results: List[ComponentResult] = field(default_factory=list)
    registered_hosts: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(result.outcome.changed for result in self.results)


class ClusterReconciler:
    """
    Reconciles the managed resources of MySQL clusters.

    One call handles one cluster. Calls for different clusters may run
    concurrently; calls for the same cluster must not.
    """

    def __init__(
        self,
        syncer: ResourceSyncer,
        recorder: EventRecorder,
        topology_client_factory: TopologyClientFactory,
    ):
        """
        Initialize cluster reconciler.

        Args:
            syncer: Converges each managed resource kind
            recorder: Receives lifecycle events
            topology_client_factory: Builds a topology client for an address
        """
        self.syncer = syncer
        self.recorder = recorder
        self.topology_client_factory = topology_client_factory

    async def sync(
        self, cluster: MysqlCluster, cancel: Optional[CancelToken] = None
    ) -> SyncReport:
        """
        Reconcile every managed resource of ``cluster``.

        Args:
            cluster: Cluster definition (already defaulted)
            cancel: Optional token checked between resources

        Returns:
            SyncReport with per-resource outcomes and registration warnings

        Raises:
            ClusterSyncError: If a resource fails to sync; later resources are
                not attempted
            ReconcileCancelledError: If ``cancel`` trips between resources
        """
        report = SyncReport(cluster=cluster.name)

        for unit in build_sync_units(cluster, self.syncer):
            if cancel is not None:
                cancel.raise_if_cancelled()

            outcome = await self._sync_unit(cluster, unit)
            report.results.append(ComponentResult(unit.alias, unit.name, outcome))

        if cancel is not None:
            cancel.raise_if_cancelled()

        await self._register_nodes(cluster, report, cancel)
        return report

    async def _sync_unit(self, cluster: MysqlCluster, unit: SyncUnit) -> SyncOutcome:
        component = unit.component
        try:
            outcome = await unit.operation()
            if outcome is SyncOutcome.FAILED:
                raise RuntimeError("resource sync reported failure")
        except Exception as e:
            logger.warning(
                "component_sync_failed",
                component=unit.alias,
                name=unit.name,
                cluster=cluster.name,
                error=str(e),
            )
            error = ClusterSyncError(unit.alias, unit.name, str(e))
            await self._emit(
                cluster, EventType.WARNING, component.reason_failed.value, error.message
            )
            raise error from e

        logger.debug(
            "component_synced",
            component=unit.alias,
            name=unit.name,
            cluster=cluster.name,
            outcome=outcome.value,
        )

        if outcome.changed:
            await self._emit(
                cluster,
                EventType.NORMAL,
                component.reason_updated.value,
                f"{unit.name} {outcome.value}",
            )

        return outcome

    async def _emit(
        self, cluster: MysqlCluster, event_type: EventType, reason: str, message: str
    ) -> None:
        """Record an event; a failing recorder never changes the sync result."""
        try:
            await self.recorder.emit(cluster, event_type, reason, message)
        except Exception as e:
            logger.warning(
                "failed_to_record_event",
                cluster=cluster.name,
                reason=reason,
                error=str(e),
            )

    async def _register_nodes(
        self, cluster: MysqlCluster, report: SyncReport, cancel: Optional[CancelToken]
    ) -> None:
        """Register ready members with the topology authority, best-effort."""
        uri = cluster.orchestrator_uri
        if uri is None:
            return

        client = self.topology_client_factory(uri)
        for ordinal in range(cluster.status.ready_nodes):
            if cancel is not None:
                cancel.raise_if_cancelled()

            host = cluster.get_pod_hostname(ordinal)
            try:
                await client.discover(host, MYSQL_PORT)
            except Exception as e:
                logger.warning(
                    "failed_to_register_host_with_orchestrator",
                    host=host,
                    cluster=cluster.name,
                    error=str(e),
                )
                report.warnings.append(f"failed to register {host} with orchestrator: {e}")
                continue

            report.registered_hosts.append(host)
