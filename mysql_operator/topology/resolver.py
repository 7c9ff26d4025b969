"""
Topology resolver: which member is the master and which replica is healthy.

Both lookups always return a hostname. Without a topology authority, or
when the authority cannot answer or answers with garbage, they fall back to static defaults derived
from the member ordinals.
"""
from mysql_operator.config.logging import get_logger
from mysql_operator.models.cluster import MysqlCluster
from mysql_operator.topology.client import TopologyClientFactory

logger = get_logger(__name__)

# Replicas further behind than this are not considered healthy.
MAX_HEALTHY_REPLICATION_LAG_SECONDS = 5


class TopologyResolver:
    """
    Resolves the master and a healthy replica of a cluster.

    Nothing is cached; every call reads the cluster definition and queries
    the topology authority again.
    """

    def __init__(self, client_factory: TopologyClientFactory):
        """
        Initialize topology resolver.

        Args:
            client_factory: Builds a topology client for an authority address
        """
        self.client_factory = client_factory

    async def resolve_primary(self, cluster: MysqlCluster) -> str:
        """Return the hostname of the cluster's current master."""
        master_host = cluster.get_pod_hostname(0)

        uri = cluster.orchestrator_uri
        if uri is None:
            return master_host

        client = self.client_factory(uri)
        cluster_hint = cluster.orchestrator_cluster_name
        try:
            instance = await client.master(cluster_hint)
        except Exception as e:
            logger.warning(
                "master_lookup_failed_using_default",
                cluster=cluster_hint,
                default_host=master_host,
                error=str(e),
            )
            return master_host

        return instance.hostname

    async def resolve_healthy_secondary(self, cluster: MysqlCluster) -> str:
        """
        Return the hostname of a replica that is safe to read from.

        The default is the highest ready ordinal. When the topology authority
        reports replicas with a known lag of at most five seconds, the last
        such replica in the authority's order wins.
        """
        ready_nodes = cluster.status.ready_nodes
        if ready_nodes < 1:
            host = cluster.get_pod_hostname(0)
            logger.warning("no_ready_nodes_yet", cluster=cluster.name, slave_host=host)
            return host

        host = cluster.get_pod_hostname(ready_nodes - 1)

        uri = cluster.orchestrator_uri
        if uri is not None:
            logger.debug("using_orchestrator_for_slave_host", cluster=cluster.name)
            client = self.client_factory(uri)
            # same <name>.<namespace> alias as the master lookup, not the bare name
            cluster_hint = cluster.orchestrator_cluster_name
            try:
                replicas = await client.replicas(cluster_hint)
            except Exception as e:
                logger.error(
                    "replicas_lookup_failed_using_default",
                    cluster=cluster_hint,
                    default_host=host,
                    error=str(e),
                )
                return host

            for replica in replicas:
                if (
                    replica.lag_known
                    and replica.replication_lag_seconds <= MAX_HEALTHY_REPLICATION_LAG_SECONDS
                ):
                    host = replica.hostname

        logger.debug("slave_host_resolved", cluster=cluster.name, slave_host=host)
        return host
