"""
Wiring of the operator components from the operator options.

The entrypoint builds the options once, then builds the reconciler and the
resolver here and hands them to its control loop.
"""
from mysql_operator.config.kubernetes import KubernetesClientSet
from mysql_operator.config.settings import OperatorOptions
from mysql_operator.core.reconciler import ClusterReconciler
from mysql_operator.events import KubernetesEventRecorder
from mysql_operator.sync.kubernetes import KubernetesResourceSyncer, ManifestBuilder
from mysql_operator.topology.client import orchestrator_client_factory
from mysql_operator.topology.resolver import TopologyResolver


def build_resolver(options: OperatorOptions) -> TopologyResolver:
    """Build a topology resolver talking to Orchestrator."""
    return TopologyResolver(orchestrator_client_factory(options.orchestrator_timeout_seconds))


def build_reconciler(
    options: OperatorOptions,
    client_set: KubernetesClientSet,
    manifests: ManifestBuilder,
) -> ClusterReconciler:
    """
    Build a cluster reconciler backed by Kubernetes and Orchestrator.

    Args:
        options: Operator options
        client_set: Kubernetes API clients
        manifests: Builder for the desired resource bodies

    Returns:
        Configured ClusterReconciler
    """
    return ClusterReconciler(
        syncer=KubernetesResourceSyncer(client_set, manifests),
        recorder=KubernetesEventRecorder(client_set.api_client, component=options.app_name),
        topology_client_factory=orchestrator_client_factory(options.orchestrator_timeout_seconds),
    )
