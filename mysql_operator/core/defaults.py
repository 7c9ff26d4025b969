"""
Defaulting engine for MySQL cluster definitions.

Fills every unset field of a cluster definition in place. Fields that are
already set are never touched, so running the defaults twice is the same as
running them once.

InnoDB sizing follows the innodb_dedicated_server heuristics:
https://www.percona.com/blog/2018/03/26/mysql-8-0-innodb_dedicated_server-variable-optimizes-innodb/
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from kubernetes.utils import parse_quantity

from mysql_operator.config.logging import get_logger
from mysql_operator.config.settings import OperatorOptions
from mysql_operator.exceptions import DefaultingError
from mysql_operator.models.cluster import (
    MysqlCluster,
    PodAffinityTerm,
    PodAntiAffinity,
    ResourceName,
    ResourceRequirements,
    WeightedPodAffinityTerm,
)

logger = get_logger(__name__)

MiB = 1 << 20
GiB = 1 << 30

BUFFER_POOL_SIZE_KEY = "innodb-buffer-pool-size"
LOG_FILE_SIZE_KEY = "innodb-log-file-size"

RESOURCE_REQUEST_CPU = "200m"
RESOURCE_REQUEST_MEMORY = "1Gi"
RESOURCE_STORAGE = "1Gi"
DEFAULT_ACCESS_MODES = ["ReadWriteOnce"]

ANTI_AFFINITY_WEIGHT = 100
HOSTNAME_TOPOLOGY_KEY = "kubernetes.io/hostname"


@dataclass(frozen=True)
class MemoryTier:
    """
    One row of a sizing table.

    A tier covers memory up to ``upper_bound`` (``None`` means unbounded);
    ``inclusive`` says whether the bound itself belongs to the tier. The size
    is either a fixed byte count or a ratio of the requested memory.
    """

    upper_bound: Optional[int]
    inclusive: bool = True
    fixed: Optional[int] = None
    ratio: Optional[Decimal] = None

    def contains(self, memory: Decimal) -> bool:
        if self.upper_bound is None:
            return True
        if self.inclusive:
            return memory <= self.upper_bound
        return memory < self.upper_bound

    def size_for(self, memory: Decimal) -> int:
        if self.fixed is not None:
            return self.fixed
        # truncate toward zero, like an integer conversion of the product
        return int(memory * self.ratio)


# Tables are ordered by increasing memory; the first tier containing a value wins.
BUFFER_POOL_TIERS: Sequence[MemoryTier] = (
    MemoryTier(upper_bound=1 * GiB, inclusive=False, fixed=128 * MiB),
    MemoryTier(upper_bound=4 * GiB, ratio=Decimal("0.5")),
    MemoryTier(upper_bound=None, ratio=Decimal("0.75")),
)

LOG_FILE_TIERS: Sequence[MemoryTier] = (
    MemoryTier(upper_bound=1 * GiB, inclusive=False, fixed=48 * MiB),
    MemoryTier(upper_bound=4 * GiB, fixed=128 * MiB),
    MemoryTier(upper_bound=8 * GiB, fixed=512 * MiB),
    MemoryTier(upper_bound=16 * GiB, fixed=1 * GiB),
    MemoryTier(upper_bound=None, fixed=2 * GiB),
)


def size_for_memory(tiers: Sequence[MemoryTier], memory: Decimal) -> int:
    """Return the byte size the matching tier prescribes for ``memory``."""
    for tier in tiers:
        if tier.contains(memory):
            return tier.size_for(memory)
    raise DefaultingError(f"No sizing tier matches memory {memory}")


def parse_memory(quantity: str) -> Decimal:
    """
    Parse a Kubernetes memory quantity (e.g. ``"512Mi"``, ``"2G"``) into bytes.

    Raises:
        DefaultingError: If the quantity is malformed or negative
    """
    try:
        value = parse_quantity(quantity)
    except (ValueError, TypeError, InvalidOperation) as e:
        raise DefaultingError(
            f"Invalid memory request {quantity!r}: {e}",
            details={"memory": quantity},
        ) from e
    if value < 0:
        raise DefaultingError(
            f"Invalid memory request {quantity!r}: must not be negative",
            details={"memory": quantity},
        )
    return value


def apply_defaults(cluster: MysqlCluster, options: OperatorOptions) -> None:
    """
    Fill unset fields of ``cluster`` from ``options`` and derived values.

    Args:
        cluster: Cluster definition, mutated in place
        options: Operator options

    Raises:
        DefaultingError: If the definition is malformed
    """
    spec = cluster.spec

    if not spec.mysql_version:
        spec.mysql_version = options.mysql_image_tag

    if not spec.secret_name:
        spec.secret_name = cluster.get_name_for_resource(ResourceName.SECRET)

    if spec.orchestrator_uri is None and options.orchestrator_uri:
        spec.orchestrator_uri = options.orchestrator_uri

    _default_pod_spec(cluster, options)
    _default_innodb_sizing(cluster)
    _default_volume_spec(cluster)

    logger.debug(
        "cluster_defaults_applied",
        cluster=cluster.name,
        namespace=cluster.namespace,
        mysql_version=spec.mysql_version,
    )


def _default_pod_spec(cluster: MysqlCluster, options: OperatorOptions) -> None:
    pod_spec = cluster.spec.pod_spec

    if not pod_spec.image_pull_policy:
        pod_spec.image_pull_policy = options.image_pull_policy

    if not pod_spec.resources.requests:
        pod_spec.resources = ResourceRequirements(
            requests={
                "cpu": RESOURCE_REQUEST_CPU,
                "memory": RESOURCE_REQUEST_MEMORY,
            }
        )

    # keep members away from each other without blocking scheduling
    if pod_spec.affinity.pod_anti_affinity is None:
        pod_spec.affinity.pod_anti_affinity = PodAntiAffinity(
            preferred_during_scheduling_ignored_during_execution=[
                WeightedPodAffinityTerm(
                    weight=ANTI_AFFINITY_WEIGHT,
                    pod_affinity_term=PodAffinityTerm(
                        topology_key=HOSTNAME_TOPOLOGY_KEY,
                        match_labels=cluster.labels(),
                    ),
                )
            ]
        )


def _default_innodb_sizing(cluster: MysqlCluster) -> None:
    conf = cluster.spec.mysql_conf
    memory_request = cluster.spec.pod_spec.resources.memory_request()
    if memory_request is None:
        return

    missing = [key for key in (BUFFER_POOL_SIZE_KEY, LOG_FILE_SIZE_KEY) if key not in conf]
    if not missing:
        return

    memory = parse_memory(memory_request)

    if BUFFER_POOL_SIZE_KEY not in conf:
        conf[BUFFER_POOL_SIZE_KEY] = str(size_for_memory(BUFFER_POOL_TIERS, memory))

    if LOG_FILE_SIZE_KEY not in conf:
        conf[LOG_FILE_SIZE_KEY] = str(size_for_memory(LOG_FILE_TIERS, memory))


def _default_volume_spec(cluster: MysqlCluster) -> None:
    volume_spec = cluster.spec.volume_spec

    if not volume_spec.access_modes:
        volume_spec.access_modes = list(DEFAULT_ACCESS_MODES)

    if not volume_spec.resources.requests:
        volume_spec.resources = ResourceRequirements(requests={"storage": RESOURCE_STORAGE})
