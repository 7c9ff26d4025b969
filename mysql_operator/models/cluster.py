"""
Pydantic models for MySQL cluster definitions.

A MysqlCluster is owned by the caller. The core reads it, and the defaulting
engine fills unset fields in place; nothing here is thread-safe.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

API_GROUP = "mysql.presslabs.org"
API_VERSION = f"{API_GROUP}/v1alpha1"
CLUSTER_KIND = "MysqlCluster"

MYSQL_PORT = 3306


class ResourceName(str, Enum):
    """Aliases of the resources managed for every cluster."""

    SECRET = "secret"
    CONFIG_MAP = "config-files"
    HEADLESS_SERVICE = "headless"
    STATEFUL_SET = "mysql"
    BACKUP_CRON_JOB = "backup-cron"


def get_name_for_resource(name: ResourceName, cluster_name: str) -> str:
    """
    Return the Kubernetes object name of a managed resource.

    Every kind maps to ``<cluster>-mysql``; objects are told apart by their
    Kubernetes kind, not by name.
    """
    return f"{cluster_name}-mysql"


class ResourceRequirements(BaseModel):
    """Compute or storage requests, as Kubernetes quantity strings."""

    requests: Dict[str, str] = Field(default_factory=dict)
    limits: Dict[str, str] = Field(default_factory=dict)

    def memory_request(self) -> Optional[str]:
        return self.requests.get("memory")


class PodAffinityTerm(BaseModel):
    topology_key: str
    match_labels: Dict[str, str] = Field(default_factory=dict)


class WeightedPodAffinityTerm(BaseModel):
    weight: int = Field(..., ge=1, le=100)
    pod_affinity_term: PodAffinityTerm


class PodAntiAffinity(BaseModel):
    preferred_during_scheduling_ignored_during_execution: List[WeightedPodAffinityTerm] = Field(
        default_factory=list
    )


class Affinity(BaseModel):
    pod_anti_affinity: Optional[PodAntiAffinity] = None


class PodSpec(BaseModel):
    """Scheduling and resource settings for MySQL pods."""

    image_pull_policy: Optional[str] = None
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    affinity: Affinity = Field(default_factory=Affinity)


class VolumeSpec(BaseModel):
    """Persistent volume claim settings for MySQL data."""

    access_modes: List[str] = Field(default_factory=list)
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)


class ClusterSpec(BaseModel):
    """Declared state of a MySQL cluster."""

    replicas: int = Field(default=1, ge=0, description="Number of MySQL members")
    secret_name: Optional[str] = Field(default=None, description="Secret holding root credentials")
    mysql_version: Optional[str] = Field(default=None, description="MySQL image tag")
    mysql_conf: Dict[str, str] = Field(
        default_factory=dict, description="Per-key overrides for my.cnf"
    )
    pod_spec: PodSpec = Field(default_factory=PodSpec)
    volume_spec: VolumeSpec = Field(default_factory=VolumeSpec)
    orchestrator_uri: Optional[str] = Field(
        default=None, description="Topology authority address; empty means not configured"
    )
    backup_schedule: Optional[str] = Field(default=None, description="Cron schedule for backups")
    backup_uri: Optional[str] = Field(default=None, description="Backup destination bucket URI")


class ClusterStatus(BaseModel):
    """Observed state of a MySQL cluster."""

    ready_nodes: int = Field(default=0, ge=0)


class MysqlCluster(BaseModel):
    """A managed MySQL cluster: identity, declared spec and observed status."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=63,
        pattern="^[a-z0-9]([-a-z0-9]*[a-z0-9])?$",
        description="Cluster name (DNS-1123 compliant)",
    )
    namespace: str = Field(default="default")
    uid: Optional[str] = None
    spec: ClusterSpec = Field(default_factory=ClusterSpec)
    status: ClusterStatus = Field(default_factory=ClusterStatus)

    def get_name_for_resource(self, name: ResourceName) -> str:
        return get_name_for_resource(name, self.name)

    def get_pod_hostname(self, ordinal: int) -> str:
        """Return the stable network hostname of member ``ordinal``."""
        pod = f"{self.get_name_for_resource(ResourceName.STATEFUL_SET)}-{ordinal}"
        service = self.get_name_for_resource(ResourceName.HEADLESS_SERVICE)
        return f"{pod}.{service}.{self.namespace}"

    def labels(self) -> Dict[str, str]:
        return {
            "app": "mysql-operator",
            "mysql_cluster": self.name,
        }

    @property
    def orchestrator_uri(self) -> Optional[str]:
        uri = self.spec.orchestrator_uri
        if uri is None or not uri.strip():
            return None
        return uri

    @property
    def orchestrator_cluster_name(self) -> str:
        """Cluster alias under which the topology authority knows this cluster."""
        return f"{self.name}.{self.namespace}"

    def as_owner_reference(self) -> Dict[str, object]:
        """Return the owner reference stamped on every managed resource."""
        return {
            "apiVersion": API_VERSION,
            "kind": CLUSTER_KIND,
            "name": self.name,
            "uid": self.uid,
            "controller": True,
        }
