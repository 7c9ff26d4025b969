"""
Kubernetes-backed resource syncer.

Converges each managed resource by reading the live object, creating it when
missing and patching it otherwise. The API server does the merging; whether
anything changed is read from the object's resourceVersion.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from kubernetes_asyncio.client import ApiException
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from mysql_operator.config.kubernetes import KubernetesClientSet
from mysql_operator.config.logging import get_logger
from mysql_operator.models.cluster import MysqlCluster, ResourceName
from mysql_operator.sync.base import COMPONENTS, SyncOutcome, resource_name_for
from mysql_operator.utils.retry import is_retryable_k8s_error

logger = get_logger(__name__)


class ManifestBuilder(Protocol):
    """
    Builds the desired Kubernetes body for a managed resource.

    Returning None means the resource is not wanted for this cluster (for
    example the backup cron job when no schedule is set).
    """

    def build(self, kind: ResourceName, cluster: MysqlCluster) -> Optional[Dict[str, Any]]:
        ...


@dataclass(frozen=True)
class KindApi:
    """Which client and which methods handle one resource kind."""

    api: str
    read: str
    create: str
    patch: str


KIND_APIS: Dict[ResourceName, KindApi] = {
    ResourceName.SECRET: KindApi(
        "core_api", "read_namespaced_secret", "create_namespaced_secret", "patch_namespaced_secret"
    ),
    ResourceName.CONFIG_MAP: KindApi(
        "core_api",
        "read_namespaced_config_map",
        "create_namespaced_config_map",
        "patch_namespaced_config_map",
    ),
    ResourceName.HEADLESS_SERVICE: KindApi(
        "core_api", "read_namespaced_service", "create_namespaced_service", "patch_namespaced_service"
    ),
    ResourceName.STATEFUL_SET: KindApi(
        "apps_api",
        "read_namespaced_stateful_set",
        "create_namespaced_stateful_set",
        "patch_namespaced_stateful_set",
    ),
    ResourceName.BACKUP_CRON_JOB: KindApi(
        "batch_api",
        "read_namespaced_cron_job",
        "create_namespaced_cron_job",
        "patch_namespaced_cron_job",
    ),
}

_COMPONENT_BY_KIND = {component.kind: component for component in COMPONENTS}


def _resource_version(obj: Any) -> Optional[str]:
    metadata = getattr(obj, "metadata", None)
    return getattr(metadata, "resource_version", None)


class KubernetesResourceSyncer:
    """Implements ResourceSyncer on top of the Kubernetes API."""

    def __init__(self, client_set: KubernetesClientSet, manifests: ManifestBuilder):
        """
        Initialize Kubernetes resource syncer.

        Args:
            client_set: Kubernetes API clients
            manifests: Builder for the desired resource bodies
        """
        self.client_set = client_set
        self.manifests = manifests

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(is_retryable_k8s_error),
        reraise=True,
    )
    async def _call(self, method: Callable[..., Awaitable[Any]], **kwargs) -> Any:
        return await method(**kwargs)

    def _prepare_body(
        self, body: Dict[str, Any], name: str, cluster: MysqlCluster
    ) -> Dict[str, Any]:
        metadata = body.setdefault("metadata", {})
        metadata.setdefault("name", name)
        metadata["namespace"] = cluster.namespace

        owner = cluster.as_owner_reference()
        owners = list(metadata.get("ownerReferences") or [])
        if not any(o.get("kind") == owner["kind"] and o.get("name") == owner["name"] for o in owners):
            owners.insert(0, owner)
        metadata["ownerReferences"] = owners
        return body

    async def sync(self, kind: ResourceName, cluster: MysqlCluster) -> SyncOutcome:
        """
        Converge one managed resource of ``cluster``.

        Raises:
            ApiException: If the Kubernetes API rejects the request
        """
        component = _COMPONENT_BY_KIND[kind]
        name = resource_name_for(component, cluster)

        body = self.manifests.build(kind, cluster)
        if body is None:
            logger.debug("resource_sync_skipped", component=component.alias, name=name)
            return SyncOutcome.SKIPPED

        body = self._prepare_body(body, name, cluster)
        name = body["metadata"]["name"]

        kind_api = KIND_APIS[kind]
        api = getattr(self.client_set, kind_api.api)

        try:
            existing = await self._call(
                getattr(api, kind_api.read), name=name, namespace=cluster.namespace
            )
        except ApiException as e:
            if e.status != 404:
                raise
            await self._call(getattr(api, kind_api.create), namespace=cluster.namespace, body=body)
            logger.info("resource_created", component=component.alias, name=name)
            return SyncOutcome.CREATED

        patched = await self._call(
            getattr(api, kind_api.patch), name=name, namespace=cluster.namespace, body=body
        )

        if _resource_version(patched) != _resource_version(existing):
            logger.info("resource_updated", component=component.alias, name=name)
            return SyncOutcome.UPDATED

        return SyncOutcome.UP_TO_DATE
