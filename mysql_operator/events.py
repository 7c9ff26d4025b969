"""
Event recording for MySQL clusters.

Events are written as core/v1 Events referencing the MysqlCluster object, so
they show up in ``kubectl describe mysqlcluster``.
"""
import asyncio
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

import aiohttp
from kubernetes_asyncio import client
from kubernetes_asyncio.client import ApiException

from mysql_operator.config.logging import get_logger
from mysql_operator.models.cluster import API_VERSION, CLUSTER_KIND, MysqlCluster

logger = get_logger(__name__)


class EventType(str, Enum):
    """Kubernetes event severities."""

    NORMAL = "Normal"
    WARNING = "Warning"


class EventRecorder(Protocol):
    """Something that can record an event about a cluster."""

    async def emit(
        self, cluster: MysqlCluster, event_type: EventType, reason: str, message: str
    ) -> None:
        ...


class KubernetesEventRecorder:
    """
    Records events through the Kubernetes API.

    Recording is best-effort: API failures are logged and never raised, so an
    unreachable event sink cannot change the outcome of a reconciliation.
    """

    def __init__(self, api_client: client.ApiClient, component: str = "mysql-operator"):
        """
        Initialize event recorder.

        Args:
            api_client: Kubernetes API client
            component: Reporting component name
        """
        self.core_api = client.CoreV1Api(api_client)
        self.component = component

    def _build_event(
        self, cluster: MysqlCluster, event_type: EventType, reason: str, message: str
    ) -> dict:
        now = datetime.now(timezone.utc).isoformat()
        return {
            "apiVersion": "v1",
            "kind": "Event",
            "metadata": {
                "name": f"{cluster.name}.{uuid.uuid4().hex[:16]}",
                "namespace": cluster.namespace,
            },
            "involvedObject": {
                "apiVersion": API_VERSION,
                "kind": CLUSTER_KIND,
                "name": cluster.name,
                "namespace": cluster.namespace,
                "uid": cluster.uid,
            },
            "type": event_type.value,
            "reason": reason,
            "message": message,
            "source": {"component": self.component},
            "firstTimestamp": now,
            "lastTimestamp": now,
            "count": 1,
        }

    async def emit(
        self, cluster: MysqlCluster, event_type: EventType, reason: str, message: str
    ) -> None:
        body = self._build_event(cluster, event_type, reason, message)
        try:
            await self.core_api.create_namespaced_event(namespace=cluster.namespace, body=body)
        except ApiException as e:
            logger.warning(
                "failed_to_record_event",
                cluster=cluster.name,
                reason=reason,
                status=e.status,
                error=str(e.reason),
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(
                "failed_to_record_event",
                cluster=cluster.name,
                reason=reason,
                error=str(e),
            )
