"""
Topology client for the Orchestrator HTTP API.

Orchestrator tracks which MySQL member is the master of a cluster and how
far behind each replica is. The operator registers members with it and
asks it for the current master and for replica lag.
"""
from typing import Any, Callable, List, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from mysql_operator.config.logging import get_logger
from mysql_operator.exceptions import TopologyError

logger = get_logger(__name__)


class TopologyInstance(BaseModel):
    """A cluster member as reported by the topology authority."""

    hostname: str
    port: int = 3306
    replication_lag_seconds: Optional[int] = Field(
        default=None, description="Seconds behind master; None when unknown"
    )

    @property
    def lag_known(self) -> bool:
        return self.replication_lag_seconds is not None


class TopologyClient(Protocol):
    """Operations the operator needs from a topology authority."""

    async def discover(self, host: str, port: int) -> None:
        ...

    async def master(self, cluster_hint: str) -> TopologyInstance:
        ...

    async def replicas(self, cluster_hint: str) -> List[TopologyInstance]:
        ...


TopologyClientFactory = Callable[[str], TopologyClient]


def parse_instance(data: Any) -> TopologyInstance:
    """
    Convert an Orchestrator instance document into a TopologyInstance.

    Orchestrator encodes nullable lag as ``{"Int64": 3, "Valid": true}``.

    Raises:
        TopologyError: If the document does not have the expected shape
    """
    if not isinstance(data, dict):
        raise TopologyError("Malformed orchestrator instance", details={"instance": data})

    key = data.get("Key") or {}
    lag = data.get("SecondsBehindMaster") or {}
    if not isinstance(key, dict) or not isinstance(lag, dict):
        raise TopologyError("Malformed orchestrator instance", details={"instance": data})

    hostname = key.get("Hostname")
    if not hostname:
        raise TopologyError("Orchestrator instance without hostname", details={"instance": data})

    lag_seconds = lag.get("Int64") if lag.get("Valid") else None

    try:
        return TopologyInstance(
            hostname=hostname,
            port=key.get("Port") or 3306,
            replication_lag_seconds=lag_seconds,
        )
    except ValidationError as e:
        raise TopologyError(
            f"Malformed orchestrator instance: {e}", details={"instance": data}
        ) from e


class OrchestratorClient:
    """
    Client for the Orchestrator HTTP API.

    Every method raises TopologyError on transport failures, non-2xx
    responses and API-level errors.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Orchestrator client.

        Args:
            base_url: Orchestrator API base URL, e.g. http://orchestrator/api
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport

    async def _get(self, path: str) -> Any:
        url = f"{self.base_url}/{path}"

        logger.debug("orchestrator_request", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
                headers={"Accept": "application/json"},
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.debug("orchestrator_http_error", url=url, error=str(e))
            raise TopologyError(
                f"Orchestrator request failed: {e}", details={"url": url}
            ) from e
        except ValueError as e:
            raise TopologyError(
                f"Orchestrator returned invalid JSON: {e}", details={"url": url}
            ) from e

        if isinstance(data, dict) and data.get("Code") == "ERROR":
            raise TopologyError(
                f"Orchestrator error: {data.get('Message', 'unknown error')}",
                details={"url": url},
            )

        return data

    async def discover(self, host: str, port: int) -> None:
        """Ask Orchestrator to discover (register) a MySQL member."""
        await self._get(f"discover/{quote(host, safe='')}/{port}")

    async def master(self, cluster_hint: str) -> TopologyInstance:
        """Return the current master of a cluster."""
        data = await self._get(f"master/{quote(cluster_hint, safe='')}")
        if not isinstance(data, dict):
            raise TopologyError("Unexpected master response from orchestrator")
        return parse_instance(data)

    async def replicas(self, cluster_hint: str) -> List[TopologyInstance]:
        """Return the replicas of a cluster, in Orchestrator's order."""
        data = await self._get(f"cluster-osc-replicas/{quote(cluster_hint, safe='')}")
        if not isinstance(data, list):
            raise TopologyError("Unexpected replicas response from orchestrator")
        return [parse_instance(item) for item in data]


def orchestrator_client_factory(timeout: float = 10.0) -> TopologyClientFactory:
    """Build a factory creating one OrchestratorClient per address."""

    def factory(uri: str) -> TopologyClient:
        return OrchestratorClient(uri, timeout=timeout)

    return factory
