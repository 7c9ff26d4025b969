"""
In-memory stand-ins for the operator's collaborators.
"""
from typing import Dict, Iterable, List, Optional

from mysql_operator.exceptions import TopologyError
from mysql_operator.models.cluster import ResourceName
from mysql_operator.sync.base import SyncOutcome
from mysql_operator.topology.client import TopologyInstance


class FakeRecorder:
    """Collects emitted events."""

    def __init__(self):
        self.events = []

    async def emit(self, cluster, event_type, reason, message):
        self.events.append((event_type, reason, message))


class BrokenRecorder:
    """Event sink that fails every write."""

    def __init__(self, error: Exception):
        self.error = error
        self.attempts = 0

    async def emit(self, cluster, event_type, reason, message):
        self.attempts += 1
        raise self.error


class FakeSyncer:
    """Resource syncer returning canned outcomes and recording calls."""

    def __init__(
        self,
        outcomes: Optional[Dict[ResourceName, SyncOutcome]] = None,
        failures: Optional[Dict[ResourceName, Exception]] = None,
    ):
        self.outcomes = outcomes or {}
        self.failures = failures or {}
        self.calls: List[ResourceName] = []

    async def sync(self, kind, cluster):
        self.calls.append(kind)
        if kind in self.failures:
            raise self.failures[kind]
        return self.outcomes.get(kind, SyncOutcome.UP_TO_DATE)


class FakeTopologyClient:
    """In-memory topology authority."""

    def __init__(
        self,
        master: Optional[TopologyInstance] = None,
        replicas: Optional[List[TopologyInstance]] = None,
        error: Optional[Exception] = None,
        discover_failures: Iterable[str] = (),
    ):
        self._master = master
        self._replicas = replicas or []
        self.error = error
        self.discover_failures = set(discover_failures)
        self.discovered = []
        self.queries = []

    async def discover(self, host, port):
        if host in self.discover_failures:
            raise TopologyError(f"cannot discover {host}")
        self.discovered.append((host, port))

    async def master(self, cluster_hint):
        self.queries.append(("master", cluster_hint))
        if self.error:
            raise self.error
        return self._master

    async def replicas(self, cluster_hint):
        self.queries.append(("replicas", cluster_hint))
        if self.error:
            raise self.error
        return list(self._replicas)


class FakeTopologyFactory:
    """Topology client factory handing out one shared fake client."""

    def __init__(self, client: FakeTopologyClient):
        self.client = client
        self.uris = []

    def __call__(self, uri):
        self.uris.append(uri)
        return self.client


