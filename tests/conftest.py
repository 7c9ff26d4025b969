"""
Pytest configuration and fixtures.
"""
from typing import Optional

import pytest

from mysql_operator.config.settings import OperatorOptions
from mysql_operator.models.cluster import ClusterSpec, ClusterStatus, MysqlCluster
from tests.fakes import FakeRecorder, FakeTopologyClient, FakeTopologyFactory


@pytest.fixture
def options():
    """Operator options independent of the environment."""
    return OperatorOptions(
        _env_file=None,
        mysql_image="percona",
        mysql_image_tag="5.7.22",
        image_pull_policy="IfNotPresent",
        orchestrator_uri=None,
    )


@pytest.fixture
def make_cluster():
    """Factory for cluster definitions."""

    def _make(
        name: str = "foo",
        namespace: str = "default",
        ready_nodes: int = 0,
        orchestrator_uri: Optional[str] = None,
        memory: Optional[str] = None,
    ) -> MysqlCluster:
        spec = ClusterSpec(orchestrator_uri=orchestrator_uri)
        if memory is not None:
            spec.pod_spec.resources.requests["memory"] = memory
        return MysqlCluster(
            name=name,
            namespace=namespace,
            uid="0b2d6a8e-1111-4c3f-9d34-1f2e3d4c5b6a",
            spec=spec,
            status=ClusterStatus(ready_nodes=ready_nodes),
        )

    return _make


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def topology_client():
    return FakeTopologyClient()


@pytest.fixture
def topology_factory(topology_client):
    return FakeTopologyFactory(topology_client)
