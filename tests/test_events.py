"""
Tests for the Kubernetes event recorder.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from kubernetes_asyncio.client import ApiException

from mysql_operator.events import EventType, KubernetesEventRecorder


@pytest.fixture
def event_recorder():
    recorder = KubernetesEventRecorder(api_client=MagicMock(), component="mysql-operator")
    recorder.core_api = MagicMock()
    recorder.core_api.create_namespaced_event = AsyncMock()
    return recorder


@pytest.mark.asyncio
async def test_emit_creates_event_for_cluster(event_recorder, make_cluster):
    cluster = make_cluster(namespace="db")

    await event_recorder.emit(cluster, EventType.WARNING, "ServiceFailed", "foo-mysql sync failed: boom")

    kwargs = event_recorder.core_api.create_namespaced_event.await_args.kwargs
    assert kwargs["namespace"] == "db"
    body = kwargs["body"]
    assert body["type"] == "Warning"
    assert body["reason"] == "ServiceFailed"
    assert body["message"] == "foo-mysql sync failed: boom"
    assert body["involvedObject"]["kind"] == "MysqlCluster"
    assert body["involvedObject"]["name"] == "foo"
    assert body["metadata"]["name"].startswith("foo.")
    assert body["source"] == {"component": "mysql-operator"}


@pytest.mark.asyncio
async def test_emit_swallows_api_errors(event_recorder, make_cluster):
    event_recorder.core_api.create_namespaced_event.side_effect = ApiException(
        status=403, reason="Forbidden"
    )

    await event_recorder.emit(make_cluster(), EventType.NORMAL, "DbSecretUpdated", "")


@pytest.mark.asyncio
async def test_emit_swallows_timeouts(event_recorder, make_cluster):
    event_recorder.core_api.create_namespaced_event.side_effect = asyncio.TimeoutError()

    await event_recorder.emit(make_cluster(), EventType.WARNING, "ServiceFailed", "timed out")

    event_recorder.core_api.create_namespaced_event.assert_awaited_once()
