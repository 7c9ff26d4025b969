"""
Tests for the Kubernetes-backed resource syncer.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from kubernetes_asyncio.client import ApiException

from mysql_operator.models.cluster import ResourceName
from mysql_operator.sync.base import SyncOutcome
from mysql_operator.sync.kubernetes import KubernetesResourceSyncer


def live_object(resource_version):
    return SimpleNamespace(metadata=SimpleNamespace(resource_version=resource_version))


class StaticManifests:
    """Returns a fixed body per kind; kinds without a body are skipped."""

    def __init__(self, bodies):
        self.bodies = bodies

    def build(self, kind, cluster):
        body = self.bodies.get(kind)
        return None if body is None else {k: v for k, v in body.items()}


@pytest.fixture
def client_set():
    return SimpleNamespace(core_api=MagicMock(), apps_api=MagicMock(), batch_api=MagicMock())


@pytest.fixture
def secret_manifests():
    return StaticManifests({ResourceName.SECRET: {"stringData": {"ROOT_PASSWORD": "secret"}}})


@pytest.mark.asyncio
async def test_missing_resource_is_created(client_set, secret_manifests, make_cluster):
    core = client_set.core_api
    core.read_namespaced_secret = AsyncMock(side_effect=ApiException(status=404, reason="Not Found"))
    core.create_namespaced_secret = AsyncMock(return_value=live_object("1"))
    syncer = KubernetesResourceSyncer(client_set, secret_manifests)

    outcome = await syncer.sync(ResourceName.SECRET, make_cluster())

    assert outcome is SyncOutcome.CREATED
    body = core.create_namespaced_secret.await_args.kwargs["body"]
    assert body["metadata"]["name"] == "foo-mysql"
    assert body["metadata"]["namespace"] == "default"
    assert body["metadata"]["ownerReferences"][0]["kind"] == "MysqlCluster"
    assert body["metadata"]["ownerReferences"][0]["controller"] is True


@pytest.mark.asyncio
async def test_changed_resource_version_means_updated(client_set, secret_manifests, make_cluster):
    core = client_set.core_api
    core.read_namespaced_secret = AsyncMock(return_value=live_object("1"))
    core.patch_namespaced_secret = AsyncMock(return_value=live_object("2"))
    syncer = KubernetesResourceSyncer(client_set, secret_manifests)

    outcome = await syncer.sync(ResourceName.SECRET, make_cluster())

    assert outcome is SyncOutcome.UPDATED
    assert core.patch_namespaced_secret.await_args.kwargs["name"] == "foo-mysql"


@pytest.mark.asyncio
async def test_same_resource_version_means_up_to_date(client_set, secret_manifests, make_cluster):
    core = client_set.core_api
    core.read_namespaced_secret = AsyncMock(return_value=live_object("7"))
    core.patch_namespaced_secret = AsyncMock(return_value=live_object("7"))
    syncer = KubernetesResourceSyncer(client_set, secret_manifests)

    outcome = await syncer.sync(ResourceName.SECRET, make_cluster())

    assert outcome is SyncOutcome.UP_TO_DATE


@pytest.mark.asyncio
async def test_no_manifest_is_skipped(client_set, make_cluster):
    client_set.batch_api.read_namespaced_cron_job = AsyncMock()
    syncer = KubernetesResourceSyncer(client_set, StaticManifests({}))

    outcome = await syncer.sync(ResourceName.BACKUP_CRON_JOB, make_cluster())

    assert outcome is SyncOutcome.SKIPPED
    client_set.batch_api.read_namespaced_cron_job.assert_not_awaited()


@pytest.mark.asyncio
async def test_statefulset_goes_through_apps_api(client_set, make_cluster):
    apps = client_set.apps_api
    apps.read_namespaced_stateful_set = AsyncMock(return_value=live_object("3"))
    apps.patch_namespaced_stateful_set = AsyncMock(return_value=live_object("3"))
    manifests = StaticManifests({ResourceName.STATEFUL_SET: {"spec": {"replicas": 3}}})
    syncer = KubernetesResourceSyncer(client_set, manifests)

    outcome = await syncer.sync(ResourceName.STATEFUL_SET, make_cluster(namespace="db"))

    assert outcome is SyncOutcome.UP_TO_DATE
    assert apps.read_namespaced_stateful_set.await_args.kwargs == {
        "name": "foo-mysql",
        "namespace": "db",
    }


@pytest.mark.asyncio
async def test_non_retryable_error_propagates(client_set, secret_manifests, make_cluster):
    core = client_set.core_api
    core.read_namespaced_secret = AsyncMock(side_effect=ApiException(status=403, reason="Forbidden"))
    syncer = KubernetesResourceSyncer(client_set, secret_manifests)

    with pytest.raises(ApiException) as exc_info:
        await syncer.sync(ResourceName.SECRET, make_cluster())

    assert exc_info.value.status == 403
    assert core.read_namespaced_secret.await_count == 1


@pytest.mark.asyncio
async def test_transient_error_is_retried(client_set, secret_manifests, make_cluster):
    core = client_set.core_api
    core.read_namespaced_secret = AsyncMock(
        side_effect=[ApiException(status=503, reason="Unavailable"), live_object("1")]
    )
    core.patch_namespaced_secret = AsyncMock(return_value=live_object("1"))
    syncer = KubernetesResourceSyncer(client_set, secret_manifests)

    outcome = await syncer.sync(ResourceName.SECRET, make_cluster())

    assert outcome is SyncOutcome.UP_TO_DATE
    assert core.read_namespaced_secret.await_count == 2
