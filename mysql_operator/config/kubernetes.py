"""
Kubernetes client setup.
"""
from kubernetes_asyncio import client, config
from kubernetes_asyncio.config import ConfigException

from mysql_operator.config.logging import get_logger
from mysql_operator.config.settings import OperatorOptions
from mysql_operator.exceptions import KubernetesError

logger = get_logger(__name__)


class KubernetesClientSet:
    """Container for the Kubernetes API clients the operator uses."""

    def __init__(self, api_client: client.ApiClient):
        self.api_client = api_client
        self.core_api = client.CoreV1Api(api_client)
        self.apps_api = client.AppsV1Api(api_client)
        self.batch_api = client.BatchV1Api(api_client)

    async def close(self):
        """Close all API clients."""
        if self.api_client:
            await self.api_client.close()


async def create_client_set(options: OperatorOptions) -> KubernetesClientSet:
    """
    Load Kubernetes configuration and build the API clients.

    Args:
        options: Operator options (in-cluster flag, kubeconfig path)

    Returns:
        KubernetesClientSet bound to an isolated configuration

    Raises:
        KubernetesError: If no usable configuration is found
    """
    configuration = client.Configuration()
    try:
        if options.k8s_in_cluster:
            config.load_incluster_config(client_configuration=configuration)
        else:
            await config.load_kube_config(
                config_file=options.kubeconfig_path,
                client_configuration=configuration,
            )
    except (ConfigException, OSError) as e:
        logger.error(
            "failed_to_load_kubernetes_config",
            in_cluster=options.k8s_in_cluster,
            kubeconfig_path=options.kubeconfig_path,
            error=str(e),
        )
        raise KubernetesError(f"Failed to load Kubernetes configuration: {e}") from e

    logger.info(
        "kubernetes_configuration_loaded",
        host=configuration.host,
        in_cluster=options.k8s_in_cluster,
    )
    return KubernetesClientSet(client.ApiClient(configuration=configuration))
