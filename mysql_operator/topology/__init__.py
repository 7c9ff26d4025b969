from mysql_operator.topology.client import (
    OrchestratorClient,
    TopologyClient,
    TopologyInstance,
)
from mysql_operator.topology.resolver import TopologyResolver

__all__ = [
    "OrchestratorClient",
    "TopologyClient",
    "TopologyInstance",
    "TopologyResolver",
]
