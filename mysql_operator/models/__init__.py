from mysql_operator.models.cluster import (
    ClusterSpec,
    ClusterStatus,
    MysqlCluster,
    ResourceName,
)

__all__ = [
    "ClusterSpec",
    "ClusterStatus",
    "MysqlCluster",
    "ResourceName",
]
