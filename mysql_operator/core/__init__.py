"""
Core of the MySQL operator.

This package provides:
- Defaulting of cluster definitions (InnoDB sizing, requests, anti-affinity)
- The cluster reconciler (ordered, fail-fast resource sync)
- Cooperative cancellation for reconciliation calls
"""
from mysql_operator.core.cancellation import CancelToken
from mysql_operator.core.defaults import apply_defaults
from mysql_operator.core.reconciler import ClusterReconciler, SyncReport

__all__ = [
    "CancelToken",
    "ClusterReconciler",
    "SyncReport",
    "apply_defaults",
]
