"""
Custom exceptions for the MySQL operator core.

Only ClusterSyncError, DefaultingError and ReconcileCancelledError cross the
boundary of the core. TopologyError is raised by topology clients and is
absorbed by the reconciler and the resolver.
"""
from typing import Any, Dict, Optional


class OperatorError(Exception):
    """
    Base exception for all operator errors.

    All custom exceptions should inherit from this base class.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ClusterSyncError(OperatorError):
    """
    Raised when a managed resource fails to sync.

    The message names the failing resource, e.g.
    ``"foo-mysql sync failed: connection refused"``.
    """

    def __init__(self, alias: str, resource_name: str, reason: str):
        self.alias = alias
        self.resource_name = resource_name
        self.reason = reason
        super().__init__(
            message=f"{resource_name} sync failed: {reason}",
            details={"component": alias, "resource": resource_name},
        )


class DefaultingError(OperatorError):
    """Raised when a cluster definition cannot be defaulted (malformed input)."""


class KubernetesError(OperatorError):
    """Raised when the Kubernetes client cannot be configured."""


class TopologyError(OperatorError):
    """Raised when the topology authority cannot answer a request."""


class ReconcileCancelledError(OperatorError):
    """Raised when a reconciliation is cancelled or its deadline passes."""
