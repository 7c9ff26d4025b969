"""
MySQL operator core: cluster defaulting, resource reconciliation and
topology resolution for MySQL clusters running on Kubernetes.
"""

__version__ = "0.1.0"
