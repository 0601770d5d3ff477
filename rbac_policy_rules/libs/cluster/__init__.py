"""
Cluster Libraries

Upstream access to RBAC objects: Kubernetes client loading, live listing,
snapshot files and binding resolution.
"""

from .auth import KubernetesAuth
from .collector import RBACCollector, RBACSnapshot, load_snapshot_file, resolve_entries, snapshot_from_objects

__all__ = [
    'KubernetesAuth',
    'RBACCollector',
    'RBACSnapshot',
    'load_snapshot_file',
    'resolve_entries',
    'snapshot_from_objects'
]
