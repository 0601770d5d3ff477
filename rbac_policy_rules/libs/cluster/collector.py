"""
RBAC Collector

Obtains the RBAC objects of a cluster, either live through the Kubernetes API
or from a YAML/JSON snapshot file, and resolves bindings into permission
entries.
"""

import logging
import sys
import urllib3
import yaml
from pathlib import Path
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..core.constants import ErrorMessages, FileConstants, KubernetesConstants
from ..core.exceptions import ClusterAccessError
from ..core.utils import handle_api_error
from ..rules.models import PermissionEntry, Principal, Rule

logger = logging.getLogger(__name__)

ObjectKind = KubernetesConstants.ObjectKind


class RBACSnapshot(NamedTuple):
    """RBAC objects of one cluster as plain dictionaries (Kubernetes field names)"""
    cluster_roles: List[Dict[str, Any]]
    roles: List[Dict[str, Any]]
    cluster_role_bindings: List[Dict[str, Any]]
    role_bindings: List[Dict[str, Any]]


class RBACCollector:
    """Lists RBAC objects through the Kubernetes API"""

    def __init__(self, api_client: client.ApiClient):
        self.api_client = api_client
        self.rbac_api = client.RbacAuthorizationV1Api(api_client)

    def fetch_snapshot(self) -> RBACSnapshot:
        """
        List roles, cluster roles and their bindings across all namespaces

        Raises:
            ClusterAccessError: If any list call fails
        """
        snapshot = RBACSnapshot(
            cluster_roles=self._list("clusterroles", self.rbac_api.list_cluster_role),
            roles=self._list("roles", self.rbac_api.list_role_for_all_namespaces),
            cluster_role_bindings=self._list("clusterrolebindings", self.rbac_api.list_cluster_role_binding),
            role_bindings=self._list("rolebindings", self.rbac_api.list_role_binding_for_all_namespaces),
        )
        logger.info(
            f"Fetched {len(snapshot.cluster_roles)} clusterroles, {len(snapshot.roles)} roles, "
            f"{len(snapshot.cluster_role_bindings)} clusterrolebindings, "
            f"{len(snapshot.role_bindings)} rolebindings"
        )
        return snapshot

    def _list(self, resource: str, list_call) -> List[Dict[str, Any]]:
        try:
            items = list_call().items or []
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            handle_api_error(e, resource)
        return [self.api_client.sanitize_for_serialization(item) for item in items]


def snapshot_from_objects(objects: Iterable[Dict[str, Any]]) -> RBACSnapshot:
    """
    Partition Kubernetes objects by kind

    ``List`` objects are expanded; objects of other kinds are ignored.
    """
    snapshot = RBACSnapshot([], [], [], [])
    targets = {
        ObjectKind.CLUSTER_ROLE.value: snapshot.cluster_roles,
        ObjectKind.ROLE.value: snapshot.roles,
        ObjectKind.CLUSTER_ROLE_BINDING.value: snapshot.cluster_role_bindings,
        ObjectKind.ROLE_BINDING.value: snapshot.role_bindings,
    }

    pending = list(objects)
    while pending:
        obj = pending.pop(0)
        if not isinstance(obj, dict):
            logger.warning(f"Skipping malformed object: {obj!r}")
            continue
        kind = obj.get('kind')
        if not isinstance(kind, str):
            logger.warning(f"Skipping object with invalid kind {kind!r}")
        elif kind.endswith(ObjectKind.LIST.value):
            pending[:0] = _list_field(obj, 'items', kind)
        elif kind in targets:
            targets[kind].append(obj)
        else:
            logger.debug(f"Ignoring object of kind {kind!r}")

    return snapshot


def load_snapshot_file(path: str) -> RBACSnapshot:
    """
    Load RBAC objects from a YAML or JSON file, '-' for stdin

    The file may hold several YAML documents, a list of objects, or a
    ``kind: List`` as written by ``kubectl get ... -o yaml``.

    Raises:
        ClusterAccessError: If the file cannot be read or parsed
    """
    try:
        if path == FileConstants.STDIN_PATH:
            text = sys.stdin.read()
        else:
            snapshot_file = Path(path)
            if not snapshot_file.is_file():
                raise ClusterAccessError(ErrorMessages.ClusterError.SNAPSHOT_NOT_FOUND.format(path=path))
            text = snapshot_file.read_text()
        documents = list(yaml.safe_load_all(text))
    except OSError as e:
        raise ClusterAccessError(f"Failed to read snapshot {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ClusterAccessError(f"Invalid YAML/JSON in snapshot {path}: {e}") from e

    objects = []
    for document in documents:
        if isinstance(document, list):
            objects.extend(document)
        elif document is not None:
            objects.append(document)

    snapshot = snapshot_from_objects(objects)
    logger.debug(f"Loaded snapshot {path} with {sum(len(part) for part in snapshot)} RBAC objects")
    return snapshot


def _list_field(obj: Dict[str, Any], key: str, obj_ref: str) -> List[Any]:
    """Value of a list field; null means empty, any other non-list is skipped."""
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring {key} of {obj_ref}: expected a list, got {type(value).__name__}")
        return []
    return value


def _rules_of(role: Dict[str, Any], role_ref: str) -> Tuple[Rule, ...]:
    rules = []
    for rule in _list_field(role, 'rules', role_ref):
        if isinstance(rule, dict):
            rules.append(Rule.from_dict(rule))
        else:
            logger.warning(f"Skipping malformed rule of {role_ref}: {rule!r}")
    return tuple(rules)


def _metadata(obj: Dict[str, Any]) -> Tuple[str, str]:
    metadata = obj.get('metadata')
    if not isinstance(metadata, dict):
        metadata = {}
    return str(metadata.get('namespace') or ''), str(metadata.get('name') or '')


def _role_ref(binding: Dict[str, Any]) -> Tuple[str, str]:
    """(kind, name) of the role a binding references, empty strings when unset."""
    role_ref = binding.get('roleRef')
    if not isinstance(role_ref, dict):
        return '', ''
    return str(role_ref.get('kind') or ''), str(role_ref.get('name') or '')


def _principals(binding: Dict[str, Any], binding_ref: str) -> List[Principal]:
    principals = []
    for subject in _list_field(binding, 'subjects', binding_ref):
        if not isinstance(subject, dict):
            logger.warning(f"Skipping malformed subject of {binding_ref}: {subject!r}")
            continue
        try:
            principals.append(Principal.from_dict(subject))
        except ValueError as e:
            logger.warning(f"Skipping subject of {binding_ref}: {e}")
    return principals


def resolve_entries(snapshot: RBACSnapshot) -> List[PermissionEntry]:
    """
    Resolve bindings into (principal, scope, rule) entries

    ClusterRoleBindings grant their ClusterRole cluster-wide. RoleBindings
    grant a Role of their namespace, or a ClusterRole, within that namespace.
    Bindings that reference a missing role, and RoleBindings without a
    namespace, are skipped with a warning.

    Args:
        snapshot: RBAC objects of the cluster

    Returns:
        Permission entries in binding, subject and rule order
    """
    cluster_roles = {}
    for cluster_role in snapshot.cluster_roles:
        _, name = _metadata(cluster_role)
        cluster_roles[name] = _rules_of(cluster_role, f"ClusterRole/{name}")

    roles = {}
    for role in snapshot.roles:
        namespace, name = _metadata(role)
        roles[(namespace, name)] = _rules_of(role, f"Role/{namespace}/{name}")

    entries: List[PermissionEntry] = []

    def grant(binding: Dict[str, Any], binding_ref: str, scope: str, rules: Optional[Tuple[Rule, ...]]) -> None:
        if rules is None:
            role_kind, role_name = _role_ref(binding)
            logger.warning(f"Skipping {binding_ref}: {role_kind or 'role'} '{role_name}' not found")
            return
        for principal in _principals(binding, binding_ref):
            entries.extend(PermissionEntry(principal, scope, rule) for rule in rules)

    for binding in snapshot.cluster_role_bindings:
        _, name = _metadata(binding)
        role_kind, role_name = _role_ref(binding)
        rules = None
        if role_kind == ObjectKind.CLUSTER_ROLE.value:
            rules = cluster_roles.get(role_name)
        grant(binding, f"ClusterRoleBinding/{name}", KubernetesConstants.CLUSTER_SCOPE, rules)

    for binding in snapshot.role_bindings:
        namespace, name = _metadata(binding)
        if not namespace:
            logger.warning(f"Skipping RoleBinding/{name}: metadata.namespace is not set")
            continue
        role_kind, role_name = _role_ref(binding)
        if role_kind == ObjectKind.ROLE.value:
            rules = roles.get((namespace, role_name))
        elif role_kind == ObjectKind.CLUSTER_ROLE.value:
            rules = cluster_roles.get(role_name)
        else:
            rules = None
        grant(binding, f"RoleBinding/{namespace}/{name}", namespace, rules)

    logger.debug(f"Resolved {len(entries)} permission entries")
    return entries
