"""
Cluster collection and binding resolution tests
"""

import logging
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import urllib3
import yaml
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from rbac_policy_rules.libs.cluster.auth import KubernetesAuth
from rbac_policy_rules.libs.cluster.collector import (
    RBACCollector,
    RBACSnapshot,
    load_snapshot_file,
    resolve_entries,
    snapshot_from_objects,
)
from rbac_policy_rules.libs.core.exceptions import ClusterAccessError
from rbac_policy_rules.libs.core.utils import handle_api_error
from rbac_policy_rules.libs.rules.models import PermissionEntry, Principal, Rule

from test_constants import PolicyRulesTestConstants as Constants


class TestSnapshotFromObjects:
    """Partitioning of Kubernetes objects"""

    def test_partition_by_kind(self):
        snapshot = snapshot_from_objects(Constants.cluster_objects())

        assert len(snapshot.cluster_roles) == 2
        assert len(snapshot.roles) == 1
        assert len(snapshot.cluster_role_bindings) == 1
        assert len(snapshot.role_bindings) == 2

    def test_list_objects_are_expanded(self):
        objects = [
            {"apiVersion": "v1", "kind": "List", "items": Constants.cluster_objects()[:3]},
            {"kind": "ClusterRoleBindingList", "items": [Constants.READ_PODS_BINDING]},
            {"kind": "Pod", "metadata": {"name": "ignored"}},
        ]

        snapshot = snapshot_from_objects(objects)

        assert [len(part) for part in snapshot] == [2, 1, 1, 0]

    def test_invalid_kinds_and_items_are_skipped(self, caplog):
        objects = [
            {"kind": ["ClusterRole"], "metadata": {"name": "listed-kind"}},
            {"kind": 7},
            {"kind": "List", "items": "not-a-list"},
            "ClusterRole",
            Constants.DEPLOYER_CLUSTER_ROLE,
        ]

        with caplog.at_level(logging.WARNING):
            snapshot = snapshot_from_objects(objects)

        assert snapshot.cluster_roles == [Constants.DEPLOYER_CLUSTER_ROLE]
        assert "invalid kind ['ClusterRole']" in caplog.text
        assert "invalid kind 7" in caplog.text
        assert "Ignoring items of List" in caplog.text


class TestResolveEntries:
    """Binding resolution into permission entries"""

    def test_cluster_and_namespace_bindings(self):
        # Arrange
        snapshot = snapshot_from_objects(Constants.cluster_objects())

        # Act
        entries = resolve_entries(snapshot)

        # Assert
        bob = Principal("User", "bob")
        assert [e for e in entries if e.principal == bob] == [
            PermissionEntry(bob, "", Rule(api_groups=("",), resources=("pods",), verbs=("get", "list", "watch"))),
            PermissionEntry(bob, "", Rule(non_resource_urls=("/healthz", "/version"), verbs=("get",))),
        ]
        admins = [e for e in entries if e.principal == Principal("Group", "admins")]
        assert len(admins) == 2 and {e.scope for e in admins} == {""}

        default_sa = [e for e in entries if e.principal == Principal("ServiceAccount", "default")]
        assert [(e.scope, e.rule.resource_names) for e in default_sa] == [("team-a", ("app-config",))]

    def test_rolebinding_to_clusterrole_is_namespaced(self):
        entries = resolve_entries(snapshot_from_objects(Constants.cluster_objects()))

        alice = [e for e in entries if e.principal.name == "alice"]

        assert [(e.scope, e.rule.resources) for e in alice] == [("team-b", ("deployments",))]

    def test_missing_role_is_skipped_with_warning(self, caplog):
        objects = Constants.cluster_objects() + [dict(Constants.DANGLING_BINDING)]

        with caplog.at_level(logging.WARNING):
            entries = resolve_entries(snapshot_from_objects(objects))

        assert all(e.principal.name != "mallory" for e in entries)
        assert "Role 'ghost' not found" in caplog.text

    def test_unsupported_subject_kind_is_skipped(self, caplog):
        binding = dict(Constants.READ_PODS_BINDING)
        binding["subjects"] = [{"kind": "Robot", "name": "r2"}, {"kind": "User", "name": "bob"}]
        snapshot = RBACSnapshot([Constants.POD_READER_CLUSTER_ROLE], [], [binding], [])

        with caplog.at_level(logging.WARNING):
            entries = resolve_entries(snapshot)

        assert {e.principal.name for e in entries} == {"bob"}
        assert "Unsupported subject kind" in caplog.text

    def test_rolebinding_without_namespace_is_skipped(self, caplog):
        # Arrange
        role = {"kind": "Role", "metadata": {"name": "secret-reader"},
                "rules": [{"apiGroups": [""], "resources": ["secrets"], "verbs": ["get"]}]}
        binding = {"kind": "RoleBinding", "metadata": {"name": "read-secrets"},
                   "roleRef": {"kind": "Role", "name": "secret-reader"},
                   "subjects": [{"kind": "User", "name": "eve"}]}

        # Act
        with caplog.at_level(logging.WARNING):
            entries = resolve_entries(snapshot_from_objects([role, binding]))

        # Assert
        assert entries == []
        assert "RoleBinding/read-secrets: metadata.namespace is not set" in caplog.text

    def test_malformed_subjects_rules_and_role_refs_are_skipped(self, caplog):
        cluster_role = {"kind": "ClusterRole", "metadata": {"name": "viewer"},
                        "rules": ["get pods", {"resources": ["pods"], "verbs": "get"}]}
        bindings = [
            {"kind": "ClusterRoleBinding", "metadata": {"name": "view"},
             "roleRef": {"kind": "ClusterRole", "name": "viewer"},
             "subjects": ["eve", {"kind": "User", "name": "bob"}]},
            {"kind": "ClusterRoleBinding", "metadata": "broken", "roleRef": ["ClusterRole", "viewer"],
             "subjects": [{"kind": "User", "name": "mallory"}]},
            {"kind": "ClusterRoleBinding", "metadata": {"name": "everyone"},
             "roleRef": {"kind": "ClusterRole", "name": "viewer"}, "subjects": "eve"},
        ]

        with caplog.at_level(logging.WARNING):
            entries = resolve_entries(RBACSnapshot([cluster_role], [], bindings, []))

        assert entries == [PermissionEntry(Principal("User", "bob"), "", Rule(resources=("pods",), verbs=("get",)))]
        assert "Skipping malformed subject of ClusterRoleBinding/view: 'eve'" in caplog.text
        assert "Skipping malformed rule of ClusterRole/viewer" in caplog.text
        assert "Ignoring subjects of ClusterRoleBinding/everyone" in caplog.text

    def test_role_without_rules_and_binding_without_subjects(self):
        snapshot = RBACSnapshot(
            cluster_roles=[{"kind": "ClusterRole", "metadata": {"name": "aggregate"}, "rules": None}],
            roles=[],
            cluster_role_bindings=[
                {"kind": "ClusterRoleBinding", "metadata": {"name": "agg"},
                 "roleRef": {"kind": "ClusterRole", "name": "aggregate"},
                 "subjects": [{"kind": "User", "name": "bob"}]},
                {"kind": "ClusterRoleBinding", "metadata": {"name": "nobody"},
                 "roleRef": {"kind": "ClusterRole", "name": "aggregate"}, "subjects": None},
            ],
            role_bindings=[],
        )

        assert resolve_entries(snapshot) == []


class TestLoadSnapshotFile:
    """Snapshot files written by kubectl"""

    def test_multi_document_yaml(self, tmp_path):
        path = tmp_path / "rbac.yaml"
        path.write_text(yaml.safe_dump_all(Constants.cluster_objects()))

        snapshot = load_snapshot_file(str(path))

        assert [len(part) for part in snapshot] == [2, 1, 1, 2]

    def test_json_list(self, tmp_path):
        path = tmp_path / "rbac.json"
        path.write_text(yaml.safe_dump({"kind": "List", "items": Constants.cluster_objects()},
                                       default_flow_style=True))

        snapshot = load_snapshot_file(str(path))

        assert len(resolve_entries(snapshot)) == 6

    def test_non_mapping_subject_in_file(self, tmp_path):
        binding = dict(Constants.READ_PODS_BINDING, subjects=["eve", {"kind": "User", "name": "bob"}])
        path = tmp_path / "rbac.yaml"
        path.write_text(yaml.safe_dump_all([Constants.POD_READER_CLUSTER_ROLE, binding]))

        entries = resolve_entries(load_snapshot_file(str(path)))

        assert {e.principal for e in entries} == {Principal("User", "bob")}

    def test_non_string_kind_in_file(self, tmp_path):
        path = tmp_path / "rbac.yaml"
        path.write_text("kind: 42\nmetadata: {name: numbers}\n---\nkind: [RoleBinding]\n")

        snapshot = load_snapshot_file(str(path))

        assert [len(part) for part in snapshot] == [0, 0, 0, 0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ClusterAccessError) as exc_info:
            load_snapshot_file(str(tmp_path / "missing.yaml"))

        assert "Snapshot file not found" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("kind: [ClusterRole\n")

        with pytest.raises(ClusterAccessError):
            load_snapshot_file(str(path))


class TestRBACCollector:
    """Live listing through the Kubernetes API"""

    @patch('rbac_policy_rules.libs.cluster.collector.client.RbacAuthorizationV1Api')
    def test_fetch_snapshot(self, mock_rbac_api_class):
        # Arrange
        mock_api_client = Mock()
        mock_api_client.sanitize_for_serialization.side_effect = lambda item: item
        mock_rbac_api = mock_rbac_api_class.return_value
        mock_rbac_api.list_cluster_role.return_value = SimpleNamespace(items=[Constants.POD_READER_CLUSTER_ROLE])
        mock_rbac_api.list_role_for_all_namespaces.return_value = SimpleNamespace(items=[])
        mock_rbac_api.list_cluster_role_binding.return_value = SimpleNamespace(items=[Constants.READ_PODS_BINDING])
        mock_rbac_api.list_role_binding_for_all_namespaces.return_value = SimpleNamespace(items=None)

        # Act
        snapshot = RBACCollector(mock_api_client).fetch_snapshot()

        # Assert
        mock_rbac_api_class.assert_called_once_with(mock_api_client)
        assert snapshot == RBACSnapshot([Constants.POD_READER_CLUSTER_ROLE], [], [Constants.READ_PODS_BINDING], [])

    @patch('rbac_policy_rules.libs.cluster.collector.client.RbacAuthorizationV1Api')
    def test_forbidden_is_cluster_access_error(self, mock_rbac_api_class):
        mock_rbac_api_class.return_value.list_cluster_role.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ClusterAccessError) as exc_info:
            RBACCollector(Mock()).fetch_snapshot()

        assert "Forbidden (403) while listing clusterroles" in str(exc_info.value)

    @patch('rbac_policy_rules.libs.cluster.collector.client.RbacAuthorizationV1Api')
    def test_connection_failure_is_cluster_access_error(self, mock_rbac_api_class):
        mock_rbac_api_class.return_value.list_cluster_role.side_effect = urllib3.exceptions.MaxRetryError(
            None, "/apis/rbac.authorization.k8s.io/v1/clusterroles", reason=ConnectionRefusedError("refused")
        )

        with pytest.raises(ClusterAccessError) as exc_info:
            RBACCollector(Mock()).fetch_snapshot()

        assert str(exc_info.value) == "Failed to list clusterroles: refused"


class TestHandleApiError:
    """Kubernetes API error translation"""

    def test_unauthorized(self):
        with pytest.raises(ClusterAccessError) as exc_info:
            handle_api_error(ApiException(status=401, reason="Unauthorized"), "roles")

        assert "Unauthorized (401)" in str(exc_info.value)

    def test_other_status(self):
        with pytest.raises(ClusterAccessError) as exc_info:
            handle_api_error(ApiException(status=500, reason="Internal Server Error"), "rolebindings")

        assert str(exc_info.value) == "Failed to list rolebindings: Internal Server Error"


class TestKubernetesAuth:
    """Kubernetes client loading"""

    @patch('rbac_policy_rules.libs.cluster.auth.config')
    def test_kubeconfig_with_skip_tls(self, mock_config):
        auth = KubernetesAuth(context="staging", skip_tls=True)

        api_client = auth.get_api_client()

        assert mock_config.load_kube_config.call_args.kwargs["context"] == "staging"
        assert api_client.configuration.verify_ssl is False
        assert auth.get_api_client() is api_client

    @patch('rbac_policy_rules.libs.cluster.auth.config')
    def test_falls_back_to_in_cluster(self, mock_config):
        mock_config.load_kube_config.side_effect = ConfigException("no kubeconfig")

        KubernetesAuth().get_api_client()

        mock_config.load_incluster_config.assert_called_once()

    @patch('rbac_policy_rules.libs.cluster.auth.config')
    def test_no_configuration_available(self, mock_config):
        mock_config.load_kube_config.side_effect = ConfigException("no kubeconfig")
        mock_config.load_incluster_config.side_effect = ConfigException("not in cluster")

        with pytest.raises(ClusterAccessError) as exc_info:
            KubernetesAuth().get_api_client()

        assert "Unable to load Kubernetes configuration" in str(exc_info.value)

    @patch('rbac_policy_rules.libs.cluster.auth.config')
    def test_explicit_context_does_not_fall_back(self, mock_config):
        mock_config.load_kube_config.side_effect = ConfigException("context not found")

        with pytest.raises(ClusterAccessError) as exc_info:
            KubernetesAuth(context="missing").get_api_client()

        assert "context 'missing'" in str(exc_info.value)
        mock_config.load_incluster_config.assert_not_called()
