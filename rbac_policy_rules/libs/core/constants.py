"""
Constants Module

Centralized constants for the policy rules tool to eliminate magic strings
and improve maintainability.
"""

from enum import Enum


class KubernetesConstants:
    """Kubernetes RBAC object and subject constants"""

    RBAC_API_GROUP = "rbac.authorization.k8s.io"
    CORE_API_GROUP = ""  # Core API group (empty string)

    # Scope key for cluster-wide rules
    CLUSTER_SCOPE = ""

    class ObjectKind(str, Enum):
        """RBAC object kinds read from the cluster or a snapshot file"""
        CLUSTER_ROLE = "ClusterRole"
        ROLE = "Role"
        CLUSTER_ROLE_BINDING = "ClusterRoleBinding"
        ROLE_BINDING = "RoleBinding"
        LIST = "List"

        def __str__(self) -> str:
            """Return the kind value for use in manifests"""
            return self.value

    class PrincipalKind(str, Enum):
        """Subject kinds that can be granted RBAC rules"""
        USER = "User"
        GROUP = "Group"
        SERVICE_ACCOUNT = "ServiceAccount"

        def __str__(self) -> str:
            """Return the subject kind for display"""
            return self.value

        @classmethod
        def values(cls) -> list:
            """Get all subject kind values"""
            return [member.value for member in cls]


class RuleConstants:
    """Rule field names and display tokens"""

    # Canonical display tokens
    WILDCARD = "*"
    NO_VALUE = "-"
    CORE_GROUP = "core"
    VALUE_SEPARATOR = ","

    class Field(str, Enum):
        """Rule fields, in the order Kubernetes documents them"""
        VERBS = "verbs"
        API_GROUPS = "apiGroups"
        RESOURCES = "resources"
        RESOURCE_NAMES = "resourceNames"
        NON_RESOURCE_URLS = "nonResourceURLs"

        def __str__(self) -> str:
            """Return the Kubernetes field name"""
            return self.value


class OutputConstants:
    """Output formatting constants"""

    DEFAULT_NAME_PATTERN = ".*"
    DEFAULT_OUTPUT_FORMAT = "table"

    # Column titles of the policy-rules table
    TABLE_HEADER = ("TYPE", "SUBJECT", "VERBS", "NAMESPACE", "API GROUP", "KIND", "NAMES", "NonResourceURI")
    COLUMN_SEPARATOR = " | "
    HEADER_RULE_CHAR = "-"
    HEADER_RULE_JOINT = "+"

    # Document keys
    SUBJECT_KEY = "subject"
    RULES_KEY = "rules"


class ErrorMessages:
    """Centralized error message templates"""

    class ConfigError(str, Enum):
        """Configuration-related error message templates"""
        INVALID_PATTERN = "Invalid name pattern '{pattern}': {error}"
        UNSUPPORTED_OUTPUT = "Unsupported output format '{output}'. Supported formats: {supported}"
        CONFIG_FILE_NOT_FOUND = "Configuration file not found: {config_path}"

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value

    class ClusterError(str, Enum):
        """Cluster access error message templates"""
        NO_CONFIG = (
            "Unable to load Kubernetes configuration from kubeconfig or in-cluster environment.\n"
            "Use --cluster-context to select a context, or --input to read a snapshot file."
        )
        UNAUTHORIZED = (
            "Unauthorized (401) while listing {resource}. "
            "Verify that your credentials are valid for the selected context."
        )
        FORBIDDEN = (
            "Forbidden (403) while listing {resource}. "
            "Reading policy rules requires list access to roles, clusterroles and their bindings."
        )
        API_FAILURE = "Failed to list {resource}: {error}"
        SNAPSHOT_NOT_FOUND = "Snapshot file not found: {path}"

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value

    class ProcessingError(str, Enum):
        """Serialization error message templates"""
        ENCODE_FAILED = "Processing error - {error}"
        DECODE_FAILED = "Failed to parse {mode} document: {error}"
        INVALID_DOCUMENT = "Invalid policy rules document: {reason}"

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value


class FileConstants:
    """File related constants"""

    DEFAULT_CONFIG_FILE = "rbac-policy-rules-config.yaml"
    STDIN_PATH = "-"
