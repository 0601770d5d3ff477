"""
RBAC Policy Rules Library

Lists the RBAC policy rules granted to users, groups and service accounts.
"""

__version__ = "1.0.0"

# Core libraries
from .core import ConfigManager
from .core.exceptions import PolicyRulesError, ConfigurationError, ClusterAccessError, ProcessingError

# Rules libraries
from .rules import Principal, Rule, PermissionEntry, PrincipalPermissions, PrincipalAggregator, SubjectFilter

# Output libraries
from .output import OutputMode, PresentationFormatter, load_document

# Cluster libraries
from .cluster import KubernetesAuth, RBACCollector, load_snapshot_file, resolve_entries

# Main application
from .pipeline import PolicyRulesPipeline
from .main_app import PolicyRulesManager, PolicyRulesOptions, main

__all__ = [
    # Core
    'ConfigManager',
    'PolicyRulesError',
    'ConfigurationError',
    'ClusterAccessError',
    'ProcessingError',
    # Rules
    'Principal',
    'Rule',
    'PermissionEntry',
    'PrincipalPermissions',
    'PrincipalAggregator',
    'SubjectFilter',
    # Output
    'OutputMode',
    'PresentationFormatter',
    'load_document',
    # Cluster
    'KubernetesAuth',
    'RBACCollector',
    'load_snapshot_file',
    'resolve_entries',
    # Main
    'PolicyRulesPipeline',
    'PolicyRulesManager',
    'PolicyRulesOptions',
    'main'
]
