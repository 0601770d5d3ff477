"""
RBAC Policy Rules

Reports, per user, group and service account, the normalized set of
Kubernetes RBAC policy rules granted cluster-wide and per namespace.
"""

__version__ = "1.0.0"

from .libs import PolicyRulesManager, PolicyRulesOptions, PolicyRulesPipeline, main

__all__ = [
    'PolicyRulesManager',
    'PolicyRulesOptions',
    'PolicyRulesPipeline',
    'main'
]
