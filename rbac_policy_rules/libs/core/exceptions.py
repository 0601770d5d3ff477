"""
Exceptions Module

Exception hierarchy for the policy rules tool.
"""


class PolicyRulesError(Exception):
    """Base exception for all policy rules errors"""
    pass


class ConfigurationError(PolicyRulesError):
    """Invalid configuration: bad name pattern, unsupported output format, unreadable config"""
    pass


class ClusterAccessError(PolicyRulesError):
    """Failure to obtain the RBAC snapshot from the cluster or a snapshot file"""
    pass


class ProcessingError(PolicyRulesError):
    """Failure encoding or decoding a structured document"""
    pass
