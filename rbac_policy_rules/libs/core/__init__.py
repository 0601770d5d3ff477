"""
Core Libraries

Shared functionality and utilities for the policy rules tool.
"""

from .config import ConfigManager
from .exceptions import PolicyRulesError, ConfigurationError, ClusterAccessError, ProcessingError
from .utils import setup_logging, disable_ssl_warnings

__all__ = [
    'ConfigManager',
    'PolicyRulesError',
    'ConfigurationError',
    'ClusterAccessError',
    'ProcessingError',
    'setup_logging',
    'disable_ssl_warnings'
]
