"""
Rules Libraries

Subject and rule data model, rule canonicalization, aggregation by subject
and subject name filtering.
"""

from .models import Principal, Rule, PermissionEntry, PrincipalPermissions
from .canonicalizer import FieldPolicy, FIELD_POLICIES, canonicalize, canonicalize_rule, rule_cells
from .aggregator import PrincipalAggregator, aggregate_permissions
from .subject_filter import SubjectFilter

__all__ = [
    # Model
    'Principal',
    'Rule',
    'PermissionEntry',
    'PrincipalPermissions',
    # Canonicalizer
    'FieldPolicy',
    'FIELD_POLICIES',
    'canonicalize',
    'canonicalize_rule',
    'rule_cells',
    # Aggregation and filtering
    'PrincipalAggregator',
    'aggregate_permissions',
    'SubjectFilter'
]
