"""
Rule Canonicalizer

Normalizes rule field values so that equivalent rules compare and display the
same way. Every field goes through one function, ``canonicalize``, driven by a
per-field ``FieldPolicy``.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, NamedTuple, Optional, Tuple

from ..core.constants import KubernetesConstants, RuleConstants
from .models import Rule

Field = RuleConstants.Field


class FieldPolicy(NamedTuple):
    """Normalization policy for one rule field"""
    fold_to_wildcard: bool = False
    synonyms: Mapping[str, str] = MappingProxyType({})


# Values that spell "matches everything" in fields where that is safe to assume
WILDCARD_ALIASES = frozenset({"", RuleConstants.WILDCARD})

# An empty API group is the core group, not "all groups", so it is never
# folded to the wildcard.
FIELD_POLICIES: Mapping[Field, FieldPolicy] = MappingProxyType({
    Field.API_GROUPS: FieldPolicy(
        fold_to_wildcard=False,
        synonyms=MappingProxyType({KubernetesConstants.CORE_API_GROUP: RuleConstants.CORE_GROUP}),
    ),
    Field.RESOURCES: FieldPolicy(fold_to_wildcard=True),
    Field.RESOURCE_NAMES: FieldPolicy(fold_to_wildcard=True),
    Field.VERBS: FieldPolicy(fold_to_wildcard=True),
    Field.NON_RESOURCE_URLS: FieldPolicy(fold_to_wildcard=True),
})

# Column order of the rule part of a table row
DISPLAY_FIELDS = (
    Field.VERBS,
    Field.API_GROUPS,
    Field.RESOURCES,
    Field.RESOURCE_NAMES,
    Field.NON_RESOURCE_URLS,
)


def canonicalize(values: Optional[Iterable[str]], policy: FieldPolicy) -> FrozenSet[str]:
    """
    Canonicalize the values of one rule field.

    Synonyms are folded first, then wildcard aliases when the policy allows it.
    An empty input stays empty; choosing a placeholder for it is a display
    decision.

    Args:
        values: Field values, in any order, possibly None
        policy: Normalization policy for the field

    Returns:
        Canonical set of values
    """
    canonical = set()
    for value in values or ():
        value = policy.synonyms.get(value, value)
        if policy.fold_to_wildcard and value in WILDCARD_ALIASES:
            value = RuleConstants.WILDCARD
        canonical.add(value)
    return frozenset(canonical)


def canonicalize_field(rule: Rule, rule_field: Field) -> Tuple[str, ...]:
    """Canonical values of one field of a rule, sorted lexicographically."""
    return tuple(sorted(canonicalize(rule.get(rule_field), FIELD_POLICIES[rule_field])))


def canonicalize_rule(rule: Rule) -> Rule:
    """
    Build the canonical form of a rule.

    The result is a new Rule whose fields are sorted canonical sets, so
    canonicalize_rule(canonicalize_rule(r)) == canonicalize_rule(r).
    """
    return Rule(
        api_groups=canonicalize_field(rule, Field.API_GROUPS),
        resources=canonicalize_field(rule, Field.RESOURCES),
        resource_names=canonicalize_field(rule, Field.RESOURCE_NAMES),
        verbs=canonicalize_field(rule, Field.VERBS),
        non_resource_urls=canonicalize_field(rule, Field.NON_RESOURCE_URLS),
    )


def resource_names_placeholder(api_groups: Iterable[str]) -> str:
    """
    Placeholder for a rule without resource names.

    Grouped rules apply to every named resource and show the wildcard; rules
    without API groups show the no-value marker.
    """
    return RuleConstants.WILDCARD if tuple(api_groups) else RuleConstants.NO_VALUE


def rule_cells(rule: Rule) -> Dict[Field, str]:
    """
    Display strings for each rule field.

    Args:
        rule: Rule as stored (raw values)

    Returns:
        Mapping of field to its comma-joined canonical values or placeholder
    """
    canonical = canonicalize_rule(rule)
    cells = {}
    for rule_field in DISPLAY_FIELDS:
        values = canonical.get(rule_field)
        if values:
            cells[rule_field] = RuleConstants.VALUE_SEPARATOR.join(values)
        elif rule_field is Field.RESOURCE_NAMES:
            cells[rule_field] = resource_names_placeholder(canonical.api_groups)
        else:
            cells[rule_field] = RuleConstants.NO_VALUE
    return cells
