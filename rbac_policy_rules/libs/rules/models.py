"""
Data Models Module.

Typed, immutable data structures for subjects and the rules granted to them.
Field names on the wire follow the Kubernetes PolicyRule and Subject schemas.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.constants import KubernetesConstants, RuleConstants

Field = RuleConstants.Field


def _as_tuple(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Normalize a missing, null, scalar or list field to a tuple of strings."""
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        return (str(values),)
    return tuple(str(value) for value in values)


@dataclass(frozen=True)
class Principal:
    """
    A security subject: User, Group or ServiceAccount.

    Two principals are the same subject when kind and name are equal.
    """
    kind: str
    name: str

    def __post_init__(self):
        if self.kind not in KubernetesConstants.PrincipalKind.values():
            raise ValueError(f"Unsupported subject kind: {self.kind!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Principal':
        """Create Principal from a Kubernetes Subject dictionary."""
        return cls(kind=str(data.get('kind', '')), name=str(data.get('name', '')))

    def to_dict(self) -> Dict[str, str]:
        return {'kind': self.kind, 'name': self.name}

    @property
    def sort_key(self) -> Tuple[str, str]:
        return (self.kind, self.name)


@dataclass(frozen=True)
class Rule:
    """
    Represents a single RBAC policy rule.

    Values are kept exactly as received; ordering and canonical forms are
    produced at render time by the canonicalizer.
    """
    api_groups: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()
    resource_names: Tuple[str, ...] = ()
    verbs: Tuple[str, ...] = ()
    non_resource_urls: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Rule':
        """Create Rule from a Kubernetes PolicyRule dictionary."""
        return cls(
            api_groups=_as_tuple(data.get(Field.API_GROUPS.value)),
            resources=_as_tuple(data.get(Field.RESOURCES.value)),
            resource_names=_as_tuple(data.get(Field.RESOURCE_NAMES.value)),
            verbs=_as_tuple(data.get(Field.VERBS.value)),
            non_resource_urls=_as_tuple(data.get(Field.NON_RESOURCE_URLS.value)),
        )

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to a PolicyRule dictionary; every field is always present."""
        return {
            Field.VERBS.value: list(self.verbs),
            Field.API_GROUPS.value: list(self.api_groups),
            Field.RESOURCES.value: list(self.resources),
            Field.RESOURCE_NAMES.value: list(self.resource_names),
            Field.NON_RESOURCE_URLS.value: list(self.non_resource_urls),
        }

    def get(self, rule_field: 'RuleConstants.Field') -> Tuple[str, ...]:
        """Get the values of one rule field."""
        return {
            Field.VERBS: self.verbs,
            Field.API_GROUPS: self.api_groups,
            Field.RESOURCES: self.resources,
            Field.RESOURCE_NAMES: self.resource_names,
            Field.NON_RESOURCE_URLS: self.non_resource_urls,
        }[rule_field]


@dataclass(frozen=True)
class PermissionEntry:
    """One (principal, scope, rule) triple: the unit delivered by the collector."""
    principal: Principal
    scope: str
    rule: Rule


@dataclass(frozen=True)
class PrincipalPermissions:
    """
    All rules granted to one principal, partitioned by scope.

    The scope key is the namespace name, or an empty string for cluster-wide
    rules. Rules under a scope keep their discovery order.
    """
    principal: Principal
    rules: Dict[str, Tuple[Rule, ...]] = field(default_factory=dict)

    def scopes(self) -> List[str]:
        """Scopes in sorted order; the cluster scope sorts first."""
        return sorted(self.rules)

    def all_rules(self) -> List[Rule]:
        return [rule for scope in self.scopes() for rule in self.rules[scope]]

    def entries(self) -> List[PermissionEntry]:
        """Flatten back into permission entries."""
        return [
            PermissionEntry(self.principal, scope, rule)
            for scope in self.scopes()
            for rule in self.rules[scope]
        ]
