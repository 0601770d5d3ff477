"""
Principal Aggregator

Groups flat permission entries into one record per principal.
"""

import logging
from typing import Dict, Iterable, List

from .models import PermissionEntry, Principal, PrincipalPermissions, Rule

logger = logging.getLogger(__name__)


class PrincipalAggregator:
    """Groups (principal, scope, rule) entries by principal and scope"""

    def aggregate(self, entries: Iterable[PermissionEntry]) -> List[PrincipalPermissions]:
        """
        Aggregate permission entries per principal

        Nothing is dropped or merged: repeated rules for the same principal
        and scope are kept as separate entries in discovery order.

        Args:
            entries: Permission entries in any order

        Returns:
            One PrincipalPermissions per distinct (kind, name), in order of
            first appearance
        """
        grouped: Dict[Principal, Dict[str, List[Rule]]] = {}
        entry_count = 0

        for entry in entries:
            scopes = grouped.setdefault(entry.principal, {})
            scopes.setdefault(entry.scope, []).append(entry.rule)
            entry_count += 1

        logger.debug(f"Aggregated {entry_count} entries into {len(grouped)} subjects")

        return [
            PrincipalPermissions(
                principal=principal,
                rules={scope: tuple(rules) for scope, rules in scopes.items()}
            )
            for principal, scopes in grouped.items()
        ]


def aggregate_permissions(entries: Iterable[PermissionEntry]) -> List[PrincipalPermissions]:
    """Aggregate entries with a default PrincipalAggregator."""
    return PrincipalAggregator().aggregate(entries)
