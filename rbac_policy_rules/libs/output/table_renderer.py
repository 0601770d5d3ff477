"""
Table Renderer

Flattens permissions into one row per (subject, scope, rule) and renders a
borderless, left-aligned text table.
"""

from typing import Iterable, List, Sequence, Tuple

from ..core.constants import KubernetesConstants, OutputConstants, RuleConstants
from ..rules.canonicalizer import DISPLAY_FIELDS, rule_cells
from ..rules.models import PrincipalPermissions
from .base_renderer import BaseRenderer

Row = Tuple[str, ...]


class TableRenderer(BaseRenderer):
    """Renders permissions as a human-readable table"""

    def build_rows(self, permissions: Iterable[PrincipalPermissions]) -> List[Row]:
        """
        Build table rows

        Columns: kind, name, verbs, scope, API groups, resources, resource
        names, non-resource URLs. Rows are sorted by (kind, name); rows of the
        same subject keep their scope and rule order.
        """
        rows = []

        for permission in permissions:
            principal = permission.principal
            for scope in permission.scopes():
                namespace = RuleConstants.WILDCARD if scope == KubernetesConstants.CLUSTER_SCOPE else scope
                for rule in permission.rules[scope]:
                    cells = rule_cells(rule)
                    verbs, api_groups, resources, resource_names, non_resource_urls = (
                        cells[rule_field] for rule_field in DISPLAY_FIELDS
                    )
                    rows.append((
                        principal.kind,
                        principal.name,
                        verbs,
                        namespace,
                        api_groups,
                        resources,
                        resource_names,
                        non_resource_urls,
                    ))

        rows.sort(key=lambda row: (row[0], row[1]))
        self.logger.debug(f"Built {len(rows)} table rows")
        return rows

    def render(self, permissions: Iterable[PrincipalPermissions]) -> str:
        return self.format_table(OutputConstants.TABLE_HEADER, self.build_rows(permissions))

    @staticmethod
    def format_table(header: Sequence[str], rows: Sequence[Row]) -> str:
        """
        Format a header and rows as aligned text

        Returns:
            Table text ending with a newline
        """
        widths = [len(title) for title in header]
        for row in rows:
            for index, cell in enumerate(row):
                widths[index] = max(widths[index], len(cell))

        def format_line(cells: Sequence[str]) -> str:
            padded = (cell.ljust(width) for cell, width in zip(cells, widths))
            return f" {OutputConstants.COLUMN_SEPARATOR.join(padded)}".rstrip()

        rule_line = OutputConstants.HEADER_RULE_JOINT.join(
            OutputConstants.HEADER_RULE_CHAR * (width + 2) for width in widths
        )

        lines = [format_line(header), rule_line]
        lines.extend(format_line(row) for row in rows)
        return "\n".join(lines) + "\n"
