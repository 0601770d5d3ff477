"""
Document Renderers

Serializes the aggregated permissions as structured documents (YAML or JSON)
and parses such documents back.

Document layout, one item per subject sorted by (kind, name):

    - subject:
        kind: ServiceAccount
        name: default
      rules:
        "":                     # cluster-wide scope
        - verbs: [get, list]
          apiGroups: []
          resources: [pods]
          resourceNames: []
          nonResourceURLs: []

Rule fields hold the values as stored, not their canonical display form.
"""

import json
import yaml
from typing import Any, Dict, Iterable, List

from ..core.constants import ErrorMessages, OutputConstants
from ..core.exceptions import ProcessingError
from ..rules.models import Principal, PrincipalPermissions, Rule
from .base_renderer import BaseRenderer


class FlowListDumper(yaml.SafeDumper):
    """SafeDumper that writes lists of strings in flow style"""
    pass


def _represent_list(dumper, data):
    flow_style = bool(data) and all(isinstance(item, str) for item in data)
    return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=flow_style)


FlowListDumper.add_representer(list, _represent_list)


def to_document(permissions: Iterable[PrincipalPermissions]) -> List[Dict[str, Any]]:
    """Build the document object graph for a collection of permissions."""
    document = []
    for permission in BaseRenderer.sort_permissions(permissions):
        document.append({
            OutputConstants.SUBJECT_KEY: permission.principal.to_dict(),
            OutputConstants.RULES_KEY: {
                scope: [rule.to_dict() for rule in permission.rules[scope]]
                for scope in permission.scopes()
            }
        })
    return document


def from_document(document: Any) -> List[PrincipalPermissions]:
    """
    Rebuild permissions from a parsed document

    Raises:
        ProcessingError: If the document does not have the expected layout
    """
    def invalid(reason: str) -> ProcessingError:
        return ProcessingError(ErrorMessages.ProcessingError.INVALID_DOCUMENT.format(reason=reason))

    if document is None:
        return []
    if not isinstance(document, list):
        raise invalid("top level must be a list")

    permissions = []
    for index, item in enumerate(document):
        if not isinstance(item, dict):
            raise invalid(f"item {index} must be a mapping")

        subject = item.get(OutputConstants.SUBJECT_KEY)
        scoped_rules = item.get(OutputConstants.RULES_KEY) or {}
        if not isinstance(subject, dict):
            raise invalid(f"item {index} has no subject")
        if not isinstance(scoped_rules, dict):
            raise invalid(f"item {index} rules must be a mapping of scope to rule list")

        try:
            principal = Principal.from_dict(subject)
        except ValueError as e:
            raise invalid(f"item {index}: {e}") from e

        rules = {}
        for scope, scope_rules in scoped_rules.items():
            if not isinstance(scope_rules, list) or not all(isinstance(r, dict) for r in scope_rules):
                raise invalid(f"item {index} scope '{scope}' must be a list of rules")
            rules[str(scope)] = tuple(Rule.from_dict(r) for r in scope_rules)

        permissions.append(PrincipalPermissions(principal=principal, rules=rules))

    return permissions


class YAMLDocumentRenderer(BaseRenderer):
    """Indented, line-oriented document encoding"""

    name = "yaml"

    def render(self, permissions: Iterable[PrincipalPermissions]) -> str:
        try:
            return yaml.dump(
                to_document(permissions),
                Dumper=FlowListDumper,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True
            )
        except yaml.YAMLError as e:
            raise ProcessingError(ErrorMessages.ProcessingError.ENCODE_FAILED.format(error=e)) from e

    def parse(self, text: str) -> List[PrincipalPermissions]:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ProcessingError(
                ErrorMessages.ProcessingError.DECODE_FAILED.format(mode=self.name, error=e)
            ) from e
        return from_document(document)


class JSONDocumentRenderer(BaseRenderer):
    """Compact, brace-delimited document encoding"""

    name = "json"

    def render(self, permissions: Iterable[PrincipalPermissions]) -> str:
        try:
            return json.dumps(to_document(permissions), separators=(',', ':'), ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise ProcessingError(ErrorMessages.ProcessingError.ENCODE_FAILED.format(error=e)) from e

    def parse(self, text: str) -> List[PrincipalPermissions]:
        try:
            document = json.loads(text)
        except ValueError as e:
            raise ProcessingError(
                ErrorMessages.ProcessingError.DECODE_FAILED.format(mode=self.name, error=e)
            ) from e
        return from_document(document)
