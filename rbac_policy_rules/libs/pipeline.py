"""
Policy Rules Pipeline

Aggregation, subject filtering and rendering of permission entries, built
from one resolved set of options.
"""

import logging
from typing import Iterable, List, Optional, TextIO

from .core.constants import OutputConstants
from .output.formatter import PresentationFormatter
from .rules.aggregator import PrincipalAggregator
from .rules.models import PermissionEntry, PrincipalPermissions
from .rules.subject_filter import SubjectFilter

logger = logging.getLogger(__name__)


class PolicyRulesPipeline:
    """Turns a snapshot of permission entries into rendered output"""

    def __init__(self, name_pattern: Optional[str] = None, invert_match: bool = False,
                 output_mode: str = OutputConstants.DEFAULT_OUTPUT_FORMAT,
                 aggregator: Optional[PrincipalAggregator] = None):
        """
        Validate the configuration and build the pipeline stages

        Args:
            name_pattern: Subject name regular expression (match-all when None)
            invert_match: Keep the subjects that do NOT match
            output_mode: table, yaml or json
            aggregator: Aggregator to use (defaults to PrincipalAggregator)

        Raises:
            ConfigurationError: If the pattern or output format is invalid
        """
        self.subject_filter = SubjectFilter(name_pattern, invert_match)
        self.formatter = PresentationFormatter(output_mode)
        self.aggregator = aggregator or PrincipalAggregator()

    def process(self, entries: Iterable[PermissionEntry]) -> List[PrincipalPermissions]:
        """Aggregate entries by subject and apply the subject filter."""
        return self.subject_filter.apply(self.aggregator.aggregate(entries))

    def render(self, entries: Iterable[PermissionEntry]) -> str:
        return self.formatter.render(self.process(entries))

    def write(self, entries: Iterable[PermissionEntry], stream: TextIO) -> None:
        """
        Render entries and write the output once

        Raises:
            ProcessingError: If a document cannot be encoded
        """
        self.formatter.write(self.process(entries), stream)
