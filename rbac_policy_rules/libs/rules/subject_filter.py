"""
Subject Filter

Keeps or drops principals by matching their name against a pattern.
"""

import logging
import re
from typing import Iterable, List, Optional

from ..core.constants import ErrorMessages, OutputConstants
from ..core.exceptions import ConfigurationError
from .models import PrincipalPermissions

logger = logging.getLogger(__name__)


class SubjectFilter:
    """Case-insensitive name filter with optional inverted matching"""

    def __init__(self, pattern: Optional[str] = None, invert_match: bool = False):
        """
        Compile the name pattern

        Args:
            pattern: Regular expression; None or empty selects the match-all default
            invert_match: Keep the subjects that do NOT match

        Raises:
            ConfigurationError: If the pattern does not compile
        """
        self.pattern_text = pattern or OutputConstants.DEFAULT_NAME_PATTERN
        self.invert_match = invert_match

        try:
            self.pattern = re.compile(self.pattern_text, re.IGNORECASE)
        except re.error as e:
            raise ConfigurationError(
                ErrorMessages.ConfigError.INVALID_PATTERN.format(pattern=self.pattern_text, error=e)
            ) from e

    def keep(self, name: str) -> bool:
        """
        Decide whether a subject name is kept

        match   invert   keep
        true    false    yes
        true    true     no
        false   false    no
        false   true     yes
        """
        matches = self.pattern.search(name) is not None
        return matches != self.invert_match

    def apply(self, permissions: Iterable[PrincipalPermissions]) -> List[PrincipalPermissions]:
        """Return the permissions whose subject name passes the filter, order preserved."""
        kept = [p for p in permissions if self.keep(p.principal.name)]
        logger.debug(
            f"Subject filter '{self.pattern_text}' (inverse={self.invert_match}) kept {len(kept)} subjects"
        )
        return kept
