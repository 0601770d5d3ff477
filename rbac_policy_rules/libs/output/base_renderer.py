"""
Base Renderer

Shared behavior for the table and document renderers.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from ..rules.models import PrincipalPermissions

logger = logging.getLogger(__name__)


class BaseRenderer(ABC):
    """Base class for all output renderers"""

    def __init__(self):
        self.logger = logger

    @abstractmethod
    def render(self, permissions: Iterable[PrincipalPermissions]) -> str:
        """
        Render permissions into the complete output text

        Args:
            permissions: Filtered permissions to render

        Returns:
            Output text, built in full before anything is written
        """

    @staticmethod
    def sort_permissions(permissions: Iterable[PrincipalPermissions]) -> List[PrincipalPermissions]:
        """Sort by (kind, name); the sort is stable."""
        return sorted(permissions, key=lambda p: p.principal.sort_key)
