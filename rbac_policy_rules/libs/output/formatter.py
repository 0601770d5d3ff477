"""
Presentation Formatter

Selects the renderer for the configured output format and writes the result.
"""

import logging
from enum import Enum
from typing import Iterable, List, TextIO

from ..core.constants import ErrorMessages
from ..core.exceptions import ConfigurationError
from ..rules.models import PrincipalPermissions
from .base_renderer import BaseRenderer
from .document_renderer import JSONDocumentRenderer, YAMLDocumentRenderer
from .table_renderer import TableRenderer

logger = logging.getLogger(__name__)


class OutputMode(str, Enum):
    """Supported output formats"""
    TABLE = "table"
    YAML = "yaml"
    JSON = "json"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> 'OutputMode':
        """
        Resolve an output format name

        Raises:
            ConfigurationError: If the format is not supported
        """
        if isinstance(value, cls):
            return value

        name = str(value).strip().lower() if value is not None else ""
        name = _MODE_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(mode.value for mode in cls)
            raise ConfigurationError(
                ErrorMessages.ConfigError.UNSUPPORTED_OUTPUT.format(output=value, supported=supported)
            ) from None


_MODE_ALIASES = {
    "tabular": OutputMode.TABLE.value,
    "document-verbose": OutputMode.YAML.value,
    "document-compact": OutputMode.JSON.value,
}

_RENDERERS = {
    OutputMode.TABLE: TableRenderer,
    OutputMode.YAML: YAMLDocumentRenderer,
    OutputMode.JSON: JSONDocumentRenderer,
}


class PresentationFormatter:
    """Renders filtered permissions in one output format"""

    def __init__(self, output_mode=OutputMode.TABLE):
        """
        Args:
            output_mode: OutputMode or format name

        Raises:
            ConfigurationError: If the output format is not supported
        """
        self.output_mode = OutputMode.parse(output_mode)
        self.renderer: BaseRenderer = _RENDERERS[self.output_mode]()

    def render(self, permissions: Iterable[PrincipalPermissions]) -> str:
        return self.renderer.render(permissions)

    def write(self, permissions: Iterable[PrincipalPermissions], stream: TextIO) -> None:
        """
        Render everything, then write it to the stream in a single call

        Raises:
            ProcessingError: If a document cannot be encoded; nothing is written
        """
        output = self.render(permissions)
        stream.write(output)
        stream.flush()
        logger.debug(f"Wrote {len(output)} characters of {self.output_mode} output")


def load_document(text: str, output_mode=OutputMode.YAML) -> List[PrincipalPermissions]:
    """
    Parse a YAML or JSON document produced by PresentationFormatter

    Raises:
        ConfigurationError: If the mode is not a document format
        ProcessingError: If the text cannot be parsed
    """
    mode = OutputMode.parse(output_mode)
    if mode is OutputMode.TABLE:
        raise ConfigurationError("Table output cannot be parsed back; use yaml or json")
    return _RENDERERS[mode]().parse(text)
