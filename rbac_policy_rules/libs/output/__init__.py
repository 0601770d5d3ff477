"""
Output Libraries

Table, YAML and JSON rendering of aggregated policy rules.
"""

from .base_renderer import BaseRenderer
from .table_renderer import TableRenderer
from .document_renderer import YAMLDocumentRenderer, JSONDocumentRenderer, to_document, from_document
from .formatter import OutputMode, PresentationFormatter, load_document

__all__ = [
    'BaseRenderer',
    'TableRenderer',
    'YAMLDocumentRenderer',
    'JSONDocumentRenderer',
    'to_document',
    'from_document',
    'OutputMode',
    'PresentationFormatter',
    'load_document'
]
