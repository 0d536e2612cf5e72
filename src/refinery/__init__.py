"""
Refinery - main content extraction for HTML documents.

Separates the prose of a page (articles, posts) from surrounding
boilerplate (navigation, comments, link lists, ads) using document
structure and word statistics alone.
"""

from refinery.config import Settings, ExtractorSettings, load_config
from refinery.utils.logging import setup_logging, get_logger
from refinery.core.exceptions import RefineryError, InvalidInputError
from refinery.extraction import ContentExtractor, ExtractionResult
from refinery.dom import parse_html

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "ExtractorSettings",
    "load_config",
    "setup_logging",
    "get_logger",
    "RefineryError",
    "InvalidInputError",
    "ContentExtractor",
    "ExtractionResult",
    "parse_html",
]
