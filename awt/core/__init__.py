"""Core functionality module."""

from awt.core.classifier import SearchMode, classify, validate_query
from awt.core.constants import FormattingConstants
from awt.core.highlighting import highlight_text
from awt.core.search import RecordSearcher

__all__ = [
    "FormattingConstants",
    "RecordSearcher",
    "SearchMode",
    "classify",
    "highlight_text",
    "validate_query",
]
