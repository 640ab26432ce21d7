"""Search mode detection for DePara queries."""

import logging
from enum import StrEnum

from awt.core.constants import QueryConstants, SearchPrefixes
from awt.exceptions import InvalidQueryError

logger = logging.getLogger(__name__)


class SearchMode(StrEnum):
    """Backend search modes, valued as the backend's ``search_by`` parameter."""

    IDENTIFIER = "id"
    CROSS_REFERENCE = "mlbu"
    STOCK_KEEPING_UNIT = "sku"


def validate_query(raw: str | None) -> str:
    """Reject empty input and return the trimmed query.

    Raises:
        InvalidQueryError: If the query is missing or whitespace only

    """
    if raw is None or not raw.strip():
        raise InvalidQueryError(raw)
    return raw.strip()


def classify(raw: str) -> SearchMode:
    """Decide which search mode a query implies.

    The most specific prefix wins: ``MLBU`` marks a cross-reference code,
    ``MLB`` followed by enough characters marks a listing identifier, and
    anything else is looked up as a SKU. Only the prefix check is
    case-insensitive; callers pass the query itself through unchanged.

    Args:
        raw: Non-empty search string (validate with ``validate_query`` first)

    Returns:
        The detected search mode
    """
    query = raw.strip()
    normalized = query.upper()

    if normalized.startswith(SearchPrefixes.CROSS_REFERENCE):
        mode = SearchMode.CROSS_REFERENCE
    elif normalized.startswith(SearchPrefixes.IDENTIFIER) and len(query) >= QueryConstants.IDENTIFIER_MIN_LENGTH:
        mode = SearchMode.IDENTIFIER
    else:
        mode = SearchMode.STOCK_KEEPING_UNIT

    logger.debug(f"Classified query {query!r} as {mode.value}")
    return mode
