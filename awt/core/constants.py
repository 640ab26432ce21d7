"""
Constants and configuration values for Amazonas Web Tools.
"""

from enum import IntEnum, StrEnum

# API
API_PREFIX = "/api/v1"
TEST_ROUTE_PREFIX = "/test"

# Integration tables
DEFAULT_EMPRESA = "amazonas"
DEFAULT_CONTA = "psa"
DEFAULT_MARKETPLACE = "mercadolivre"
DEFAULT_TABLE_NAME = f"integration.{DEFAULT_EMPRESA}_{DEFAULT_CONTA}.{DEFAULT_MARKETPLACE}_base"

PERMALINK_BASE_URL = "https://produto.mercadolivre.com.br"

# Marketplace order integration
INTEGRATION_CONTAS = ("principal", "oficial", "psa", "jeep", "renault", "ford")
INTEGRATION_MARKETPLACES = ("mercadolivre",)
FINISHED_INTEGRATION_STATUSES = ("completed", "failed", "error")
FAILED_INTEGRATION_STATUSES = ("failed", "error")


class SearchPrefixes(StrEnum):
    """Prefixes that identify marketplace codes in a search string."""

    CROSS_REFERENCE = "MLBU"
    IDENTIFIER = "MLB"


class APIConstants(IntEnum):
    """API-related limits and constants."""

    REQUEST_TIMEOUT = 30
    BACKOFF_MAX_TRIES = 3
    BACKOFF_FACTOR = 2
    BACKOFF_MAX_VALUE = 30
    AUDIT_DEFAULT_LIMIT = 10
    AUDIT_MAX_LIMIT = 100


class PaginationConstants(IntEnum):
    """Client-side pagination limits."""

    DEFAULT_PAGE_SIZE = 15  # 3 rows x 5 cards in the portal grid
    MAX_PAGE_SIZE = 100


class QueryConstants(IntEnum):
    """Search query limits."""

    IDENTIFIER_MIN_LENGTH = 10


class PollingConstants(IntEnum):
    """Job log polling intervals."""

    INTERVAL_SECONDS = 5
    CLI_WAIT_TIMEOUT_SECONDS = 300


class FormattingConstants(IntEnum):
    """Formatting constants."""

    JSON_INDENT = 2


class FilterConstants(IntEnum):
    """Local filtering thresholds."""

    FUZZY_THRESHOLD = 70


class LogSeverity(StrEnum):
    """Severity of a job log event."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class DefaultLogValues(StrEnum):
    """Fallbacks for log events missing fields."""

    STEP = "Processamento"
    MESSAGE = "Processando..."
