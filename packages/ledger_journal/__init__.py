"""Public interface for the ``ledger_journal`` package.

Parses plain-text ledger journals into balanced transactions. This module
only re-exports the stable import surface; see ``ledger_journal.api`` for the
entry points.
"""

from .api import (
    LedgerStream,
    parse_ledger,
    parse_ledger_async,
    parse_ledger_file,
    parse_ledger_file_async,
)
from .balance import balance_postings, common_unit_total
from .config import ParserSettings, load_settings
from .errors import (
    IncludeError,
    LedgerError,
    LedgerReadError,
    ParseError,
)
from .logging_setup import configure_logging
from .models import Posting, Transaction

__all__ = [
    # API
    "parse_ledger",
    "parse_ledger_file",
    "parse_ledger_async",
    "parse_ledger_file_async",
    "LedgerStream",
    "balance_postings",
    "common_unit_total",
    # Models
    "Posting",
    "Transaction",
    # Errors
    "LedgerError",
    "ParseError",
    "IncludeError",
    "LedgerReadError",
    # Configuration
    "ParserSettings",
    "load_settings",
    "configure_logging",
]
