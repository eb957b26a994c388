"""harvest_hours package

Utilities and CLI for Harvest billable hours reporting.

Public API (minimal for now):
- TimeReportClient: fetch and sum billable hours for a period or date range
- CredentialStore, ensure_credentials: credential helpers
- TimePeriod, date_range_for: period handling

CLI entrypoint exposed via setup.py as `harvest-hours`.
"""

__version__ = "1.0.0"

from .core import TimePeriod, TimeReportClient, date_range_for  # noqa: E402
from .login_helper import CredentialStore, ensure_credentials  # noqa: E402
from .cli import main  # noqa: E402 (runtime import after definitions)

__all__ = [
    "CredentialStore",
    "TimePeriod",
    "TimeReportClient",
    "date_range_for",
    "ensure_credentials",
    "main",
    "__version__",
]
