"""DuoReport — Error Taxonomy.

Only ConfigurationError and RangeError ever reach an HTTP caller.
UpstreamFetchError is absorbed by the reconciler and turned into
zero-filled data for the failing platform.
"""

from typing import List, Optional


class DuoReportError(Exception):
    """Base class for all DuoReport errors."""


class ConfigurationError(DuoReportError):
    """Raised when the upstream credentials are not fully configured."""

    def __init__(self, missing: Optional[List[str]] = None):
        self.missing = list(missing or [])
        detail = ", ".join(self.missing) if self.missing else "unknown"
        super().__init__(f"API credentials missing: {detail}")


class UpstreamFetchError(DuoReportError):
    """Raised when one platform's reporting API call fails."""

    def __init__(
        self,
        platform: str,
        message: str,
        status_code: int = 0,
        error_code: int = 0,
    ):
        self.platform = platform
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(f"[{platform}] {message}")


class RangeError(DuoReportError):
    """Raised when the reporting window cannot be computed."""
