from typing import Optional


class SEOAuditError(Exception):
    """Base class for errors raised by the audit pipeline"""


class InvalidURL(SEOAuditError, ValueError):
    """The URL handed to the analyzer cannot be parsed as an http(s) URL"""

    def __init__(self, url: str, reason: str = "not a valid http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class ScrapeError(SEOAuditError):
    """Fetching the page content failed. Fatal for the audit."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class PerformanceReportUnavailable(SEOAuditError):
    """The performance lab report could not be obtained. Never fatal."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class AuditCancelled(SEOAuditError):
    """The caller asked to stop the audit before it completed"""
