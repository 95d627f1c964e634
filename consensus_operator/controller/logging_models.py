"""
Structured logging models for the reconcile loop.

Each entry names the component key being processed and, for retries,
how many consecutive attempts have failed.
"""

from consensus_operator.logging.models import Entry, LogLevel


class ControllerDebug(Entry, kw_only=True):
    """Debug-level logging for the reconcile loop."""
    component: str = ""
    attempt: int = 0
    level: LogLevel = LogLevel.DEBUG


class ControllerInfo(Entry, kw_only=True):
    """Info-level logging for the reconcile loop."""
    component: str = ""
    attempt: int = 0
    level: LogLevel = LogLevel.INFO


class ControllerWarning(Entry, kw_only=True):
    """Warning-level logging for the reconcile loop."""
    component: str = ""
    attempt: int = 0
    level: LogLevel = LogLevel.WARN


class ControllerError(Entry, kw_only=True):
    """Error-level logging for the reconcile loop."""
    component: str = ""
    attempt: int = 0
    level: LogLevel = LogLevel.ERROR
