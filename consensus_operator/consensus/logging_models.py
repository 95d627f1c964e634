"""
Structured logging models for consensus-set update operations.

Follows the Entry-based pattern from consensus_operator/logging.
Each level variant carries the component being reconciled and, where
relevant, the replica and revision involved.
"""

from consensus_operator.logging.models import Entry, LogLevel


class ConsensusTrace(Entry, kw_only=True):
    """Trace-level logging for consensus update operations."""
    component: str
    replica: str = ""
    revision: str = ""
    level: LogLevel = LogLevel.TRACE


class ConsensusDebug(Entry, kw_only=True):
    """Debug-level logging for consensus update operations."""
    component: str
    replica: str = ""
    revision: str = ""
    level: LogLevel = LogLevel.DEBUG


class ConsensusInfo(Entry, kw_only=True):
    """Info-level logging for consensus update operations."""
    component: str
    replica: str = ""
    revision: str = ""
    level: LogLevel = LogLevel.INFO


class ConsensusWarning(Entry, kw_only=True):
    """Warning-level logging for consensus update operations."""
    component: str
    replica: str = ""
    revision: str = ""
    level: LogLevel = LogLevel.WARN


class ConsensusError(Entry, kw_only=True):
    """Error-level logging for consensus update operations."""
    component: str
    replica: str = ""
    revision: str = ""
    level: LogLevel = LogLevel.ERROR
