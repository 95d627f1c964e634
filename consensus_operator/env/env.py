from __future__ import annotations
import os
from pydantic import BaseModel, StrictFloat, StrictInt, StrictStr
from typing import Callable, Dict, Literal, Union

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    # Reconcile loop
    CONSENSUS_MAX_WORKERS: StrictInt = (os.cpu_count() or 1) * 2
    CONSENSUS_REQUEUE_DELAY: StrictFloat = 1.0

    # Retry backoff for failed passes
    CONSENSUS_RETRY_BASE_DELAY: StrictFloat = 0.5
    CONSENSUS_RETRY_MAX_DELAY: StrictFloat = 30.0
    CONSENSUS_RETRY_JITTER: Literal["full", "equal", "decorrelated", "none"] = "full"

    # Role handling
    CONSENSUS_DEFAULT_LEADER_NAME: StrictStr = "leader"
    CONSENSUS_CONFIG_KEY_PREFIX: StrictStr = "KB_"

    # Logging
    CONSENSUS_LOG_LEVEL: Literal["trace", "debug", "info", "warn", "error", "critical", "fatal"] = "info"
    CONSENSUS_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    CONSENSUS_LOG_PATH: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "CONSENSUS_MAX_WORKERS": int,
            "CONSENSUS_REQUEUE_DELAY": float,
            "CONSENSUS_RETRY_BASE_DELAY": float,
            "CONSENSUS_RETRY_MAX_DELAY": float,
            "CONSENSUS_RETRY_JITTER": str,
            "CONSENSUS_DEFAULT_LEADER_NAME": str,
            "CONSENSUS_CONFIG_KEY_PREFIX": str,
            "CONSENSUS_LOG_LEVEL": str,
            "CONSENSUS_LOG_OUTPUT": str,
            "CONSENSUS_LOG_PATH": str,
        }

    def get_retry_config(self) -> dict:
        """Get controller retry backoff settings."""
        return {
            'base_delay': self.CONSENSUS_RETRY_BASE_DELAY,
            'max_delay': self.CONSENSUS_RETRY_MAX_DELAY,
            'jitter': self.CONSENSUS_RETRY_JITTER,
        }

    def get_logging_config(self) -> dict:
        """Get LoggingConfig.update() arguments from environment settings."""
        return {
            'log_level': self.CONSENSUS_LOG_LEVEL,
            'log_output': self.CONSENSUS_LOG_OUTPUT,
        }
