"""
Retry backoff with jitter for failed reconcile passes.

A pass that raises is re-queued after an exponentially growing delay.
Jitter spreads retries of many components that failed together (for
example after a status-store outage) so they do not hammer the store
in lockstep when it recovers.
"""

import random
from dataclasses import dataclass
from enum import Enum


# Exponents past this overflow float conversion on long failure streaks
MAX_BACKOFF_EXPONENT = 62


class JitterStrategy(Enum):
    """
    Jitter strategies for retry delays.

    FULL: Maximum spread, best for independent components
        delay = random(0, min(cap, base * 2^attempt))

    EQUAL: Guarantees minimum delay while spreading
        temp = min(cap, base * 2^attempt)
        delay = temp/2 + random(0, temp/2)

    DECORRELATED: Each retry depends on the previous delay
        delay = min(cap, random(base, previous_delay * 3))

    NONE: No jitter, pure exponential backoff
        delay = min(cap, base * 2^attempt)
    """

    FULL = "full"
    EQUAL = "equal"
    DECORRELATED = "decorrelated"
    NONE = "none"


@dataclass(slots=True)
class RetryConfig:
    """Backoff settings for failed passes."""

    base_delay: float = 0.5  # seconds
    max_delay: float = 30.0  # cap
    jitter: JitterStrategy = JitterStrategy.FULL

    @classmethod
    def from_env_config(cls, config: dict) -> "RetryConfig":
        return cls(
            base_delay=config['base_delay'],
            max_delay=config['max_delay'],
            jitter=JitterStrategy(config['jitter']),
        )


class Backoff:
    """
    Per-key backoff state.

    Tracks consecutive failures for one work item and yields the delay
    before its next attempt. Reset once the item succeeds.
    """

    __slots__ = (
        "_config",
        "_attempts",
        "_previous_delay",
    )

    def __init__(self, config: RetryConfig) -> None:
        self._config = config
        self._attempts = 0
        self._previous_delay = config.base_delay

    @property
    def attempts(self) -> int:
        return self._attempts

    def next_delay(self) -> float:
        """Record a failure and return the delay before the next attempt."""
        if self._config.jitter == JitterStrategy.DECORRELATED:
            delay = random.uniform(
                self._config.base_delay,
                self._previous_delay * 3,
            )
            delay = min(self._config.max_delay, delay)
            self._previous_delay = delay

        else:
            delay = calculate_jittered_delay(
                self._attempts,
                base_delay=self._config.base_delay,
                max_delay=self._config.max_delay,
                jitter=self._config.jitter,
            )

        self._attempts += 1
        return delay

    def reset(self) -> None:
        self._attempts = 0
        self._previous_delay = self._config.base_delay


def calculate_jittered_delay(
    attempt: int,
    base_delay: float = 0.5,
    max_delay: float = 30.0,
    jitter: JitterStrategy = JitterStrategy.FULL,
) -> float:
    """
    Calculate a jittered delay for a zero-based attempt number.

    DECORRELATED needs the previous delay, so without that state it is
    treated as FULL here. Use Backoff for true decorrelated jitter.
    """
    temp = min(max_delay, base_delay * (2 ** min(attempt, MAX_BACKOFF_EXPONENT)))

    if jitter == JitterStrategy.FULL or jitter == JitterStrategy.DECORRELATED:
        return random.uniform(0, temp)

    elif jitter == JitterStrategy.EQUAL:
        return temp / 2 + random.uniform(0, temp / 2)

    else:  # NONE
        return temp
