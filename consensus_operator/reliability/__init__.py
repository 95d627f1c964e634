from .retry import (
    Backoff as Backoff,
    JitterStrategy as JitterStrategy,
    RetryConfig as RetryConfig,
    calculate_jittered_delay as calculate_jittered_delay,
)
