"""
Exceptions raised by the consensus operator.

Every error here is retryable from the controller's point of view: a
failed pass is re-run from freshly fetched inputs after a backoff.
"""


class ConsensusOperatorError(Exception):
    """Base class for consensus operator errors."""
    pass


class ComponentNotFoundError(ConsensusOperatorError):
    """Raised when the backing store has no record of a component."""

    def __init__(self, key: object) -> None:
        super().__init__(f"Component {key} not found")
        self.key = key


class ReplicaNotFoundError(ConsensusOperatorError):
    """
    Raised when a replica targeted by a delete or label patch is gone.

    Deleting a replica that no longer exists is the desired end state,
    so the plan walker treats this as success.
    """

    def __init__(self, replica_name: str) -> None:
        super().__init__(f"Replica {replica_name} not found")
        self.replica_name = replica_name


class StatusConflictError(ConsensusOperatorError):
    """
    Raised when a conditional status update loses an optimistic
    concurrency race. The pass is retried from scratch, never merged.
    """

    def __init__(self, key: object, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"Status of {key} changed concurrently: "
            f"expected version {expected_version}, found {actual_version}"
        )
        self.key = key
        self.expected_version = expected_version
        self.actual_version = actual_version


class ConfigPropagationError(ConsensusOperatorError):
    """Raised when leader/follower identities could not be pushed to config records."""

    def __init__(self, key: object, cause: Exception) -> None:
        super().__init__(f"Failed to propagate consensus roles of {key}: {cause}")
        self.key = key
        self.cause = cause
