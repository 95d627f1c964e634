from dataclasses import dataclass, field
from enum import Enum

from .replica import ReplicaObservation
from .role_spec import UpdateStrategy


class BatchStage(str, Enum):
    """Which part of an update strategy produced a batch."""

    SERIAL = "serial"
    PARALLEL = "parallel"
    LEARNERS = "learners"  # Unknown, empty and learner roles
    FOLLOWERS_FIRST_HALF = "followers_first_half"
    FOLLOWERS_SECOND_HALF = "followers_second_half"
    LEADER = "leader"


class ReplicaUpdateState(Enum):
    """Walker classification of one replica within a batch."""

    SETTLED = "settled"  # At target revision and ready
    TERMINATING = "terminating"
    AWAITING_READY = "awaiting_ready"  # At target revision, not ready yet
    REPLACING = "replacing"  # Stale revision, delete issued this pass

    @property
    def settled(self) -> bool:
        return self == ReplicaUpdateState.SETTLED


@dataclass(slots=True)
class UpdateBatch:
    """Replicas evaluated together within one walk step."""

    stage: BatchStage
    replicas: list[ReplicaObservation] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.replicas)

    def names(self) -> list[str]:
        return [replica.name for replica in self.replicas]


@dataclass(slots=True)
class UpdatePlan:
    """
    Ordered batches for one update pass.

    Rebuilt from scratch each pass. Progress is never stored here: it
    is implied by which replicas already run the target revision.
    """

    strategy: UpdateStrategy
    target_revision: str
    batches: list[UpdateBatch] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.batches)

    def replicas(self) -> list[ReplicaObservation]:
        return [
            replica
            for batch in self.batches
            for replica in batch.replicas
        ]

    def batch_names(self) -> list[list[str]]:
        return [batch.names() for batch in self.batches]


@dataclass(slots=True)
class WalkResult:
    """Outcome of one walker invocation."""

    complete: bool
    settled_batches: int = 0
    replaced: list[str] = field(default_factory=list)
    pending: dict[str, ReplicaUpdateState] = field(default_factory=dict)


class PassState(str, Enum):
    COMPLETE = "complete"  # Every replica at target revision and ready
    IN_PROGRESS = "in_progress"  # Plan advanced, batches still unsettled
    NOT_READY = "not_ready"  # Replica set has not converged structurally
    SKIPPED = "skipped"  # Component is not a consensus set


@dataclass(slots=True)
class UpdatePassResult:
    state: PassState
    status_changed: bool = False
    plan: UpdatePlan | None = None
    walk: WalkResult | None = None

    @property
    def done(self) -> bool:
        return self.state in (PassState.COMPLETE, PassState.SKIPPED)
