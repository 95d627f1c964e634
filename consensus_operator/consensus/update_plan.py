"""
Update plan construction.

Orders replicas from least to most critical role and partitions them
into batches according to the component's update strategy:

    Serial:             unknown -> empty -> learner -> followers -> leader,
                        one replica at a time
    Parallel:           every replica at once
    BestEffortParallel: unknown & empty & learner -> 1/2 followers
                        -> other 1/2 followers -> leader

Plans are pure functions of the observations and are rebuilt every pass.
"""

from typing import Callable

from .models import (
    BatchStage,
    ReplicaObservation,
    RolePriority,
    UpdateBatch,
    UpdatePlan,
    UpdateStrategy,
)
from .role_classifier import RoleMap


BatchBuilder = Callable[[list[ReplicaObservation], RoleMap], list[UpdateBatch]]


def sort_replicas(
    replicas: list[ReplicaObservation],
    role_map: RoleMap,
) -> list[ReplicaObservation]:
    """Sort by (role priority, ordinal), least critical first."""
    return sorted(
        replicas,
        key=lambda replica: (
            role_map.priority_of(replica.role_label),
            replica.ordinal,
        ),
    )


def serial_batches(
    replicas: list[ReplicaObservation],
    role_map: RoleMap,
) -> list[UpdateBatch]:
    return [
        UpdateBatch(stage=BatchStage.SERIAL, replicas=[replica])
        for replica in replicas
    ]


def parallel_batches(
    replicas: list[ReplicaObservation],
    role_map: RoleMap,
) -> list[UpdateBatch]:
    return [
        UpdateBatch(stage=BatchStage.PARALLEL, replicas=list(replicas)),
    ]


def best_effort_parallel_batches(
    replicas: list[ReplicaObservation],
    role_map: RoleMap,
) -> list[UpdateBatch]:
    learners = [
        replica for replica in replicas
        if role_map.priority_of(replica.role_label) <= RolePriority.LEARNER
    ]

    remaining = replicas[len(learners):]
    follower_count = sum(
        1 for replica in remaining
        if role_map.priority_of(replica.role_label) < RolePriority.LEADER
    )

    # Never take more than half the followers down at once
    first_half_end = follower_count // 2

    return [
        UpdateBatch(stage=BatchStage.LEARNERS, replicas=learners),
        UpdateBatch(
            stage=BatchStage.FOLLOWERS_FIRST_HALF,
            replicas=remaining[:first_half_end],
        ),
        UpdateBatch(
            stage=BatchStage.FOLLOWERS_SECOND_HALF,
            replicas=remaining[first_half_end:follower_count],
        ),
        UpdateBatch(stage=BatchStage.LEADER, replicas=remaining[follower_count:]),
    ]


BATCH_BUILDERS: dict[UpdateStrategy, BatchBuilder] = {
    UpdateStrategy.SERIAL: serial_batches,
    UpdateStrategy.PARALLEL: parallel_batches,
    UpdateStrategy.BEST_EFFORT_PARALLEL: best_effort_parallel_batches,
}


def build_update_plan(
    replicas: list[ReplicaObservation],
    role_map: RoleMap,
    strategy: UpdateStrategy,
    target_revision: str,
) -> UpdatePlan:
    """
    Build the ordered batches for one pass.

    The caller must only invoke this once the replica set has converged
    structurally (every desired replica observed, no generation lag).
    Stages with no replicas produce no batch.
    """
    ordered = sort_replicas(replicas, role_map)
    batches = BATCH_BUILDERS[strategy](ordered, role_map)

    return UpdatePlan(
        strategy=strategy,
        target_revision=target_revision,
        batches=[batch for batch in batches if len(batch) > 0],
    )
