"""
Update plan execution.

Walks a plan from its first batch, skipping batches whose replicas are
all at the target revision and ready, and issues replacement deletes for
stale replicas in the first batch that is not yet settled. Each call
advances by at most one unsettled batch; the next pass resumes from
whatever the replicas then report, so no cursor is ever stored.
"""

from typing import TYPE_CHECKING, Awaitable, Callable

from consensus_operator.errors import ReplicaNotFoundError

from .logging_models import ConsensusDebug, ConsensusInfo
from .models import (
    ReplicaObservation,
    ReplicaUpdateState,
    UpdatePlan,
    WalkResult,
)

if TYPE_CHECKING:
    from consensus_operator.logging import Logger


ReplicaPredicate = Callable[[ReplicaObservation], bool]
DeleteAction = Callable[[ReplicaObservation], Awaitable[None]]


def classify_replica(
    replica: ReplicaObservation,
    is_current: ReplicaPredicate,
    is_ready: ReplicaPredicate,
) -> ReplicaUpdateState:
    if replica.terminating:
        return ReplicaUpdateState.TERMINATING

    if is_current(replica):
        if is_ready(replica):
            return ReplicaUpdateState.SETTLED

        return ReplicaUpdateState.AWAITING_READY

    return ReplicaUpdateState.REPLACING


class PlanWalker:
    """
    Advances an UpdatePlan by at most one unsettled batch per call.

    The delete action must be idempotent. A ReplicaNotFoundError from it
    means the replica is already gone and is treated as success; any
    other error aborts the walk and propagates to the caller.
    """

    __slots__ = (
        "_delete_replica",
        "_logger",
        "_component",
    )

    def __init__(
        self,
        delete_replica: DeleteAction,
        logger: "Logger",
        component: str = "",
    ) -> None:
        self._delete_replica = delete_replica
        self._logger = logger
        self._component = component

    async def walk_one_step(
        self,
        plan: UpdatePlan,
        is_current: ReplicaPredicate | None = None,
        is_ready: ReplicaPredicate | None = None,
    ) -> WalkResult:
        if is_current is None:
            target_revision = plan.target_revision
            is_current = lambda replica: replica.revision == target_revision

        if is_ready is None:
            is_ready = lambda replica: replica.ready

        result = WalkResult(complete=False)

        for batch in plan.batches:
            batch_settled = True

            for replica in batch.replicas:
                state = classify_replica(replica, is_current, is_ready)

                if state == ReplicaUpdateState.REPLACING:
                    await self._replace(replica, plan.target_revision)
                    result.replaced.append(replica.name)

                if not state.settled:
                    batch_settled = False
                    result.pending[replica.name] = state

            if not batch_settled:
                pending = ", ".join(
                    f"{name}={state.value}" for name, state in result.pending.items()
                )

                await self._logger.log(ConsensusDebug(
                    message=(
                        f"Batch {result.settled_batches + 1}/{len(plan)} "
                        f"({batch.stage.value}) not settled: {pending}"
                    ),
                    component=self._component,
                    revision=plan.target_revision,
                ))
                return result

            result.settled_batches += 1

        result.complete = True
        return result

    async def _replace(
        self,
        replica: ReplicaObservation,
        target_revision: str,
    ) -> None:
        try:
            await self._delete_replica(replica)

        except ReplicaNotFoundError:
            await self._logger.log(ConsensusDebug(
                message="Replica already gone",
                component=self._component,
                replica=replica.name,
                revision=target_revision,
            ))
            return

        await self._logger.log(ConsensusInfo(
            message=f"Replacing replica at stale revision {replica.revision}",
            component=self._component,
            replica=replica.name,
            revision=target_revision,
        ))
