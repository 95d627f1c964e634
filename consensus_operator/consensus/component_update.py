"""
One reconcile pass for a consensus-set component.

    fetch snapshot + replicas
      -> classify roles
      -> reconcile status (persist, propagate config on change)
      -> wait for the replica set to converge structurally
      -> build update plan, advance it by at most one batch

Every input is fetched fresh, so a pass can be abandoned or retried at
any point without losing progress.
"""

from typing import TYPE_CHECKING

from .config_propagator import DEFAULT_CONFIG_KEY_PREFIX, ConfigPropagator
from .logging_models import ConsensusDebug, ConsensusInfo
from .models import (
    DEFAULT_LEADER_NAME,
    ComponentKey,
    PassState,
    ReplicaObservation,
    UpdatePassResult,
)
from .plan_walker import PlanWalker
from .role_classifier import compose_role_map
from .status_reconciler import StatusReconciler
from .update_plan import build_update_plan

if TYPE_CHECKING:
    from consensus_operator.controller.client import ConsensusClient
    from consensus_operator.env import Env
    from consensus_operator.logging import Logger


class ConsensusUpdateHandler:
    """Runs reconcile passes for consensus-set components."""

    __slots__ = (
        "_client",
        "_logger",
        "_status_reconciler",
        "_default_leader_name",
    )

    def __init__(
        self,
        client: "ConsensusClient",
        logger: "Logger",
        config_key_prefix: str = DEFAULT_CONFIG_KEY_PREFIX,
        default_leader_name: str = DEFAULT_LEADER_NAME,
    ) -> None:
        self._client = client
        self._logger = logger
        self._default_leader_name = default_leader_name
        self._status_reconciler = StatusReconciler(
            client,
            ConfigPropagator(client, logger, prefix=config_key_prefix),
            logger,
        )

    @classmethod
    def from_env(
        cls,
        client: "ConsensusClient",
        logger: "Logger",
        env: "Env",
    ) -> "ConsensusUpdateHandler":
        return cls(
            client,
            logger,
            config_key_prefix=env.CONSENSUS_CONFIG_KEY_PREFIX,
            default_leader_name=env.CONSENSUS_DEFAULT_LEADER_NAME,
        )

    async def handle(self, key: ComponentKey) -> UpdatePassResult:
        snapshot = await self._client.get_component(key)
        if snapshot.role_spec is None:
            return UpdatePassResult(state=PassState.SKIPPED)

        replicas = await self._client.list_replicas(key)
        role_map = compose_role_map(snapshot.role_spec, self._default_leader_name)

        diff = await self._status_reconciler.reconcile(snapshot, role_map, replicas)

        # Deletes only start once the replica set controller has caught up
        # with the latest generation and every desired replica exists, so
        # the plan sees each replica's previous role before replacing it.
        replica_set = snapshot.replica_set
        if not replica_set.generation_converged:
            await self._logger.log(ConsensusDebug(
                message=(
                    f"Waiting for replica set generation {replica_set.generation} "
                    f"(observed {replica_set.observed_generation})"
                ),
                component=str(key),
            ))
            return UpdatePassResult(
                state=PassState.NOT_READY,
                status_changed=diff.changed,
            )

        if len(replicas) != replica_set.desired_replicas:
            await self._logger.log(ConsensusDebug(
                message=(
                    f"Waiting for replicas: {len(replicas)} of "
                    f"{replica_set.desired_replicas} present"
                ),
                component=str(key),
            ))
            return UpdatePassResult(
                state=PassState.NOT_READY,
                status_changed=diff.changed,
            )

        plan = build_update_plan(
            replicas,
            role_map,
            snapshot.role_spec.update_strategy,
            replica_set.update_revision,
        )

        async def delete_replica(replica: ReplicaObservation) -> None:
            await self._client.delete_replica(key, replica.name)

        walker = PlanWalker(
            delete_replica,
            self._logger,
            component=str(key),
        )
        walk = await walker.walk_one_step(plan)

        if walk.complete:
            await self._logger.log(ConsensusInfo(
                message=f"All {len(replicas)} replicas at revision {plan.target_revision}",
                component=str(key),
                revision=plan.target_revision,
            ))

        return UpdatePassResult(
            state=PassState.COMPLETE if walk.complete else PassState.IN_PROGRESS,
            status_changed=diff.changed,
            plan=plan,
            walk=walk,
        )
