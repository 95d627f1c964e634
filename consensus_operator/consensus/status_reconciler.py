"""
Consensus status reconciliation.

Derives which ready replica holds which role from the observed role
labels, compares the result with the persisted status, and on change
persists it with a conditional update before pushing the new
leader/follower identities to the component's config records.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from consensus_operator.errors import ConfigPropagationError

from .logging_models import ConsensusDebug, ConsensusInfo, ConsensusWarning
from .models import (
    ComponentKey,
    ComponentSnapshot,
    ConsensusMember,
    ConsensusStatus,
    ReplicaObservation,
    RoleBinding,
    RoleKind,
)
from .role_classifier import RoleMap

if TYPE_CHECKING:
    from consensus_operator.controller.client import ConsensusClient
    from consensus_operator.logging import Logger

    from .config_propagator import ConfigPropagator


@dataclass(slots=True)
class StatusDiff:
    status: ConsensusStatus
    changed: bool


def compute_consensus_status(
    role_map: RoleMap,
    replicas: list[ReplicaObservation],
) -> ConsensusStatus:
    """
    Build the status implied by the ready replicas' role labels.

    Starts from a vacant status so replicas that are gone or no longer
    ready drop out. Replicas are applied in observation order.
    """
    status = ConsensusStatus()

    for replica in replicas:
        if not replica.ready:
            continue

        binding = role_map.resolve(replica.role_label)
        if not binding.is_known:
            continue

        assign_replica_role(status, binding, replica.name)

    return status


def assign_replica_role(
    status: ConsensusStatus,
    binding: RoleBinding,
    replica_name: str,
) -> None:
    """Move replica_name into the slot for binding, vacating any slot it held."""
    remove_replica(status, replica_name)

    member = ConsensusMember(
        replica_name=replica_name,
        role_name=binding.label,
        access_mode=binding.access_mode,
    )

    if binding.kind == RoleKind.LEADER:
        status.leader = member

    elif binding.kind == RoleKind.FOLLOWER:
        if all(follower.replica_name != replica_name for follower in status.followers):
            status.followers.append(member)
            status.followers.sort(key=lambda follower: follower.replica_name)

    elif binding.kind == RoleKind.LEARNER:
        status.learner = member


def remove_replica(status: ConsensusStatus, replica_name: str) -> None:
    if not status.leader.is_vacant and status.leader.replica_name == replica_name:
        status.leader = ConsensusMember.vacant()

    status.followers = [
        follower for follower in status.followers
        if follower.replica_name != replica_name
    ]

    if status.learner is not None and status.learner.replica_name == replica_name:
        status.learner = None


def diff_consensus_status(
    previous: ConsensusStatus | None,
    role_map: RoleMap,
    replicas: list[ReplicaObservation],
) -> StatusDiff:
    status = compute_consensus_status(role_map, replicas)
    return StatusDiff(
        status=status,
        changed=status != previous,
    )


class StatusReconciler:
    """
    Persists status changes and triggers config propagation.

    A component whose status was written but whose propagation failed
    is remembered in process so the next pass propagates again even
    though the status no longer differs.
    """

    __slots__ = (
        "_client",
        "_propagator",
        "_logger",
        "_pending_propagation",
    )

    def __init__(
        self,
        client: "ConsensusClient",
        propagator: "ConfigPropagator",
        logger: "Logger",
    ) -> None:
        self._client = client
        self._propagator = propagator
        self._logger = logger
        self._pending_propagation: set[ComponentKey] = set()

    def propagation_pending(self, key: ComponentKey) -> bool:
        return key in self._pending_propagation

    async def reconcile(
        self,
        snapshot: ComponentSnapshot,
        role_map: RoleMap,
        replicas: list[ReplicaObservation],
    ) -> StatusDiff:
        key = snapshot.key
        diff = diff_consensus_status(snapshot.status, role_map, replicas)

        if diff.changed:
            version = await self._client.update_status(
                key,
                diff.status,
                expected_version=snapshot.status_version,
            )

            await self._logger.log(ConsensusInfo(
                message=(
                    f"Consensus status updated to version {version}: "
                    f"leader={diff.status.leader.replica_name} "
                    f"followers={diff.status.follower_names()}"
                ),
                component=str(key),
            ))

            self._pending_propagation.add(key)

        else:
            await self._logger.log(ConsensusDebug(
                message="Consensus status unchanged",
                component=str(key),
            ))

        if key in self._pending_propagation:
            try:
                await self._propagator.propagate(
                    key,
                    leader=diff.status.leader_name(),
                    followers=diff.status.follower_names(),
                )

            except Exception as err:
                await self._logger.log(ConsensusWarning(
                    message=f"Config propagation failed, will retry: {err}",
                    component=str(key),
                ))
                raise ConfigPropagationError(key, err) from err

            self._pending_propagation.discard(key)

        return diff
