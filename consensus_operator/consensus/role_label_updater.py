from typing import TYPE_CHECKING

from .labels import ACCESS_MODE_LABEL_KEY, ROLE_LABEL_KEY
from .logging_models import ConsensusDebug, ConsensusInfo
from .models import DEFAULT_LEADER_NAME, ComponentKey
from .role_classifier import compose_role_map

if TYPE_CHECKING:
    from consensus_operator.controller.client import ConsensusClient
    from consensus_operator.logging import Logger


class RoleLabelUpdater:
    """
    Applies a probed role to a replica's labels.

    Called when a replica reports that its database role changed. The
    role and the access mode the role spec grants it are written as labels,
    which later passes observe as the replica's role. Roles the role spec
    does not declare are ignored.
    """

    __slots__ = (
        "_client",
        "_logger",
        "_default_leader_name",
    )

    def __init__(
        self,
        client: "ConsensusClient",
        logger: "Logger",
        default_leader_name: str = DEFAULT_LEADER_NAME,
    ) -> None:
        self._client = client
        self._logger = logger
        self._default_leader_name = default_leader_name

    async def update_role_label(
        self,
        key: ComponentKey,
        replica_name: str,
        role: str,
    ) -> bool:
        """Returns True if the replica's labels were patched."""
        snapshot = await self._client.get_component(key)
        if snapshot.role_spec is None:
            return False

        role_map = compose_role_map(snapshot.role_spec, self._default_leader_name)
        if role not in role_map:
            await self._logger.log(ConsensusDebug(
                message=f"Ignoring role {role!r} not declared by the component",
                component=str(key),
                replica=replica_name,
            ))
            return False

        binding = role_map.resolve(role)
        await self._client.patch_replica_labels(
            key,
            replica_name,
            {
                ROLE_LABEL_KEY: binding.label,
                ACCESS_MODE_LABEL_KEY: binding.access_mode.value,
            },
        )

        await self._logger.log(ConsensusInfo(
            message=f"Replica role set to {binding.label} ({binding.access_mode.value})",
            component=str(key),
            replica=replica_name,
        ))

        return True
