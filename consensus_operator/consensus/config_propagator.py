from typing import TYPE_CHECKING

from .labels import component_config_selector
from .logging_models import ConsensusDebug, ConsensusInfo
from .models import ComponentKey

if TYPE_CHECKING:
    from consensus_operator.controller.client import ConsensusClient
    from consensus_operator.logging import Logger


DEFAULT_CONFIG_KEY_PREFIX = "KB_"


def config_key_names(
    component: str,
    prefix: str = DEFAULT_CONFIG_KEY_PREFIX,
) -> tuple[str, str]:
    """Return the (leader, followers) keys, e.g. KB_MYSQL_LEADER / KB_MYSQL_FOLLOWERS."""
    component_name = component.upper()
    return (
        f"{prefix}{component_name}_LEADER",
        f"{prefix}{component_name}_FOLLOWERS",
    )


class ConfigPropagator:
    """
    Publishes the current leader and followers of a component to every
    env config record carrying the component's identity labels.
    """

    __slots__ = (
        "_client",
        "_logger",
        "_prefix",
    )

    def __init__(
        self,
        client: "ConsensusClient",
        logger: "Logger",
        prefix: str = DEFAULT_CONFIG_KEY_PREFIX,
    ) -> None:
        self._client = client
        self._logger = logger
        self._prefix = prefix

    async def propagate(
        self,
        key: ComponentKey,
        leader: str,
        followers: list[str],
    ) -> int:
        """
        Set the leader/follower keys on each matching record.

        Records that already hold the target values are left alone.
        Returns the number of records patched.
        """
        leader_key, followers_key = config_key_names(key.component, self._prefix)
        values = {
            leader_key: leader,
            followers_key: ",".join(sorted(followers)),
        }

        records = await self._client.list_config_records(
            component_config_selector(key)
        )

        patched = 0
        for record in records:
            if all(record.data.get(name) == value for name, value in values.items()):
                continue

            await self._client.patch_config_record(record.name, values)
            patched += 1

        if patched > 0:
            await self._logger.log(ConsensusInfo(
                message=(
                    f"Propagated {leader_key}={values[leader_key]} "
                    f"{followers_key}={values[followers_key]} to {patched} config record(s)"
                ),
                component=str(key),
            ))

        else:
            await self._logger.log(ConsensusDebug(
                message=f"No config records to update ({len(records)} matched)",
                component=str(key),
            ))

        return patched
