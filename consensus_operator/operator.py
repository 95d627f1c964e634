from consensus_operator.consensus import ConsensusUpdateHandler, RoleLabelUpdater
from consensus_operator.consensus.models import ComponentKey
from consensus_operator.controller import ConsensusClient, ConsensusController
from consensus_operator.env import Env, load_env
from consensus_operator.logging import Logger, LoggingConfig


class ConsensusOperator:
    """
    Wires the reconcile loop for one backing store.

    Settings come from Env (process environment and .env file unless an
    Env is passed in). Logging is configured process-wide on start.
    """

    def __init__(
        self,
        client: ConsensusClient,
        env: Env | None = None,
        logger: Logger | None = None,
    ) -> None:
        if env is None:
            env = load_env(Env)

        if logger is None:
            logger = Logger(name="consensus", path=env.CONSENSUS_LOG_PATH)

        self._env = env
        self._logger = logger
        self._logging_config: LoggingConfig | None = None

        self._handler = ConsensusUpdateHandler.from_env(client, logger, env)
        self._controller = ConsensusController.from_env(self._handler, logger, env)
        self._role_label_updater = RoleLabelUpdater(
            client,
            logger,
            default_leader_name=env.CONSENSUS_DEFAULT_LEADER_NAME,
        )

    @property
    def env(self) -> Env:
        return self._env

    @property
    def controller(self) -> ConsensusController:
        return self._controller

    @property
    def handler(self) -> ConsensusUpdateHandler:
        return self._handler

    async def start(self) -> None:
        if self._logging_config is None:
            self._logging_config = LoggingConfig()
            self._logging_config.update(**self._env.get_logging_config())

        self._logger.open()
        await self._controller.start()

    async def stop(self) -> None:
        """Stop the controller and close the logger. start() may be called again."""
        await self._controller.stop()
        await self._logger.close()

    def enqueue(self, key: ComponentKey) -> None:
        self._controller.enqueue(key)

    async def report_role(
        self,
        key: ComponentKey,
        replica_name: str,
        role: str,
    ) -> bool:
        """
        Apply a role a replica reported and queue its component so the
        status picks the change up.
        """
        patched = await self._role_label_updater.update_role_label(
            key,
            replica_name,
            role,
        )

        if patched:
            self._controller.enqueue(key)

        return patched
