"""
Contract between the consensus core and its backing store.

Implementations supply fetch, conditional status update, config record
patching and replica mutation from whatever store they wrap.
"""

from abc import ABC, abstractmethod

from consensus_operator.consensus.models import (
    ComponentKey,
    ComponentSnapshot,
    ConfigRecord,
    ConsensusStatus,
    ReplicaObservation,
)


class ConsensusClient(ABC):

    @abstractmethod
    async def get_component(self, key: ComponentKey) -> ComponentSnapshot:
        """Raises ComponentNotFoundError for unknown components."""
        ...

    @abstractmethod
    async def list_replicas(self, key: ComponentKey) -> list[ReplicaObservation]:
        ...

    @abstractmethod
    async def update_status(
        self,
        key: ComponentKey,
        status: ConsensusStatus,
        expected_version: int,
    ) -> int:
        """
        Replace the component's status if its version still equals
        expected_version and return the new version. Raises
        StatusConflictError otherwise.
        """
        ...

    @abstractmethod
    async def list_config_records(self, labels: dict[str, str]) -> list[ConfigRecord]:
        """Return every config record carrying all of the given labels."""
        ...

    @abstractmethod
    async def patch_config_record(self, name: str, data: dict[str, str]) -> None:
        """Merge data into the named config record."""
        ...

    @abstractmethod
    async def delete_replica(self, key: ComponentKey, name: str) -> None:
        """
        Start deleting a replica so its replica set recreates it at the
        update revision. Raises ReplicaNotFoundError if it is already gone.
        """
        ...

    @abstractmethod
    async def patch_replica_labels(
        self,
        key: ComponentKey,
        name: str,
        labels: dict[str, str],
    ) -> None:
        """Merge labels into a replica's labels. Raises ReplicaNotFoundError."""
        ...
