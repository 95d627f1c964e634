"""
In-process backing store implementing ConsensusClient.

Holds components, their replicas and config records in memory, with an
optimistic-concurrency version on each component's status. Every read
returns copies so callers can never mutate stored state in place.
Helper methods stand in for the replica set controller (finishing a
termination, recreating a replica at a revision).
"""

from dataclasses import dataclass, field

from consensus_operator.consensus.labels import ROLE_LABEL_KEY
from consensus_operator.consensus.models import (
    ComponentKey,
    ComponentRoleSpec,
    ComponentSnapshot,
    ConfigRecord,
    ConsensusStatus,
    ReplicaObservation,
    ReplicaSetState,
    decode_status,
    encode_status,
)
from consensus_operator.errors import (
    ComponentNotFoundError,
    ConsensusOperatorError,
    ReplicaNotFoundError,
    StatusConflictError,
)

from .client import ConsensusClient


@dataclass(slots=True)
class ReplicaRecord:
    name: str
    revision: str = ""
    ready: bool = False
    terminating: bool = False
    labels: dict[str, str] = field(default_factory=dict)

    def observe(self) -> ReplicaObservation:
        return ReplicaObservation.from_name(
            self.name,
            role_label=self.labels.get(ROLE_LABEL_KEY, ""),
            revision=self.revision,
            ready=self.ready,
            terminating=self.terminating,
        )


@dataclass(slots=True)
class ComponentRecord:
    role_spec: ComponentRoleSpec | None
    replica_set: ReplicaSetState
    status_data: bytes | None = None
    status_version: int = 0
    replicas: dict[str, ReplicaRecord] = field(default_factory=dict)


class InMemoryClusterStore(ConsensusClient):

    def __init__(self) -> None:
        self._components: dict[ComponentKey, ComponentRecord] = {}
        self._configs: dict[str, ConfigRecord] = {}
        self.deleted_replicas: list[str] = []

    # =========================================================================
    # Setup and inspection
    # =========================================================================

    def add_component(
        self,
        key: ComponentKey,
        role_spec: ComponentRoleSpec | None,
        replica_set: ReplicaSetState,
    ) -> ComponentRecord:
        record = ComponentRecord(role_spec=role_spec, replica_set=replica_set)
        self._components[key] = record
        return record

    def set_replica_set(self, key: ComponentKey, replica_set: ReplicaSetState) -> None:
        self._component(key).replica_set = replica_set

    def add_replica(
        self,
        key: ComponentKey,
        name: str,
        role_label: str = "",
        revision: str = "",
        ready: bool = False,
    ) -> ReplicaRecord:
        labels = {ROLE_LABEL_KEY: role_label} if role_label else {}
        record = ReplicaRecord(
            name=name,
            revision=revision,
            ready=ready,
            labels=labels,
        )
        self._component(key).replicas[name] = record
        return record

    def replica(self, key: ComponentKey, name: str) -> ReplicaRecord:
        record = self._component(key).replicas.get(name)
        if record is None:
            raise ReplicaNotFoundError(name)

        return record

    def add_config_record(self, record: ConfigRecord) -> None:
        self._configs[record.name] = record

    def config_record(self, name: str) -> ConfigRecord:
        return self._configs[name]

    def status(self, key: ComponentKey) -> ConsensusStatus | None:
        record = self._component(key)
        if record.status_data is None:
            return None

        return decode_status(record.status_data)

    def status_version(self, key: ComponentKey) -> int:
        return self._component(key).status_version

    def complete_termination(self, key: ComponentKey, name: str) -> None:
        self._component(key).replicas.pop(name, None)

    def recreate_replica(
        self,
        key: ComponentKey,
        name: str,
        revision: str,
        role_label: str = "",
        ready: bool = True,
    ) -> ReplicaRecord:
        self.complete_termination(key, name)
        return self.add_replica(
            key,
            name,
            role_label=role_label,
            revision=revision,
            ready=ready,
        )

    # =========================================================================
    # ConsensusClient
    # =========================================================================

    async def get_component(self, key: ComponentKey) -> ComponentSnapshot:
        record = self._component(key)
        return ComponentSnapshot(
            key=key,
            role_spec=record.role_spec,
            replica_set=record.replica_set,
            status=self.status(key),
            status_version=record.status_version,
        )

    async def list_replicas(self, key: ComponentKey) -> list[ReplicaObservation]:
        return [
            replica.observe()
            for replica in self._component(key).replicas.values()
        ]

    async def update_status(
        self,
        key: ComponentKey,
        status: ConsensusStatus,
        expected_version: int,
    ) -> int:
        record = self._component(key)
        if record.status_version != expected_version:
            raise StatusConflictError(key, expected_version, record.status_version)

        record.status_data = encode_status(status)
        record.status_version += 1
        return record.status_version

    async def list_config_records(self, labels: dict[str, str]) -> list[ConfigRecord]:
        return [
            ConfigRecord(
                name=record.name,
                labels=dict(record.labels),
                data=dict(record.data),
            )
            for record in self._configs.values()
            if all(record.labels.get(name) == value for name, value in labels.items())
        ]

    async def patch_config_record(self, name: str, data: dict[str, str]) -> None:
        record = self._configs.get(name)
        if record is None:
            raise ConsensusOperatorError(f"Config record {name} not found")

        record.data.update(data)

    async def delete_replica(self, key: ComponentKey, name: str) -> None:
        record = self.replica(key, name)
        record.terminating = True
        record.ready = False
        self.deleted_replicas.append(name)

    async def patch_replica_labels(
        self,
        key: ComponentKey,
        name: str,
        labels: dict[str, str],
    ) -> None:
        self.replica(key, name).labels.update(labels)

    def _component(self, key: ComponentKey) -> ComponentRecord:
        record = self._components.get(key)
        if record is None:
            raise ComponentNotFoundError(key)

        return record
