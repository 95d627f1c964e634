from dataclasses import dataclass, field

from .replica import ReplicaSetState
from .role_spec import ComponentRoleSpec
from .status import ConsensusStatus


@dataclass(slots=True, frozen=True)
class ComponentKey:
    """Identity of one component instance. Used as the work-queue key."""

    namespace: str
    cluster: str
    component: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.cluster}/{self.component}"


@dataclass(slots=True)
class ComponentSnapshot:
    """
    One fetch of a component.

    role_spec is None when the component's workload is not a consensus
    set. status_version is the base version for the conditional status
    update issued later in the same pass.
    """

    key: ComponentKey
    role_spec: ComponentRoleSpec | None
    replica_set: ReplicaSetState
    status: ConsensusStatus | None = None
    status_version: int = 0


@dataclass(slots=True)
class ConfigRecord:
    """Shared key/value config record consumed by the database replicas."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)
