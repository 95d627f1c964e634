from dataclasses import dataclass


def ordinal_from_name(name: str) -> int:
    """
    Parse the ordinal suffix of a replica name ("db-mysql-2" -> 2).

    Names without a numeric suffix get -1 so they sort ahead of
    every numbered replica.
    """
    _, separator, suffix = name.rpartition("-")
    if not separator or not suffix.isdigit():
        return -1

    return int(suffix)


@dataclass(slots=True, frozen=True)
class ReplicaObservation:
    """
    Point-in-time view of one replica.

    Built fresh from the backing store on every pass and never persisted.
    """

    name: str
    ordinal: int
    role_label: str = ""
    revision: str = ""
    ready: bool = False
    terminating: bool = False

    @classmethod
    def from_name(
        cls,
        name: str,
        role_label: str = "",
        revision: str = "",
        ready: bool = False,
        terminating: bool = False,
    ) -> "ReplicaObservation":
        return cls(
            name=name,
            ordinal=ordinal_from_name(name),
            role_label=role_label,
            revision=revision,
            ready=ready,
            terminating=terminating,
        )


@dataclass(slots=True, frozen=True)
class ReplicaSetState:
    """Structural state of the replica set that owns a component's replicas."""

    desired_replicas: int
    generation: int = 1
    observed_generation: int = 1
    update_revision: str = ""

    @property
    def generation_converged(self) -> bool:
        return self.generation == self.observed_generation
