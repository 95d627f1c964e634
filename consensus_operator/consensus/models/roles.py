"""
Role vocabulary for consensus-set members.

Role labels observed on replicas are resolved into one of a closed set
of RoleKind variants, each carrying the access mode granted by the role
specification and the priority used to order replacements.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class AccessMode(str, Enum):
    """Capability granted to a member role."""

    NONE = "None"
    READONLY = "Readonly"
    READ_WRITE = "ReadWrite"


class RoleKind(str, Enum):
    """Consensus function a replica performs."""

    LEADER = "Leader"
    FOLLOWER = "Follower"
    LEARNER = "Learner"
    UNKNOWN = "Unknown"  # Empty label or label absent from the role spec


class RolePriority(IntEnum):
    """
    Replacement priority, strictly decreasing from leader to unknown.

    Lower priorities are replaced first during an update so the leader,
    the most critical member, is always replaced last.
    """

    LEADER = 1 << 5
    FOLLOWER_READ_WRITE = 1 << 4
    FOLLOWER_READONLY = 1 << 3
    FOLLOWER_NONE = 1 << 2
    LEARNER = 1 << 1
    EMPTY = 1 << 0
    UNKNOWN = 0


FOLLOWER_PRIORITIES: dict[AccessMode, RolePriority] = {
    AccessMode.NONE: RolePriority.FOLLOWER_NONE,
    AccessMode.READONLY: RolePriority.FOLLOWER_READONLY,
    AccessMode.READ_WRITE: RolePriority.FOLLOWER_READ_WRITE,
}


@dataclass(slots=True, frozen=True)
class RoleBinding:
    """Resolved meaning of one role label."""

    label: str
    kind: RoleKind
    access_mode: AccessMode
    priority: RolePriority

    @property
    def is_known(self) -> bool:
        return self.kind != RoleKind.UNKNOWN
