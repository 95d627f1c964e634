"""
Persisted consensus status.

Records which replica currently holds which role. Structs give full
structural equality, which the status reconciler relies on to decide
whether a write is needed, and a stable JSON form for the status store.
"""

import msgspec

from .roles import AccessMode


DEFAULT_REPLICA_NAME = "Unknown"


class ConsensusMember(msgspec.Struct, kw_only=True):
    replica_name: str
    role_name: str = ""
    access_mode: AccessMode = AccessMode.NONE

    @classmethod
    def vacant(cls) -> "ConsensusMember":
        return cls(
            replica_name=DEFAULT_REPLICA_NAME,
            role_name="",
            access_mode=AccessMode.NONE,
        )

    @property
    def is_vacant(self) -> bool:
        return self.replica_name == DEFAULT_REPLICA_NAME and self.role_name == ""


class ConsensusStatus(msgspec.Struct, kw_only=True):
    leader: ConsensusMember = msgspec.field(default_factory=ConsensusMember.vacant)
    followers: list[ConsensusMember] = msgspec.field(default_factory=list)
    learner: ConsensusMember | None = None

    def leader_name(self) -> str:
        """Leader replica name, or an empty string while the slot is vacant."""
        if self.leader.is_vacant:
            return ""

        return self.leader.replica_name

    def follower_names(self) -> list[str]:
        return [member.replica_name for member in self.followers]

    def role_of(self, replica_name: str) -> str | None:
        if not self.leader.is_vacant and self.leader.replica_name == replica_name:
            return self.leader.role_name

        for member in self.followers:
            if member.replica_name == replica_name:
                return member.role_name

        if self.learner is not None and self.learner.replica_name == replica_name:
            return self.learner.role_name

        return None


def encode_status(status: ConsensusStatus) -> bytes:
    return msgspec.json.encode(status)


def decode_status(data: bytes) -> ConsensusStatus:
    return msgspec.json.decode(data, type=ConsensusStatus)
