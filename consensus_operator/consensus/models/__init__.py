"""
Consensus model exports.

All dataclasses, structs, and enums used by the consensus module.
"""

from .component import (
    ComponentKey,
    ComponentSnapshot,
    ConfigRecord,
)
from .plan import (
    BatchStage,
    PassState,
    ReplicaUpdateState,
    UpdateBatch,
    UpdatePassResult,
    UpdatePlan,
    WalkResult,
)
from .replica import (
    ReplicaObservation,
    ReplicaSetState,
    ordinal_from_name,
)
from .role_spec import (
    DEFAULT_LEADER_NAME,
    ComponentRoleSpec,
    ConsensusMemberSpec,
    UpdateStrategy,
)
from .roles import (
    FOLLOWER_PRIORITIES,
    AccessMode,
    RoleBinding,
    RoleKind,
    RolePriority,
)
from .status import (
    DEFAULT_REPLICA_NAME,
    ConsensusMember,
    ConsensusStatus,
    decode_status,
    encode_status,
)

__all__ = [
    # Component identity
    "ComponentKey",
    "ComponentSnapshot",
    "ConfigRecord",
    # Plans
    "BatchStage",
    "PassState",
    "ReplicaUpdateState",
    "UpdateBatch",
    "UpdatePassResult",
    "UpdatePlan",
    "WalkResult",
    # Replicas
    "ReplicaObservation",
    "ReplicaSetState",
    "ordinal_from_name",
    # Role spec
    "DEFAULT_LEADER_NAME",
    "ComponentRoleSpec",
    "ConsensusMemberSpec",
    "UpdateStrategy",
    # Roles
    "FOLLOWER_PRIORITIES",
    "AccessMode",
    "RoleBinding",
    "RoleKind",
    "RolePriority",
    # Status
    "DEFAULT_REPLICA_NAME",
    "ConsensusMember",
    "ConsensusStatus",
    "decode_status",
    "encode_status",
]
