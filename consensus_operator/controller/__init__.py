from .client import ConsensusClient
from .controller import ConsensusController, UpdateHandler
from .memory_store import ComponentRecord, InMemoryClusterStore, ReplicaRecord

__all__ = [
    "ComponentRecord",
    "ConsensusClient",
    "ConsensusController",
    "InMemoryClusterStore",
    "ReplicaRecord",
    "UpdateHandler",
]
