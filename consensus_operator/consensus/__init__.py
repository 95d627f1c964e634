"""
Consensus-set update orchestration.

Classifies replica roles, keeps the persisted consensus status in step
with observed role labels, and replaces replicas during updates in an
order that keeps the leader available for as long as possible.
"""

from .component_update import ConsensusUpdateHandler
from .config_propagator import ConfigPropagator, config_key_names
from .plan_walker import PlanWalker, classify_replica
from .role_classifier import RoleMap, compose_role_map
from .role_label_updater import RoleLabelUpdater
from .status_reconciler import (
    StatusDiff,
    StatusReconciler,
    compute_consensus_status,
    diff_consensus_status,
)
from .update_plan import build_update_plan, sort_replicas

__all__ = [
    "ConfigPropagator",
    "ConsensusUpdateHandler",
    "PlanWalker",
    "RoleLabelUpdater",
    "RoleMap",
    "StatusDiff",
    "StatusReconciler",
    "build_update_plan",
    "classify_replica",
    "compose_role_map",
    "compute_consensus_status",
    "config_key_names",
    "diff_consensus_status",
    "sort_replicas",
]
