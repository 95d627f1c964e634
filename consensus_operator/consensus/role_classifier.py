"""
Role classification for consensus-set replicas.

Turns a component's role specification into a RoleMap that resolves any
observed role label to a RoleBinding. Built once per pass; pure.
"""

from .models import (
    DEFAULT_LEADER_NAME,
    FOLLOWER_PRIORITIES,
    AccessMode,
    ComponentRoleSpec,
    RoleBinding,
    RoleKind,
    RolePriority,
)


class RoleMap:
    """
    Label -> RoleBinding lookup for one component.

    The empty label resolves to the EMPTY priority and any label the role spec
    does not declare resolves to UNKNOWN. Neither carries a role kind, so
    neither can ever be promoted into the consensus status.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: dict[str, RoleBinding]) -> None:
        self._bindings = bindings

    def __contains__(self, label: str) -> bool:
        return label in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def resolve(self, label: str) -> RoleBinding:
        binding = self._bindings.get(label)
        if binding is not None:
            return binding

        return RoleBinding(
            label=label,
            kind=RoleKind.UNKNOWN,
            access_mode=AccessMode.NONE,
            priority=RolePriority.EMPTY if label == "" else RolePriority.UNKNOWN,
        )

    def priority_of(self, label: str) -> RolePriority:
        return self.resolve(label).priority


def compose_role_map(
    spec: ComponentRoleSpec | None,
    default_leader_name: str = DEFAULT_LEADER_NAME,
) -> RoleMap:
    """
    Build the RoleMap for a role specification.

    A missing spec or leader falls back to a read-write leader named
    default_leader_name. Entries with an empty name are ignored. When
    two entries share a name the higher-priority binding is kept.
    """
    if spec is None:
        spec = ComponentRoleSpec()

    spec = spec.with_default_leader(default_leader_name)

    bindings: dict[str, RoleBinding] = {}

    _bind(
        bindings,
        RoleBinding(
            label=spec.leader.name,
            kind=RoleKind.LEADER,
            access_mode=spec.leader.access_mode,
            priority=RolePriority.LEADER,
        ),
    )

    for follower in spec.followers:
        _bind(
            bindings,
            RoleBinding(
                label=follower.name,
                kind=RoleKind.FOLLOWER,
                access_mode=follower.access_mode,
                priority=FOLLOWER_PRIORITIES[follower.access_mode],
            ),
        )

    if spec.learner is not None:
        _bind(
            bindings,
            RoleBinding(
                label=spec.learner.name,
                kind=RoleKind.LEARNER,
                access_mode=spec.learner.access_mode,
                priority=RolePriority.LEARNER,
            ),
        )

    return RoleMap(bindings)


def _bind(bindings: dict[str, RoleBinding], binding: RoleBinding) -> None:
    if not binding.label:
        return

    existing = bindings.get(binding.label)
    if existing is None or binding.priority > existing.priority:
        bindings[binding.label] = binding
