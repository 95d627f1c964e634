"""
Unit tests for RoleLabelUpdater.
"""

import pytest

from consensus_operator.consensus.labels import ACCESS_MODE_LABEL_KEY, ROLE_LABEL_KEY
from consensus_operator.consensus.models import ComponentRoleSpec, ReplicaSetState
from consensus_operator.consensus.role_label_updater import RoleLabelUpdater
from consensus_operator.controller.memory_store import InMemoryClusterStore
from consensus_operator.errors import ReplicaNotFoundError


@pytest.fixture
def store(component_key, role_spec) -> InMemoryClusterStore:
    store = InMemoryClusterStore()
    store.add_component(component_key, role_spec, ReplicaSetState(desired_replicas=2))
    store.add_replica(component_key, "db-0", "secondary", revision="rev-1", ready=True)
    store.add_replica(component_key, "db-1", "primary", revision="rev-1", ready=True)
    return store


@pytest.fixture
def updater(store, mock_logger) -> RoleLabelUpdater:
    return RoleLabelUpdater(store, mock_logger)


class TestRoleLabelUpdater:
    """Tests for RoleLabelUpdater.update_role_label."""

    @pytest.mark.asyncio
    async def test_applies_role_and_access_mode(self, updater, store, component_key) -> None:
        assert await updater.update_role_label(component_key, "db-0", "primary")

        labels = store.replica(component_key, "db-0").labels
        assert labels[ROLE_LABEL_KEY] == "primary"
        assert labels[ACCESS_MODE_LABEL_KEY] == "ReadWrite"

    @pytest.mark.asyncio
    async def test_readonly_follower(self, updater, store, component_key) -> None:
        await updater.update_role_label(component_key, "db-1", "secondary2")

        labels = store.replica(component_key, "db-1").labels
        assert labels[ROLE_LABEL_KEY] == "secondary2"
        assert labels[ACCESS_MODE_LABEL_KEY] == "Readonly"

    @pytest.mark.asyncio
    async def test_undeclared_role_ignored(self, updater, store, component_key) -> None:
        assert not await updater.update_role_label(component_key, "db-0", "arbiter")
        assert store.replica(component_key, "db-0").labels[ROLE_LABEL_KEY] == "secondary"

    @pytest.mark.asyncio
    async def test_non_consensus_component_ignored(self, store, mock_logger, component_key) -> None:
        store.add_component(component_key, None, ReplicaSetState(desired_replicas=1))
        updater = RoleLabelUpdater(store, mock_logger)

        assert not await updater.update_role_label(component_key, "db-0", "primary")

    @pytest.mark.asyncio
    async def test_default_leader_role(self, store, mock_logger, component_key) -> None:
        store.add_component(component_key, ComponentRoleSpec(), ReplicaSetState(desired_replicas=1))
        store.add_replica(component_key, "db-0", revision="rev-1", ready=True)
        updater = RoleLabelUpdater(store, mock_logger)

        assert await updater.update_role_label(component_key, "db-0", "leader")
        assert store.replica(component_key, "db-0").labels[ACCESS_MODE_LABEL_KEY] == "ReadWrite"

    @pytest.mark.asyncio
    async def test_missing_replica(self, updater, component_key) -> None:
        with pytest.raises(ReplicaNotFoundError):
            await updater.update_role_label(component_key, "db-9", "primary")
