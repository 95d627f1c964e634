"""
Unit tests for PlanWalker.

Tests replica classification, one-batch-per-call advancement, delete
idempotency and completion detection.
"""

from unittest.mock import AsyncMock

import pytest

from consensus_operator.consensus.models import (
    ReplicaUpdateState,
    UpdateStrategy,
)
from consensus_operator.consensus.plan_walker import PlanWalker, classify_replica
from consensus_operator.consensus.role_classifier import compose_role_map
from consensus_operator.consensus.update_plan import build_update_plan
from consensus_operator.errors import ConsensusOperatorError, ReplicaNotFoundError
from tests.factories import make_replica


def is_current(replica) -> bool:
    return replica.revision == "rev-2"


def is_ready(replica) -> bool:
    return replica.ready


@pytest.fixture
def delete_replica():
    return AsyncMock()


@pytest.fixture
def walker(delete_replica, mock_logger):
    return PlanWalker(delete_replica, mock_logger, component="default/orders/mysql")


@pytest.fixture
def role_map(role_spec):
    return compose_role_map(role_spec)


class TestClassifyReplica:
    """Tests for classify_replica."""

    def test_settled(self) -> None:
        replica = make_replica("db-0", revision="rev-2", ready=True)
        assert classify_replica(replica, is_current, is_ready) == ReplicaUpdateState.SETTLED

    def test_awaiting_ready(self) -> None:
        replica = make_replica("db-0", revision="rev-2", ready=False)
        assert (
            classify_replica(replica, is_current, is_ready)
            == ReplicaUpdateState.AWAITING_READY
        )

    def test_stale(self) -> None:
        replica = make_replica("db-0", revision="rev-1")
        assert classify_replica(replica, is_current, is_ready) == ReplicaUpdateState.REPLACING

    def test_terminating_wins(self) -> None:
        replica = make_replica("db-0", revision="rev-1", terminating=True)
        assert (
            classify_replica(replica, is_current, is_ready)
            == ReplicaUpdateState.TERMINATING
        )


class TestPlanWalker:
    """Tests for PlanWalker.walk_one_step."""

    @pytest.mark.asyncio
    async def test_complete_when_all_settled(self, walker, delete_replica, role_map) -> None:
        replicas = [
            make_replica("db-0", "primary"),
            make_replica("db-1", "secondary"),
            make_replica("db-2", "learner"),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert result.complete
        assert result.settled_batches == 3
        assert result.replaced == []
        delete_replica.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_plan_is_complete(self, walker, role_map) -> None:
        plan = build_update_plan([], role_map, UpdateStrategy.SERIAL, "rev-2")
        result = await walker.walk_one_step(plan)

        assert result.complete

    @pytest.mark.asyncio
    async def test_best_effort_deletes_stale_first_follower(
        self,
        walker,
        delete_replica,
        role_map,
    ) -> None:
        replicas = [
            make_replica("db-0", "primary"),
            make_replica("db-1", "secondary", revision="rev-1"),
            make_replica("db-2", "secondary"),
        ]
        plan = build_update_plan(
            replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )

        assert plan.batch_names()[0] == ["db-1"]

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert result.replaced == ["db-1"]
        assert result.pending == {"db-1": ReplicaUpdateState.REPLACING}
        delete_replica.assert_awaited_once_with(replicas[1])

    @pytest.mark.asyncio
    async def test_stops_at_first_unsettled_batch(self, walker, delete_replica, role_map) -> None:
        replicas = [
            make_replica("db-0", "primary", revision="rev-1"),
            make_replica("db-1", "secondary", revision="rev-1"),
            make_replica("db-2", "learner"),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert result.settled_batches == 1
        assert result.replaced == ["db-1"]
        assert delete_replica.await_count == 1

    @pytest.mark.asyncio
    async def test_parallel_deletes_every_stale_replica(
        self,
        walker,
        delete_replica,
        role_map,
    ) -> None:
        replicas = [
            make_replica("db-0", "primary", revision="rev-1"),
            make_replica("db-1", "secondary"),
            make_replica("db-2", "secondary2", revision="rev-1"),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.PARALLEL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert sorted(result.replaced) == ["db-0", "db-2"]
        assert delete_replica.await_count == 2

    @pytest.mark.asyncio
    async def test_waits_for_terminating_replica(self, walker, delete_replica, role_map) -> None:
        replicas = [
            make_replica("db-0", "primary"),
            make_replica("db-1", "secondary", revision="rev-1", ready=False, terminating=True),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert result.pending == {"db-1": ReplicaUpdateState.TERMINATING}
        delete_replica.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_waits_for_recreated_replica_to_be_ready(
        self,
        walker,
        delete_replica,
        role_map,
    ) -> None:
        replicas = [
            make_replica("db-0", "primary", revision="rev-1"),
            make_replica("db-1", "", ready=False),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert result.pending == {"db-1": ReplicaUpdateState.AWAITING_READY}
        delete_replica.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_deleted_replica_is_success(
        self,
        walker,
        delete_replica,
        role_map,
    ) -> None:
        delete_replica.side_effect = ReplicaNotFoundError("db-1")
        replicas = [make_replica("db-1", "secondary", revision="rev-1")]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(plan)

        assert not result.complete
        assert result.replaced == ["db-1"]

    @pytest.mark.asyncio
    async def test_delete_failure_propagates(self, walker, delete_replica, role_map) -> None:
        delete_replica.side_effect = ConsensusOperatorError("store unavailable")
        replicas = [make_replica("db-1", "secondary", revision="rev-1")]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        with pytest.raises(ConsensusOperatorError):
            await walker.walk_one_step(plan)

    @pytest.mark.asyncio
    async def test_custom_predicates(self, walker, delete_replica, role_map) -> None:
        replicas = [make_replica("db-1", "secondary", revision="rev-1")]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        result = await walker.walk_one_step(
            plan,
            is_current=lambda replica: True,
            is_ready=lambda replica: True,
        )

        assert result.complete
        delete_replica.assert_not_awaited()
