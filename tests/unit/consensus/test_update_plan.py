"""
Unit tests for update plan construction.

Tests replica ordering, per-strategy batching, and that every strategy
partitions the observed replicas exactly.
"""

import pytest

from consensus_operator.consensus.models import (
    BatchStage,
    ComponentRoleSpec,
    UpdateStrategy,
)
from consensus_operator.consensus.role_classifier import compose_role_map
from consensus_operator.consensus.update_plan import build_update_plan, sort_replicas
from tests.factories import make_replica


@pytest.fixture
def role_map(role_spec: ComponentRoleSpec):
    return compose_role_map(role_spec)


@pytest.fixture
def mixed_replicas():
    return [
        make_replica("db-0", "primary"),
        make_replica("db-1", "secondary"),
        make_replica("db-2", "secondary2"),
        make_replica("db-3", "learner"),
        make_replica("db-4", ""),
        make_replica("db-5", "arbiter"),
        make_replica("db-6", "secondary2"),
    ]


class TestSortReplicas:
    """Tests for sort_replicas."""

    def test_least_critical_first(self, role_map, mixed_replicas) -> None:
        ordered = sort_replicas(mixed_replicas, role_map)

        assert [replica.name for replica in ordered] == [
            "db-5",  # unknown
            "db-4",  # empty
            "db-3",  # learner
            "db-2",  # readonly follower
            "db-6",
            "db-1",  # read-write follower
            "db-0",  # leader
        ]

    def test_ordinal_breaks_ties(self, role_map) -> None:
        replicas = [
            make_replica("db-10", "secondary"),
            make_replica("db-2", "secondary"),
            make_replica("db-1", "secondary"),
        ]
        ordered = sort_replicas(replicas, role_map)

        assert [replica.name for replica in ordered] == ["db-1", "db-2", "db-10"]

    def test_does_not_mutate_input(self, role_map, mixed_replicas) -> None:
        names = [replica.name for replica in mixed_replicas]
        sort_replicas(mixed_replicas, role_map)

        assert [replica.name for replica in mixed_replicas] == names


class TestSerialPlan:
    """Tests for the Serial strategy."""

    def test_one_replica_per_batch_in_role_order(self, role_map) -> None:
        replicas = [
            make_replica("r2", "primary"),
            make_replica("r0", "learner"),
            make_replica("r1", "secondary"),
        ]
        plan = build_update_plan(replicas, role_map, UpdateStrategy.SERIAL, "rev-2")

        assert plan.batch_names() == [["r0"], ["r1"], ["r2"]]
        assert all(batch.stage == BatchStage.SERIAL for batch in plan.batches)
        assert plan.target_revision == "rev-2"


class TestParallelPlan:
    """Tests for the Parallel strategy."""

    def test_single_batch(self, role_map, mixed_replicas) -> None:
        plan = build_update_plan(mixed_replicas, role_map, UpdateStrategy.PARALLEL, "rev-2")

        assert len(plan) == 1
        assert plan.batches[0].stage == BatchStage.PARALLEL
        assert len(plan.batches[0]) == len(mixed_replicas)

    def test_no_replicas(self, role_map) -> None:
        plan = build_update_plan([], role_map, UpdateStrategy.PARALLEL, "rev-2")
        assert len(plan) == 0


class TestBestEffortParallelPlan:
    """Tests for the BestEffortParallel strategy."""

    def test_stages(self, role_map, mixed_replicas) -> None:
        plan = build_update_plan(
            mixed_replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )

        assert [batch.stage for batch in plan.batches] == [
            BatchStage.LEARNERS,
            BatchStage.FOLLOWERS_FIRST_HALF,
            BatchStage.FOLLOWERS_SECOND_HALF,
            BatchStage.LEADER,
        ]
        assert plan.batch_names() == [
            ["db-5", "db-4", "db-3"],
            ["db-2"],
            ["db-6", "db-1"],
            ["db-0"],
        ]

    def test_two_followers_and_leader(self, role_map) -> None:
        replicas = [
            make_replica("db-0", "primary"),
            make_replica("db-1", "secondary"),
            make_replica("db-2", "secondary"),
        ]
        plan = build_update_plan(
            replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )

        assert plan.batch_names() == [["db-1"], ["db-2"], ["db-0"]]
        assert plan.batches[0].stage == BatchStage.FOLLOWERS_FIRST_HALF

    @pytest.mark.parametrize("follower_count", [1, 2, 3, 4, 5])
    def test_follower_halves(self, role_map, follower_count: int) -> None:
        replicas = [make_replica("db-0", "primary")] + [
            make_replica(f"db-{ordinal}", "secondary")
            for ordinal in range(1, follower_count + 1)
        ]
        plan = build_update_plan(
            replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )
        sizes = {batch.stage: len(batch) for batch in plan.batches}

        assert sizes.get(BatchStage.FOLLOWERS_FIRST_HALF, 0) == follower_count // 2
        assert sizes[BatchStage.FOLLOWERS_SECOND_HALF] == follower_count - follower_count // 2
        assert plan.batches[-1].stage == BatchStage.LEADER

    def test_leader_batch_always_last(self, role_map) -> None:
        replicas = [
            make_replica("db-0", "learner"),
            make_replica("db-1", "primary"),
        ]
        plan = build_update_plan(
            replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )

        assert plan.batch_names() == [["db-0"], ["db-1"]]
        assert plan.batches[-1].stage == BatchStage.LEADER


class TestPlanPartition:
    """Every strategy covers each replica exactly once."""

    @pytest.mark.parametrize("strategy", list(UpdateStrategy))
    def test_exact_partition(self, role_map, mixed_replicas, strategy) -> None:
        plan = build_update_plan(mixed_replicas, role_map, strategy, "rev-2")
        names = [name for batch in plan.batch_names() for name in batch]

        assert sorted(names) == sorted(replica.name for replica in mixed_replicas)
        assert len(names) == len(set(names))
        assert all(len(batch) > 0 for batch in plan.batches)

    def test_default_leader_spec(self) -> None:
        role_map = compose_role_map(ComponentRoleSpec())
        replicas = [
            make_replica("db-0", "leader"),
            make_replica("db-1", ""),
        ]
        plan = build_update_plan(
            replicas,
            role_map,
            UpdateStrategy.BEST_EFFORT_PARALLEL,
            "rev-2",
        )

        assert plan.batch_names() == [["db-1"], ["db-0"]]
