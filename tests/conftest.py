"""
Shared fixtures for consensus operator tests.

Configures pytest-asyncio for async test support.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from consensus_operator.consensus.models import (
    AccessMode,
    ComponentKey,
    ComponentRoleSpec,
    ConsensusMemberSpec,
    UpdateStrategy,
)


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def mock_logger():
    logger = MagicMock()
    logger.log = AsyncMock()
    return logger


@pytest.fixture
def component_key() -> ComponentKey:
    return ComponentKey(namespace="default", cluster="orders", component="mysql")


@pytest.fixture
def role_spec() -> ComponentRoleSpec:
    """primary leader, read-write and readonly followers, a learner."""
    return ComponentRoleSpec(
        leader=ConsensusMemberSpec("primary", AccessMode.READ_WRITE),
        followers=(
            ConsensusMemberSpec("secondary", AccessMode.READ_WRITE),
            ConsensusMemberSpec("secondary2", AccessMode.READONLY),
        ),
        learner=ConsensusMemberSpec("learner", AccessMode.READONLY),
        update_strategy=UpdateStrategy.SERIAL,
    )
