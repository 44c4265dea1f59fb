"""
Shared fixtures for the client shell tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from client.app.config import Settings, set_test_mode
from client.app.services.session import SessionContext
from client.app.services.state import create_shell_state
from client.test_scripts.test_utils import FakeGateway

set_test_mode(True)


# ============================================================================
# PYTEST FIXTURES
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with zero poll delays so polling tests never sleep."""
    return Settings(
        POLL_INTERVAL_SECONDS=0.0,
        POLL_MAX_RETRIES=3,
        POLL_BACKOFF_FACTOR=2.0,
        POLL_MAX_BACKOFF_SECONDS=0.0,
        )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def ctx() -> SessionContext:
    return SessionContext(user_id=1, username="alice", token="secret")


@pytest.fixture
def anonymous() -> SessionContext:
    return SessionContext.anonymous()


@pytest.fixture
def state(gateway, test_settings):
    shell = create_shell_state(gateway, test_settings)
    yield shell
    shell.reset()
