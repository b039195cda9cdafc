"""Test configuration and fixtures."""

import logfire
import pytest

from gitswitch.domain.model import Identity
from tests.factories import make_identity

# Keep spans local during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def alice() -> Identity:
    return make_identity("Alice", "alice@example.com", "ghp_alice0000000000")


@pytest.fixture
def bob() -> Identity:
    return make_identity("Bob", "bob@example.com", "ghp_bob000000000000")
