"""Strongly typed identifiers for gitswitch domain entities."""

from typing import NewType
from uuid import UUID, uuid4

IdentityId = NewType("IdentityId", UUID)


def new_identity_id() -> IdentityId:
    """Generate a fresh identity ID (random UUID, never reused)."""
    return IdentityId(uuid4())
