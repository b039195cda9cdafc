"""Mappers for converting between stored values and domain models.

Identities are stored as a JSON array. The credential is never part of the
serialized form; repositories keep it in the secret store.
"""

import json
from typing import Any, Dict, Optional
from uuid import UUID

import logfire

from gitswitch.domain.model import Identity
from gitswitch.domain.value import IdentityId


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    """Convert Identity domain model to a JSON-ready dict.

    Args:
        identity: Identity domain model

    Returns:
        Dict without the credential
    """
    return {
        "id": str(identity.id),
        "display_name": identity.display_name,
        "email": identity.email,
        "remote_username": identity.remote_username,
        "avatar_url": identity.avatar_url,
    }


def dict_to_identity(data: Dict[str, Any], credential: str = "") -> Identity:
    """Convert a stored dict to an Identity domain model.

    Args:
        data: Dict produced by identity_to_dict
        credential: Credential loaded separately from the secret store

    Returns:
        Identity domain model
    """
    return Identity(
        id=IdentityId(UUID(data["id"])),
        display_name=data["display_name"],
        email=data["email"],
        credential=credential,
        remote_username=data.get("remote_username"),
        avatar_url=data.get("avatar_url"),
    )


def identities_to_json(identities: list[Identity]) -> str:
    return json.dumps([identity_to_dict(identity) for identity in identities])


def json_to_identity_dicts(value: Optional[str]) -> list[Dict[str, Any]]:
    """Parse the stored identity list.

    Corrupt data is logged and treated as an empty list.

    Args:
        value: Stored JSON text, or None if nothing is stored

    Returns:
        Identity dicts in stored order
    """
    if not value:
        return []
    try:
        data = json.loads(value)
    except ValueError as e:
        logfire.error("Stored identity list is not valid JSON", error=str(e))
        return []
    if not isinstance(data, list):
        logfire.error("Stored identity list has unexpected shape")
        return []
    return [item for item in data if isinstance(item, dict)]


def parse_identity_id(value: Optional[str]) -> Optional[IdentityId]:
    """Parse a stored identity ID, None if unset or malformed."""
    if not value:
        return None
    try:
        return IdentityId(UUID(value))
    except ValueError:
        logfire.warn("Stored active identity id is malformed")
        return None


def validate_identity(data: Dict[str, Any], credential: str) -> Optional[Identity]:
    """Build an Identity, skipping records that fail validation."""
    try:
        return dict_to_identity(data, credential)
    except (KeyError, ValueError) as e:
        logfire.error("Skipping malformed stored identity", error=str(e))
        return None
