"""Base model for domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for entities kept in the session.

    Entities are replaced, never mutated: edits go through ``model_copy``
    so the coordinator can swap them atomically in its list.
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,  # Names and emails are stored trimmed
        arbitrary_types_allowed=True,
    )
