"""Domain model entities for gitswitch."""

from gitswitch.domain.model.identity import Identity

__all__ = ["Identity"]
