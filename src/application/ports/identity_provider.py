"""Identity provider port.

Supplies the acting user's display name for activity narration and the
owner profile read by the personalization heuristic. Authentication and
session management stay outside the engine.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.owner_profile import OwnerProfile


class IdentityProviderProtocol(Protocol):
    """Protocol for looking up users."""

    async def get_display_name(self, user_id: str) -> str:
        """Return the name used in narration.

        Implementations fall back to a generic name when the user has none.
        """
        ...

    async def get_profile(self, owner_id: str) -> OwnerProfile:
        """Return skills and workload preference for an owner."""
        ...
