"""Identity provider stub with configurable profiles."""

from __future__ import annotations

from src.application.ports.identity_provider import IdentityProviderProtocol
from src.domain.models.owner_profile import DEFAULT_DISPLAY_NAME, OwnerProfile


class IdentityProviderStub(IdentityProviderProtocol):
    """In-memory identity provider.

    Unknown users are narrated as "User" and get an empty profile (no
    skills, no workload preference).
    """

    def __init__(self) -> None:
        self._profiles: dict[str, OwnerProfile] = {}

    async def get_display_name(self, user_id: str) -> str:
        profile = self._profiles.get(user_id)
        return profile.display_name if profile is not None else DEFAULT_DISPLAY_NAME

    async def get_profile(self, owner_id: str) -> OwnerProfile:
        return self._profiles.get(owner_id, OwnerProfile(owner_id=owner_id))

    def set_profile(self, profile: OwnerProfile) -> None:
        self._profiles[profile.owner_id] = profile

    def clear(self) -> None:
        self._profiles.clear()
