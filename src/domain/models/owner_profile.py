"""Owner profile model.

The profile carries the inputs the personalization heuristic reads about the
person who owns a task collection: their display name (used in activity
narration), their skills, and their preferred workload ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DISPLAY_NAME = "User"


@dataclass(frozen=True)
class OwnerProfile:
    """Identity-provider view of a task owner.

    Attributes:
        owner_id: Id of the owner this profile describes.
        display_name: Name used in activity narration.
        skills: Skills the owner has declared.
        workload_threshold: Preferred ceiling on concurrently in-progress
            tasks. None means no preference was configured.
    """

    owner_id: str
    display_name: str = DEFAULT_DISPLAY_NAME
    skills: frozenset[str] = frozenset()
    workload_threshold: int | None = None

    def has_skills(self, required: tuple[str, ...]) -> bool:
        """Whether every required skill is present (vacuously true)."""
        return all(skill in self.skills for skill in required)
