"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- TaskRepositoryProtocol: per-owner task persistence and subscriptions
- NotificationDispatcherProtocol: fire-and-forget advisories
- IdentityProviderProtocol: display names and owner profiles
- CommentStoreProtocol: task comment storage
- TaskMetricsPort: engine counters
- TimeAuthorityProtocol: injected clock
"""

from src.application.ports.comment_store import CommentStoreProtocol
from src.application.ports.identity_provider import IdentityProviderProtocol
from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import (
    TaskRepositoryProtocol,
    TaskSubscriptionProtocol,
)
from src.application.ports.time_authority import TimeAuthorityProtocol

__all__: list[str] = [
    "CommentStoreProtocol",
    "IdentityProviderProtocol",
    "NotificationDispatcherProtocol",
    "NullTaskMetrics",
    "TaskMetricsPort",
    "TaskRepositoryProtocol",
    "TaskSubscriptionProtocol",
    "TimeAuthorityProtocol",
]
