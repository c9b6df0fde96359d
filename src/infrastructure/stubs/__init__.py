"""Infrastructure stubs for development and testing.

Available stubs:
- TaskRepositoryStub: In-memory per-owner task storage with subscriptions
- NotificationDispatcherStub: Records dispatched advisories
- IdentityProviderStub: Configurable display names and owner profiles
- CommentStoreStub: In-memory comment storage

WARNING: These stubs are NOT for production use.
Production implementations are in src/infrastructure/adapters/.
"""

from src.infrastructure.stubs.comment_store_stub import CommentStoreStub
from src.infrastructure.stubs.identity_provider_stub import IdentityProviderStub
from src.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from src.infrastructure.stubs.task_subscription import TaskSubscription

__all__: list[str] = [
    "CommentStoreStub",
    "IdentityProviderStub",
    "NotificationDispatcherStub",
    "TaskRepositoryStub",
    "TaskSubscription",
]
