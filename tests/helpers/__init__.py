"""Test helpers for task engine tests.

This package contains reusable test utilities and fake implementations
for dependency injection in unit tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    make_task: Task builder with sensible defaults
    sample_total: Prometheus sample lookup across label sets

Usage:
    from tests.helpers import FakeTimeAuthority, make_task
"""

from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT, FakeTimeAuthority
from tests.helpers.metrics import sample_total
from tests.helpers.tasks import make_task

__all__ = ["DEFAULT_FROZEN_AT", "FakeTimeAuthority", "make_task", "sample_total"]
