"""Unit tests for correlation ids and the logging notification dispatcher."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from structlog.testing import capture_logs

from src.domain.models.advisory import Advisory, AdvisoryLevel, AdvisoryType
from src.infrastructure.adapters.logging_notification_dispatcher import (
    LoggingNotificationDispatcher,
)
from src.infrastructure.observability import (
    correlation_id_processor,
    ensure_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    def test_incoming_id_adopted(self) -> None:
        assert ensure_correlation_id(" abc-123 ") == "abc-123"
        assert get_correlation_id() == "abc-123"

    def test_missing_id_generated(self) -> None:
        generated = ensure_correlation_id(None)
        assert len(generated) == 36
        assert get_correlation_id() == generated

    def test_processor_stamps_entries(self) -> None:
        set_correlation_id("req-1")
        event = correlation_id_processor(None, "info", {"event": "x"})
        assert event["correlation_id"] == "req-1"

    def test_processor_skips_when_unset(self) -> None:
        set_correlation_id("")
        assert "correlation_id" not in correlation_id_processor(None, "info", {})


class TestLoggingNotificationDispatcher:
    """Advisories become structured log entries at their level."""

    @pytest.mark.asyncio
    async def test_warning_advisory_logged_as_warning(self) -> None:
        advisory = Advisory(
            advisory_type=AdvisoryType.BUDGET_EXCEEDED,
            level=AdvisoryLevel.WARNING,
            owner_id="owner-1",
            task_id="t1",
            message="over budget",
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            data={"ratio": 1.1},
        )

        with capture_logs() as logs:
            await LoggingNotificationDispatcher().dispatch(advisory)

        [entry] = logs
        assert entry["event"] == "task_advisory"
        assert entry["log_level"] == "warning"
        assert entry["advisory_type"] == "budget_exceeded"
        assert entry["ratio"] == 1.1

    @pytest.mark.asyncio
    async def test_info_advisory_logged_as_info(self) -> None:
        advisory = Advisory(
            advisory_type=AdvisoryType.RECURRING_TASKS_CREATED,
            level=AdvisoryLevel.INFO,
            owner_id="owner-1",
            message="2 recurring tasks created",
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
            data={"count": 2},
        )

        with capture_logs() as logs:
            await LoggingNotificationDispatcher().dispatch(advisory)

        assert logs[0]["log_level"] == "info"
        assert logs[0]["count"] == 2
