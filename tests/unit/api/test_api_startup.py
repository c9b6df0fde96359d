"""Unit tests for API startup and shutdown hooks."""

from unittest.mock import AsyncMock, MagicMock, patch

from src.api.startup import record_service_startup, run_shutdown, run_startup


class TestRunStartup:
    """Tests for the startup sequence."""

    async def test_startup_order(self) -> None:
        calls: list[str] = []

        with (
            patch(
                "src.api.startup.configure_logging",
                side_effect=lambda: calls.append("logging"),
            ),
            patch(
                "src.api.startup.initialize_task_store",
                AsyncMock(side_effect=lambda: calls.append("store")),
            ),
            patch(
                "src.api.startup.record_service_startup",
                side_effect=lambda: calls.append("metrics"),
            ),
        ):
            await run_startup()

        assert calls == ["logging", "store", "metrics"]

    def test_record_service_startup(self) -> None:
        collector = MagicMock()

        with patch("src.api.startup.get_http_metrics", return_value=collector):
            record_service_startup("worker")

        collector.record_startup.assert_called_once_with("worker")


class TestRunShutdown:
    async def test_shutdown_releases_engine(self) -> None:
        with patch("src.api.startup.shutdown_task_engine", AsyncMock()) as shutdown:
            await run_shutdown()

        shutdown.assert_awaited_once()
