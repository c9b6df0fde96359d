"""Metrics endpoint for Prometheus scraping.

Exposes HTTP and task engine metrics in Prometheus exposition format.
"""

from fastapi import APIRouter, Response

from src.bootstrap.metrics import get_metrics_exporter

router = APIRouter(prefix="/v1", tags=["metrics"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Returns service metrics in Prometheus exposition format for scraping.",
    response_class=Response,
    responses={
        200: {
            "description": "Metrics in Prometheus format",
            "content": {"text/plain": {}},
        }
    },
)
async def get_metrics() -> Response:
    """Get operational metrics in Prometheus format.

    Returns:
        Response with metrics in Prometheus exposition format.

    Includes uptime, HTTP latency and error counters, and the task
    counters (activities by type, auto-splits, recurring generations,
    batch failures, budget advisories).
    """
    exporter = get_metrics_exporter()
    metrics_output = exporter.generate_metrics()
    return Response(
        content=metrics_output,
        media_type=exporter.content_type,
    )
