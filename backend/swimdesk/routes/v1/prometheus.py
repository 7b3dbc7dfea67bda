"""
Prometheus scrape endpoint.

Unauthenticated, like any scrape target; it only exposes counters and
timings, never tenant data.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/prometheus")
def get_prometheus_metrics() -> Response:
    return Response(content=prometheus_metrics.exposition(), media_type=prometheus_metrics.content_type)
