"""
service_lifecycle/api/routes/metrics.py
Exposes Prometheus-compatible metrics endpoint.
"""

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ...core.metrics import render_prometheus_metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def metrics(request: Request):
    """Prometheus scrape endpoint."""
    lifecycle = getattr(request.app.state, "lifecycle", None)
    uptime = lifecycle.uptime if lifecycle is not None else 0.0
    data = render_prometheus_metrics(uptime)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
