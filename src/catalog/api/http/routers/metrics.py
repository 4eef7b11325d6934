"""Metrics exposition endpoint."""

from fastapi import APIRouter, Depends
from starlette.responses import Response

from src.catalog.api.http.deps import get_metrics_sink
from src.catalog.core.services import MetricsSink

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def metrics(sink: MetricsSink = Depends(get_metrics_sink)) -> Response:
    """Prometheus text exposition; empty when metrics are disabled."""
    payload, content_type = sink.render()
    return Response(content=payload, media_type=content_type)
