from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from pipeline_app.observability.metrics import HttpMetrics
from pipeline_app.services.dependencies import get_http_metrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics(http_metrics: HttpMetrics = Depends(get_http_metrics)) -> Response:
    return Response(content=http_metrics.render(), media_type=http_metrics.content_type)
