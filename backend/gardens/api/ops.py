"""Operations endpoints: liveness and Prometheus metrics."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from gardens.settings import settings

router = APIRouter(prefix="", tags=["ops"])


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name}


@router.get("/metrics")
async def prometheus_metrics() -> Response:
	if not (settings.obs_metrics_public or settings.is_dev()):
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
