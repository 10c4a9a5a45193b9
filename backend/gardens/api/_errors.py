"""Error translation helpers for the gardens API."""

from __future__ import annotations

from fastapi import HTTPException, status

from gardens.domain import exceptions


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, exceptions.GardenNotFound):
		return HTTPException(status_code=exc.status_code, detail={"detail": exc.detail, "garden_id": exc.garden_id})
	if isinstance(exc, exceptions.GardensError):
		return HTTPException(status_code=exc.status_code, detail=exc.detail)
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal_error")
