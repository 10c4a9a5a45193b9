"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from gardens.obs import logging as obs_logging
from gardens.obs import middleware
from gardens.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Configure logging once per process and instrument each app once."""
	global _logging_configured
	if not settings.obs_enabled or getattr(app.state, "obs_initialised", False):
		return
	if not _logging_configured:
		obs_logging.configure_logging()
		_logging_configured = True
	middleware.install(app)
	app.state.obs_initialised = True


__all__ = ["init"]
