"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gardens import obs
from gardens.api import ops, routes
from gardens.domain.networks import NetworkConfig
from gardens.services.registry import DirectoryRegistry
from gardens.settings import settings
from gardens.sources.clients import GithubMetadataClient, SubgraphIndexerClient


def build_registry(http: httpx.AsyncClient, *, networks: Optional[NetworkConfig] = None) -> DirectoryRegistry:
	networks = networks or NetworkConfig()
	return DirectoryRegistry(
		indexer=SubgraphIndexerClient(http, networks=networks),
		metadata_client=GithubMetadataClient(http, networks=networks),
		networks=networks,
	)


def create_app(registry: Optional[DirectoryRegistry] = None) -> FastAPI:
	@asynccontextmanager
	async def lifespan(app: FastAPI):
		if registry is not None:
			yield
			return
		async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as http:
			app.state.registry = build_registry(http)
			try:
				yield
			finally:
				await app.state.registry.close()

	app = FastAPI(title="Gardens directory", lifespan=lifespan)
	if registry is not None:
		app.state.registry = registry
	if settings.cors_allow_origins:
		app.add_middleware(
			CORSMiddleware,
			allow_origins=list(settings.cors_allow_origins),
			allow_methods=["GET", "POST"],
			allow_headers=["*"],
		)
	app.include_router(ops.router)
	app.include_router(routes.router, prefix=settings.api_prefix or "")
	obs.init(app)
	return app


app = create_app()
