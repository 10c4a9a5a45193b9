"""Gardens directory API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from gardens.api._errors import to_http_error
from gardens.domain.filters import SORTING_OPTIONS, get_sorting
from gardens.schemas import dto
from gardens.services.registry import DirectoryRegistry

router = APIRouter(tags=["gardens"])


def get_registry(request: Request) -> DirectoryRegistry:
	return request.app.state.registry


@router.get("/gardens/sorting", response_model=list[dto.SortingOptionResponse])
async def list_sorting_options_endpoint() -> list[dto.SortingOptionResponse]:
	return [dto.SortingOptionResponse(key=option.key, label=option.label) for option in SORTING_OPTIONS]


@router.get("/gardens", response_model=dto.GardenListResponse)
async def list_gardens_endpoint(
	chain_id: Optional[int] = None,
	sort: Optional[str] = None,
	name: str = "",
	registry: DirectoryRegistry = Depends(get_registry),
) -> dto.GardenListResponse:
	try:
		sorting = get_sorting(sort)
		aggregator, items = await registry.list_gardens(chain_id, sorting=sorting, name=name)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.GardenListResponse(
		chain_id=aggregator.chain_id,
		sort=sorting.key,
		name=name,
		loading=aggregator.loading,
		total=len(items),
		items=list(items),
	)


@router.get("/gardens/{garden_id}", response_model=dto.ConnectedGardenResponse)
async def get_garden_endpoint(
	garden_id: str,
	chain_id: Optional[int] = None,
	registry: DirectoryRegistry = Depends(get_registry),
) -> dto.ConnectedGardenResponse:
	try:
		garden, scopes = await registry.get_garden(garden_id, chain_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ConnectedGardenResponse(chain_id=registry.networks.get(chain_id).chain_id, garden=garden, scopes=scopes)


@router.post("/gardens/reload", response_model=dto.ReloadResponse)
async def reload_gardens_endpoint(
	chain_id: Optional[int] = None,
	registry: DirectoryRegistry = Depends(get_registry),
) -> dto.ReloadResponse:
	try:
		reloaded = await registry.reload(chain_id)
		network = registry.networks.get(chain_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.ReloadResponse(chain_id=network.chain_id, reloaded=reloaded)
