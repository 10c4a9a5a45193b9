"""Response schemas for the gardens read API."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from gardens.domain.models import MergedGarden


class SortingOptionResponse(BaseModel):
	key: str
	label: str


class GardenListResponse(BaseModel):
	chain_id: int
	sort: str
	name: str = ""
	loading: bool = False
	total: int
	items: List[MergedGarden]


class ConnectedGardenResponse(BaseModel):
	chain_id: int
	garden: MergedGarden
	scopes: List[str]


class ReloadResponse(BaseModel):
	chain_id: int
	reloaded: int
