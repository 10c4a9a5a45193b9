"""Compose the directory, the connected garden and its scoped collaborators."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from gardens.domain import exceptions
from gardens.domain.filters import InternalFilters, QueryFilters, SortingOption
from gardens.domain.models import GardenMetadata, MergedGarden, ResolutionStatus
from gardens.services.cascade import ContextCascade
from gardens.services.directory import DirectoryAggregator
from gardens.services.resolver import ConnectedResolver

logger = logging.getLogger(__name__)

_GARDEN_ROUTE = re.compile(r"^/garden/(?P<dao_id>[^/?#]+)")


def match_garden_route(path: Optional[str]) -> Optional[str]:
	"""Return the garden id for `/garden/:daoId` paths (and their sub-routes)."""

	if not path:
		return None
	match = _GARDEN_ROUTE.match(path)
	return match.group("dao_id") if match else None


@dataclass(frozen=True, slots=True)
class GardensState:
	connected_garden: Optional[MergedGarden]
	internal_filters: InternalFilters
	external_filters: QueryFilters
	gardens: Sequence[MergedGarden]
	gardens_metadata: tuple[GardenMetadata, ...]
	loading: bool


class GardensProvider:
	"""Owns the resolver and the cascade; shares the aggregator it is given.

	`close()` tears down the resolver and unmounts scoped collaborators. The
	aggregator is closed by whoever created it.
	"""

	def __init__(
		self,
		*,
		aggregator: DirectoryAggregator,
		resolver: ConnectedResolver,
		cascade: Optional[ContextCascade] = None,
	) -> None:
		self._aggregator = aggregator
		self._resolver = resolver
		self._cascade = cascade or ContextCascade()
		self._route_garden_id: Optional[str] = None

	@property
	def aggregator(self) -> DirectoryAggregator:
		return self._aggregator

	@property
	def resolver(self) -> ConnectedResolver:
		return self._resolver

	@property
	def cascade(self) -> ContextCascade:
		return self._cascade

	@property
	def route_garden_id(self) -> Optional[str]:
		return self._route_garden_id

	@property
	def loading(self) -> bool:
		return self._aggregator.loading or self._connected_loading()

	async def start(self, path: Optional[str] = None) -> None:
		self._route_garden_id = match_garden_route(path)
		await self._aggregator.refresh()
		await self._sync_connected()

	async def navigate(self, path: Optional[str]) -> GardensState:
		self._route_garden_id = match_garden_route(path)
		await self._sync_connected()
		return self.state()

	async def reload(self) -> None:
		await self._aggregator.reload()
		await self._sync_connected()

	async def set_network(self, chain_id: int) -> None:
		self._resolver.set_network(chain_id)
		await self._cascade.unmount()
		await self._aggregator.set_network(chain_id)
		await self._sync_connected()

	async def set_sorting(self, sorting: SortingOption) -> None:
		await self._aggregator.set_sorting(sorting)

	def set_name_filter(self, raw: str) -> None:
		self._aggregator.set_name_filter(raw)

	def state(self) -> GardensState:
		"""Snapshot the published state, raising `GardenNotFound` for an unresolvable route."""

		result = self._resolver.result
		connected = result.garden if result.is_found else None
		if self._route_garden_id and connected is None and not self._connected_loading():
			raise exceptions.GardenNotFound(self._route_garden_id)
		return GardensState(
			connected_garden=connected,
			internal_filters=self._aggregator.filters.internal,
			external_filters=self._aggregator.filters.query,
			gardens=self._aggregator.gardens,
			gardens_metadata=self._aggregator.gardens_metadata,
			loading=self.loading,
		)

	async def close(self) -> None:
		await self._cascade.unmount()
		await self._resolver.close()

	def _connected_loading(self) -> bool:
		return bool(self._route_garden_id) and self._resolver.result.status is ResolutionStatus.PENDING

	async def _sync_connected(self) -> None:
		result = await self._resolver.resolve(
			self._route_garden_id,
			self._aggregator.gardens_metadata,
			metadata_loaded=self._aggregator.metadata_loaded,
			refetch_token=self._aggregator.refetch_token,
		)
		await self._cascade.sync(result)


__all__ = ["GardensProvider", "GardensState", "match_garden_route"]
