"""Process-wide directory registry backing the read API."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from gardens.domain import exceptions
from gardens.domain.filters import DEFAULT_SORTING, GardenFilters, SortingOption, apply_name_filter
from gardens.domain.models import MergedGarden
from gardens.domain.networks import NetworkConfig
from gardens.domain.voided import VoidedRegistry
from gardens.services.cascade import ContextCascade, default_scope_chain
from gardens.services.directory import DirectoryAggregator
from gardens.services.provider import GardensProvider
from gardens.services.resolver import ConnectedResolver
from gardens.sources.clients import IndexerClient, MetadataClient
from gardens.sources.directory import DirectorySource
from gardens.sources.metadata import MetadataSource
from gardens.sources.single import SingleGardenSource

logger = logging.getLogger(__name__)


class DirectoryRegistry:
	"""Keep one aggregator per (network, sorting) so repeated reads hit memory."""

	def __init__(
		self,
		*,
		indexer: IndexerClient,
		metadata_client: MetadataClient,
		networks: Optional[NetworkConfig] = None,
		voided: Optional[VoidedRegistry] = None,
	) -> None:
		self._networks = networks or NetworkConfig()
		self._metadata_source = MetadataSource(metadata_client)
		self._directory_source = DirectorySource(indexer, voided or VoidedRegistry())
		self._single_source = SingleGardenSource(indexer)
		self._aggregators: dict[tuple[int, str], DirectoryAggregator] = {}

	@property
	def networks(self) -> NetworkConfig:
		return self._networks

	def aggregator(self, chain_id: Optional[int] = None, sorting: SortingOption = DEFAULT_SORTING) -> DirectoryAggregator:
		network = self._networks.get(chain_id)
		key = (network.chain_id, sorting.key)
		aggregator = self._aggregators.get(key)
		if aggregator is None:
			aggregator = DirectoryAggregator(
				metadata_source=self._metadata_source,
				directory_source=self._directory_source,
				chain_id=network.chain_id,
				filters=GardenFilters().with_sorting(sorting),
			)
			self._aggregators[key] = aggregator
		return aggregator

	async def list_gardens(
		self,
		chain_id: Optional[int] = None,
		*,
		sorting: SortingOption = DEFAULT_SORTING,
		name: Optional[str] = None,
	) -> tuple[DirectoryAggregator, Sequence[MergedGarden]]:
		aggregator = self.aggregator(chain_id, sorting)
		await aggregator.refresh()
		return aggregator, apply_name_filter(aggregator.merged, name)

	async def get_garden(self, garden_id: str, chain_id: Optional[int] = None) -> tuple[MergedGarden, list[str]]:
		"""Resolve one garden; raises `GardenNotFound` when it cannot be resolved."""

		aggregator = self.aggregator(chain_id)
		await aggregator.refresh()
		scopes = default_scope_chain()
		provider = GardensProvider(
			aggregator=aggregator,
			resolver=ConnectedResolver(self._single_source, chain_id=aggregator.chain_id),
			cascade=ContextCascade(scopes),
		)
		try:
			state = await provider.navigate(f"/garden/{garden_id}")
			mounted = [scope.name for scope in scopes if scope.garden is not None]
		finally:
			await provider.close()
		if state.connected_garden is None:
			raise exceptions.GardenNotFound(garden_id)
		return state.connected_garden, mounted

	async def reload(self, chain_id: Optional[int] = None) -> int:
		network = self._networks.get(chain_id)
		targets = [agg for (cid, _), agg in self._aggregators.items() if cid == network.chain_id]
		if not targets:
			targets = [self.aggregator(network.chain_id)]
		await asyncio.gather(*(aggregator.reload() for aggregator in targets))
		return len(targets)

	async def close(self) -> None:
		aggregators = list(self._aggregators.values())
		self._aggregators.clear()
		await asyncio.gather(*(aggregator.close() for aggregator in aggregators))


__all__ = ["DirectoryRegistry"]
