"""Directory aggregation: metadata + garden list + voided set + merge + name filter."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from gardens.domain.filters import FilterEngine, GardenFilters, SortingOption
from gardens.domain.merge import merge_gardens
from gardens.domain.models import GardenMetadata, GardenRecord, MergedGarden
from gardens.domain.tasks import KeyedTask
from gardens.obs import logging as obs_logging
from gardens.sources.directory import DirectorySource
from gardens.sources.metadata import MetadataSource

logger = logging.getLogger(__name__)

MetadataKey = tuple[int, int]
ListKey = tuple[int, tuple[tuple[str, str], ...], int]


class DirectoryAggregator:
	"""Expose the merged, filtered garden directory for the active network.

	Metadata and the garden list load independently; the aggregator is loading
	until both have committed. `reload()` bumps the refetch token, which is part
	of both task keys, so both fetches are re-issued even when the network and
	query filters are unchanged.
	"""

	def __init__(
		self,
		*,
		metadata_source: MetadataSource,
		directory_source: DirectorySource,
		chain_id: int,
		filters: Optional[GardenFilters] = None,
		filter_engine: Optional[FilterEngine] = None,
	) -> None:
		self._metadata_source = metadata_source
		self._directory_source = directory_source
		self._chain_id = chain_id
		self._filters = filters or GardenFilters()
		self._refetch_token = 0
		self._metadata: KeyedTask[MetadataKey, tuple[GardenMetadata, ...]] = KeyedTask(
			"metadata", self._load_metadata, initial=()
		)
		self._list: KeyedTask[ListKey, tuple[GardenRecord, ...]] = KeyedTask(
			"directory", self._load_list, initial=()
		)
		self._filter_engine = filter_engine or FilterEngine(initial=self._filters.internal.name)
		self._merge_inputs: tuple[object, object] | None = None
		self._merged: tuple[MergedGarden, ...] = ()

	@property
	def chain_id(self) -> int:
		return self._chain_id

	@property
	def filters(self) -> GardenFilters:
		return self._filters

	@property
	def refetch_token(self) -> int:
		return self._refetch_token

	@property
	def loading(self) -> bool:
		return not (self._metadata.loaded and self._list.loaded)

	@property
	def metadata_loaded(self) -> bool:
		return self._metadata.loaded

	@property
	def gardens_metadata(self) -> tuple[GardenMetadata, ...]:
		return self._metadata.value

	@property
	def records(self) -> tuple[GardenRecord, ...]:
		return self._list.value

	@property
	def merged(self) -> tuple[MergedGarden, ...]:
		"""Merged view, recomputed only when the list or metadata snapshot changes."""

		records = self._list.value
		metadata = self._metadata.value
		inputs = self._merge_inputs
		if inputs is None or inputs[0] is not records or inputs[1] is not metadata:
			self._merged = merge_gardens(records, metadata)
			self._merge_inputs = (records, metadata)
		return self._merged

	@property
	def gardens(self) -> Sequence[MergedGarden]:
		return self._filter_engine.apply(self.merged)

	@property
	def name_filter(self) -> str:
		return self._filter_engine.name_filter

	async def refresh(self) -> None:
		tokens = obs_logging.bind_context(chain_id=self._chain_id)
		try:
			await asyncio.gather(
				self._metadata.run(self._metadata_key()),
				self._list.run(self._list_key()),
			)
		finally:
			obs_logging.reset_context(tokens)

	async def reload(self) -> None:
		self._refetch_token += 1
		logger.info("gardens.directory.reload", extra={"chain_id": self._chain_id, "token": self._refetch_token})
		await self.refresh()

	async def set_sorting(self, sorting: SortingOption) -> None:
		if sorting == self._filters.query.sorting:
			return
		self._filters = self._filters.with_sorting(sorting)
		await self._list.run(self._list_key())

	async def set_network(self, chain_id: int) -> None:
		if chain_id == self._chain_id:
			return
		self._chain_id = chain_id
		self._metadata.reset()
		self._list.reset()
		await self.refresh()

	def set_name_filter(self, raw: str) -> None:
		self._filters = self._filters.with_name(raw)
		self._filter_engine.set_name_filter(raw)

	async def wait_filter_settled(self) -> str:
		return await self._filter_engine.wait_settled()

	async def close(self) -> None:
		self._filter_engine.close()
		await asyncio.gather(self._metadata.close(), self._list.close())

	def _metadata_key(self) -> MetadataKey:
		return (self._chain_id, self._refetch_token)

	def _list_key(self) -> ListKey:
		return (self._chain_id, self._filters.query.sorting.query_args, self._refetch_token)

	async def _load_metadata(self, key: MetadataKey) -> tuple[GardenMetadata, ...]:
		chain_id, _ = key
		return await self._metadata_source.fetch(chain_id)

	async def _load_list(self, key: ListKey) -> tuple[GardenRecord, ...]:
		chain_id, query_args, _ = key
		return await self._directory_source.fetch(chain_id, dict(query_args))


__all__ = ["DirectoryAggregator"]
