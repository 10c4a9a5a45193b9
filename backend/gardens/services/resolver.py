"""Resolve the garden named by the current route."""

from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

from gardens.domain import exceptions
from gardens.domain.addresses import normalize_address
from gardens.domain.merge import merge_garden_metadata
from gardens.domain.models import GardenMetadata, MergedGarden, ResolutionResult
from gardens.domain.tasks import KeyedTask
from gardens.obs import logging as obs_logging
from gardens.obs import metrics as obs_metrics
from gardens.sources.single import SingleGardenSource

logger = logging.getLogger(__name__)

ResolveKey = tuple[int, str, int, tuple[GardenMetadata, ...]]


class ResolverState(str, enum.Enum):
	IDLE = "idle"
	LOADING = "loading"
	FOUND = "found"
	NOT_FOUND = "not_found"


class ConnectedResolver:
	"""Fetch and merge the routed garden once metadata is available.

	The single-garden fetch waits for metadata so the merge happens in one pass.
	Without an id, or while metadata is still loading, the resolver stays idle
	and reports a pending result; it never reports not-found in that case.
	A new refetch token re-issues the lookup even when the metadata is unchanged.
	"""

	def __init__(self, source: SingleGardenSource, *, chain_id: int) -> None:
		self._source = source
		self._chain_id = chain_id
		self._task: KeyedTask[ResolveKey, Optional[MergedGarden]] = KeyedTask(
			"connected_garden", self._load, initial=None
		)
		self._state = ResolverState.IDLE
		self._result = ResolutionResult.pending()
		self._garden_id: Optional[str] = None

	@property
	def state(self) -> ResolverState:
		return self._state

	@property
	def result(self) -> ResolutionResult:
		return self._result

	@property
	def garden_id(self) -> Optional[str]:
		return self._garden_id

	@property
	def loading(self) -> bool:
		return self._state is ResolverState.LOADING

	def set_network(self, chain_id: int) -> None:
		if chain_id != self._chain_id:
			self._chain_id = chain_id
			self._idle()

	async def resolve(
		self,
		garden_id: Optional[str],
		gardens_metadata: Sequence[GardenMetadata],
		*,
		metadata_loaded: bool,
		refetch_token: int = 0,
	) -> ResolutionResult:
		self._garden_id = garden_id
		if not garden_id or not metadata_loaded:
			self._idle()
			return self._result

		key: ResolveKey = (self._chain_id, normalize_address(garden_id), refetch_token, tuple(gardens_metadata))
		if self._task.key != key:
			self._state = ResolverState.LOADING
			self._result = ResolutionResult.pending()

		tokens = obs_logging.bind_context(chain_id=self._chain_id, garden_id=garden_id)
		try:
			committed = await self._task.run(key)
		except exceptions.GardenNotFound:
			self._state = ResolverState.NOT_FOUND
			self._result = ResolutionResult.not_found()
			obs_metrics.RESOLUTIONS.labels(outcome="not_found").inc()
			logger.info("gardens.resolver.not_found", extra={"garden": garden_id})
			return self._result
		finally:
			obs_logging.reset_context(tokens)

		if not committed or self._task.value is None:
			return self._result
		self._state = ResolverState.FOUND
		self._result = ResolutionResult.found(self._task.value)
		obs_metrics.RESOLUTIONS.labels(outcome="found").inc()
		return self._result

	def require_found(self) -> MergedGarden:
		"""Return the connected garden or raise `GardenNotFound` once resolution failed."""

		if self._result.is_found and self._result.garden is not None:
			return self._result.garden
		if self._state is ResolverState.NOT_FOUND:
			raise exceptions.GardenNotFound(self._garden_id or "")
		raise LookupError("garden resolution still pending")

	async def close(self) -> None:
		await self._task.close()

	def _idle(self) -> None:
		self._task.reset()
		self._state = ResolverState.IDLE
		self._result = ResolutionResult.pending()

	async def _load(self, key: ResolveKey) -> MergedGarden:
		chain_id, garden_id, _, gardens_metadata = key
		record = await self._source.fetch(chain_id, garden_id)
		return merge_garden_metadata(record, gardens_metadata)


__all__ = ["ConnectedResolver", "ResolverState"]
