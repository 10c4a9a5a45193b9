"""Dependency-keyed fetch tasks whose completions are tagged with a generation."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from gardens.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

K = TypeVar("K")
T = TypeVar("T")

_UNSET = object()


class KeyedTask(Generic[K, T]):
	"""Hold the latest result of `fetch(key)`.

	Each issued fetch gets a new generation. Only the completion of the most
	recently issued generation is committed; anything older, and anything that
	finishes after `close()`, is discarded. Calling `run` again with the key that
	is already committed returns the memoized value without a new fetch.
	"""

	def __init__(self, name: str, fetch: Callable[[K], Awaitable[T]], *, initial: T) -> None:
		self.name = name
		self._fetch = fetch
		self._initial = initial
		self._value: T = initial
		self._key: object = _UNSET
		self._generation = 0
		self._committed_generation = 0
		self._task: Optional[asyncio.Future[T]] = None
		self._closed = False

	@property
	def value(self) -> T:
		return self._value

	@property
	def key(self) -> Optional[K]:
		return None if self._key is _UNSET else self._key  # type: ignore[return-value]

	@property
	def generation(self) -> int:
		return self._generation

	@property
	def loading(self) -> bool:
		return self._task is not None and self._committed_generation != self._generation

	@property
	def loaded(self) -> bool:
		return self._committed_generation != 0 and not self.loading

	@property
	def closed(self) -> bool:
		return self._closed

	def is_current(self, generation: int) -> bool:
		return not self._closed and generation == self._generation

	async def run(self, key: K, *, force: bool = False) -> bool:
		"""Fetch for `key` and return True if the result was committed."""

		if self._closed:
			return False
		task = self._task
		same_key = not force and key == self._key and task is not None
		if same_key and self._committed_generation == self._generation:
			return True
		if same_key:
			generation = self._generation
		else:
			generation, task = self._start(key)

		try:
			result = await asyncio.shield(task)
		except asyncio.CancelledError:
			if task.cancelled():
				self._discard(generation)
				return False
			raise
		except Exception:
			if not self.is_current(generation):
				self._discard(generation)
				return False
			self._task = None
			self._key = _UNSET
			raise

		if not self.is_current(generation):
			self._discard(generation)
			return False
		if self._committed_generation != generation:
			self._value = result
			self._committed_generation = generation
		return True

	def reset(self) -> None:
		"""Drop the committed value and orphan any in-flight fetch."""

		self._generation += 1
		self._committed_generation = 0
		self._value = self._initial
		self._key = _UNSET
		self._task = None

	async def close(self) -> None:
		self._closed = True
		task = self._task
		self._task = None
		if task is not None and not task.done():
			task.cancel()
			with suppress(asyncio.CancelledError, Exception):
				await task

	def _start(self, key: K) -> tuple[int, asyncio.Future[T]]:
		self._generation += 1
		self._key = key
		self._task = asyncio.ensure_future(self._fetch(key))
		return self._generation, self._task

	def _discard(self, generation: int) -> None:
		obs_metrics.inc_stale_discard(self.name)
		logger.debug(
			"gardens.task.stale_discarded",
			extra={"task": self.name, "generation": generation, "current": self._generation},
		)


__all__ = ["KeyedTask"]
