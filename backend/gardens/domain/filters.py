"""Directory filters: sorting query args, name matching and debounced input."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence

from gardens.domain.models import MergedGarden
from gardens.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SortingOption:
	key: str
	label: str
	query_args: tuple[tuple[str, str], ...]

	def as_query_args(self) -> dict[str, str]:
		return dict(self.query_args)


SORTING_OPTIONS: tuple[SortingOption, ...] = (
	SortingOption("most_active", "Most active", (("orderBy", "proposalCount"), ("orderDirection", "desc"))),
	SortingOption("most_supporters", "Most supporters", (("orderBy", "supporterCount"), ("orderDirection", "desc"))),
	SortingOption("newest", "Newest", (("orderBy", "createdAt"), ("orderDirection", "desc"))),
	SortingOption("oldest", "Oldest", (("orderBy", "createdAt"), ("orderDirection", "asc"))),
)
DEFAULT_SORTING = SORTING_OPTIONS[0]


def get_sorting(key: Optional[str]) -> SortingOption:
	if not key:
		return DEFAULT_SORTING
	for option in SORTING_OPTIONS:
		if option.key == key:
			return option
	raise ValueError(f"unknown sorting option: {key}")


@dataclass(frozen=True, slots=True)
class QueryFilters:
	"""Filters forwarded to the indexer; a change requires a refetch."""

	sorting: SortingOption = DEFAULT_SORTING


@dataclass(frozen=True, slots=True)
class InternalFilters:
	"""Filters applied client-side after the fetch."""

	name: str = ""


@dataclass(frozen=True, slots=True)
class GardenFilters:
	query: QueryFilters = field(default_factory=QueryFilters)
	internal: InternalFilters = field(default_factory=InternalFilters)

	def with_name(self, name: str) -> "GardenFilters":
		return replace(self, internal=InternalFilters(name=name))

	def with_sorting(self, sorting: SortingOption) -> "GardenFilters":
		return replace(self, query=QueryFilters(sorting=sorting))


def normalize_filter(value: str | None) -> str:
	"""Collapse whitespace, trim and lower-case a name filter."""

	if not value:
		return ""
	return " ".join(value.strip().split()).lower()


def matches_name_filter(name_filter: str, garden: MergedGarden) -> bool:
	needle = normalize_filter(name_filter)
	if not needle:
		return True
	return needle in normalize_filter(garden.display_name)


def apply_name_filter(gardens: Sequence[MergedGarden], name_filter: str | None) -> Sequence[MergedGarden]:
	"""Keep gardens whose display name contains the filter, preserving order.

	An empty filter returns the input sequence itself.
	"""

	if not normalize_filter(name_filter):
		return gardens
	return tuple(garden for garden in gardens if matches_name_filter(name_filter or "", garden))


class Debouncer:
	"""Coalesce bursts of input into one settled value after a quiet period."""

	def __init__(
		self,
		delay: float,
		on_settle: Optional[Callable[[str], None]] = None,
		*,
		initial: str = "",
	) -> None:
		self._delay = max(0.0, delay)
		self._on_settle = on_settle
		self._handle: Optional[asyncio.TimerHandle] = None
		self._raw = initial
		self._settled_value = initial
		self._settled = asyncio.Event()
		self._settled.set()
		self._closed = False

	@property
	def value(self) -> str:
		return self._settled_value

	@property
	def pending(self) -> bool:
		return self._handle is not None

	def push(self, raw: str) -> None:
		if self._closed:
			return
		self._raw = raw
		self._cancel()
		if self._delay <= 0:
			self._fire()
			return
		self._settled.clear()
		loop = asyncio.get_running_loop()
		self._handle = loop.call_later(self._delay, self._fire)

	def flush(self) -> None:
		"""Settle the latest input immediately."""

		if self._handle is not None:
			self._cancel()
			self._fire()

	async def wait_settled(self) -> str:
		await self._settled.wait()
		return self._settled_value

	def close(self) -> None:
		self._closed = True
		self._cancel()
		self._settled.set()

	def _cancel(self) -> None:
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None

	def _fire(self) -> None:
		self._handle = None
		changed = self._raw != self._settled_value
		self._settled_value = self._raw
		self._settled.set()
		if changed and self._on_settle is not None:
			try:
				self._on_settle(self._settled_value)
			except Exception:
				logger.exception("gardens.filters.settle_callback_failed")


class FilterEngine:
	"""Debounced name filter over a merged garden collection."""

	def __init__(
		self,
		*,
		delay: Optional[float] = None,
		on_settle: Optional[Callable[[str], None]] = None,
		initial: str = "",
	) -> None:
		self._debouncer = Debouncer(
			settings.filter_debounce_seconds if delay is None else delay,
			on_settle,
			initial=initial,
		)

	@property
	def name_filter(self) -> str:
		return self._debouncer.value

	@property
	def pending(self) -> bool:
		return self._debouncer.pending

	def set_name_filter(self, raw: str) -> None:
		self._debouncer.push(raw)

	def flush(self) -> None:
		self._debouncer.flush()

	async def wait_settled(self) -> str:
		return await self._debouncer.wait_settled()

	def apply(self, gardens: Sequence[MergedGarden]) -> Sequence[MergedGarden]:
		return apply_name_filter(gardens, self._debouncer.value)

	def close(self) -> None:
		self._debouncer.close()


__all__ = [
	"SortingOption",
	"SORTING_OPTIONS",
	"DEFAULT_SORTING",
	"get_sorting",
	"QueryFilters",
	"InternalFilters",
	"GardenFilters",
	"normalize_filter",
	"matches_name_filter",
	"apply_name_filter",
	"Debouncer",
	"FilterEngine",
]
