"""Registry of garden addresses hidden from the directory."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from gardens.domain.addresses import normalize_address
from gardens.settings import settings


class VoidedRegistry:
	"""Read-only set of excluded garden ids per chain, loaded on first access."""

	def __init__(self, entries: Optional[Mapping[int, Iterable[str]]] = None) -> None:
		self._entries = entries
		self._by_network: dict[int, frozenset[str]] | None = None

	def _load(self) -> dict[int, frozenset[str]]:
		if self._by_network is None:
			source = self._entries if self._entries is not None else settings.voided_gardens
			self._by_network = {
				int(chain_id): frozenset(normalize_address(address) for address in addresses if address)
				for chain_id, addresses in source.items()
			}
		return self._by_network

	def excluded(self, chain_id: int) -> frozenset[str]:
		return self._load().get(int(chain_id), frozenset())

	def is_voided(self, chain_id: int, garden_id: str) -> bool:
		return normalize_address(garden_id) in self.excluded(chain_id)


__all__ = ["VoidedRegistry"]
