"""Custom exceptions for garden directory operations."""

from __future__ import annotations


class GardensError(Exception):
	"""Base class for gardens directory errors."""

	def __init__(self, detail: str, *, status_code: int = 400) -> None:
		super().__init__(detail)
		self.detail = detail
		self.status_code = status_code


class SourceFetchError(GardensError):
	"""Raised by upstream clients when the indexer or metadata host fails."""

	def __init__(self, source: str, detail: str = "source_unavailable", *, status_code: int = 503) -> None:
		super().__init__(detail, status_code=status_code)
		self.source = source


class GardenNotFound(GardensError):
	"""Raised when a routed garden cannot be resolved."""

	def __init__(self, garden_id: str) -> None:
		super().__init__("garden_not_found", status_code=404)
		self.garden_id = garden_id

	def __str__(self) -> str:
		return f"Garden {self.garden_id} not found"


class UnsupportedNetwork(GardensError):
	"""Raised when a chain id has no network configuration."""

	def __init__(self, chain_id: int) -> None:
		super().__init__("unsupported_network", status_code=400)
		self.chain_id = chain_id


__all__ = [
	"GardensError",
	"SourceFetchError",
	"GardenNotFound",
	"UnsupportedNetwork",
]
