"""Domain models for on-chain garden records, curated metadata and merged views."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TokenInfo(BaseModel):
	"""ERC20 descriptor as reported by the indexer."""

	id: str
	name: Optional[str] = None
	symbol: Optional[str] = None
	decimals: Optional[int] = None
	logo: Optional[str] = None

	model_config = ConfigDict(frozen=True, extra="allow")


class GardenRecord(BaseModel):
	"""On-chain garden as listed by the indexer."""

	id: str
	chain_id: Optional[int] = Field(default=None, alias="chainId")
	token: TokenInfo
	wrappable_token: Optional[TokenInfo] = Field(default=None, alias="wrappableToken")

	model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class GardenMetadata(BaseModel):
	"""Curated display attributes for one garden, keyed by its address."""

	address: str = Field(validation_alias=AliasChoices("address", "id"))
	name: Optional[str] = None
	description: Optional[str] = None
	logo: Optional[str] = None
	token_logo: Optional[str] = None
	wrappable_token: Optional[dict[str, Any]] = Field(default=None, alias="wrappableToken")
	forum: Optional[str] = None
	links: Any = None

	model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class MergedGarden(BaseModel):
	"""A garden record with its metadata overlay applied."""

	id: str
	address: str
	chain_id: Optional[int] = None
	token: TokenInfo
	wrappable_token: Optional[TokenInfo] = None
	forum_url: Optional[str] = None
	name: Optional[str] = None
	description: Optional[str] = None
	logo: Optional[str] = None
	token_logo: Optional[str] = None
	links: Any = None

	model_config = ConfigDict(frozen=True, extra="allow")

	@property
	def display_name(self) -> str:
		return self.name or self.token.name or ""


class ResolutionStatus(str, enum.Enum):
	PENDING = "pending"
	FOUND = "found"
	NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class ResolutionResult:
	"""Outcome of resolving the routed garden."""

	status: ResolutionStatus
	garden: Optional[MergedGarden] = None

	@classmethod
	def pending(cls) -> "ResolutionResult":
		return cls(ResolutionStatus.PENDING)

	@classmethod
	def found(cls, garden: MergedGarden) -> "ResolutionResult":
		return cls(ResolutionStatus.FOUND, garden)

	@classmethod
	def not_found(cls) -> "ResolutionResult":
		return cls(ResolutionStatus.NOT_FOUND)

	@property
	def is_found(self) -> bool:
		return self.status is ResolutionStatus.FOUND

	@property
	def is_not_found(self) -> bool:
		return self.status is ResolutionStatus.NOT_FOUND


__all__ = [
	"TokenInfo",
	"GardenRecord",
	"GardenMetadata",
	"MergedGarden",
	"ResolutionStatus",
	"ResolutionResult",
]
