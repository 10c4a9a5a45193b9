"""Overlay curated metadata onto on-chain garden records."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from pydantic import ValidationError

from gardens.domain.addresses import addresses_equal
from gardens.domain.models import GardenMetadata, GardenRecord, MergedGarden, TokenInfo

logger = logging.getLogger(__name__)

# Keys the merge computes itself; a metadata document cannot shadow them.
_COMPUTED_KEYS = ("id", "address", "forum_url", "token", "wrappable_token")


def find_garden_metadata(
	garden_id: str,
	gardens_metadata: Optional[Iterable[GardenMetadata]],
) -> Optional[GardenMetadata]:
	for entry in gardens_metadata or ():
		if addresses_equal(entry.address, garden_id):
			return entry
	return None


def get_garden_forum_url(metadata: Optional[GardenMetadata]) -> Optional[str]:
	"""Build the forum link from the curated `forum` host or URL."""

	if metadata is None or not metadata.forum:
		return None
	forum = metadata.forum.strip()
	if not forum:
		return None
	if not forum.startswith(("http://", "https://")):
		forum = f"https://{forum}"
	return forum.rstrip("/")


def _merge_token(token: TokenInfo, metadata: Optional[GardenMetadata]) -> TokenInfo:
	if metadata is None or metadata.token_logo is None:
		return token
	return token.model_copy(update={"logo": metadata.token_logo})


def _merge_wrappable_token(
	wrappable_token: Optional[TokenInfo],
	metadata: Optional[GardenMetadata],
) -> Optional[TokenInfo]:
	if wrappable_token is None:
		return None
	overrides = (metadata.wrappable_token if metadata is not None else None) or {}
	if not overrides:
		return wrappable_token
	try:
		return TokenInfo.model_validate({**wrappable_token.model_dump(), **overrides})
	except ValidationError as exc:
		logger.warning(
			"gardens.merge.wrappable_override_invalid",
			extra={"garden": metadata.address if metadata is not None else None, "errors": exc.errors(include_url=False)},
		)
		return wrappable_token


def merge_garden_metadata(
	garden: GardenRecord,
	gardens_metadata: Optional[Sequence[GardenMetadata]],
) -> MergedGarden:
	"""Combine one record with its matching metadata entry, if any.

	Metadata values shadow record values for every overlapping key. The token
	keeps the record's descriptor with `logo` taken from `token_logo`; the
	wrappable token is shallow-merged only when the record has one, so a partial
	override replaces just the keys it names.
	"""

	metadata = find_garden_metadata(garden.id, gardens_metadata)
	fields: dict[str, Any] = garden.model_dump(exclude={"token", "wrappable_token"})
	if metadata is not None:
		fields.update(metadata.model_dump(exclude_unset=True, exclude={"wrappable_token"}))
	for key in _COMPUTED_KEYS:
		fields.pop(key, None)
	return MergedGarden(
		id=garden.id,
		address=garden.id,
		forum_url=get_garden_forum_url(metadata),
		token=_merge_token(garden.token, metadata),
		wrappable_token=_merge_wrappable_token(garden.wrappable_token, metadata),
		**fields,
	)


def merge_gardens(
	gardens: Iterable[GardenRecord],
	gardens_metadata: Optional[Sequence[GardenMetadata]],
) -> tuple[MergedGarden, ...]:
	return tuple(merge_garden_metadata(garden, gardens_metadata) for garden in gardens)


__all__ = [
	"find_garden_metadata",
	"get_garden_forum_url",
	"merge_garden_metadata",
	"merge_gardens",
]
