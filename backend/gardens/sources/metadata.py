"""Curated metadata source; failures degrade to an empty collection."""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from gardens.domain import exceptions
from gardens.domain.models import GardenMetadata
from gardens.obs import metrics as obs_metrics
from gardens.sources.clients import MetadataClient

logger = logging.getLogger(__name__)
_SOURCE = "metadata"


class MetadataSource:
	"""Load the per-network metadata document and parse its `gardens` entries."""

	def __init__(self, client: MetadataClient) -> None:
		self._client = client

	async def fetch(self, chain_id: int) -> tuple[GardenMetadata, ...]:
		started = time.perf_counter()
		try:
			document = await self._client.fetch_metadata_document(chain_id)
			raw_entries = document.get("gardens") or document.get("organizations") or []
			entries = tuple(self._parse(chain_id, raw_entries))
		except exceptions.SourceFetchError as exc:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.warning(
				"gardens.metadata.fetch_failed",
				extra={"chain_id": chain_id, "detail": exc.detail},
			)
			return ()
		except Exception:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.exception("gardens.metadata.fetch_exception", extra={"chain_id": chain_id})
			return ()
		obs_metrics.record_fetch(_SOURCE, "ok", time.perf_counter() - started)
		return entries

	def _parse(self, chain_id: int, raw_entries: list) -> list[GardenMetadata]:
		parsed: list[GardenMetadata] = []
		for raw in raw_entries:
			try:
				parsed.append(GardenMetadata.model_validate(raw))
			except ValidationError:
				logger.warning(
					"gardens.metadata.entry_invalid",
					extra={"chain_id": chain_id, "entry": raw},
				)
		return parsed


__all__ = ["MetadataSource"]
