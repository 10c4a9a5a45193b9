"""On-chain garden list source with voided gardens removed."""

from __future__ import annotations

import logging
import time
from typing import Mapping

from gardens.domain import exceptions
from gardens.domain.models import GardenRecord
from gardens.domain.voided import VoidedRegistry
from gardens.obs import metrics as obs_metrics
from gardens.sources.clients import IndexerClient

logger = logging.getLogger(__name__)
_SOURCE = "directory"


class DirectorySource:
	def __init__(self, client: IndexerClient, voided: VoidedRegistry) -> None:
		self._client = client
		self._voided = voided

	async def fetch(self, chain_id: int, query_args: Mapping[str, str]) -> tuple[GardenRecord, ...]:
		started = time.perf_counter()
		try:
			records = await self._client.list_gardens(chain_id, query_args)
		except exceptions.SourceFetchError as exc:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.warning(
				"gardens.directory.fetch_failed",
				extra={"chain_id": chain_id, "detail": exc.detail},
			)
			return ()
		except Exception:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.exception("gardens.directory.fetch_exception", extra={"chain_id": chain_id})
			return ()
		obs_metrics.record_fetch(_SOURCE, "ok", time.perf_counter() - started)

		kept = tuple(record for record in records if not self._voided.is_voided(chain_id, record.id))
		dropped = len(records) - len(kept)
		if dropped:
			obs_metrics.VOIDED_DROPPED.labels(chain_id=str(chain_id)).inc(dropped)
		return kept


__all__ = ["DirectorySource"]
