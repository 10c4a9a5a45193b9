"""Single garden lookup; every failure is reported as not found."""

from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from gardens.domain import exceptions
from gardens.domain.models import GardenRecord
from gardens.obs import metrics as obs_metrics
from gardens.sources.clients import IndexerClient

logger = logging.getLogger(__name__)
_SOURCE = "single"


class SingleGardenSource:
	def __init__(self, client: IndexerClient) -> None:
		self._client = client

	async def fetch(self, chain_id: int, garden_id: str) -> GardenRecord:
		started = time.perf_counter()
		try:
			record = await self._client.get_garden(chain_id, garden_id)
		except (exceptions.SourceFetchError, ValidationError) as exc:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.warning(
				"gardens.single.fetch_failed",
				extra={"chain_id": chain_id, "garden": garden_id, "detail": str(exc)},
			)
			raise exceptions.GardenNotFound(garden_id) from exc
		except Exception as exc:
			obs_metrics.record_fetch(_SOURCE, "error", time.perf_counter() - started)
			logger.exception("gardens.single.fetch_exception", extra={"chain_id": chain_id, "garden": garden_id})
			raise exceptions.GardenNotFound(garden_id) from exc
		if record is None:
			obs_metrics.record_fetch(_SOURCE, "missing", time.perf_counter() - started)
			raise exceptions.GardenNotFound(garden_id)
		obs_metrics.record_fetch(_SOURCE, "ok", time.perf_counter() - started)
		return record


__all__ = ["SingleGardenSource"]
