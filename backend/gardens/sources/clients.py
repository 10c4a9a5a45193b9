"""HTTP clients for the gardens subgraph and the curated metadata host."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import httpx

from gardens.domain import exceptions
from gardens.domain.models import GardenRecord
from gardens.domain.networks import NetworkConfig
from gardens.settings import settings

logger = logging.getLogger(__name__)

_GARDEN_FIELDS = """
	id
	active
	createdAt
	proposalCount
	supporterCount
	token { id name symbol decimals }
	wrappableToken { id name symbol decimals }
"""

_LIST_QUERY = (
	"query Gardens($first: Int!, $skip: Int!, $orderBy: String, $orderDirection: String) {"
	" organizations(first: $first, skip: $skip, orderBy: $orderBy, orderDirection: $orderDirection,"
	" where: { active: true }) {" + _GARDEN_FIELDS + "} }"
)

_SINGLE_QUERY = "query Garden($id: ID!) { organization(id: $id) {" + _GARDEN_FIELDS + "} }"


class IndexerClient(Protocol):
	async def list_gardens(self, chain_id: int, query_args: Mapping[str, str]) -> list[GardenRecord]:
		...

	async def get_garden(self, chain_id: int, garden_id: str) -> Optional[GardenRecord]:
		...


class MetadataClient(Protocol):
	async def fetch_metadata_document(self, chain_id: int) -> dict[str, Any]:
		...


class SubgraphIndexerClient:
	"""GraphQL-over-HTTP reader for the gardens subgraph."""

	def __init__(
		self,
		http: httpx.AsyncClient,
		*,
		networks: Optional[NetworkConfig] = None,
		page_size: Optional[int] = None,
		timeout: Optional[float] = None,
	) -> None:
		self._http = http
		self._networks = networks or NetworkConfig()
		self._page_size = page_size or settings.indexer_page_size
		self._timeout = timeout or settings.http_timeout_seconds

	async def list_gardens(self, chain_id: int, query_args: Mapping[str, str]) -> list[GardenRecord]:
		gardens: list[GardenRecord] = []
		skip = 0
		while True:
			variables: dict[str, Any] = {"first": self._page_size, "skip": skip, **dict(query_args)}
			data = await self._execute(chain_id, _LIST_QUERY, variables)
			page = data.get("organizations") or []
			gardens.extend(self._to_record(chain_id, item) for item in page)
			if len(page) < self._page_size:
				return gardens
			skip += self._page_size

	async def get_garden(self, chain_id: int, garden_id: str) -> Optional[GardenRecord]:
		data = await self._execute(chain_id, _SINGLE_QUERY, {"id": garden_id.lower()})
		item = data.get("organization")
		if not item:
			return None
		return self._to_record(chain_id, item)

	async def _execute(self, chain_id: int, query: str, variables: dict[str, Any]) -> dict[str, Any]:
		url = self._networks.subgraph_url(chain_id)
		try:
			response = await self._http.post(
				url,
				json={"query": query, "variables": variables},
				timeout=self._timeout,
			)
			response.raise_for_status()
			payload = response.json()
		except (httpx.HTTPError, ValueError) as exc:
			raise exceptions.SourceFetchError("indexer") from exc
		errors = payload.get("errors") if isinstance(payload, dict) else None
		if errors:
			logger.warning("gardens.indexer.graphql_errors", extra={"chain_id": chain_id, "errors": errors})
			raise exceptions.SourceFetchError("indexer", "indexer_query_failed")
		data = payload.get("data") if isinstance(payload, dict) else None
		if not isinstance(data, dict):
			raise exceptions.SourceFetchError("indexer", "indexer_bad_payload")
		return data

	@staticmethod
	def _to_record(chain_id: int, item: Mapping[str, Any]) -> GardenRecord:
		return GardenRecord.model_validate({**item, "chainId": chain_id})


class GithubMetadataClient:
	"""Fetch the curated per-network gardens document from the content host."""

	def __init__(
		self,
		http: httpx.AsyncClient,
		*,
		networks: Optional[NetworkConfig] = None,
		url_template: Optional[str] = None,
		timeout: Optional[float] = None,
	) -> None:
		self._http = http
		self._networks = networks or NetworkConfig()
		self._url_template = url_template or settings.metadata_url_template
		self._timeout = timeout or settings.http_timeout_seconds

	def document_url(self, chain_id: int) -> str:
		network = self._networks.get(chain_id)
		return self._url_template.format(file=network.metadata_file, chain_id=chain_id, network=network.type)

	async def fetch_metadata_document(self, chain_id: int) -> dict[str, Any]:
		url = self.document_url(chain_id)
		try:
			response = await self._http.get(url, timeout=self._timeout)
			response.raise_for_status()
			document = response.json()
		except (httpx.HTTPError, ValueError) as exc:
			raise exceptions.SourceFetchError("metadata") from exc
		if not isinstance(document, dict):
			raise exceptions.SourceFetchError("metadata", "metadata_bad_payload")
		return document


__all__ = ["IndexerClient", "MetadataClient", "SubgraphIndexerClient", "GithubMetadataClient"]
