import json

import httpx
import pytest

from gardens.domain import exceptions
from gardens.domain.networks import Network, NetworkConfig
from gardens.domain.voided import VoidedRegistry
from gardens.sources.clients import GithubMetadataClient, SubgraphIndexerClient
from gardens.sources.directory import DirectorySource
from gardens.sources.metadata import MetadataSource
from gardens.sources.single import SingleGardenSource

_NETWORKS = NetworkConfig(
	{
		100: Network(
			chain_id=100,
			name="xDai",
			type="xdai",
			subgraph_url="https://indexer.test/gardens-xdai",
			metadata_file="xdai.json",
		)
	},
	subgraph_overrides={},
	default_chain_id=100,
)


def _org(garden_id: str) -> dict:
	return {
		"id": garden_id,
		"active": True,
		"token": {"id": f"{garden_id}-t", "name": "Honey", "symbol": "HNY", "decimals": "18"},
		"wrappableToken": None,
	}


@pytest.mark.asyncio
async def test_metadata_source_parses_entries(stub_metadata_client):
	source = MetadataSource(stub_metadata_client)

	entries = await source.fetch(100)

	assert isinstance(entries, tuple)
	assert entries[0].address == "0xa"
	assert entries[0].token_logo == "logoA.png"


@pytest.mark.asyncio
async def test_metadata_source_degrades_to_empty_on_failure(stub_metadata_client, caplog):
	stub_metadata_client.fail = True
	source = MetadataSource(stub_metadata_client)

	with caplog.at_level("WARNING"):
		entries = await source.fetch(100)

	assert entries == ()
	assert any("gardens.metadata.fetch_failed" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_metadata_source_skips_invalid_entries(stub_metadata_client):
	stub_metadata_client.documents[100] = {"gardens": [{"name": "no address"}, {"address": "0xb"}]}
	source = MetadataSource(stub_metadata_client)

	entries = await source.fetch(100)

	assert [entry.address for entry in entries] == ["0xb"]


@pytest.mark.asyncio
async def test_metadata_source_keeps_entries_with_list_links(stub_metadata_client):
	stub_metadata_client.documents[100] = {"gardens": [{"address": "0xa", "links": ["https://1hive.org"]}]}

	entries = await MetadataSource(stub_metadata_client).fetch(100)

	assert [entry.links for entry in entries] == [["https://1hive.org"]]


@pytest.mark.asyncio
async def test_metadata_source_accepts_organizations_key(stub_metadata_client):
	stub_metadata_client.documents[100] = {"organizations": [{"id": "0xC", "name": "Clover"}]}

	entries = await MetadataSource(stub_metadata_client).fetch(100)

	assert [(entry.address, entry.name) for entry in entries] == [("0xC", "Clover")]


@pytest.mark.asyncio
async def test_metadata_source_handles_unexpected_errors():
	class _Broken:
		async def fetch_metadata_document(self, chain_id):
			raise RuntimeError("unexpected")

	assert await MetadataSource(_Broken()).fetch(100) == ()


@pytest.mark.asyncio
async def test_directory_source_drops_voided_gardens(stub_indexer):
	voided = VoidedRegistry({100: ["0xb"]})
	source = DirectorySource(stub_indexer, voided)

	records = await source.fetch(100, {"orderBy": "createdAt"})

	assert [record.id for record in records] == ["0xA"]
	assert stub_indexer.list_calls == [(100, {"orderBy": "createdAt"})]


@pytest.mark.asyncio
async def test_directory_source_degrades_to_empty_on_failure(stub_indexer):
	stub_indexer.fail_list = True
	source = DirectorySource(stub_indexer, VoidedRegistry({}))

	assert await source.fetch(100, {}) == ()


@pytest.mark.asyncio
async def test_single_source_returns_record(stub_indexer):
	record = await SingleGardenSource(stub_indexer).fetch(100, "0xa")

	assert record.id == "0xA"
	assert record.chain_id == 100


@pytest.mark.asyncio
async def test_single_source_collapses_missing_and_transport_errors(stub_indexer):
	source = SingleGardenSource(stub_indexer)

	with pytest.raises(exceptions.GardenNotFound) as missing:
		await source.fetch(100, "0xdead")
	assert missing.value.garden_id == "0xdead"
	assert missing.value.status_code == 404

	stub_indexer.fail_get = True
	with pytest.raises(exceptions.GardenNotFound) as failed:
		await source.fetch(100, "0xA")
	assert isinstance(failed.value.__cause__, exceptions.SourceFetchError)


def test_voided_registry_lookup():
	registry = VoidedRegistry({100: ["0xAbC", ""], 137: []})

	assert registry.excluded(100) == frozenset({"0xabc"})
	assert registry.excluded(4) == frozenset()
	assert registry.is_voided(100, "0xABC")
	assert not registry.is_voided(137, "0xabc")


def test_voided_registry_reads_settings_lazily(monkeypatch):
	from gardens.settings import settings

	registry = VoidedRegistry()
	monkeypatch.setattr(settings, "voided_gardens", {100: ["0x1"]})

	assert registry.is_voided(100, "0x1")


@pytest.mark.asyncio
async def test_subgraph_client_paginates_and_forwards_query_args():
	organizations = [_org(f"0x{idx}") for idx in range(3)]
	seen: list[dict] = []

	def handler(request: httpx.Request) -> httpx.Response:
		assert str(request.url) == "https://indexer.test/gardens-xdai"
		body = json.loads(request.content)
		variables = body["variables"]
		seen.append(variables)
		page = organizations[variables["skip"] : variables["skip"] + variables["first"]]
		return httpx.Response(200, json={"data": {"organizations": page}})

	async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
		client = SubgraphIndexerClient(http, networks=_NETWORKS, page_size=2)
		records = await client.list_gardens(100, {"orderBy": "createdAt", "orderDirection": "asc"})

	assert [record.id for record in records] == ["0x0", "0x1", "0x2"]
	assert records[0].token.decimals == 18
	assert records[0].wrappable_token is None
	assert [v["skip"] for v in seen] == [0, 2]
	assert all(v["orderBy"] == "createdAt" for v in seen)


@pytest.mark.asyncio
async def test_subgraph_client_get_garden_missing_returns_none():
	def handler(request: httpx.Request) -> httpx.Response:
		body = json.loads(request.content)
		assert body["variables"] == {"id": "0xabc"}
		return httpx.Response(200, json={"data": {"organization": None}})

	async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
		client = SubgraphIndexerClient(http, networks=_NETWORKS)
		assert await client.get_garden(100, "0xABC") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(502, text="bad gateway"),
		httpx.Response(200, json={"errors": [{"message": "indexing_error"}]}),
		httpx.Response(200, text="not json"),
	],
)
async def test_subgraph_client_raises_source_fetch_error(response):
	async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response)) as http:
		client = SubgraphIndexerClient(http, networks=_NETWORKS)
		with pytest.raises(exceptions.SourceFetchError):
			await client.list_gardens(100, {})


@pytest.mark.asyncio
async def test_subgraph_client_rejects_unknown_network():
	async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200))) as http:
		client = SubgraphIndexerClient(http, networks=_NETWORKS)
		with pytest.raises(exceptions.UnsupportedNetwork):
			await client.list_gardens(137, {})


@pytest.mark.asyncio
async def test_metadata_client_fetches_network_document():
	requested: list[str] = []

	def handler(request: httpx.Request) -> httpx.Response:
		requested.append(str(request.url))
		return httpx.Response(200, json={"gardens": [{"address": "0xa"}]})

	async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
		client = GithubMetadataClient(http, networks=_NETWORKS, url_template="https://content.test/{file}")
		document = await client.fetch_metadata_document(100)

	assert requested == ["https://content.test/xdai.json"]
	assert document["gardens"][0]["address"] == "0xa"


@pytest.mark.asyncio
async def test_metadata_client_wraps_http_errors():
	async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404))) as http:
		client = GithubMetadataClient(http, networks=_NETWORKS, url_template="https://content.test/{file}")
		with pytest.raises(exceptions.SourceFetchError) as excinfo:
			await client.fetch_metadata_document(100)

	assert excinfo.value.source == "metadata"


def test_network_config_applies_subgraph_override():
	config = NetworkConfig(subgraph_overrides={100: "https://override.test"}, default_chain_id=100)

	assert config.subgraph_url(100) == "https://override.test"
	assert config.get().chain_id == 100
	assert 137 in config.chain_ids()
	with pytest.raises(exceptions.UnsupportedNetwork):
		config.get(1)
