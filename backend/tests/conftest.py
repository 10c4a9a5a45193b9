import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from gardens.domain import exceptions
from gardens.domain.models import GardenRecord
from gardens.main import create_app
from gardens.services.registry import DirectoryRegistry
from gardens.settings import settings


class StubIndexer:
	"""In-memory stand-in for the subgraph client."""

	def __init__(self) -> None:
		self.gardens: dict[int, list[dict]] = {}
		self.list_calls: list[tuple[int, dict]] = []
		self.get_calls: list[tuple[int, str]] = []
		self.fail_list = False
		self.fail_get = False

	async def list_gardens(self, chain_id, query_args):
		self.list_calls.append((chain_id, dict(query_args)))
		if self.fail_list:
			raise exceptions.SourceFetchError("indexer")
		return [GardenRecord.model_validate({**item, "chainId": chain_id}) for item in self.gardens.get(chain_id, [])]

	async def get_garden(self, chain_id, garden_id):
		self.get_calls.append((chain_id, garden_id))
		if self.fail_get:
			raise exceptions.SourceFetchError("indexer")
		for item in self.gardens.get(chain_id, []):
			if item["id"].lower() == garden_id.lower():
				return GardenRecord.model_validate({**item, "chainId": chain_id})
		return None


class StubMetadataClient:
	"""In-memory stand-in for the metadata host."""

	def __init__(self) -> None:
		self.documents: dict[int, dict] = {}
		self.calls: list[int] = []
		self.fail = False

	async def fetch_metadata_document(self, chain_id):
		self.calls.append(chain_id)
		if self.fail:
			raise exceptions.SourceFetchError("metadata")
		return self.documents.get(chain_id, {"gardens": []})


def garden_item(garden_id: str, *, token_name: str = "Honey", wrappable: dict | None = None, **extra) -> dict:
	item = {
		"id": garden_id,
		"token": {"id": f"{garden_id}-token", "name": token_name, "symbol": token_name[:3].upper(), "decimals": 18},
		**extra,
	}
	if wrappable is not None:
		item["wrappableToken"] = wrappable
	return item


@pytest.fixture
def stub_indexer():
	indexer = StubIndexer()
	indexer.gardens[100] = [
		garden_item("0xA", token_name="Honey"),
		garden_item("0xB", token_name="Bee"),
	]
	return indexer


@pytest.fixture
def stub_metadata_client():
	client = StubMetadataClient()
	client.documents[100] = {
		"gardens": [
			{"address": "0xa", "name": "1Hive", "token_logo": "logoA.png", "forum": "forum.1hive.org"},
		]
	}
	return client


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Keep debounce short and metrics reachable while tests run."""
	original_env = settings.environment
	original_debounce = settings.filter_debounce_ms
	original_voided = settings.voided_gardens
	settings.environment = "dev"
	settings.filter_debounce_ms = 20
	settings.voided_gardens = {}
	try:
		yield
	finally:
		settings.environment = original_env
		settings.filter_debounce_ms = original_debounce
		settings.voided_gardens = original_voided


async def spin_until(predicate, *, attempts: int = 200) -> None:
	"""Yield to the event loop until `predicate()` holds."""
	for _ in range(attempts):
		if predicate():
			return
		await asyncio.sleep(0)
	raise AssertionError("condition not reached")


@pytest.fixture
def spin():
	return spin_until


@pytest.fixture
def make_garden():
	return garden_item


@pytest_asyncio.fixture
async def registry(stub_indexer, stub_metadata_client):
	directory = DirectoryRegistry(indexer=stub_indexer, metadata_client=stub_metadata_client)
	try:
		yield directory
	finally:
		await directory.close()


@pytest_asyncio.fixture
async def api_client(registry):
	transport = ASGITransport(app=create_app(registry))
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
