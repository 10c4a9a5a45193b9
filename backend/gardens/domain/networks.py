"""Network configuration for the chains gardens are deployed on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from gardens.domain import exceptions
from gardens.settings import settings


@dataclass(frozen=True, slots=True)
class Network:
	chain_id: int
	name: str
	type: str
	subgraph_url: str
	metadata_file: str
	explorer: str = "blockscout"


_NETWORKS: dict[int, Network] = {
	100: Network(
		chain_id=100,
		name="xDai",
		type="xdai",
		subgraph_url="https://api.thegraph.com/subgraphs/name/1hive/gardens-xdai",
		metadata_file="xdai.json",
	),
	137: Network(
		chain_id=137,
		name="Polygon",
		type="polygon",
		subgraph_url="https://api.thegraph.com/subgraphs/name/1hive/gardens-polygon",
		metadata_file="polygon.json",
		explorer="polygonscan",
	),
	4: Network(
		chain_id=4,
		name="Rinkeby",
		type="rinkeby",
		subgraph_url="https://api.thegraph.com/subgraphs/name/1hive/gardens-rinkeby",
		metadata_file="rinkeby.json",
		explorer="etherscan",
	),
}


class NetworkConfig:
	"""Read-only lookup of network settings, with subgraph URL overrides applied."""

	def __init__(
		self,
		networks: Mapping[int, Network] | None = None,
		*,
		subgraph_overrides: Mapping[int, str] | None = None,
		default_chain_id: int | None = None,
	) -> None:
		self._networks = dict(networks if networks is not None else _NETWORKS)
		overrides = subgraph_overrides if subgraph_overrides is not None else settings.subgraph_urls
		self._overrides = {int(chain_id): url for chain_id, url in overrides.items()}
		self.default_chain_id = default_chain_id if default_chain_id is not None else settings.default_chain_id

	def get(self, chain_id: int | None = None) -> Network:
		key = self.default_chain_id if chain_id is None else int(chain_id)
		network = self._networks.get(key)
		if network is None:
			raise exceptions.UnsupportedNetwork(key)
		return network

	def subgraph_url(self, chain_id: int) -> str:
		return self._overrides.get(chain_id) or self.get(chain_id).subgraph_url

	def chain_ids(self) -> list[int]:
		return sorted(self._networks)


__all__ = ["Network", "NetworkConfig"]
