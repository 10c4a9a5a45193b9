"""Mount garden-scoped collaborators only while a garden is connected."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Optional, Protocol, Sequence

from gardens.domain.models import MergedGarden, ResolutionResult
from gardens.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

# Activation order; teardown runs in reverse.
SCOPE_ORDER = ("connect", "activity", "garden_state", "staking", "agreement_subscription")


class ScopedCollaborator(Protocol):
	name: str

	async def activate(self, garden: MergedGarden) -> None:
		...

	async def deactivate(self) -> None:
		...


class GardenScope:
	"""Minimal collaborator that tracks the garden it is bound to."""

	def __init__(self, name: str) -> None:
		self.name = name
		self.garden: Optional[MergedGarden] = None

	async def activate(self, garden: MergedGarden) -> None:
		self.garden = garden
		logger.debug("gardens.scope.activated", extra={"scope": self.name, "garden": garden.id})

	async def deactivate(self) -> None:
		logger.debug("gardens.scope.deactivated", extra={"scope": self.name})
		self.garden = None


def default_scope_chain() -> list[GardenScope]:
	return [GardenScope(name) for name in SCOPE_ORDER]


def can_activate_scope(result: ResolutionResult) -> bool:
	return result.is_found and result.garden is not None


class ContextCascade:
	def __init__(self, collaborators: Sequence[ScopedCollaborator] = ()) -> None:
		self._collaborators = tuple(collaborators)
		self._stack: Optional[AsyncExitStack] = None
		self._garden: Optional[MergedGarden] = None

	@property
	def mounted(self) -> bool:
		return self._stack is not None

	@property
	def garden(self) -> Optional[MergedGarden]:
		return self._garden

	@property
	def collaborators(self) -> tuple[ScopedCollaborator, ...]:
		return self._collaborators

	async def sync(self, result: ResolutionResult) -> bool:
		"""Mount for a found garden, unmount otherwise; return whether mounted."""

		garden = result.garden if can_activate_scope(result) else None
		if garden is None:
			await self.unmount()
			return False
		if self._stack is not None and self._garden == garden:
			return True
		await self.unmount()
		await self._mount(garden)
		return True

	async def unmount(self) -> None:
		stack = self._stack
		if stack is None:
			return
		self._stack = None
		self._garden = None
		await stack.aclose()

	async def _mount(self, garden: MergedGarden) -> None:
		stack = AsyncExitStack()
		try:
			for collaborator in self._collaborators:
				await collaborator.activate(garden)
				stack.push_async_callback(collaborator.deactivate)
		except Exception:
			logger.exception("gardens.scope.activation_failed", extra={"garden": garden.id})
			await stack.aclose()
			raise
		self._stack = stack
		self._garden = garden
		obs_metrics.SCOPE_ACTIVATIONS.inc()


__all__ = [
	"SCOPE_ORDER",
	"ScopedCollaborator",
	"GardenScope",
	"default_scope_chain",
	"can_activate_scope",
	"ContextCascade",
]
