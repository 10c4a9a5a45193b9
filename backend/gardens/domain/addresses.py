"""Address comparison helpers."""

from __future__ import annotations


def normalize_address(value: str | None) -> str:
	"""Lower-case and trim an identifier for use as a lookup key."""

	if not value:
		return ""
	return value.strip().lower()


def addresses_equal(first: str | None, second: str | None) -> bool:
	"""Case-insensitive identifier equality; empty values never match."""

	left = normalize_address(first)
	right = normalize_address(second)
	if not left or not right:
		return False
	return left == right


__all__ = ["addresses_equal", "normalize_address"]
