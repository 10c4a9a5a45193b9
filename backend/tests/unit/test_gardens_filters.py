import asyncio

import pytest

from gardens.domain.filters import (
	DEFAULT_SORTING,
	Debouncer,
	FilterEngine,
	GardenFilters,
	apply_name_filter,
	get_sorting,
	matches_name_filter,
	normalize_filter,
)
from gardens.domain.merge import merge_gardens
from gardens.domain.models import GardenMetadata, GardenRecord


def _collection():
	records = [
		GardenRecord.model_validate({"id": "0xA", "token": {"id": "t1", "name": "Honey"}}),
		GardenRecord.model_validate({"id": "0xB", "token": {"id": "t2", "name": "Bee Token"}}),
		GardenRecord.model_validate({"id": "0xC", "token": {"id": "t3", "name": "Pollen"}}),
	]
	metadata = [GardenMetadata.model_validate({"address": "0xa", "name": "1Hive Garden"})]
	return merge_gardens(records, metadata)


def test_empty_filter_is_identity():
	collection = _collection()

	assert apply_name_filter(collection, "") is collection
	assert apply_name_filter(collection, "   ") is collection
	assert apply_name_filter(collection, None) is collection


def test_filter_matches_display_name_case_insensitively():
	collection = _collection()

	assert [g.id for g in apply_name_filter(collection, "HIVE")] == ["0xA"]
	assert [g.id for g in apply_name_filter(collection, "bee   token")] == ["0xB"]


def test_filter_without_match_returns_empty():
	assert list(apply_name_filter(_collection(), "xyz")) == []


def test_filter_is_idempotent_and_order_preserving():
	collection = _collection()

	once = apply_name_filter(collection, "e")
	twice = apply_name_filter(once, "e")

	assert list(once) == list(twice)
	assert [g.id for g in once] == ["0xA", "0xB", "0xC"]


def test_matches_name_filter_uses_metadata_name_before_token_name():
	garden = _collection()[0]

	assert matches_name_filter("1hive", garden)
	assert not matches_name_filter("honey", garden)
	assert matches_name_filter("", garden)


def test_normalize_filter():
	assert normalize_filter("  Hello   World ") == "hello world"
	assert normalize_filter(None) == ""


def test_sorting_lookup():
	assert get_sorting(None) is DEFAULT_SORTING
	assert get_sorting("newest").as_query_args() == {"orderBy": "createdAt", "orderDirection": "desc"}
	with pytest.raises(ValueError):
		get_sorting("random")


def test_garden_filters_are_replaced_not_mutated():
	filters = GardenFilters()

	named = filters.with_name("hive")
	sorted_filters = named.with_sorting(get_sorting("oldest"))

	assert filters.internal.name == ""
	assert named.internal.name == "hive"
	assert sorted_filters.internal.name == "hive"
	assert sorted_filters.query.sorting.key == "oldest"


@pytest.mark.asyncio
async def test_debouncer_coalesces_burst_into_single_settle():
	settled: list[str] = []
	debouncer = Debouncer(0.05, settled.append)

	for raw in ("h", "hi", "hiv", "hive"):
		debouncer.push(raw)
		await asyncio.sleep(0.005)

	assert debouncer.pending
	assert debouncer.value == ""
	assert await debouncer.wait_settled() == "hive"
	assert settled == ["hive"]
	assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_resets_timer_on_each_input():
	debouncer = Debouncer(0.1)

	debouncer.push("a")
	await asyncio.sleep(0.06)
	debouncer.push("ab")
	await asyncio.sleep(0.06)

	assert debouncer.value == ""
	assert debouncer.pending
	assert await debouncer.wait_settled() == "ab"


@pytest.mark.asyncio
async def test_debouncer_close_cancels_pending_timer():
	settled: list[str] = []
	debouncer = Debouncer(0.02, settled.append)

	debouncer.push("hive")
	debouncer.close()
	await asyncio.sleep(0.05)

	assert settled == []
	assert debouncer.value == ""
	assert not debouncer.pending
	debouncer.push("ignored")
	assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_flush_settles_immediately():
	debouncer = Debouncer(10)

	debouncer.push("hive")
	debouncer.flush()

	assert debouncer.value == "hive"
	assert not debouncer.pending


@pytest.mark.asyncio
async def test_filter_engine_applies_settled_text_only():
	engine = FilterEngine(delay=0.02)
	collection = _collection()

	engine.set_name_filter("pollen")
	assert engine.apply(collection) is collection

	await engine.wait_settled()
	assert [g.id for g in engine.apply(collection)] == ["0xC"]
	engine.close()
