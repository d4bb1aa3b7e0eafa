import asyncio

import pytest

from storefront.catalog.snapshot import CatalogSnapshot, SnapshotRegistry, load_snapshot
from storefront.catalog.sources import CatalogSource


class StaticSource(CatalogSource):
    def __init__(self, products=None, categories=None, subcategories=None, fail=()):
        self.products = products if products is not None else []
        self.categories = categories if categories is not None else []
        self.subcategories = subcategories if subcategories is not None else []
        self.fail = set(fail)
        self.calls = []

    async def _get(self, name, value):
        self.calls.append(name)
        await asyncio.sleep(0)
        if name in self.fail:
            raise ConnectionError(f"{name} unavailable")
        return value

    async def fetch_products(self):
        return await self._get("products", self.products)

    async def fetch_categories(self):
        return await self._get("categories", self.categories)

    async def fetch_subcategories(self):
        return await self._get("subcategories", self.subcategories)


def test_load_snapshot_normalizes_all_three_lists():
    source = StaticSource(
        products=[{"id": "1", "title": "Cobb Tester", "price": "1,000"}],
        categories=[{"id": 1, "title": "Paper Testing Equipment"}],
        subcategories=[{"title": "Cobb Tester", "category": "Paper Testing Equipment"}],
    )
    snapshot = asyncio.run(load_snapshot(source))
    assert sorted(source.calls) == ["categories", "products", "subcategories"]
    assert snapshot.products[0].price == 1000.0
    assert snapshot.categories[0].slug == "paper-testing-equipment"
    assert snapshot.subcategories[0].slug == "cobb-tester"
    assert snapshot.errors == {}


def test_failed_fetch_degrades_to_empty_list():
    source = StaticSource(
        products=[{"title": "A"}],
        categories=[{"title": "Paper"}],
        fail={"products"},
    )
    snapshot = asyncio.run(load_snapshot(source))
    assert snapshot.products == []
    assert snapshot.is_empty
    assert [c.title for c in snapshot.categories] == ["Paper"]
    assert "products" in snapshot.errors


def test_non_list_response_degrades_to_empty_list():
    source = StaticSource(products={"error": "Failed to fetch products"})
    snapshot = asyncio.run(load_snapshot(source))
    assert snapshot.products == []
    assert snapshot.errors["products"] == "invalid response"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_registry_expires_entries_after_ttl():
    clock = FakeClock()
    registry = SnapshotRegistry(ttl=10, clock=clock)
    registry.store("s1", "value", registry.begin_load("s1"))
    clock.now = 5
    assert registry.get("s1") == "value"
    clock.now = 14
    assert registry.get("s1") == "value"
    clock.now = 30
    assert registry.get("s1") is None
    assert len(registry) == 0


def test_purge_expired():
    clock = FakeClock()
    registry = SnapshotRegistry(ttl=10, clock=clock)
    registry.store("a", 1, 0)
    registry.store("b", 2, 0)
    clock.now = 8
    registry.get("b")
    clock.now = 15
    assert registry.purge_expired() == 1
    assert registry.get("b") == 2


def test_get_or_create_loads_once_per_session():
    registry = SnapshotRegistry(ttl=0)
    loads = []

    async def factory():
        loads.append(1)
        return CatalogSnapshot.empty()

    async def scenario():
        first = await registry.get_or_create("s", factory)
        second = await registry.get_or_create("s", factory)
        return first, second

    first, second = asyncio.run(scenario())
    assert first is second
    assert len(loads) == 1


def test_load_finishing_after_discard_is_not_stored():
    registry = SnapshotRegistry(ttl=0)

    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def factory():
            started.set()
            await release.wait()
            return "stale"

        task = asyncio.create_task(registry.get_or_create("s", factory))
        await started.wait()
        registry.discard("s")
        release.set()
        return await task

    assert asyncio.run(scenario()) == "stale"
    assert registry.get("s") is None


def test_store_with_old_generation_is_rejected():
    registry = SnapshotRegistry(ttl=0)
    generation = registry.begin_load("s")
    registry.discard("s")
    assert registry.store("s", "late", generation) is False
    assert registry.store("s", "fresh", registry.begin_load("s")) is True


def test_cancellation_is_not_swallowed():
    class SlowSource(StaticSource):
        async def fetch_products(self):
            await asyncio.sleep(10)

    async def scenario():
        task = asyncio.create_task(load_snapshot(SlowSource()))
        await asyncio.sleep(0.01)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(scenario())
