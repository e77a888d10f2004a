from backend.region_registry import RegionRegistry
from core.demo_colony import DemoRegion


def test_known_preserves_registration_order() -> None:
    registry = RegionRegistry()
    for region_id in (3, 1, 2):
        registry.register(DemoRegion(region_id, f"Map {region_id}", False, (50, 50)))

    assert [r.region_id for r in registry.known()] == [3, 1, 2]
    assert len(registry) == 3
    assert 1 in registry


def test_discard_removes_only_that_region() -> None:
    registry = RegionRegistry()
    home = DemoRegion(1, "Home", True, (250, 250))
    camp = DemoRegion(2, "Camp", False, (100, 100))
    registry.register(home)
    registry.register(camp)

    assert registry.discard(camp) is True
    assert registry.known() == (home,)
    assert registry.discard(camp) is False


def test_stale_handle_does_not_evict_reloaded_region() -> None:
    registry = RegionRegistry()
    old = DemoRegion(5, "Camp", False, (100, 100))
    new = DemoRegion(5, "Camp", False, (100, 100))
    registry.register(old)
    registry.register(new)

    assert registry.discard(old) is False
    assert registry.get(5) is new


def test_reregistering_moves_region_to_the_end() -> None:
    registry = RegionRegistry()
    first = DemoRegion(1, "Home", True, (250, 250))
    registry.register(first)
    registry.register(DemoRegion(2, "Camp", False, (100, 100)))
    registry.register(DemoRegion(1, "Home", True, (250, 250)))

    assert [r.region_id for r in registry.known()] == [2, 1]


def test_known_is_a_snapshot_copy() -> None:
    registry = RegionRegistry()
    home = DemoRegion(1, "Home", True, (250, 250))
    registry.register(home)

    snapshot = registry.known()
    registry.discard(home)
    registry.register(DemoRegion(2, "Camp", False, (100, 100)))

    assert snapshot == (home,)


def test_clear_forgets_everything() -> None:
    registry = RegionRegistry()
    registry.register(DemoRegion(1, "Home", True, (250, 250)))

    registry.clear()

    assert registry.known() == ()
    assert len(registry) == 0
