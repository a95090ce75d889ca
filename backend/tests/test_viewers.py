from qrseat.viewers import ViewerRegistry


def test_reregistration_moves_device_between_operators(relay):
    relay.viewers.register("d1", "Mario", 2)
    relay.viewers.register("d1", "Mario", 3)

    assert relay.viewers.list(2) == []
    viewers = relay.viewers.list(3)
    assert [(v.device_id, v.operator_name) for v in viewers] == [("d1", "Mario")]


def test_list_filters_by_operator(relay):
    relay.viewers.register("d1", "Mario", 2)
    relay.viewers.register("d2", "Luigi", 2)
    relay.viewers.register("d3", "Peach", 5)

    assert sorted(v.device_id for v in relay.viewers.list(2)) == ["d1", "d2"]
    assert [v.device_id for v in relay.viewers.list(5)] == ["d3"]


def test_stale_viewers_are_hidden_then_pruned_on_write(relay, store, clock):
    relay.viewers.register("d1", "Mario", 2)
    clock.advance(10_000)

    assert relay.viewers.list(2) == []
    assert len(store.load_viewers()) == 1

    relay.viewers.register("d2", "Luigi", 2)

    assert [v.device_id for v in store.load_viewers()] == ["d2"]


def test_heartbeat_refresh_keeps_viewer_visible(relay, clock):
    relay.viewers.register("d1", "Mario", 2)
    clock.advance(9_000)
    relay.viewers.register("d1", "Mario", 2)
    clock.advance(9_000)

    viewers = relay.viewers.list(2)
    assert len(viewers) == 1
    assert viewers[0].last_seen == clock.now - 9_000


def test_unregister(relay):
    relay.viewers.register("d1", "Mario", 2)

    assert relay.viewers.unregister("d1") is True
    assert relay.viewers.unregister("d1") is False
    assert relay.viewers.list(2) == []


def test_prune_counts_dropped_entries(store, clock):
    registry = ViewerRegistry(store, clock, heartbeat_ms=1_000)
    registry.register("d1", "Mario", 1)
    registry.register("d2", "Luigi", 1)
    clock.advance(1_000)

    assert registry.prune() == 2
    assert registry.prune() == 0


def test_viewers_do_not_touch_sessions(relay, store):
    relay.viewers.register("d1", "Mario", 2)

    assert store.stale_keys(cutoff=10**15) == []
