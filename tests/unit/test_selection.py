from netviz.viz.selection import SelectionBroadcaster, SelectionChanged


def recorder():
    events = []
    return events, events.append


def test_toggle_sequence_notifies_once_per_mutation():
    chips = SelectionBroadcaster("grouped_bars")
    events, handler = recorder()
    chips.subscribe(handler)

    chips.toggle("LIE")
    chips.toggle("LUX")
    chips.toggle("LIE")

    assert [set(e.keys) for e in events] == [{"LIE"}, {"LIE", "LUX"}, {"LUX"}]
    assert chips.snapshot() == frozenset({"LUX"})
    assert all(isinstance(e, SelectionChanged) and e.source == "grouped_bars" for e in events)


def test_snapshot_is_immutable_copy():
    chips = SelectionBroadcaster("x")
    chips.toggle("A")
    snap = chips.snapshot()
    chips.toggle("B")
    assert snap == frozenset({"A"})


def test_subscribers_called_in_subscription_order():
    sel = SelectionBroadcaster("scatter")
    calls = []
    sel.subscribe(lambda e: calls.append("first"))
    sel.subscribe(lambda e: calls.append("second"))
    sel.replace({"NOR"})
    assert calls == ["first", "second"]


def test_subscribe_during_notification_starts_next_time():
    sel = SelectionBroadcaster("scatter")
    late = []

    def subscribe_another(event):
        sel.subscribe(late.append)

    first = sel.subscribe(subscribe_another)
    sel.toggle("A")
    assert late == []
    sel.unsubscribe(first)
    sel.toggle("B")
    assert [set(e.keys) for e in late] == [{"A", "B"}]


def test_cancelled_subscription_is_skipped():
    sel = SelectionBroadcaster("scatter")
    events, handler = recorder()
    sub = sel.subscribe(handler)
    sub.cancel()
    sel.toggle("A")
    assert events == []


def test_failing_subscriber_does_not_block_others():
    sel = SelectionBroadcaster("scatter")
    events, handler = recorder()

    def broken(event):
        raise RuntimeError("boom")

    sel.subscribe(broken)
    sel.subscribe(handler)
    assert sel.toggle("A") == frozenset({"A"})
    assert len(events) == 1


def test_active_flag_distinguishes_cleared_from_empty_brush():
    sel = SelectionBroadcaster("scatter")
    events, handler = recorder()
    sel.subscribe(handler)

    sel.replace(set(), active=True)
    sel.clear()

    brushed_nothing, cleared = events
    assert brushed_nothing.active and not brushed_nothing.includes("NOR")
    assert not cleared.active and cleared.includes("NOR")


def test_includes_selected_keys_only_when_active():
    event = SelectionChanged(source="s", keys=frozenset({"LUX"}), active=True)
    assert event.includes("LUX")
    assert not event.includes("NOR")


def test_replace_defaults_active_to_non_empty():
    sel = SelectionBroadcaster("s")
    sel.replace(["A"])
    assert sel.active
    sel.replace([])
    assert not sel.active
    assert len(sel) == 0
