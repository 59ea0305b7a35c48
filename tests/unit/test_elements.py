from netviz.viz.elements import ElementLayer


def code(row):
    return row[0]


def draw(element, row):
    element.attrs["width"] = row[1]


def shrink(layer):
    def exit_(element):
        layer.transition_out(element, {"width": 0.0}, 300)

    return exit_


def test_update_keeps_element_identity(scheduler):
    layer = ElementLayer("bars", "rect", scheduler)
    layer.join([("USA", 70.0), ("GBR", 80.0)], code, enter=draw, update=draw)
    ids = {el.key: el.id for el in layer}
    layer.join([("GBR", 81.0), ("USA", 71.7)], code, enter=draw, update=draw)
    assert {el.key: el.id for el in layer} == ids
    assert [el.key for el in layer] == ["GBR", "USA"]
    assert layer.get("USA").datum == ("USA", 71.7)


def test_new_keys_get_fresh_ids(scheduler):
    layer = ElementLayer("bars", "rect", scheduler)
    layer.join([("USA", 1.0)], code, enter=draw)
    first = layer.get("USA").id
    layer.join([], code, enter=draw)
    layer.join([("USA", 1.0)], code, enter=draw)
    assert layer.get("USA").id != first


def test_exit_without_hook_removes_immediately(scheduler):
    layer = ElementLayer("bars", "rect", scheduler)
    layer.join([("USA", 1.0), ("GBR", 2.0)], code, enter=draw)
    gone = layer.get("GBR")
    layer.join([("USA", 1.0)], code, enter=draw)
    assert layer.keys() == ["USA"]
    assert layer.exiting() == []
    assert gone.removed


def test_exit_transition_removes_on_completion(clock, scheduler):
    layer = ElementLayer("bars", "rect", scheduler)
    layer.join([("USA", 10.0), ("GBR", 20.0)], code, enter=draw)
    layer.join([("USA", 10.0)], code, enter=draw, exit=shrink(layer))
    (leaving,) = layer.exiting()
    assert leaving.key == "GBR" and leaving.exiting
    assert "GBR" not in layer
    assert len(layer.all_elements()) == 2

    clock.advance(150)
    scheduler.tick()
    assert 0 < leaving.attrs["width"] < 20.0
    clock.advance(150)
    scheduler.tick()
    assert leaving.removed
    assert layer.all_elements() == [layer.get("USA")]


def test_returning_key_revives_exiting_element(clock, scheduler):
    layer = ElementLayer("bars", "rect", scheduler)
    layer.join([("USA", 10.0)], code, enter=draw)
    original = layer.get("USA")
    layer.join([], code, enter=draw, exit=shrink(layer))
    clock.advance(100)
    scheduler.tick()

    entered = []
    layer.join([("USA", 12.0)], code, enter=lambda el, row: entered.append(row), update=draw, exit=shrink(layer))
    assert entered == []
    assert layer.get("USA") is original
    assert not original.exiting
    clock.advance(1000)
    scheduler.tick()
    assert not original.removed
    assert original.attrs["width"] == 12.0


def test_remove_clears_children(scheduler):
    layer = ElementLayer("groups", "group", scheduler)
    layer.join([("LIE", 1.0)], code, enter=lambda el, row: el.child("bars", "rect", scheduler).join(
        [("gdp", 1.0), ("net", 2.0)], code, enter=draw
    ))
    group = layer.get("LIE")
    bars = list(group.children["bars"])
    layer.join([], code, enter=draw)
    assert group.removed
    assert all(bar.removed for bar in bars)
    assert len(group.children["bars"]) == 0
