import pytest

from netviz.viz.selection import SelectionChanged
from netviz.viz.strategies.grouped_bars import FIXED_CODES, GroupedBarsController, fun_fact


@pytest.fixture
def chart(gapminder, settings, scheduler):
    view = GroupedBarsController(gapminder, settings, scheduler)
    scheduler.flush()
    return view


def bars(view, code):
    return {el.key: el for el in view.groups.get(code).children["bars"]}


def test_sample_follows_fixed_codes(chart):
    assert [r.code for r in chart.sample] == list(FIXED_CODES)
    assert chart.visible_subset() == []
    assert len(chart.groups) == 0


def test_chips_show_fun_facts_until_active(chart):
    chart.toggle("LIE")
    states = {c["code"]: c for c in chart.chip_states()}
    assert states["LIE"] == {"code": "LIE", "label": "Liechtenstein", "active": True}
    assert states["BER"]["label"] == "~84.2% online"
    assert not states["BER"]["active"]


def test_toggle_draws_two_bars_on_separate_axes(chart, scheduler):
    chart.toggle("LIE")
    scheduler.flush()
    h = chart.viewport.inner_height
    assert chart.y_right.domain == (0.0, 100000.0)
    gdp, net = bars(chart, "LIE")["gdp"], bars(chart, "LIE")["net"]
    assert gdp.attrs["height"] == pytest.approx(h * 0.87)
    assert net.attrs["height"] == pytest.approx(h * 0.80)
    assert gdp.attrs["x"] < net.attrs["x"]
    values = {el.key: el.attrs["text"] for el in chart.groups.get("LIE").children["values"]}
    assert values == {"gdp": "$87,000", "net": "80.0%"}


def test_bars_grow_from_baseline(chart, clock, scheduler):
    chart.toggle("NOR")
    net = bars(chart, "NOR")["net"]
    assert net.attrs["height"] == 0.0
    assert net.attrs["y"] == chart.viewport.inner_height
    clock.advance(275)
    scheduler.tick()
    assert 0 < net.attrs["height"] < chart.viewport.inner_height


def test_groups_keep_fixed_order(chart, scheduler):
    chart.toggle("LUX")
    chart.toggle("LIE")
    scheduler.flush()
    assert [r.code for r in chart.visible_subset()] == ["LIE", "LUX"]
    assert chart.groups.get("LIE").attrs["tx"] < chart.groups.get("LUX").attrs["tx"]


def test_toggle_off_removes_group(chart, clock, scheduler):
    chart.toggle("LIE")
    scheduler.flush()
    group = chart.groups.get("LIE")
    chart.toggle("LIE")
    assert group.removed
    assert len(chart.groups) == 0
    (name,) = chart.names.exiting()
    clock.advance(200)
    scheduler.tick()
    assert name.removed


def test_unknown_chip_is_ignored(chart):
    events = []
    chart.selection.subscribe(events.append)
    chart.toggle("AFG")
    chart.toggle("ZZZ")
    assert events == []
    assert chart.selection.snapshot() == frozenset()


def test_apply_filters_toggles_in_order(chart):
    chart.apply_filters({"toggle": ["lie", "lux", "lie"]})
    assert chart.selection.snapshot() == frozenset({"LUX"})


def test_right_axis_defaults_without_selection(chart):
    chart.toggle("ERI")
    chart.toggle("ERI")
    lo, hi = chart.y_right.domain
    assert lo == 0
    assert 1.1 <= hi < 2


def test_linked_selection_dims_groups(chart, scheduler):
    chart.apply_filters({"toggle": ["LIE", "LUX"]})
    chart.on_linked_selection(SelectionChanged(source="bubble_scatter", keys=frozenset({"LUX"}), active=True))
    scheduler.flush()
    assert chart.groups.get("LUX").attrs["opacity"] == 1.0
    assert chart.groups.get("LIE").attrs["opacity"] == 0.3

    chart.on_linked_selection(SelectionChanged(source="bubble_scatter", keys=frozenset(), active=False))
    scheduler.flush()
    assert chart.groups.get("LIE").attrs["opacity"] == 1.0


def test_frame_carries_group_opacity(chart, scheduler):
    chart.apply_filters({"toggle": ["LIE"]})
    chart.on_linked_selection(SelectionChanged(source="bubble_scatter", keys=frozenset(), active=True))
    scheduler.flush()
    frame = chart.frame()
    opacities = frame.loc[frame["layer"] == "bars", "opacity"]
    assert len(opacities) == 2
    assert all(v == pytest.approx(0.9 * 0.3) for v in opacities)


def test_spec_usermeta(chart, scheduler):
    chart.toggle("NOR")
    scheduler.flush()
    meta = chart.to_spec()["usermeta"]
    assert meta["selection"] == ["NOR"]
    assert len(meta["chips"]) == len(FIXED_CODES)


def test_fun_fact_format(gapminder):
    nor = next(r for r in gapminder if r.code == "NOR")
    assert fun_fact(nor) == "~93.3% online"
