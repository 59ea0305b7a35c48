import pytest

from netviz.schemas.records import InternetUseRecord
from netviz.viz.strategies.bar_ranking import BarRankingController


@pytest.fixture
def chart(internet_use, settings, scheduler):
    view = BarRankingController(internet_use, settings, scheduler)
    scheduler.flush()
    return view


def widths(view):
    return {el.key: el.attrs["width"] for el in view.bars}


def test_defaults_to_latest_year_top_five(chart):
    assert chart.years == [2008, 2009, 2010]
    assert chart.year == 2010
    assert [r.code for r in chart.visible_subset()] == ["DEU", "GBR", "JPN", "KOR", "USA"]


def test_bar_widths_scale_to_largest_value(chart):
    inner = chart.viewport.inner_width
    w = widths(chart)
    assert w["DEU"] == inner
    assert w["USA"] == pytest.approx(inner * 71.7 / 82.0)


def test_bars_follow_band_order(chart):
    ys = [el.attrs["y"] for el in chart.bars]
    assert ys == sorted(ys)
    assert chart.bars.keys() == ["DEU", "GBR", "JPN", "KOR", "USA"]


def test_labels_show_values(chart):
    usa = chart.labels.get("USA")
    assert usa.attrs["text"] == "71.7%"
    assert usa.attrs["x"] == pytest.approx(chart.bars.get("USA").attrs["width"] + 6)


def test_year_change_enters_and_exits(chart, clock, scheduler):
    chart.set_top_n(3)
    chart.select_year(2008)
    scheduler.flush()
    assert chart.bars.keys() == ["DEU", "USA", "JPN"]
    usa = chart.bars.get("USA")

    chart.select_year(2010)
    assert chart.bars.keys() == ["DEU", "GBR", "JPN"]
    assert chart.bars.get("GBR").attrs["width"] == 0.0
    assert chart.bars.exiting() == [usa]

    clock.advance(150)
    scheduler.tick()
    assert 0 < usa.attrs["width"] < chart.viewport.inner_width
    clock.advance(150)
    scheduler.tick()
    assert usa.removed
    assert chart.bars.exiting() == []
    assert "USA" not in chart.labels

    clock.advance(300)
    scheduler.tick()
    assert chart.bars.get("GBR").attrs["width"] == pytest.approx(chart.viewport.inner_width * 79.0 / 82.0)


def test_same_data_twice_keeps_elements(chart, scheduler):
    ids = [el.id for el in chart.bars]
    chart.select_year(2010)
    scheduler.flush()
    assert [el.id for el in chart.bars] == ids


def test_top_n_is_clamped(chart):
    chart.set_top_n("500")
    assert chart.top_n == 50
    assert len(chart.bars) == 7
    chart.set_top_n("abc")
    assert chart.top_n == chart.settings.bar_top_n


def test_apply_filters(chart, scheduler):
    chart.apply_filters({"year": "2009", "top_n": 2})
    scheduler.flush()
    assert chart.year == 2009
    assert chart.bars.keys() == ["DEU", "GBR"]


def test_no_records_renders_nothing(settings, scheduler):
    view = BarRankingController([], settings, scheduler)
    assert view.year is None
    assert len(view.bars) == 0
    assert view.frame().empty
    assert view.to_spec()["usermeta"]["visible"] == []


def test_frame_and_spec(chart):
    frame = chart.frame()
    assert set(frame["layer"]) == {"bars", "labels"}
    spec = chart.to_spec()
    assert spec["usermeta"]["year"] == 2010
    assert spec["usermeta"]["visible"] == ["DEU", "GBR", "JPN", "KOR", "USA"]
    assert spec["width"] == 900 and spec["height"] == 380
    assert len(spec["layer"]) == 4


def test_three_rows_top_two(settings, scheduler):
    records = [
        InternetUseRecord(code="USA", year=2010, value=71.7),
        InternetUseRecord(code="MEX", year=2010, value=31.1),
        InternetUseRecord(code="DEU", year=2010, value=82.0),
    ]
    view = BarRankingController(records, settings, scheduler)
    view.apply_filters({"year": 2010, "top_n": 2})
    scheduler.flush()
    assert [(r.code, r.value) for r in view.visible_subset()] == [("DEU", 82.0), ("USA", 71.7)]
    assert view.bars.keys() == ["DEU", "USA"]
    assert view.x.domain[1] == 82.0
    inner = view.viewport.inner_width
    w = widths(view)
    assert w["DEU"] == inner
    assert w["USA"] == pytest.approx(inner * 71.7 / 82.0)
