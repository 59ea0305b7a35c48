import json
from pathlib import Path

import pytest

from netviz.viz.registry import factory

FIXTURES = Path(__file__).parent.parent / "fixtures"

DATA_FILES = {
    "bar_ranking": "internet-use-sample.csv",
    "time_series": "internet-use-sample.csv",
    "grouped_bars": "gapminder_internet.csv",
    "bubble_scatter": "gapminder_internet.csv",
}


def upload(name):
    return {"data_file": (name, (FIXTURES / name).read_bytes(), "text/csv")}


@pytest.mark.parametrize("chart_key", sorted(DATA_FILES))
def test_visualize_success(client, chart_key):
    response = client.post(f"/api/visualize/{chart_key}", files=upload(DATA_FILES[chart_key]))
    assert response.status_code == 200
    payload = response.json()
    assert payload["chart_key"] == chart_key
    assert "spec" in payload
    assert payload["spec"]["layer"]


def test_bar_ranking_year_filter(client):
    response = client.post(
        "/api/visualize/bar_ranking",
        files=upload("internet-use-sample.csv"),
        data={"filters": json.dumps({"year": 2008, "top_n": 3})},
    )
    assert response.status_code == 200
    meta = response.json()["spec"]["usermeta"]
    assert meta["year"] == 2008
    assert meta["visible"] == ["DEU", "USA", "JPN"]


def test_bar_ranking_mid_transition_frame(client):
    response = client.post(
        "/api/visualize/bar_ranking",
        files=upload("internet-use-sample.csv"),
        data={"filters": json.dumps({"top_n": 3, "year": 2008}), "config": json.dumps({"frame_ms": 150})},
    )
    assert response.status_code == 200
    bars = response.json()["spec"]["layer"][0]
    rows = bars["data"]["values"] if "values" in bars.get("data", {}) else None
    if rows is None:
        datasets = response.json()["spec"]["datasets"]
        rows = datasets[bars["data"]["name"]]
    # KOR left at top_n=3, GBR left when 2008 brought USA back
    assert {row["key"] for row in rows if row["exiting"]} == {"KOR", "GBR"}
    assert {row["key"] for row in rows if not row["exiting"]} == {"DEU", "USA", "JPN"}


def test_scatter_brush_returns_selection(client):
    response = client.post(
        "/api/visualize/bubble_scatter",
        files=upload("gapminder_internet.csv"),
        data={"filters": json.dumps({"cap": "abc", "brush": [700, 0, 900, 60]})},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["selection"] == ["LUX", "NOR"]
    assert payload["spec"]["usermeta"]["cap"] == 150


def test_grouped_bars_toggle(client):
    response = client.post(
        "/api/visualize/grouped_bars",
        files=upload("gapminder_internet.csv"),
        data={"filters": json.dumps({"toggle": ["NOR", "LIE"]})},
    )
    assert response.status_code == 200
    assert response.json()["selection"] == ["LIE", "NOR"]


def test_visualize_unknown_key(client):
    response = client.post("/api/visualize/unknown", files=upload("internet-use-sample.csv"))
    assert response.status_code == 404
    payload = response.json()
    assert payload["code"] == "invalid_chart_key"
    assert payload["supported_chart_keys"] == factory.list_keys()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
