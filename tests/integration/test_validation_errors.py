import json
from pathlib import Path

FIXTURES = Path(__file__).parent.parent / "fixtures"


def test_missing_columns_error(client):
    minimal = b"LOCATION,year\nUSA,2010"
    response = client.post(
        "/api/visualize/bar_ranking",
        files={"data_file": ("bad.csv", minimal, "text/csv")},
    )
    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "missing_required_columns"
    assert payload["details"] == ["TIME", "Value"]


def test_wrong_dataset_for_chart(client):
    response = client.post(
        "/api/visualize/bubble_scatter",
        files={"data_file": ("a.csv", (FIXTURES / "internet-use-sample.csv").read_bytes(), "text/csv")},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "missing_required_columns"


def test_invalid_file_type(client):
    response = client.post(
        "/api/visualize/bar_ranking",
        files={"data_file": ("data.txt", b"LOCATION,TIME,Value", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_file_type"


def test_invalid_json_filters(client):
    response = client.post(
        "/api/visualize/bar_ranking",
        files={"data_file": ("a.csv", (FIXTURES / "internet-use-sample.csv").read_bytes(), "text/csv")},
        data={"filters": "{not json"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "payload_error"


def test_filters_must_be_an_object(client):
    response = client.post(
        "/api/visualize/bar_ranking",
        files={"data_file": ("a.csv", (FIXTURES / "internet-use-sample.csv").read_bytes(), "text/csv")},
        data={"filters": "[1, 2]"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "payload_error"


def test_bad_brush_is_payload_error(client):
    response = client.post(
        "/api/visualize/bubble_scatter",
        files={"data_file": ("g.csv", (FIXTURES / "gapminder_internet.csv").read_bytes(), "text/csv")},
        data={"filters": json.dumps({"brush": [1, 2, 3]})},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "payload_error"


def test_bad_frame_ms(client):
    response = client.post(
        "/api/visualize/time_series",
        files={"data_file": ("a.csv", (FIXTURES / "internet-use-sample.csv").read_bytes(), "text/csv")},
        data={"config": json.dumps({"frame_ms": "soon"})},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "payload_error"
