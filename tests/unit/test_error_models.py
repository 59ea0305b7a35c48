from netviz.schemas.errors import ErrorCode, ErrorResponse
from netviz.services.error_builder import build_error


def test_error_builder_structures_payload():
    payload = build_error("invalid_chart_key", "bad key", ["detail"], ["a", "b"])
    assert payload["code"] == "invalid_chart_key"
    assert payload["message"] == "bad key"
    assert payload["details"] == ["detail"]
    assert payload["supported_chart_keys"] == ["a", "b"]


def test_error_builder_defaults_details():
    payload = build_error(ErrorCode.DUPLICATE_KEY, "dup")
    assert payload["details"] == []
    assert payload["supported_chart_keys"] is None


def test_error_response_round_trips_codes():
    model = ErrorResponse(code=ErrorCode.DATASET_TOO_LARGE, message="too big")
    assert model.model_dump()["code"] == "dataset_too_large"
