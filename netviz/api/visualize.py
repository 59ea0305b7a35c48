import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from netviz.config.observability import log_event
from netviz.schemas.errors import ErrorCode
from netviz.schemas.visualize import ChartRequest
from netviz.services import visualize_service
from netviz.services.error_builder import build_error
from netviz.viz.registry import factory

router = APIRouter(tags=["visualize"])


def _payload_error(message: str, details: list[str]) -> JSONResponse:
    error = build_error(
        code=ErrorCode.PAYLOAD_ERROR,
        message=message,
        details=details,
        supported_keys=factory.list_keys(),
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error)


@router.get("/visualize/supported-keys", response_model=list[str])
async def supported_keys() -> list[str]:
    return factory.list_keys()


@router.post("/visualize/{chart_key}", response_model=Dict[str, Any])
async def visualize(
    chart_key: str,
    data_file: UploadFile = File(...),
    filters: Optional[str] = Form(None),
    config: Optional[str] = Form(None),
) -> Dict[str, Any]:
    try:
        parsed_filters = json.loads(filters) if filters else None
        parsed_config = json.loads(config) if config else None
    except json.JSONDecodeError as exc:
        return _payload_error("Invalid JSON payload in filters/config", [str(exc)])
    for name, value in (("filters", parsed_filters), ("config", parsed_config)):
        if value is not None and not isinstance(value, dict):
            return _payload_error(f"{name} must be a JSON object", [type(value).__name__])

    log_event("visualize.request_parsed", chart_key=chart_key, filters=parsed_filters, config=parsed_config)

    request = ChartRequest(chart_key=chart_key, filters=parsed_filters, config=parsed_config)
    try:
        return await visualize_service.generate_chart(request=request, data_file=data_file)
    except visualize_service.UnknownChartKeyError as exc:
        error = build_error(
            code=ErrorCode.INVALID_CHART_KEY,
            message=str(exc.args[0]) if exc.args else str(exc),
            details=[],
            supported_keys=factory.list_keys(),
        )
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=error)
    except visualize_service.ValidationFailure as exc:
        error = build_error(
            code=exc.code,
            message=exc.message,
            details=exc.details,
            supported_keys=factory.list_keys(),
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error)
