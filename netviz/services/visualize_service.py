from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import UploadFile

from netviz.config.observability import log_error, log_event, timed
from netviz.config.settings import settings
from netviz.schemas.datasets import required_columns
from netviz.schemas.errors import ErrorCode
from netviz.schemas.visualize import ChartRequest, VisualizationSpec
from netviz.services import data_loader
from netviz.services.validators import DatasetTooLarge, missing_columns
from netviz.viz.reconciler import DuplicateKeyError
from netviz.viz.registry import factory
from netviz.viz.transitions import ManualClock, TransitionScheduler
import netviz.viz  # noqa: F401 ensures default controllers registered


class UnknownChartKeyError(KeyError):
    pass


class ValidationFailure(ValueError):
    def __init__(self, code: str, message: str, details: Optional[list[str]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or []


async def _read_upload(file: UploadFile) -> bytes:
    return await file.read()


def _frame_ms(config: Dict[str, Any]) -> Optional[float]:
    raw = config.get("frame_ms")
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(
            code=ErrorCode.PAYLOAD_ERROR, message="frame_ms must be a number", details=[str(raw)]
        ) from exc
    if value < 0:
        raise ValidationFailure(code=ErrorCode.PAYLOAD_ERROR, message="frame_ms must not be negative", details=[str(raw)])
    return value


async def generate_chart(request: ChartRequest, data_file: UploadFile) -> Dict[str, Any]:
    """Render one chart from an uploaded file and return its Vega-Lite spec.

    The controller renders on a simulated clock: the initial render is settled, then the
    filters are replayed. With ``config.frame_ms`` the spec shows the frame that many
    milliseconds into the resulting transitions; otherwise their end state.
    """
    controller_cls = factory.get(request.chart_key)
    if controller_cls is None:
        log_error("invalid_chart_key", f"Unsupported chart key: {request.chart_key}")
        raise UnknownChartKeyError(f"Unsupported chart key: {request.chart_key}")
    config = request.config or {}
    filters = request.filters or {}
    frame_ms = _frame_ms(config)

    with timed(f"load_{controller_cls.dataset}"):
        raw = await _read_upload(data_file)
        try:
            df = data_loader.read_bytes_to_df(raw, data_file.filename, settings=settings)
        except data_loader.UnsupportedFileType as exc:
            raise ValidationFailure(
                code=ErrorCode.INVALID_FILE_TYPE, message="Unsupported file type", details=[str(exc)]
            ) from exc
        except DatasetTooLarge as exc:
            raise ValidationFailure(
                code=ErrorCode.DATASET_TOO_LARGE, message="Dataset too large", details=[str(exc)]
            ) from exc
        except ValueError as exc:
            raise ValidationFailure(
                code=ErrorCode.LOAD_FAILURE, message="Could not parse the uploaded file", details=[str(exc)]
            ) from exc

    missing = missing_columns(df, required_columns(controller_cls.dataset))
    if missing:
        raise ValidationFailure(
            code=ErrorCode.MISSING_REQUIRED_COLUMNS,
            message=f"Missing required {controller_cls.dataset} columns",
            details=missing,
        )
    records = data_loader.PARSERS[controller_cls.dataset](df)

    clock = ManualClock()
    scheduler = TransitionScheduler(clock=clock)
    with timed("generate_spec"):
        try:
            controller = factory.create(request.chart_key, records, settings, scheduler=scheduler)
            scheduler.flush()
            controller.apply_filters(filters)
        except DuplicateKeyError as exc:
            raise ValidationFailure(
                code=ErrorCode.DUPLICATE_KEY, message="Duplicate record key", details=[str(exc.key)]
            ) from exc
        except (TypeError, ValueError) as exc:
            raise ValidationFailure(
                code=ErrorCode.PAYLOAD_ERROR, message="Invalid filter value", details=[str(exc)]
            ) from exc
        if frame_ms is None:
            scheduler.flush()
        else:
            scheduler.tick(clock.advance(frame_ms))
        spec = controller.to_spec()

    selection = controller.selection
    keys = sorted(str(k) for k in selection.snapshot()) if selection is not None else []
    log_event("chart_generated", chart_key=request.chart_key, records=len(records), selection=len(keys))
    return VisualizationSpec(
        chart_key=request.chart_key,
        spec=spec,
        generated_at=datetime.now(timezone.utc),
        selection=keys,
    ).model_dump(mode="json")
