import math
from typing import Any, Iterable, List, Optional

import pandas as pd

from netviz.config.observability import log_event


def missing_columns(df: pd.DataFrame, required: Iterable[str]) -> List[str]:
    df_norm = {str(col).strip().upper() for col in df.columns}
    missing = []
    for col in required:
        if str(col).strip().upper() not in df_norm:
            missing.append(col)
    return sorted(missing)


class DatasetTooLarge(ValueError):
    pass


def enforce_dimensions(df: pd.DataFrame, max_rows: int, max_columns: int) -> None:
    if len(df.index) > max_rows or len(df.columns) > max_columns:
        raise DatasetTooLarge(
            f"Dataset too large: rows={len(df.index)}, cols={len(df.columns)}, "
            f"limits rows<={max_rows}, cols<={max_columns}"
        )


def _to_float(raw: Any) -> Optional[float]:
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def clamp_int(raw: Any, default: int, lo: int, hi: int, field: str = "value") -> int:
    """Coerce a user-supplied number into ``[lo, hi]``.

    Non-numeric or non-finite input falls back to ``default``; fractional input is
    truncated toward zero before clamping.
    """
    value = _to_float(raw)
    if value is None:
        log_event("input_defaulted", field=field, raw=raw, value=default)
        return default
    clamped = max(lo, min(hi, int(value)))
    if clamped != value:
        log_event("input_clamped", field=field, raw=raw, value=clamped)
    return clamped


def clamp_cap(raw: Any, settings: Any) -> int:
    return clamp_int(
        raw,
        default=settings.scatter_default_cap,
        lo=settings.scatter_cap_min,
        hi=settings.scatter_cap_max,
        field="cap",
    )
