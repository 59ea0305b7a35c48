from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ChartRequest(BaseModel):
    chart_key: str = Field(..., description="Registry key selecting the chart controller")
    filters: Optional[Dict[str, Any]] = Field(
        default=None, description="Filter inputs replayed on the controller (year, cap, toggle, brush...)"
    )
    config: Optional[Dict[str, Any]] = Field(
        default=None, description="Rendering options such as frame_ms"
    )


class VisualizationSpec(BaseModel):
    chart_key: str
    spec: Dict[str, Any]
    generated_at: datetime
    selection: List[str] = Field(default_factory=list)
