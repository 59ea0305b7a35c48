from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class InternetUseRecord(BaseModel):
    """One row of the internet-use sample: share of individuals online, per country and year."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1, description="Country code (LOCATION)")
    year: int = Field(..., description="Observation year (TIME)")
    value: float = Field(..., allow_inf_nan=False, description="Percentage of individuals online")

    @property
    def key(self) -> str:
        return self.code


class GapminderRecord(BaseModel):
    """One country of the gapminder snapshot.

    `code` is derived from the name (first three characters, upper-cased), so it is not an
    ISO code; the loader keeps the first record per code.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    net: float = Field(..., allow_inf_nan=False, description="Internet users per 100 people")
    urb: float = Field(..., allow_inf_nan=False, description="Urban population (%)")
    gdp: Optional[float] = Field(default=None, allow_inf_nan=False, description="Income per person (USD)")

    @property
    def key(self) -> str:
        return self.code
