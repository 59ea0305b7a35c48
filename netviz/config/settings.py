from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    max_rows: int = Field(50000, description="Maximum allowed rows per dataset")
    max_columns: int = Field(200, description="Maximum allowed columns per dataset")
    log_level: str = Field("INFO", description="Logging level")
    cors_allow_origins: str = Field(
        "*",
        description="CORS allow origins for the API (use '*' or a comma-separated list)",
    )
    internet_use_csv: Path = Field(
        Path("data/internet-use-sample.csv"), description="Internet use per country and year (File A)"
    )
    gapminder_csv: Path = Field(
        Path("data/gapminder_internet.csv"), description="Gapminder internet/urban/income snapshot (File B)"
    )
    bar_top_n: int = Field(5, description="Number of countries ranked by the bar chart")
    scatter_default_cap: int = Field(150, description="Point cap used when the cap input is not a number")
    scatter_cap_min: int = Field(20, description="Lowest accepted point cap")
    scatter_cap_max: int = Field(500, description="Highest accepted point cap")

    model_config = ConfigDict(env_prefix="NETVIZ_", case_sensitive=False)


settings = Settings()
