from typing import List, Set

INTERNET_USE = "internet_use"
GAPMINDER = "gapminder"

INTERNET_USE_REQUIRED_COLUMNS: Set[str] = {"LOCATION", "TIME", "Value"}
GAPMINDER_REQUIRED_COLUMNS: Set[str] = {"country", "internetuserate", "urbanrate"}


def required_columns(dataset: str) -> List[str]:
    if dataset == INTERNET_USE:
        return sorted(INTERNET_USE_REQUIRED_COLUMNS)
    if dataset == GAPMINDER:
        return sorted(GAPMINDER_REQUIRED_COLUMNS)
    raise KeyError(f"Unknown dataset: {dataset}")
