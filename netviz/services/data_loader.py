import csv
import io
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Generic, List, Optional, TypeVar, Union

import numpy as np
import pandas as pd

from netviz.config.observability import log_error, log_event, log_warning, timed
from netviz.config.settings import settings as default_settings
from netviz.schemas.datasets import GAPMINDER, INTERNET_USE, required_columns
from netviz.schemas.records import GapminderRecord, InternetUseRecord
from netviz.services.validators import enforce_dimensions, missing_columns

T = TypeVar("T")


class UnsupportedFileType(ValueError):
    pass


class LoadFailure(Exception):
    """A data file could not be read or does not have the expected shape."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    records: List[T] = field(default_factory=list)
    error: Optional[LoadFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, records: List[T]) -> "LoadResult[T]":
        return cls(records=list(records))

    @classmethod
    def failure(cls, error: LoadFailure) -> "LoadResult[T]":
        return cls(error=error)


def _detect_separator(sample: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=";,|\t")
        return dialect.delimiter
    except csv.Error:
        return ","


def read_bytes_to_df(data: bytes, filename: Optional[str], settings: Any = None) -> pd.DataFrame:
    settings = settings or default_settings
    extension = os.path.splitext(filename or "")[1].lower()
    buffer = io.BytesIO(data)
    if extension in {".xls", ".xlsx"}:
        df = pd.read_excel(buffer)
    elif extension in {".csv", ""}:
        sample = data[:1024].decode(errors="ignore")
        sep = _detect_separator(sample)
        df = pd.read_csv(io.BytesIO(data), sep=sep)
    else:
        raise UnsupportedFileType(f"Unsupported file type: {extension or 'unknown'}")
    enforce_dimensions(df, max_rows=settings.max_rows, max_columns=settings.max_columns)
    return df


def _column(df: pd.DataFrame, name: str) -> Optional[str]:
    wanted = name.strip().upper()
    for col in df.columns:
        if str(col).strip().upper() == wanted:
            return col
    return None


def _text(df: pd.DataFrame, name: str) -> pd.Series:
    col = _column(df, name)
    if col is None:
        return pd.Series([""] * len(df.index), index=df.index, dtype=object)
    return df[col].fillna("").astype(str).str.strip()


def _number(df: pd.DataFrame, name: str) -> pd.Series:
    col = _column(df, name)
    if col is None:
        return pd.Series([np.nan] * len(df.index), index=df.index, dtype=float)
    values = pd.to_numeric(df[col], errors="coerce").astype(float)
    return values.replace([np.inf, -np.inf], np.nan)


def _drop_duplicate_keys(frame: pd.DataFrame, subset: List[str], dataset: str) -> pd.DataFrame:
    dupes = frame.duplicated(subset=subset, keep="first")
    if dupes.any():
        keys = sorted({"/".join(str(v) for v in row) for row in frame.loc[dupes, subset].itertuples(index=False)})
        log_warning("duplicate_keys_dropped", dataset=dataset, count=int(dupes.sum()), keys=",".join(keys))
    return frame[~dupes]


def parse_internet_use(df: pd.DataFrame) -> List[InternetUseRecord]:
    """Type File A rows; rows with a blank code or a non-finite year/value are dropped."""
    frame = pd.DataFrame(
        {"code": _text(df, "LOCATION"), "year": _number(df, "TIME"), "value": _number(df, "Value")}
    )
    valid = frame[(frame["code"] != "") & frame["year"].notna() & frame["value"].notna()]
    valid = _drop_duplicate_keys(valid, ["code", "year"], INTERNET_USE)
    log_event("rows_parsed", dataset=INTERNET_USE, kept=len(valid.index), dropped=len(frame.index) - len(valid.index))
    return [
        InternetUseRecord(code=row.code, year=int(row.year), value=float(row.value))
        for row in valid.itertuples(index=False)
    ]


def parse_gapminder(df: pd.DataFrame) -> List[GapminderRecord]:
    """Type File B rows.

    The code is the upper-cased first three characters of the country name. Internet and
    urban rates are required; income is kept when finite and left as None otherwise.
    """
    names = _text(df, "country")
    frame = pd.DataFrame(
        {
            "name": names,
            "code": names.str[:3].str.upper(),
            "net": _number(df, "internetuserate"),
            "urb": _number(df, "urbanrate"),
            "gdp": _number(df, "incomeperperson"),
        }
    )
    valid = frame[(frame["code"] != "") & frame["net"].notna() & frame["urb"].notna()]
    valid = _drop_duplicate_keys(valid, ["code"], GAPMINDER)
    log_event("rows_parsed", dataset=GAPMINDER, kept=len(valid.index), dropped=len(frame.index) - len(valid.index))
    return [
        GapminderRecord(
            name=row.name,
            code=row.code,
            net=float(row.net),
            urb=float(row.urb),
            gdp=None if pd.isna(row.gdp) else float(row.gdp),
        )
        for row in valid.itertuples(index=False)
    ]


PARSERS = {INTERNET_USE: parse_internet_use, GAPMINDER: parse_gapminder}


def _load(
    source: Union[str, Path], dataset: str, parser: Callable[[pd.DataFrame], List[T]], settings: Any
) -> LoadResult[T]:
    path = Path(source)
    try:
        with timed(f"load_{dataset}"):
            df = read_bytes_to_df(path.read_bytes(), path.name, settings=settings)
            missing = missing_columns(df, required_columns(dataset))
            if missing:
                raise LoadFailure(str(path), "missing required columns: " + ", ".join(missing))
            records = parser(df)
    except LoadFailure as exc:
        log_error("load_failure", exc.reason, dataset=dataset, source=exc.source)
        return LoadResult.failure(exc)
    except (OSError, ValueError) as exc:
        failure = LoadFailure(str(path), str(exc))
        log_error("load_failure", failure.reason, dataset=dataset, source=failure.source)
        return LoadResult.failure(failure)
    log_event("dataset_loaded", dataset=dataset, source=str(path), rows=len(records))
    return LoadResult.success(records)


def load_internet_use(source: Union[str, Path], settings: Any = None) -> LoadResult[InternetUseRecord]:
    return _load(source, INTERNET_USE, parse_internet_use, settings or default_settings)


def load_gapminder(source: Union[str, Path], settings: Any = None) -> LoadResult[GapminderRecord]:
    return _load(source, GAPMINDER, parse_gapminder, settings or default_settings)
