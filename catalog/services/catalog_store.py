import logging
import os
from collections.abc import Mapping
from functools import partial
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from catalog.exceptions import LoadError, UnknownCategory
from catalog.records import Category, ComponentRecord
from catalog.services.loading import LoadOnce, as_frame, bad_line_count, read_table

logger = logging.getLogger(__name__)

TYPE_COLUMN = "Type"
MODEL_COLUMN = "Model"
BENCHMARK_COLUMN = "Benchmark"
URL_COLUMN = "URL"


def clean_benchmarks(values: pd.Series) -> pd.Series:
    # "12,345 " -> 12345.0, anything non-numeric -> NaN
    cleaned = values.astype(str).str.replace(",", "", regex=False).str.strip()
    return pd.to_numeric(cleaned, errors="coerce")


def _blank_to_none(value):
    if value is None or pd.isna(value):
        return None
    return value


def records_from_frame(
    df: pd.DataFrame, default_category: Optional[Category] = None, label="table"
) -> Tuple[List[ComponentRecord], int]:
    """Turn one Type/Model/Benchmark/URL table into records.

    Returns (records, dropped). Rows with an unknown type, a blank model or
    a benchmark that is not a non-negative number are dropped, as are lines
    the CSV reader already skipped for having too many fields.
    """
    if TYPE_COLUMN not in df.columns and default_category is None:
        raise LoadError(f"{label}: missing required column '{TYPE_COLUMN}'")
    missing = [c for c in (MODEL_COLUMN, BENCHMARK_COLUMN) if c not in df.columns]
    if missing:
        raise LoadError(
            f"{label}: missing required column(s) {', '.join(repr(c) for c in missing)}"
        )

    if TYPE_COLUMN in df.columns:
        types = df[TYPE_COLUMN].fillna("").astype(str).str.strip()
        if default_category is not None:
            types = types.where(types != "", default_category.value)
    else:
        types = pd.Series(default_category.value, index=df.index)

    benchmarks = clean_benchmarks(df[BENCHMARK_COLUMN])
    if URL_COLUMN in df.columns:
        urls = df[URL_COLUMN]
    else:
        urls = pd.Series([None] * len(df), index=df.index, dtype=object)

    records: List[ComponentRecord] = []
    dropped = bad_line_count(df)
    for type_, model, benchmark, url in zip(types, df[MODEL_COLUMN], benchmarks, urls):
        if pd.isna(benchmark):
            dropped += 1
            continue
        try:
            records.append(
                ComponentRecord(
                    category=type_,
                    model=_blank_to_none(model),
                    benchmark=benchmark,
                    url=_blank_to_none(url),
                )
            )
        except ValueError:
            dropped += 1
    return records, dropped


def _reject(message):
    raise LoadError(message)


def _tables(source):
    """Split a catalog source into (label, reader, default_category) entries.

    The second item of the result is True when the source is a single table,
    in which case a read failure is fatal for the whole load.
    """
    if isinstance(source, pd.DataFrame):
        return [("dataframe", partial(as_frame, source), None)], True

    if isinstance(source, Mapping):
        tables = []
        for key, table in source.items():
            try:
                category = Category.parse(key)
            except UnknownCategory as exc:
                tables.append((str(key), partial(_reject, str(exc)), None))
                continue
            tables.append((category.value, partial(as_frame, table), category))
        return tables, False

    if isinstance(source, (str, os.PathLike)):
        path = Path(source)
        if path.is_dir():
            files = sorted(path.glob("*.csv"))
            if not files:
                logger.warning("No CSV files found in %s", path)
            return [(f.name, partial(read_table, f), None) for f in files], False
        return [(path.name, partial(read_table, path), None)], True

    if source is None:
        raise LoadError("No catalog source given")

    return [(str(p), partial(read_table, p), None) for p in source], False


class Catalog(LoadOnce):
    """In-memory CPU/GPU/RAM benchmark records.

    Populated once by ``load`` and read-only afterwards, so queries take no
    locks. Construct one per process and hand it to whatever needs lookups.
    """

    def __init__(self):
        super().__init__()
        self._records: Dict[Category, Tuple[ComponentRecord, ...]] = {
            category: () for category in Category
        }

    def _ingest(self, source):
        tables, single = _tables(source)
        buckets: Dict[Category, List[ComponentRecord]] = {c: [] for c in Category}
        errors: Dict[str, str] = {}
        total_dropped = 0

        for label, reader, default_category in tables:
            try:
                records, dropped = records_from_frame(
                    reader(), default_category=default_category, label=label
                )
            except LoadError as exc:
                if single:
                    raise
                errors[label] = str(exc)
                logger.warning("Skipping %s: %s", label, exc)
                continue
            for record in records:
                buckets[record.category].append(record)
            if dropped:
                logger.warning("%s: dropped %d malformed row(s)", label, dropped)
            total_dropped += dropped

        self._records = {c: tuple(rows) for c, rows in buckets.items()}
        self.errors = errors
        logger.info(
            "Catalog loaded: %d CPU, %d GPU, %d RAM (%d dropped, %d table error(s))",
            len(self._records[Category.CPU]),
            len(self._records[Category.GPU]),
            len(self._records[Category.RAM]),
            total_dropped,
            len(errors),
        )

    # --- Queries ---
    def get(self, category, model) -> Optional[ComponentRecord]:
        category = Category.parse(category)
        wanted = str(model or "").strip().lower()
        if not wanted:
            return None
        for record in self._records[category]:
            if record.model.lower() == wanted:
                return record
        return None

    def list(self, category) -> Tuple[ComponentRecord, ...]:
        return self._records[Category.parse(category)]

    def search(self, category, text) -> List[ComponentRecord]:
        category = Category.parse(category)
        needle = str(text or "").lower()
        label = category.value.lower()
        return [
            record
            for record in self._records[category]
            if needle in record.model.lower() or needle in label
        ]

    def as_dict(self) -> dict:
        return {
            category.plural: [record.to_dict() for record in self._records[category]]
            for category in Category
        }

    def __len__(self):
        return sum(len(rows) for rows in self._records.values())
