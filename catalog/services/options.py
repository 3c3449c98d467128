"""Name-only option lists for the five picker axes.

Each axis is a separate single-column table. Axes load independently: a
missing or broken file leaves that axis empty and is recorded in
``OptionLists.errors`` instead of failing the others.
"""

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from catalog.exceptions import LoadError, UnknownOptionAxis
from catalog.services.loading import LoadOnce, as_frame, bad_line_count

logger = logging.getLogger(__name__)

OPTIONS_LIST_LIMIT = 300


class OptionAxis(Enum):
    CPU = "CPU Name"
    GPU = "GPU Name"
    RAM = "RAM Name"
    STORAGE = "HDD Name"
    RESOLUTION = "Resolution Name"

    @property
    def column(self) -> str:
        return self.value

    @property
    def key(self) -> str:
        return _AXIS_KEYS[self]

    @classmethod
    def parse(cls, value) -> "OptionAxis":
        if isinstance(value, cls):
            return value
        axis = _AXIS_ALIASES.get(str(value or "").strip().lower())
        if axis is None:
            raise UnknownOptionAxis(f'Invalid option type "{value}"')
        return axis


_AXIS_KEYS = {
    OptionAxis.CPU: "cpus",
    OptionAxis.GPU: "gpus",
    OptionAxis.RAM: "rams",
    OptionAxis.STORAGE: "hdds",
    OptionAxis.RESOLUTION: "resolutions",
}

_AXIS_ALIASES = {
    "cpu": OptionAxis.CPU,
    "cpus": OptionAxis.CPU,
    "gpu": OptionAxis.GPU,
    "gpus": OptionAxis.GPU,
    "ram": OptionAxis.RAM,
    "rams": OptionAxis.RAM,
    "storage": OptionAxis.STORAGE,
    "hdd": OptionAxis.STORAGE,
    "hdds": OptionAxis.STORAGE,
    "resolution": OptionAxis.RESOLUTION,
    "resolutions": OptionAxis.RESOLUTION,
}

DEFAULT_OPTION_FILES = {
    OptionAxis.CPU: "cpu.csv",
    OptionAxis.GPU: "gpus.csv",
    OptionAxis.RAM: "ram.csv",
    OptionAxis.STORAGE: "hdd.csv",
    OptionAxis.RESOLUTION: "resolutions.csv",
}


def read_names(table, column: str) -> List[str]:
    df = as_frame(table)
    if column not in df.columns:
        raise LoadError(f"missing column '{column}'")
    skipped = bad_line_count(df)
    if skipped:
        logger.warning("%s: skipped %d malformed line(s)", column, skipped)
    names = []
    for value in df[column]:
        if value is None or pd.isna(value):
            continue
        name = str(value).strip()
        if name:
            names.append(name)
    return names


def _axis_sources(source, files=None) -> Tuple[Dict[OptionAxis, object], Dict[str, str]]:
    """Map each axis to its table; unrecognized keys come back as errors."""
    tables: Dict[OptionAxis, object] = {}
    unknown: Dict[str, str] = {}

    if isinstance(source, Mapping):
        entries = source.items()
    elif isinstance(source, (str, os.PathLike)):
        directory = Path(source)
        names = {axis: filename for axis, filename in DEFAULT_OPTION_FILES.items()}
        names.update(files or {})
        entries = [(axis, directory / filename) for axis, filename in names.items()]
    else:
        raise LoadError(f"Unsupported options source: {source!r}")

    for key, table in entries:
        try:
            tables[OptionAxis.parse(key)] = table
        except UnknownOptionAxis as exc:
            unknown[str(key)] = str(exc)
    return tables, unknown


class OptionLists(LoadOnce):
    def __init__(self):
        super().__init__()
        self._names: Dict[OptionAxis, Tuple[str, ...]] = {
            axis: () for axis in OptionAxis
        }

    def load(self, source, files=None):
        """Load every axis from a directory or an ``axis -> table`` mapping.

        ``files`` overrides the per-axis file names used with a directory.
        """
        return super().load((source, files))

    def _ingest(self, source):
        source, files = source
        tables, unknown = _axis_sources(source, files)
        names: Dict[OptionAxis, Tuple[str, ...]] = {}
        errors: Dict[object, str] = {}

        for key, message in unknown.items():
            errors[key] = message
            logger.warning("Ignoring option source %r: %s", key, message)

        for axis in OptionAxis:
            if axis not in tables:
                names[axis] = ()
                errors[axis] = "no source configured"
                logger.warning("No option source for %s", axis.key)
                continue
            try:
                names[axis] = tuple(read_names(tables[axis], axis.column))
            except LoadError as exc:
                names[axis] = ()
                errors[axis] = str(exc)
                logger.warning("Error loading %s names: %s", axis.key, exc)

        self._names = names
        self.errors = errors
        logger.info(
            "Options loaded: %s",
            ", ".join(f"{len(names[axis])} {axis.key}" for axis in OptionAxis),
        )

    def list(self, axis, limit: Optional[int] = OPTIONS_LIST_LIMIT) -> Tuple[str, ...]:
        names = self._names[OptionAxis.parse(axis)]
        if limit is None:
            return names
        return names[: max(limit, 0)]

    def search(self, axis, text) -> List[str]:
        needle = str(text or "").lower()
        return [name for name in self._names[OptionAxis.parse(axis)] if needle in name.lower()]

    def as_dict(self, limit: Optional[int] = OPTIONS_LIST_LIMIT) -> Dict[str, List[str]]:
        return {axis.key: list(self.list(axis, limit)) for axis in OptionAxis}
