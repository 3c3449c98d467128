import threading
from enum import Enum
from pathlib import Path

import pandas as pd

from catalog.exceptions import LoadError


class LoadState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


def read_table(path) -> pd.DataFrame:
    """Read a CSV as strings with stripped column names.

    Lines with more fields than the header are skipped; their count is kept
    in ``df.attrs["bad_lines"]``. Any failure to open or parse the file as a
    whole is reported as LoadError.
    """
    path = Path(path)
    bad_lines = []

    def skip_line(fields):
        bad_lines.append(fields)
        return None

    try:
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            engine="python",
            on_bad_lines=skip_line,
        )
    except (
        OSError,
        UnicodeDecodeError,
        pd.errors.EmptyDataError,
        pd.errors.ParserError,
    ) as exc:
        raise LoadError(f"Cannot read {path}: {exc}") from exc
    df.columns = df.columns.str.strip()
    df.attrs["bad_lines"] = len(bad_lines)
    return df


def bad_line_count(df: pd.DataFrame) -> int:
    return int(df.attrs.get("bad_lines", 0))


def as_frame(table) -> pd.DataFrame:
    if isinstance(table, pd.DataFrame):
        df = table.copy()
        df.columns = [str(c).strip() for c in df.columns]
        return df
    return read_table(table)


class LoadOnce:
    """Single-flight loader: ``_ingest`` runs at most once per instance.

    Concurrent callers block on the lock until the first load finishes, so
    every caller returns with the contents fully populated. A failed ingest
    resets the state to EMPTY and re-raises.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = LoadState.EMPTY
        self.errors = {}

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is LoadState.READY

    def load(self, source):
        if self._state is LoadState.READY:
            return self
        with self._lock:
            if self._state is LoadState.READY:
                return self
            self._state = LoadState.LOADING
            try:
                self._ingest(source)
            except Exception:
                self._state = LoadState.EMPTY
                raise
            self._state = LoadState.READY
        return self

    def _ingest(self, source):
        raise NotImplementedError
