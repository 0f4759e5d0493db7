from __future__ import annotations

import csv
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from lib.errors import StoreError


Row = list[str]


class TableStore(ABC):
    """
    Ordered list of text rows. Row 0 is whatever the caller put there (the repository keeps a header in it).

    Implementations raise StoreError for every I/O problem and nothing else.
    """

    @abstractmethod
    def exists(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def read_rows(self) -> list[Row]:
        raise NotImplementedError

    @abstractmethod
    def create(self, header: Sequence[str]) -> None:
        """Create the store holding only `header`."""
        raise NotImplementedError

    @abstractmethod
    def write_row(self, index: int, values: Sequence[str]) -> None:
        """Overwrite row `index` (0-based, header included)."""
        raise NotImplementedError

    @abstractmethod
    def append_row(self, values: Sequence[str]) -> int:
        """Append one row; returns its index."""
        raise NotImplementedError


class CsvTableStore(TableStore):
    """
    UTF-8 CSV file backing store.

    Writes go through a sibling temp file + os.replace so a crash mid-write
    never leaves a half-written table behind.
    """

    def __init__(self, *, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read_rows(self) -> list[Row]:
        try:
            with self._path.open("r", encoding="utf-8", newline="") as f:
                return [list(r) for r in csv.reader(f)]
        except FileNotFoundError as e:
            raise StoreError(f"Store not found: {self._path}", path=self._path) from e
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StoreError(f"Could not read store {self._path}: {e}", path=self._path) from e

    def create(self, header: Sequence[str]) -> None:
        self._write_all([list(header)])

    def write_row(self, index: int, values: Sequence[str]) -> None:
        rows = self.read_rows()
        if index < 0 or index >= len(rows):
            raise StoreError(f"Row {index} out of range (store has {len(rows)} rows)", path=self._path)
        rows[index] = [str(v) for v in values]
        self._write_all(rows)

    def append_row(self, values: Sequence[str]) -> int:
        rows = self.read_rows()
        rows.append([str(v) for v in values])
        self._write_all(rows)
        return len(rows) - 1

    def _write_all(self, rows: list[Row]) -> None:
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8", newline="") as f:
                csv.writer(f).writerows(rows)
            os.replace(tmp, self._path)
        except (OSError, csv.Error) as e:
            raise StoreError(f"Could not write store {self._path}: {e}", path=self._path) from e
