"""Source reading layer (pure reads, no interpretation).

Every source is loaded as a raw grid: a list of rows, each a list of cell
values with blanks as ``None``. Header detection is left to the extractors
because the header row position differs between sources.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, List

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from .errors import SourceReadError

LOGGER = logging.getLogger(__name__)

Table = List[List[Any]]

_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
_CSV_SUFFIXES = {".csv", ".txt"}


def _coerce_path(pathlike: str | Path) -> Path:
    return Path(pathlike)


def _frame_to_rows(df: pd.DataFrame) -> Table:
    if df.empty:
        return []
    clean = df.astype(object).where(pd.notna(df), None)
    return [list(row) for row in clean.itertuples(index=False, name=None)]


def _read_excel_grid(path: Path) -> pd.DataFrame:
    # First sheet only; the extracts never split data across sheets.
    return pd.read_excel(path, sheet_name=0, header=None)


def _bad_line_logger(path: Path):
    def _skip(fields: List[str]) -> None:
        LOGGER.warning(
            "Skipping malformed row in %s: %d fields (%s)",
            path.name,
            len(fields),
            ",".join(fields)[:80],
        )
        return None

    return _skip


def _read_csv_grid(path: Path) -> pd.DataFrame:
    # Everything stays text so identifiers keep their leading zeros. Rows with
    # more fields than the header are dropped one by one.
    return pd.read_csv(
        path,
        header=None,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8",
        skip_blank_lines=True,
        engine="python",
        on_bad_lines=_bad_line_logger(path),
    )


def source_exists(path: str | Path) -> bool:
    return _coerce_path(path).is_file()


def read_table(path: str | Path) -> Table:
    """Load the first sheet of a workbook (or a CSV file) as a raw row grid.

    Raises:
        SourceReadError: when the file is missing, has an unknown suffix or
            cannot be parsed.
    """

    file_path = _coerce_path(path)
    if not file_path.is_file():
        raise SourceReadError(f"Source not found: {file_path}")
    suffix = file_path.suffix.lower()
    try:
        if suffix in _EXCEL_SUFFIXES:
            df = _read_excel_grid(file_path)
        elif suffix in _CSV_SUFFIXES:
            df = _read_csv_grid(file_path)
        else:
            raise SourceReadError(f"Unsupported source type '{suffix}': {file_path}")
    except SourceReadError:
        raise
    except pd.errors.EmptyDataError:
        LOGGER.debug("Source %s is empty", file_path)
        return []
    except (
        OSError,
        ValueError,
        zipfile.BadZipFile,
        InvalidFileException,
        pd.errors.ParserError,
    ) as exc:
        raise SourceReadError(f"Unable to read {file_path}: {exc}") from exc
    rows = _frame_to_rows(df)
    LOGGER.debug("Read %d raw rows from %s", len(rows), file_path)
    return rows


__all__ = ["Table", "read_table", "source_exists"]
