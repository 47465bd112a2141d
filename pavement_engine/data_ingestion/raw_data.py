"""Typed access to raw survey rows and a pandas-based CSV loader.

A raw row is one line of the network inventory export: one row per road
segment, with ``file_*`` columns for identity, classification, traffic,
surfacing, pavement and condition survey data.  All values are read as
text and converted on access so that blank cells and mixed formats are
handled in one place.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import pandas as pd

_TRUE_TEXT: frozenset[str] = frozenset({"true", "1", "yes", "y", "t"})
_FALSE_TEXT: frozenset[str] = frozenset({"false", "0", "no", "n", "f", ""})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


# ---------------------------------------------------------------------------
# Row accessor
# ---------------------------------------------------------------------------


class RawRow:
    """Column-name access to a single raw data row.

    Args:
        values: Mapping of column name to cell value.  A
            :class:`pandas.Series` works as well as a plain ``dict``.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | pd.Series):
        if isinstance(values, pd.Series):
            values = values.to_dict()
        self._values: dict[str, Any] = {str(k).strip().lower(): v for k, v in values.items()}

    def __contains__(self, column: str) -> bool:
        return column.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def _get(self, column: str) -> Any:
        try:
            return self._values[column.lower()]
        except KeyError:
            raise KeyError(f"Raw data column '{column}' not found") from None

    def text(self, column: str) -> str:
        """Return the cell as stripped text; blank cells give ``""``."""
        value = self._get(column)
        return "" if _is_blank(value) else str(value).strip()

    def number(self, column: str) -> float:
        """Return the cell as a float; blank cells give ``0.0``.

        Raises:
            ValueError: If the cell is not numeric.
        """
        value = self._get(column)
        if _is_blank(value):
            return 0.0
        try:
            return float(str(value).strip())
        except ValueError:
            raise ValueError(
                f"Raw data column '{column}' value '{value}' is not numeric"
            ) from None

    def flag(self, column: str) -> bool:
        """Return the cell as a boolean (true/false, 1/0, yes/no).

        Raises:
            ValueError: If the text is not a recognised boolean.
        """
        text = self.text(column).lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
        raise ValueError(f"Raw data column '{column}' value '{text}' is not a boolean")

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)


# ---------------------------------------------------------------------------
# CSV loader
# ---------------------------------------------------------------------------


def load_raw_frame(path: Path) -> pd.DataFrame:
    """Read a raw inventory CSV with every column as text.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file has no ``file_*`` columns.
    """
    if not path.exists():
        raise FileNotFoundError(f"Raw data file not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if not any(c.startswith("file_") for c in df.columns):
        raise ValueError(f"Raw data file {path} has no 'file_*' columns")
    return df


def load_raw_rows(path: Path) -> list[RawRow]:
    """Load a raw inventory CSV as a list of :class:`RawRow`, in file order."""
    df = load_raw_frame(path)
    return [RawRow(row) for _, row in df.iterrows()]
