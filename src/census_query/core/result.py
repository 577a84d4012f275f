"""Tabular results returned by the Census API."""

import json
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import pandas as pd

from census_query.core.geography import LEVELS
from census_query.errors import (
    InvalidQueryError,
    MismatchedGeographyError,
    MismatchedRowError,
)

Payload = Union[str, bytes, List[List[str]]]


def parse_payload(raw: Payload) -> List[Any]:
    """
    Parse a raw API response into a list.

    Args:
        raw: JSON text, or an already parsed list

    Returns:
        The parsed payload. Its elements are not checked.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidQueryError(f"API response is not valid JSON: {e}")

    if not isinstance(raw, list):
        raise InvalidQueryError(f"API response is not a table: {raw!r}")

    return raw


def split_colnames(colnames: List[str]) -> Tuple[List[str], List[str]]:
    """Split column names into geography columns and data columns, keeping order."""
    geocolnames = [c for c in colnames if c in LEVELS]
    datacolnames = [c for c in colnames if c not in LEVELS]
    return geocolnames, datacolnames


def _split_table(raw: Payload) -> Tuple[List[str], List[List[str]]]:
    """Split a payload into its header and data rows."""
    table = parse_payload(raw)
    if not table:
        return [], []

    for row in table:
        if not isinstance(row, list):
            raise InvalidQueryError(f"API response row is not a list: {row!r}")

    header, *rows = table
    for row in rows:
        if len(row) != len(header):
            raise InvalidQueryError(
                f"API response row has {len(row)} cells, header has {len(header)}"
            )

    return list(header), [list(r) for r in rows]


class ResultSet:
    """
    A table of Census data.

    Built from the API's JSON format::

        [["column1", "column2", ...], [row11, row12, ...], [row21, row22, ...], ...]

    Columns named after a geography level (state, county, ...) identify the
    row; all other columns are data. Results fetched in several chunks are
    combined with :meth:`merge`.
    """

    def __init__(
        self,
        column_names: Optional[List[str]] = None,
        rows: Optional[List[List[str]]] = None,
    ):
        self.column_names: List[str] = list(column_names or [])
        self.rows: List[List[str]] = rows if rows is not None else []
        self._colmap: Dict[str, int] = {c: i for i, c in enumerate(self.column_names)}
        self.geography_columns, self.data_columns = split_colnames(self.column_names)

    @classmethod
    def from_payload(cls, raw: Payload) -> "ResultSet":
        """Construct a result set from an API response."""
        header, rows = _split_table(raw)
        return cls(header, rows)

    def merge(self, raw: Payload) -> "ResultSet":
        """
        Merge additional columns returned by the API into this result set.

        Rows are matched by position. This assumes the API returns rows in a
        consistent order for the same geography, and fails hard if it does not.

        Args:
            raw: API response for the same geography with other variables

        Returns:
            This result set, with the new data columns appended
        """
        colnames, rows = _split_table(raw)
        colmap = {c: i for i, c in enumerate(colnames)}
        geocolnames, datacolnames = split_colnames(colnames)

        if geocolnames != self.geography_columns:
            raise MismatchedGeographyError(
                f"Mismatched geographies: {self.geography_columns} != {geocolnames}"
            )

        if len(rows) != len(self.rows):
            raise MismatchedRowError(
                f"Mismatched rows: expected {len(self.rows)} rows, got {len(rows)}"
            )

        for i, (row, other) in enumerate(zip(self.rows, rows)):
            for name in self.geography_columns:
                if row[self._colmap[name]] != other[colmap[name]]:
                    raise MismatchedRowError(
                        f"Mismatched rows at position {i}: {name} "
                        f"{row[self._colmap[name]]!r} != {other[colmap[name]]!r}"
                    )

        for row, other in zip(self.rows, rows):
            row.extend(other[colmap[name]] for name in datacolnames)

        n = len(self.column_names)
        self._colmap.update({name: n + i for i, name in enumerate(datacolnames)})
        self.column_names.extend(datacolnames)
        self.data_columns.extend(datacolnames)

        return self

    def column(self, name: str) -> List[str]:
        """Return all values of one column."""
        if name not in self._colmap:
            raise KeyError(name)
        i = self._colmap[name]
        return [row[i] for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a pandas DataFrame of strings."""
        return pd.DataFrame(self.rows, columns=self.column_names)

    def __iter__(self) -> Iterator[Dict[str, str]]:
        for row in self.rows:
            yield dict(zip(self.column_names, row))

    def __len__(self) -> int:
        return len(self.rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self.column_names == other.column_names and self.rows == other.rows

    def __repr__(self) -> str:
        return f"ResultSet(columns={self.column_names!r}, rows={len(self.rows)})"
