"""
Observation access for pyols.

Two shapes of data feed a regression:

    - row-oriented: any iterable of records, where a record is something
      a named numeric field can be read from (a NumericRecord, a mapping,
      or an object with attributes);
    - column-oriented: a DataSource, which holds one array per field name.

field_reader() resolves how to read one field from one kind of record.
The design builder calls it once per distinct field name and reuses the
returned accessor for every row.

Usage:
    from pyols import DataSource

    ds = DataSource.from_arrays(y=y, x1=x1, x2=x2)
    ds = DataSource.from_file("data.csv")
    ds = DataSource.from_dataframe(df)

    ds.keys()  # frozenset({'y', 'x1', 'x2'})
    x1 = ds['x1']
"""

from __future__ import annotations

import operator
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TYPE_CHECKING
from collections.abc import Mapping

import numpy as np
from numpy.typing import NDArray

from pyols.core.exceptions import ValidationError
from pyols.core.protocols import NumericRecord

if TYPE_CHECKING:
    import pandas as pd


FieldReader = Callable[[Any], Any]


def field_reader(record: Any, name: str) -> FieldReader:
    """
    Resolve an accessor that reads field ``name`` from records shaped like ``record``.

    Lookup order:
        1. NumericRecord: ``record.get_numeric_field(name)``
        2. Mapping (or anything with ``keys()`` and ``[]``): ``record[name]``
        3. Attribute: ``getattr(record, name)``

    Args:
        record: A sample record; its shape decides the accessor
        name: Field name

    Returns:
        A callable taking a record and returning the raw field value

    Raises:
        KeyError: If the sample record has no field ``name``
        FieldNotFoundError: From a NumericRecord rejecting ``name``
    """
    if isinstance(record, NumericRecord):
        # Probe once so a missing name fails here, not halfway through the rows
        record.get_numeric_field(name)
        return operator.methodcaller('get_numeric_field', name)

    if isinstance(record, Mapping) or (
        hasattr(record, 'keys') and hasattr(record, '__getitem__')
    ):
        if name not in record.keys():
            raise KeyError(name)
        return operator.itemgetter(name)

    if hasattr(record, name):
        return operator.attrgetter(name)

    raise KeyError(name)


def is_dataframe(obj: Any) -> bool:
    """True if ``obj`` is a pandas DataFrame (without importing pandas)."""
    pd = sys.modules.get('pandas')
    return pd is not None and isinstance(obj, pd.DataFrame)


@dataclass(frozen=True)
class DataSource:
    """
    Column-oriented data container. Domain-agnostic.

    Construct via factory classmethods, not directly. Columns are stored
    as given; conversion to float64 and validation happen when a design
    is built, so non-numeric columns that a formula never references are
    harmless.
    """
    _data: dict[str, Any]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Array Access ===

    def keys(self) -> frozenset[str]:
        """
        Return the names of all available columns.

        Example:
            >>> ds = DataSource.from_arrays(x=x, y=y)
            >>> ds.keys()
            frozenset({'x', 'y'})
        """
        return frozenset(self._data.keys())

    def __getitem__(self, key: str) -> Any:
        """
        Access a named column.

        Raises:
            KeyError: If key not found, with a message listing available keys
        """
        if key not in self._data:
            available = sorted(self.keys())
            raise KeyError(
                f"DataSource has no column '{key}'. Available: {available}"
            )
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        """Check if a key exists."""
        return key in self._data

    def __len__(self) -> int:
        return self.n_observations

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of statistical units (rows)."""
        return self._metadata.get('n_observations', 0)

    @property
    def metadata(self) -> dict[str, Any]:
        """Source metadata (origin, column order, file path)."""
        return self._metadata.copy()

    # === Factory Methods ===

    @classmethod
    def from_arrays(
        cls,
        *,
        data: NDArray | None = None,
        columns: list[str] | None = None,
        **named_arrays: Any,
    ) -> DataSource:
        """
        Construct from NumPy arrays.

        Either pass columns by keyword (``from_arrays(y=y, x=x)``) or a 2D
        ``data`` array together with its ``columns`` names.
        """
        storage: dict[str, Any] = {}

        if data is not None:
            data = np.asarray(data)
            if data.ndim != 2:
                raise ValidationError(
                    f"data: expected 2D array, got {data.ndim}D with shape {data.shape}"
                )
            if columns is None or len(columns) != data.shape[1]:
                raise ValidationError(
                    f"data: {data.shape[1]} columns require {data.shape[1]} column names, "
                    f"got {None if columns is None else len(columns)}"
                )
            for i, col in enumerate(columns):
                storage[col] = data[:, i]

        for name, arr in named_arrays.items():
            storage[name] = np.asarray(arr)

        return cls._from_storage(storage, source='arrays')

    @classmethod
    def from_columns(cls, columns: Mapping[str, Any]) -> DataSource:
        """
        Construct from a mapping of column name to values.

        Unlike from_arrays, any column name is allowed (including 'data'
        and 'columns').
        """
        storage = {str(name): np.asarray(values) for name, values in columns.items()}
        return cls._from_storage(storage, source='columns')

    @classmethod
    def _from_storage(cls, storage: dict[str, Any], *, source: str) -> DataSource:
        for name, arr in storage.items():
            if arr.ndim != 1:
                raise ValidationError(
                    f"column '{name}': expected 1D values, got {arr.ndim}D with shape {arr.shape}"
                )

        lengths = {name: len(arr) for name, arr in storage.items()}
        if len(set(lengths.values())) > 1:
            details = ", ".join(f"{k}={v}" for k, v in lengths.items())
            raise ValidationError(f"Inconsistent column lengths: {details}")

        return cls(
            _data=storage,
            _metadata={
                'n_observations': next(iter(lengths.values()), 0),
                'source': source,
                'columns': list(storage),
            },
        )

    @classmethod
    def from_file(cls, path: str | Path, *, columns: list[str] | None = None) -> DataSource:
        """Construct from file (CSV, TSV, NPY)."""
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in ('.csv', '.tsv'):
            import pandas as pd
            sep = '\t' if suffix == '.tsv' else ','
            df = pd.read_csv(path, usecols=columns, sep=sep)
            return cls.from_dataframe(df, source_path=str(path))
        elif suffix == '.npy':
            data = np.load(path)
            return cls.from_arrays(data=data, columns=columns)
        else:
            raise ValidationError(f"Unknown file format: {suffix}")

    @classmethod
    def from_dataframe(cls, df: 'pd.DataFrame', *, source_path: str | None = None) -> DataSource:
        """Construct from pandas DataFrame."""
        storage: dict[str, Any] = {}

        for col in df.columns:
            storage[str(col)] = df[col].to_numpy()

        metadata = {
            'n_observations': len(df),
            'source': 'dataframe',
            'columns': [str(c) for c in df.columns],
        }
        if source_path:
            metadata['source_path'] = source_path

        return cls(_data=storage, _metadata=metadata)
