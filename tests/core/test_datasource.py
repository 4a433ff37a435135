"""
Tests for DataSource and record field access.
"""

from collections import namedtuple
from dataclasses import dataclass

import numpy as np
import pytest

from pyols.core.datasource import DataSource, field_reader, is_dataframe
from pyols.core.exceptions import ValidationError
from pyols.core.protocols import NumericRecord


@dataclass(frozen=True)
class Province:
    lottery: float
    literacy: float


Point = namedtuple("Point", ["x", "y"])


class ScaledRecord:
    """NumericRecord that reports every field in thousands."""

    def __init__(self, values):
        self._values = values

    def get_numeric_field(self, name):
        return self._values[name] / 1000.0


class TestFieldReader:

    def test_mapping(self):
        read = field_reader({"x": 1.5, "y": 2.0}, "x")
        assert read({"x": 3.0, "y": 0.0}) == 3.0

    def test_dataclass_attribute(self):
        read = field_reader(Province(lottery=41.0, literacy=37.0), "literacy")
        assert read(Province(lottery=1.0, literacy=2.0)) == 2.0

    def test_namedtuple_attribute(self):
        read = field_reader(Point(1.0, 2.0), "y")
        assert read(Point(5.0, 6.0)) == 6.0

    def test_numeric_record_protocol(self):
        record = ScaledRecord({"pop": 2500.0})
        assert isinstance(record, NumericRecord)
        read = field_reader(record, "pop")
        assert read(record) == pytest.approx(2.5)

    def test_missing_mapping_key(self):
        with pytest.raises(KeyError):
            field_reader({"x": 1.0}, "z")

    def test_missing_attribute(self):
        with pytest.raises(KeyError):
            field_reader(Point(1.0, 2.0), "z")

    def test_numeric_record_missing_field_probed(self):
        with pytest.raises(KeyError):
            field_reader(ScaledRecord({"pop": 1.0}), "area")


class TestDataSourceFromArrays:

    def test_named_arrays(self):
        ds = DataSource.from_arrays(y=[1.0, 2.0, 3.0], x=[4.0, 5.0, 6.0])
        assert ds.keys() == frozenset({"x", "y"})
        assert ds.n_observations == 3
        assert len(ds) == 3
        np.testing.assert_array_equal(ds["x"], [4.0, 5.0, 6.0])

    def test_2d_data_with_columns(self):
        data = np.arange(6.0).reshape(3, 2)
        ds = DataSource.from_arrays(data=data, columns=["a", "b"])
        np.testing.assert_array_equal(ds["b"], [1.0, 3.0, 5.0])

    def test_columns_required_for_data(self):
        with pytest.raises(ValidationError, match="column names"):
            DataSource.from_arrays(data=np.zeros((3, 2)))

    def test_inconsistent_lengths(self):
        with pytest.raises(ValidationError, match="Inconsistent column lengths"):
            DataSource.from_arrays(x=[1.0, 2.0], y=[1.0, 2.0, 3.0])

    def test_missing_column_lists_available(self):
        ds = DataSource.from_arrays(x=[1.0], y=[2.0])
        with pytest.raises(KeyError, match=r"\['x', 'y'\]"):
            ds["z"]

    def test_contains(self):
        ds = DataSource.from_arrays(x=[1.0])
        assert "x" in ds
        assert "y" not in ds


class TestDataSourceFromColumns:

    def test_reserved_names_allowed(self):
        ds = DataSource.from_columns({"data": [1.0, 2.0], "columns": [3.0, 4.0]})
        assert ds.keys() == frozenset({"data", "columns"})
        assert ds.metadata["source"] == "columns"

    def test_rejects_scalar_column(self):
        with pytest.raises(ValidationError, match="expected 1D"):
            DataSource.from_columns({"x": 1.0})


class TestDataSourceFromFile:

    def test_csv(self, tmp_path):
        pytest.importorskip("pandas")
        path = tmp_path / "points.csv"
        path.write_text("x,y\n1,2\n2,4\n3,5\n")
        ds = DataSource.from_file(path)
        assert ds.n_observations == 3
        np.testing.assert_array_equal(ds["y"], [2, 4, 5])
        assert ds.metadata["source_path"] == str(path)

    def test_npy(self, tmp_path):
        path = tmp_path / "points.npy"
        np.save(path, np.array([[1.0, 2.0], [3.0, 4.0]]))
        ds = DataSource.from_file(path, columns=["x", "y"])
        np.testing.assert_array_equal(ds["x"], [1.0, 3.0])

    def test_unknown_suffix(self, tmp_path):
        with pytest.raises(ValidationError, match="Unknown file format"):
            DataSource.from_file(tmp_path / "points.parquet")


class TestDataSourceFromDataFrame:

    def test_columns_and_length(self):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame({"x": [1.0, 2.0], "label": ["a", "b"]})
        assert is_dataframe(df)
        ds = DataSource.from_dataframe(df)
        assert ds.keys() == frozenset({"x", "label"})
        assert ds.n_observations == 2

    def test_plain_objects_are_not_dataframes(self):
        assert not is_dataframe({"x": [1.0]})
        assert not is_dataframe(np.zeros(3))
