import numpy as np
import pandas as pd
import pytest

from surveyjoin.contracts import PersistenceError
from surveyjoin.pipeline.accumulator import combine_tables
from surveyjoin.pipeline.persister import TablePersister

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


@pytest.fixture
def table():
    return pd.DataFrame({
        "SEQN": [1.0, 2.0, 3.0],
        "LBXGH": [5.5, np.nan, 6.0],
        "Cycle": ["2017-2018"] * 3,
        "SourceFile": ["GHB_J.xpt"] * 3,
    })


def test_persist_writes_both_artifacts(tmp_path, table):
    paths = TablePersister(tmp_path).persist(table, "combined_laboratory")

    assert paths == {
        "parquet": tmp_path / "combined_laboratory.parquet",
        "csv": tmp_path / "combined_laboratory.csv",
    }
    assert all(p.exists() for p in paths.values())
    assert not list(tmp_path.glob("*.tmp"))


def test_parquet_round_trip_preserves_values_and_nulls(tmp_path, table):
    persister = TablePersister(tmp_path)
    persister.persist(table, "combined_laboratory")

    loaded = persister.load("combined_laboratory")

    pd.testing.assert_frame_equal(loaded, table)


def test_csv_has_header_and_empty_fields_for_nulls(tmp_path, table):
    paths = TablePersister(tmp_path).persist(table, "t")

    lines = paths["csv"].read_text().splitlines()
    assert lines[0] == "SEQN,LBXGH,Cycle,SourceFile"
    assert lines[2] == "2.0,,2017-2018,GHB_J.xpt"
    assert len(lines) == 4


def test_csv_is_byte_identical_across_writes(tmp_path, table):
    persister = TablePersister(tmp_path)
    first = persister.persist(table, "t")["csv"].read_bytes()
    second = persister.persist(table, "t")["csv"].read_bytes()

    assert first == second


@pytest.mark.parametrize("compression", ["snappy", "gzip", "zstd", "none"])
def test_compression_options(tmp_path, table, compression):
    persister = TablePersister(tmp_path, compression=compression)
    persister.persist(table, "t")
    assert len(persister.load("t")) == 3


def test_empty_table_with_provenance_columns(tmp_path):
    empty = pd.DataFrame(columns=["Cycle", "SourceFile"])
    persister = TablePersister(tmp_path)

    persister.persist(empty, "combined_demographics")
    loaded = persister.load("combined_demographics")

    assert loaded.empty
    assert loaded.columns.tolist() == ["Cycle", "SourceFile"]
    assert (tmp_path / "combined_demographics.csv").read_text() == "Cycle,SourceFile\n"


def test_load_missing_snapshot_raises(tmp_path):
    with pytest.raises(PersistenceError, match="Snapshot not found"):
        TablePersister(tmp_path).load("combined_laboratory")


def test_load_corrupt_snapshot_raises(tmp_path):
    (tmp_path / "merged.parquet").write_bytes(b"definitely not parquet")

    with pytest.raises(PersistenceError, match="Could not read snapshot"):
        TablePersister(tmp_path).load("merged")


def test_write_failure_raises_and_keeps_previous_artifact(tmp_path, table, monkeypatch):
    persister = TablePersister(tmp_path)
    persister.persist(table, "t")
    before = (tmp_path / "t.csv").read_bytes()

    def broken_to_csv(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pd.DataFrame, "to_csv", broken_to_csv)

    with pytest.raises(PersistenceError, match="disk full"):
        persister.persist(table.head(1), "t")

    assert (tmp_path / "t.csv").read_bytes() == before
    assert not (tmp_path / "t.csv.tmp").exists()


def test_unwritable_directory_raises(tmp_path, table):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    with pytest.raises(PersistenceError, match="Cannot create output directory"):
        TablePersister(blocker / "out").persist(table, "t")


def test_mixed_type_column_stored_as_text(tmp_path):
    stacked = combine_tables([
        pd.DataFrame({"SEQN": [1.0], "X": [1.5]}),
        pd.DataFrame({"SEQN": [2.0], "X": ["abc"]}),
        pd.DataFrame({"SEQN": [3.0], "X": [np.nan]}),
    ])
    persister = TablePersister(tmp_path)

    paths = persister.persist(stacked, "combined_laboratory")
    loaded = persister.load("combined_laboratory")

    assert loaded["X"].tolist()[:2] == ["1.5", "abc"]
    assert pd.isna(loaded.loc[2, "X"])
    assert loaded["SEQN"].tolist() == [1.0, 2.0, 3.0]
    assert paths["csv"].read_text().splitlines()[1:] == ["1.0,1.5", "2.0,abc", "3.0,"]
