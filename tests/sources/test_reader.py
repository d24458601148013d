import numpy as np
import pytest

from surveyjoin.contracts import ParseError
from surveyjoin.sources.reader import XptTableReader

from tests.helpers.fake_xpt import write_fake_xpt

pytestmark = [pytest.mark.unit, pytest.mark.sources]


def test_read_returns_all_rows_and_columns(internal_config, tmp_path):
    path = write_fake_xpt(
        tmp_path / "GHB_J.xpt",
        n_rows=4,
        seqn_start=93703,
        extra_columns={"LBXGH": [5.5, 6.0, 5.25, 7.5]},
    )

    df = XptTableReader(internal_config).read(path)

    assert df.columns.tolist() == ["SEQN", "LBXGH"]
    assert len(df) == 4
    assert df["SEQN"].tolist() == [93703.0, 93704.0, 93705.0, 93706.0]
    assert df["LBXGH"].tolist() == [5.5, 6.0, 5.25, 7.5]


def test_missing_numeric_values_become_nan(internal_config, tmp_path):
    path = write_fake_xpt(
        tmp_path / "GHB_I.xpt",
        n_rows=3,
        extra_columns={"LBXGH": [5.5, np.nan, 6.0]},
    )

    df = XptTableReader(internal_config).read(path)

    assert df["LBXGH"].isna().tolist() == [False, True, False]


def test_character_columns_are_decoded(internal_config, tmp_path):
    path = write_fake_xpt(
        tmp_path / "DEMO_J.xpt",
        n_rows=2,
        extra_columns={"SDDSRVYR": ["J", "J"]},
    )

    df = XptTableReader(internal_config).read(path)

    assert df["SDDSRVYR"].tolist() == ["J", "J"]


def test_corrupt_file_raises_parse_error(internal_config, tmp_path):
    path = tmp_path / "GHB_E.xpt"
    path.write_bytes(b"<!DOCTYPE html><html><body>Page Not Found</body></html>")

    with pytest.raises(ParseError) as excinfo:
        XptTableReader(internal_config).read(path)

    assert excinfo.value.status == "parse_failed"
    assert excinfo.value.path == path


def test_missing_file_raises_parse_error(internal_config, tmp_path):
    with pytest.raises(ParseError, match="GHB_F.xpt"):
        XptTableReader(internal_config).read(tmp_path / "GHB_F.xpt")
