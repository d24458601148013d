import os

import pandas as pd
import pytest

from surveyjoin.pipeline.accumulator import CategoryAccumulator, combine_tables, tag_table
from surveyjoin.pipeline.source_tracker import SourceTracker
from surveyjoin.sources.fetcher import XptFetcher

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def _accumulator(config, output_dirs, session, **kwargs):
    return CategoryAccumulator(config, output_dirs, fetcher=XptFetcher(config, session=session), **kwargs)


class TestTagTable:

    def test_appends_constant_provenance_columns(self):
        df = pd.DataFrame({"SEQN": [1.0, 2.0, 3.0], "LBXGH": [5.5, 6.0, 7.0]})

        tagged = tag_table(df, "2017-2018", "GHB_J.xpt")

        assert tagged.columns.tolist() == ["SEQN", "LBXGH", "Cycle", "SourceFile"]
        assert (tagged["Cycle"] == "2017-2018").all()
        assert (tagged["SourceFile"] == "GHB_J.xpt").all()

    def test_does_not_modify_input(self):
        df = pd.DataFrame({"SEQN": [1.0]})
        tag_table(df, "2017-2018", "GHB_J.xpt")
        assert df.columns.tolist() == ["SEQN"]

    def test_empty_table_stays_empty(self):
        tagged = tag_table(pd.DataFrame({"SEQN": pd.Series([], dtype=float)}), "2005-2006", "GHB_D.xpt")
        assert len(tagged) == 0
        assert "Cycle" in tagged.columns

    def test_custom_column_names(self):
        tagged = tag_table(pd.DataFrame({"SEQN": [1.0]}), "x", "y", cycle_column="wave", source_column="origin")
        assert tagged.columns.tolist() == ["SEQN", "wave", "origin"]


class TestCombineTables:

    def test_row_count_is_sum_of_inputs(self):
        a = pd.DataFrame({"SEQN": [1.0, 2.0]})
        b = pd.DataFrame({"SEQN": [3.0, 4.0, 5.0]})
        assert len(combine_tables([a, b])) == 5

    def test_preserves_input_order(self):
        a = pd.DataFrame({"SEQN": [10.0, 11.0]})
        b = pd.DataFrame({"SEQN": [1.0]})
        assert combine_tables([a, b])["SEQN"].tolist() == [10.0, 11.0, 1.0]

    def test_column_union_with_nulls_for_missing(self):
        a = pd.DataFrame({"SEQN": [1.0], "LBXGH": [5.5]})
        b = pd.DataFrame({"SEQN": [2.0], "LBDGHSI": [37.0]})

        combined = combine_tables([a, b])

        assert combined.columns.tolist() == ["SEQN", "LBXGH", "LBDGHSI"]
        assert pd.isna(combined.loc[1, "LBXGH"])
        assert pd.isna(combined.loc[0, "LBDGHSI"])

    def test_no_tables_gives_empty_frame_with_columns(self):
        combined = combine_tables([], empty_columns=("Cycle", "SourceFile"))
        assert combined.empty
        assert combined.columns.tolist() == ["Cycle", "SourceFile"]


class TestCategoryAccumulator:

    def test_all_entries_succeed(self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session):
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session(two_cycle_routes))

        combined, report = acc.accumulate(pipeline_config.laboratory)

        assert len(combined) == 8
        assert combined["Cycle"].value_counts().to_dict() == {"2015-2016": 3, "2017-2018": 5}
        assert combined["Cycle"].tolist()[:3] == ["2015-2016"] * 3
        assert set(combined["SourceFile"]) == {"GHB_I.xpt", "GHB_J.xpt"}
        assert report.configured == 2
        assert report.succeeded == 2
        assert report.skipped == 0
        assert report.rows == 8

    def test_raw_files_land_in_category_directory(
        self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session
    ):
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session(two_cycle_routes))
        acc.accumulate(pipeline_config.demographics)

        raw_dir = pipeline_output_dirs["demographics"]
        assert sorted(p.name for p in raw_dir.iterdir()) == ["DEMO_I.xpt", "DEMO_J.xpt"]

    def test_fetch_failure_skips_entry(self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session):
        routes = dict(two_cycle_routes)
        routes["GHB_I.xpt"] = 404
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session(routes))

        combined, report = acc.accumulate(pipeline_config.laboratory)

        assert len(combined) == 5
        assert set(combined["Cycle"]) == {"2017-2018"}
        assert report.skipped == 1
        assert report.skipped_entries == ["GHB_I"]
        failed = report.outcomes[0]
        assert failed.status == "fetch_failed"
        assert failed.status_code == 404
        assert "skipped: GHB_I" in report.summary_line()

    def test_parse_failure_skips_entry(self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session):
        routes = dict(two_cycle_routes)
        routes["GHB_J.xpt"] = b"not an xport file at all"
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session(routes))

        combined, report = acc.accumulate(pipeline_config.laboratory)

        assert len(combined) == 3
        assert report.outcomes[1].status == "parse_failed"
        assert report.outcomes[1].raw_path.name == "GHB_J.xpt"

    def test_all_entries_fail(self, pipeline_config, pipeline_output_dirs, fake_session):
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session({}))

        combined, report = acc.accumulate(pipeline_config.laboratory)

        assert combined.empty
        assert combined.columns.tolist() == ["Cycle", "SourceFile"]
        assert report.succeeded == 0
        assert report.skipped == 2

    def test_outcomes_recorded_in_tracker(
        self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session, tmp_path
    ):
        routes = dict(two_cycle_routes)
        routes["GHB_I.xpt"] = 500
        tracker = SourceTracker(tmp_path / "outcomes.db")
        acc = _accumulator(
            pipeline_config, pipeline_output_dirs, fake_session(routes), tracker=tracker, run_id="run1"
        )

        acc.accumulate(pipeline_config.laboratory)

        stats = tracker.get_statistics("run1")
        assert stats["laboratory"] == {"configured": 2, "succeeded": 1, "skipped": 1, "rows": 5}
        tracker.close()

    def test_rename_failure_skips_only_that_entry(
        self, pipeline_config, pipeline_output_dirs, two_cycle_routes, fake_session, monkeypatch
    ):
        real_replace = os.replace

        def flaky_replace(src, dst):
            if str(dst).endswith("GHB_I.xpt"):
                raise PermissionError("denied")
            return real_replace(src, dst)

        monkeypatch.setattr("surveyjoin.sources.fetcher.os.replace", flaky_replace)
        acc = _accumulator(pipeline_config, pipeline_output_dirs, fake_session(two_cycle_routes))

        combined, report = acc.accumulate(pipeline_config.laboratory)

        assert len(combined) == 5
        assert report.skipped_entries == ["GHB_I"]
        assert report.outcomes[0].status == "fetch_failed"
