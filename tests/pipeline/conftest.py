import pytest

from surveyjoin.setup_directories import setup_output_directories


LAB_SOURCES = [
    ("GHB_I", "2015-2016", "2015"),
    ("GHB_J", "2017-2018", "2017"),
]
DEMO_SOURCES = [
    ("DEMO_I", "2015-2016", "2015"),
    ("DEMO_J", "2017-2018", "2017"),
]


@pytest.fixture
def pipeline_config(make_config):
    """Two cycles per category, tracking enabled."""
    return make_config(laboratory_sources=LAB_SOURCES, demographic_sources=DEMO_SOURCES)


@pytest.fixture
def pipeline_output_dirs(pipeline_config):
    return setup_output_directories(pipeline_config.base_dir, pipeline_config.categories)


@pytest.fixture
def two_cycle_routes(xpt_factory):
    """Remote files for pipeline_config.

    Laboratory: 3 rows (SEQN 1-3) + 5 rows (SEQN 101-105).
    Demographics: 4 rows (SEQN 2-5) + 5 rows (SEQN 101-105).
    Matching keys: 2, 3, 101-105.
    """
    return {
        "GHB_I.xpt": xpt_factory(n_rows=3, seqn_start=1, extra_columns={"LBXGH": [5.5, 6.0, 7.0]}),
        "GHB_J.xpt": xpt_factory(n_rows=5, seqn_start=101, extra_columns={"LBXGH": [5.0] * 5}),
        "DEMO_I.xpt": xpt_factory(n_rows=4, seqn_start=2, extra_columns={"RIDAGEYR": [30.0, 40.0, 50.0, 60.0]}),
        "DEMO_J.xpt": xpt_factory(n_rows=5, seqn_start=101, extra_columns={"RIDAGEYR": [20.0] * 5}),
    }
