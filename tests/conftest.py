"""Root-level pytest fixtures for the surveyjoin test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of
hand-written InternalConfig dicts.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from surveyjoin.schemas import ParamConfig, UserConfig, SourceEntry, resolve_config
from surveyjoin.setup_directories import setup_output_directories

from tests.helpers.fake_http import FakeResponse, FakeSession
from tests.helpers.fake_xpt import write_fake_xpt


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config, temp_dir):
    """Fully validated runtime configuration writing under temp_dir.

    Examples
    --------
    >>> def test_fetcher_init(internal_config):
    ...     fetcher = XptFetcher(internal_config)
    ...     assert fetcher.extension == "xpt"
    """
    return resolve_config(param_config, {"BASE_DIR": str(temp_dir)}, None)


@pytest.fixture
def make_config(param_config, temp_dir):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs. base_dir
    defaults to temp_dir.

    Examples
    --------
    >>> def test_two_cycles(make_config):
    ...     config = make_config(laboratory_sources=[("GHB_J", "2017-2018", "2017")])
    ...     assert len(config.laboratory.sources) == 1
    """
    def _make(**user_overrides):
        user_overrides.setdefault("base_dir", str(temp_dir))
        return resolve_config(param_config, UserConfig(**user_overrides), None)

    return _make


@pytest.fixture
def make_entry():
    def _make(identifier="GHB_J", label="2017-2018", year="2017"):
        return SourceEntry(remote_identifier=identifier, label=label, cycle_year=year)
    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(internal_config):
    """Standard surveyjoin output directory structure.

    Returns dict with keys: base, logs, laboratory, demographics.
    """
    return setup_output_directories(internal_config.base_dir, internal_config.categories)


# =============================================================================
# Remote / File Fixtures
# =============================================================================

@pytest.fixture
def xpt_factory(temp_dir):
    """Returns raw XPORT bytes for a table with the given shape.

    Files are built in a scratch directory separate from pipeline output.
    """
    scratch = temp_dir / "_fixtures"
    scratch.mkdir(exist_ok=True)
    counter = {"n": 0}

    def _make(n_rows=3, seqn_start=1, extra_columns=None):
        counter["n"] += 1
        path = scratch / f"fixture_{counter['n']}.xpt"
        write_fake_xpt(path, n_rows=n_rows, seqn_start=seqn_start, extra_columns=extra_columns)
        return path.read_bytes()

    return _make


@pytest.fixture
def fake_session():
    """Factory for a FakeSession from ``{file_name: bytes | status | exception}``."""
    def _make(routes):
        built = {}
        for name, value in routes.items():
            if isinstance(value, bytes):
                built[name] = FakeResponse(200, value)
            elif isinstance(value, int):
                built[name] = FakeResponse(value)
            else:
                built[name] = value
        return FakeSession(built)
    return _make
