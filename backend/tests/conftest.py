"""Shared test fixtures."""

from pathlib import Path

import pytest

from carecommon.config import get_settings
from carecommon.models.config import AppConfig
from carecommon.services.config_loader import load_config_from_json, set_current_config
from carecommon.services.request_context import clear_request_id

TESTDATA_DIR = Path(__file__).parent / "testdata"


@pytest.fixture(autouse=True)
def isolated_state():
    """Fresh settings, no current config and no bound request id for every test."""
    get_settings.cache_clear()
    set_current_config(None)
    clear_request_id()
    yield
    get_settings.cache_clear()
    set_current_config(None)
    clear_request_id()


@pytest.fixture
def testdata_dir() -> Path:
    return TESTDATA_DIR


@pytest.fixture
def static_dir(testdata_dir: Path) -> Path:
    return testdata_dir / "static"


@pytest.fixture
def config_path(testdata_dir: Path) -> Path:
    return testdata_dir / "config" / "test.json"


@pytest.fixture
def app_config(config_path: Path) -> AppConfig:
    """The test landing config, loaded as the current config."""
    return load_config_from_json(str(config_path))
