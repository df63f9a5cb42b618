" generic fixtures "
import pytest

from wallrizz.config import Configuration
from wallrizz.logging_setup import get_logger
from wallrizz.models import ExtensionScript, ScriptShape
from wallrizz.schema import WALLRIZZ_CONFIG_SCHEMA

from .testtools import COMBINED_SCRIPT, write_script


def pytest_configure():
    "Runs once before all"
    from wallrizz.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A logger for the objects under test"
    return get_logger("tests")


@pytest.fixture
def script_factory(tmp_path):
    "Creates ExtensionScript objects backed by real files"

    def _make(name: str, body: str = COMBINED_SCRIPT, shape: ScriptShape = ScriptShape.COMBINED) -> ExtensionScript:
        path = write_script(tmp_path / "extensions", name, body)
        cache_dir = tmp_path / "cache" / "themes" / name
        cache_dir.mkdir(parents=True, exist_ok=True)
        return ExtensionScript(name=name, path=path, shape=shape, cache_dir=cache_dir)

    return _make


@pytest.fixture
def make_config(tmp_path, test_logger):
    "Builds a Configuration rooted in tmp_path"

    def _make(**values) -> Configuration:
        section = {
            "wallpapers_dir": str(tmp_path / "wallpapers"),
            "extensions_dir": str(tmp_path / "extensions"),
            "cache_dir": str(tmp_path / "cache"),
        }
        section.update(values)
        return Configuration(section, logger=test_logger, schema=WALLRIZZ_CONFIG_SCHEMA)

    return _make
