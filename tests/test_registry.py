from pathlib import Path

import pytest

from wallrizz.models import ExitCode, RegistrationError, ScriptShape
from wallrizz.registry import ExtensionRegistry

from .testtools import COMBINED_SCRIPT, SEPARATE_SCRIPT, write_script


@pytest.fixture
def registry(tmp_path, test_logger):
    return ExtensionRegistry(tmp_path / "themes", test_logger)


@pytest.mark.asyncio
async def test_load_shapes(tmp_path, registry):
    directory = tmp_path / "extensions"
    write_script(directory, "kitty.py", COMBINED_SCRIPT)
    write_script(directory, "waybar.py", SEPARATE_SCRIPT)
    write_script(directory, ".hidden.py", "raise RuntimeError('never imported')")
    write_script(directory, "README.md", "not a script")

    scripts = await registry.load(directory)

    assert list(scripts) == ["kitty.py", "waybar.py"]
    assert scripts["kitty.py"].shape == ScriptShape.COMBINED
    assert scripts["waybar.py"].shape == ScriptShape.SEPARATE
    assert scripts["waybar.py"].cache_dir == tmp_path / "themes" / "waybar.py"
    assert scripts["waybar.py"].cache_dir.is_dir()
    assert registry["kitty.py"].path == directory / "kitty.py"
    assert len(registry) == 2


@pytest.mark.asyncio
async def test_combined_wins(tmp_path, registry):
    directory = tmp_path / "extensions"
    write_script(directory, "both.py", COMBINED_SCRIPT + SEPARATE_SCRIPT)
    scripts = await registry.load(directory)
    assert scripts["both.py"].shape == ScriptShape.COMBINED


@pytest.mark.asyncio
async def test_creates_directory(tmp_path, registry):
    directory = tmp_path / "missing"
    assert await registry.load(directory) == {}
    assert directory.is_dir()


@pytest.mark.asyncio
async def test_missing_set_theme(tmp_path, registry):
    directory = tmp_path / "extensions"
    write_script(directory, "broken.py", "def getThemes(colours, paths):\n    return None\n")
    with pytest.raises(RegistrationError) as excinfo:
        await registry.load(directory)
    assert excinfo.value.missing == ["setTheme"]
    assert "broken.py" in str(excinfo.value)
    assert excinfo.value.exit_code == ExitCode.REGISTRATION_ERROR


@pytest.mark.asyncio
async def test_incomplete_separate_pair(tmp_path, registry):
    directory = tmp_path / "extensions"
    write_script(directory, "half.py", "def setTheme(path):\n    pass\n\ndef getDarkThemeConf(colours):\n    return ''\n")
    with pytest.raises(RegistrationError) as excinfo:
        await registry.load(directory)
    assert excinfo.value.missing == ["getThemes", "getLightThemeConf"]


@pytest.mark.asyncio
async def test_import_failure(tmp_path, registry):
    directory = tmp_path / "extensions"
    write_script(directory, "syntax.py", "def setTheme(:\n")
    with pytest.raises(RegistrationError) as excinfo:
        await registry.load(directory)
    assert "SyntaxError" in excinfo.value.reason


@pytest.mark.asyncio
async def test_sample_extension(tmp_path, registry):
    sample = Path(__file__).parents[1] / "sample_extension" / "kitty.py"
    write_script(tmp_path / "extensions", "kitty.py", sample.read_text())
    scripts = await registry.load(tmp_path / "extensions")
    assert scripts["kitty.py"].shape == ScriptShape.SEPARATE
