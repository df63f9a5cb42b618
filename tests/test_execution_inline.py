from pathlib import Path

import pytest

from wallrizz.execution import ExecutionRequest, InlineStrategy, IsolatedStrategy, create_strategy
from wallrizz.models import ControlFlow, OperationalError, ScriptError

from .testtools import SEPARATE_SCRIPT, write_script

FAULTY_SCRIPT = """
from wallrizz.models import ControlFlow, OperationalError

CALLS = []

def setTheme(path):
    raise ValueError("bad theme " + path)

def getThemes(colours, paths):
    raise OperationalError("Missing tool", "kitty is not installed", {"tool": "kitty"})

def getDarkThemeConf(colours):
    CALLS.append("dark")
    return ControlFlow.STOP_REQUESTED

def getLightThemeConf(colours):
    CALLS.append("light")
    return "light"

def count():
    CALLS.append("count")
    return len(CALLS)
"""


@pytest.fixture
def strategy(test_logger):
    return InlineStrategy(test_logger)


def test_create_strategy(test_logger):
    assert isinstance(create_strategy(1, test_logger), InlineStrategy)
    isolated = create_strategy(4, test_logger, timeout=3)
    assert isinstance(isolated, IsolatedStrategy)
    assert isolated.timeout == 3


@pytest.mark.asyncio
async def test_execute_writes_outputs(tmp_path, strategy):
    script = write_script(tmp_path, "waybar.py", SEPARATE_SCRIPT)
    dark = tmp_path / "out" / "dark.conf"
    request = ExecutionRequest(str(script), {"getDarkThemeConf": str(dark), "getLightThemeConf": None}, [["#000000"]])

    results = await strategy.execute(request)

    assert results == {"getDarkThemeConf": "dark:#000000", "getLightThemeConf": "light:#000000"}
    assert dark.read_text() == "dark:#000000"


@pytest.mark.asyncio
async def test_invoke_awaits_coroutines(tmp_path, strategy):
    script = write_script(tmp_path, "waybar.py", SEPARATE_SCRIPT)
    assert await strategy.invoke(script, "getLightThemeConf", [["#ffffff"]]) == "light:#ffffff"


@pytest.mark.asyncio
async def test_module_cached(tmp_path, strategy):
    script = write_script(tmp_path, "faulty.py", FAULTY_SCRIPT)
    assert await strategy.invoke(script, "count") == 1
    assert await strategy.invoke(script, "count") == 2


@pytest.mark.asyncio
async def test_missing_capability(tmp_path, strategy):
    script = write_script(tmp_path, "waybar.py", SEPARATE_SCRIPT)
    with pytest.raises(ScriptError, match="getThemes is not defined"):
        await strategy.invoke(script, "getThemes", [[], []])


@pytest.mark.asyncio
async def test_script_exception(tmp_path, strategy):
    script = write_script(tmp_path, "faulty.py", FAULTY_SCRIPT)
    with pytest.raises(ScriptError) as excinfo:
        await strategy.invoke(script, "setTheme", ["/tmp/x.conf"])
    assert excinfo.value.source_file == str(script)
    assert "ValueError: bad theme /tmp/x.conf" in excinfo.value.cause
    assert str(excinfo.value).startswith(f'Error in "{script}"')


@pytest.mark.asyncio
async def test_operational_error_passes_through(tmp_path, strategy):
    script = write_script(tmp_path, "faulty.py", FAULTY_SCRIPT)
    with pytest.raises(OperationalError) as excinfo:
        await strategy.invoke(script, "getThemes", [[], []])
    assert excinfo.value.name == "Missing tool"
    assert excinfo.value.body == {"tool": "kitty"}


@pytest.mark.asyncio
async def test_stop_requested_ends_one_capability(tmp_path, strategy):
    script = write_script(tmp_path, "faulty.py", FAULTY_SCRIPT)
    light = tmp_path / "light.conf"
    request = ExecutionRequest(str(script), {"getDarkThemeConf": str(tmp_path / "dark.conf"), "getLightThemeConf": str(light)}, [[]])

    results = await strategy.execute(request)

    assert results == {"getDarkThemeConf": ControlFlow.STOP_REQUESTED, "getLightThemeConf": "light"}
    assert light.read_text() == "light"
    assert not (tmp_path / "dark.conf").exists()
    assert await strategy.invoke(script, "count") == 3


@pytest.mark.asyncio
async def test_import_error(tmp_path, strategy):
    script = write_script(tmp_path, "broken.py", "import does_not_exist_anywhere\n")
    with pytest.raises(ScriptError, match="does_not_exist_anywhere"):
        await strategy.invoke(script, "setTheme", ["x"])


@pytest.mark.asyncio
async def test_sample_extension_render(strategy):
    sample = Path(__file__).parents[1] / "sample_extension" / "kitty.py"
    palette = ["#ffffff", "#000000", "#ff0000"]
    dark = await strategy.invoke(sample, "getDarkThemeConf", [palette])
    light = await strategy.invoke(sample, "getLightThemeConf", [palette])
    assert dark.startswith("background #000000\nforeground #ffffff\n")
    assert light.startswith("background #ffffff\nforeground #000000\n")
    assert "color15 #ff0000" in dark
