import textwrap
from pathlib import Path

COMBINED_SCRIPT = """
from pathlib import Path

def getThemes(colours, paths):
    return ("dark " + " ".join(colours), "light " + " ".join(colours))

def setTheme(path):
    Path(path + ".applied").write_text(Path(path).read_text())
"""

SEPARATE_SCRIPT = """
from pathlib import Path

def getDarkThemeConf(colours):
    return "dark:" + ",".join(colours)

async def getLightThemeConf(colours):
    return "light:" + ",".join(colours)

def setTheme(path):
    Path(path + ".applied").write_text(Path(path).read_text())
"""


def write_script(directory: Path, name: str, body: str) -> Path:
    "Writes an extension script, returns its path"
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(textwrap.dedent(body))
    return path


def applied_text(artifact: Path) -> str:
    "Content received by the stub setTheme"
    return Path(str(artifact) + ".applied").read_text()
