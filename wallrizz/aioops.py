"""Async file system helpers backed by aiofiles."""

__all__ = ["aiexists", "aiisfile", "ailistdir", "aimakedirs", "aiopen", "aireplace", "aistat"]

import aiofiles.os
from aiofiles import open as aiopen
from aiofiles.os import listdir as ailistdir
from aiofiles.os import makedirs as aimakedirs
from aiofiles.os import replace as aireplace
from aiofiles.os import stat as aistat

aiexists = aiofiles.os.path.exists
aiisfile = aiofiles.os.path.isfile
