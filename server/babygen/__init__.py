"""Baby image generation client.

Importing the package reads ``server/.env`` and then ``server/.env.local`` so
``BABYGEN_*`` settings can live next to the code during development.
"""
from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

__version__ = "0.1.0"

_SERVER_DIR = Path(__file__).resolve().parent.parent
ENV_FILES = (".env", ".env.local")


def load_env_files(directory: Path = _SERVER_DIR) -> list[Path]:
    """Load the env files found in ``directory``; later files win.

    Returns the files that were actually read. Values already present in the
    process environment are only replaced by ``.env.local``.
    """

    loaded: list[Path] = []
    for index, name in enumerate(ENV_FILES):
        path = directory / name
        if path.is_file():
            load_dotenv(path, override=index > 0)
            loaded.append(path)
    return loaded


load_env_files()
