from pathlib import Path
from typing import Optional

from utils.dataModels import STORE_FILENAME
from utils.helper import config_dir


def resolve_store_path(explicit: Optional[str] = None, cwd: Optional[Path] = None,
                       config_root: Optional[Path] = None) -> Path:
    """Pick the store file: explicit path, then ./kvage.yaml, then the per-user config directory.

    Only checks for existence; nothing is created here.
    """
    if explicit:
        return Path(explicit)

    local = (cwd / STORE_FILENAME) if cwd is not None else Path(STORE_FILENAME)
    if local.is_file():
        return local

    return (config_root if config_root is not None else config_dir()) / STORE_FILENAME
