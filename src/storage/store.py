import os
import stat

from pathlib import Path

import yaml

from utils.dataModels import STORE_DIR_MODE, KeyValue
from utils.errors import StorageIOError
from utils.logger import get_logger

log = get_logger("kvage.store")


def save_store(path: Path, kv: KeyValue) -> None:
    """Write the store atomically: <name>.tmp in the same directory, then rename over the old file."""
    text = kv.to_text()
    try:
        path.parent.mkdir(mode=STORE_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError(f"Error creating directory: {e}") from e

    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            os.chmod(tmp, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp, path)
    except OSError as e:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise StorageIOError(f"Error writing file: {e}") from e
    log.debug(f"saved {len(kv.data)} entries to {path}")


def load_store(path: Path) -> KeyValue:
    """Load the store; a missing or unreadable file is an empty store."""
    if not path.exists():
        log.debug(f"no store at {path}, starting empty")
        return KeyValue()
    try:
        return KeyValue.from_text(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as e:
        # Kept lenient; a following save replaces the unreadable file.
        log.warning(f"could not parse store {path}, treating it as empty: {e}")
        return KeyValue()
