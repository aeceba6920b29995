import os
import sys

from pathlib import Path
from typing import Mapping, Optional

from utils.dataModels import APP_NAME


def config_dir(platform: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Path:
    """Per-user configuration directory for kvage; computed only, never created."""
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    if platform.startswith("win"):
        base = Path(environ.get("APPDATA", ""))
    elif platform == "darwin":
        base = Path(environ.get("HOME", "")) / "Library" / "Application Support"
    elif platform.startswith("linux"):
        try:
            base = Path.home() / ".config"
        except RuntimeError:
            base = Path("/etc")
    else:
        base = Path("/etc")
    return base / APP_NAME


def rel_time_iso(ts: float | None = None) -> str:
    """RFC 3339 timestamp in local time with offset, second precision."""
    import datetime as _dt
    if ts is None:
        return _dt.datetime.now().astimezone().replace(microsecond=0).isoformat()
    return _dt.datetime.fromtimestamp(ts).astimezone().replace(microsecond=0).isoformat()
