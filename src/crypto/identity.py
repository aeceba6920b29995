"""
crypto.identity
---------------
age X25519 identities (via pyrage) and the key file that
holds the local identity.

Key file layout (kept byte-compatible with keys made by earlier releases and
by age-keygen):

    # created: 2024-01-02T03:04:05+01:00
    # public key: age1...
    AGE-SECRET-KEY-1...

Only the third line is used. The comments are documentation.
"""
from __future__ import annotations

import os

from pathlib import Path
from typing import Mapping, Optional, Tuple

import pyrage

from utils.dataModels import (
    KEY_DIR_MODE, KEY_FILE_ENV, KEY_FILE_MODE, KEYS_DIR, KEY_FILENAME, KeyFile,
)
from utils.errors import ConfigError, CryptoError, StorageIOError
from utils.helper import rel_time_iso
from utils.logger import get_logger

log = get_logger("kvage.identity")


def parse_recipient(s: str) -> pyrage.x25519.Recipient:
    """Parse an `age1...` recipient string."""
    try:
        return pyrage.x25519.Recipient.from_str(s)
    except (pyrage.RecipientError, ValueError) as e:
        raise CryptoError(f"malformed recipient: {e}") from e


class X25519Identity:
    """The local age identity. Keeps the secret out of repr()."""

    def __init__(self, identity: pyrage.x25519.Identity):
        self.age_identity = identity

    @staticmethod
    def generate() -> "X25519Identity":
        try:
            return X25519Identity(pyrage.x25519.Identity.generate())
        except (pyrage.IdentityError, ValueError) as e:
            raise CryptoError(f"error generating key pair: {e}") from e

    @staticmethod
    def from_string(s: str) -> "X25519Identity":
        try:
            return X25519Identity(pyrage.x25519.Identity.from_str(s))
        except (pyrage.IdentityError, ValueError) as e:
            raise CryptoError(f"failed to parse private key: {e}") from e

    def __str__(self) -> str:
        return str(self.age_identity)

    def __repr__(self) -> str:
        return f"X25519Identity(recipient={self.recipient()})"

    def recipient(self) -> pyrage.x25519.Recipient:
        return self.age_identity.to_public()


def _write_private(path: Path, content: str, force: bool) -> None:
    flags = os.O_WRONLY | os.O_CREAT | (os.O_TRUNC if force else os.O_EXCL)
    fd = os.open(path, flags, KEY_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    os.chmod(path, KEY_FILE_MODE)


def generate_identity(keys_dir: Path | str = KEYS_DIR, force: bool = False) -> Tuple[X25519Identity, Path]:
    identity = X25519Identity.generate()

    keys_dir = Path(keys_dir)
    try:
        keys_dir.mkdir(mode=KEY_DIR_MODE, parents=True, exist_ok=True)
        os.chmod(keys_dir, KEY_DIR_MODE)
    except OSError as e:
        raise StorageIOError(f"error creating keys directory: {e}") from e

    key_path = keys_dir / KEY_FILENAME
    record = KeyFile(created=rel_time_iso(), public_key=str(identity.recipient()), secret_key=str(identity))
    try:
        _write_private(key_path, record.to_text(), force)
    except FileExistsError as e:
        raise StorageIOError(f"{key_path} exists. Use --force to overwrite.") from e
    except OSError as e:
        raise StorageIOError(f"error saving private key: {e}") from e

    log.info(f"generated identity {record.public_key} at {key_path}")
    return identity, key_path


def resolve_key_path(explicit_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    key_path = explicit_path or environ.get(KEY_FILE_ENV)
    if not key_path:
        raise ConfigError(f"no key file specified. Either use --key flag or set {KEY_FILE_ENV} environment variable")
    return Path(key_path)


def load_identity(explicit_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> X25519Identity:
    key_path = resolve_key_path(explicit_path, environ)
    try:
        content = key_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StorageIOError(f"failed to read key file: {e}") from e

    record = KeyFile.from_text(content)
    log.debug(f"loaded key file {key_path}")
    return X25519Identity.from_string(record.secret_key)
