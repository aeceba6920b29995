import argparse
import re
import sys

from pathlib import Path
from typing import Iterator, Optional, Tuple

from crypto.cipher import armor, decrypt, decrypt_value, encrypt, encrypt_value, to_age_bytes
from crypto.identity import X25519Identity, load_identity
from storage.locator import resolve_store_path
from storage.store import load_store, save_store
from utils.errors import CryptoError, KeyNotFoundError
from utils.logger import get_logger

log = get_logger("kvage.core")

SHELL_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")


def set_value(store_path: Path, identity: X25519Identity, key: str, value: str) -> None:
    encrypted = encrypt_value(value, identity)
    kv = load_store(store_path)
    kv.data[key] = encrypted
    save_store(store_path, kv)
    log.info(f"stored '{key}' in {store_path}")


def get_value(store_path: Path, identity: X25519Identity, key: str) -> str:
    kv = load_store(store_path)
    if key not in kv.data:
        raise KeyNotFoundError(key)
    return decrypt_value(kv.data[key], identity)


def iter_values(store_path: Path, identity: X25519Identity,
                pattern: Optional[str] = None) -> Iterator[Tuple[str, Optional[str], Optional[CryptoError]]]:
    """Yield (key, plaintext, error) in key order, decrypting only keys that contain `pattern`.

    A key that fails to decrypt comes back with its error and the rest still follow.
    """
    kv = load_store(store_path)
    for key in kv.sorted_keys():
        if pattern and pattern not in key:
            continue
        try:
            yield key, decrypt_value(kv.data[key], identity), None
        except CryptoError as e:
            log.debug(f"could not decrypt '{key}': {e}")
            yield key, None, e


def remove_value(store_path: Path, key: str) -> None:
    kv = load_store(store_path)
    if key not in kv.data:
        raise KeyNotFoundError(key)
    del kv.data[key]
    save_store(store_path, kv)
    log.info(f"removed '{key}' from {store_path}")


def _shell_quote(value: str) -> str:
    for ch in ("\\", '"', "$", "`"):
        value = value.replace(ch, "\\" + ch)
    return f'"{value}"'


def is_shell_name(key: str) -> bool:
    return SHELL_NAME.match(key.upper()) is not None


def export_line(key: str, value: str) -> str:
    return f"export {key.upper()}={_shell_quote(value)}"


def _read_stdin_bytes() -> bytes:
    stream = getattr(sys.stdin, "buffer", None)
    if stream is not None:
        return stream.read()
    return sys.stdin.read().encode("utf-8")


def _write_stdout_bytes(data: bytes) -> None:
    sys.stdout.flush()
    stream = getattr(sys.stdout, "buffer", None)
    if stream is None:
        sys.stdout.write(data.decode("utf-8", errors="replace"))
        return
    stream.write(data)
    stream.flush()


def cmd_set(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    set_value(resolve_store_path(args.file), identity, args.name, args.value)
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    print(get_value(resolve_store_path(args.file), identity, args.name))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    for key, value, err in iter_values(resolve_store_path(args.file), identity, args.filter):
        if err is not None:
            print(f"{key}: <error decrypting: {err}>")
            continue
        print(f"{key}: {value}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    for key, value, err in iter_values(resolve_store_path(args.file), identity, args.filter):
        if not is_shell_name(key):
            print(f"[!] {key}: not a valid shell variable name, skipped", file=sys.stderr)
            continue
        if err is not None:
            print(f"[!] {key}: <error decrypting: {err}>", file=sys.stderr)
            continue
        print(export_line(key, value))
    return 0


def cmd_encrypt(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    sys.stdout.write(armor(encrypt(_read_stdin_bytes(), identity.recipient())))
    return 0


def cmd_decrypt(args: argparse.Namespace) -> int:
    identity = load_identity(args.key)
    _write_stdout_bytes(decrypt(to_age_bytes(_read_stdin_bytes()), identity))
    return 0
