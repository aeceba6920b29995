import argparse

from crypto.identity import generate_identity
from storage.locator import resolve_store_path
from utils.core import remove_value
from utils.dataModels import KEYS_DIR, VERSION


def cmd_rm(args: argparse.Namespace) -> int:
    remove_value(resolve_store_path(args.file), args.name)
    print(f"[+] Removed {args.name}")
    return 0


def cmd_generate_key(args: argparse.Namespace) -> int:
    identity, key_path = generate_identity(KEYS_DIR, force=args.force)
    print(f"Key pairs saved to: {key_path}")
    print(f"Public key: {identity.recipient()}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    print(f"Version: {VERSION}")
    return 0
