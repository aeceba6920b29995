import argparse

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from utils.core import cmd_decrypt, cmd_encrypt, cmd_export, cmd_get, cmd_list, cmd_set
from utils.dataModels import KEY_FILE_ENV, VERSION
from utils.maintain import cmd_generate_key, cmd_rm, cmd_version


@dataclass(frozen=True)
class Command:
    handler: Callable[[argparse.Namespace], int]
    help: str
    configure: Optional[Callable[[argparse.ArgumentParser], None]] = None


def _with_name(p: argparse.ArgumentParser) -> None:
    p.add_argument("name", metavar="key", help="Key name")


def _with_name_value(p: argparse.ArgumentParser) -> None:
    _with_name(p)
    p.add_argument("value", help="Plaintext value (encrypted before it is stored)")


def _with_filter(p: argparse.ArgumentParser) -> None:
    p.add_argument("--filter", default=None, help="Only keys containing this substring")


def _with_force(p: argparse.ArgumentParser) -> None:
    p.add_argument("--force", action="store_true", help="Overwrite an existing key file")


def build_commands() -> Dict[str, Command]:
    return {
        "generate-key": Command(cmd_generate_key, "Generate a new age key pair", _with_force),
        "set": Command(cmd_set, "Save an encrypted key-value pair", _with_name_value),
        "get": Command(cmd_get, "Retrieve and decrypt a value by key", _with_name),
        "list": Command(cmd_list, "List all keys with their decrypted values", _with_filter),
        "rm": Command(cmd_rm, "Delete a key", _with_name),
        "export": Command(cmd_export, "Print values as shell export statements", _with_filter),
        "encrypt": Command(cmd_encrypt, "Encrypt stdin to an armored blob on stdout"),
        "decrypt": Command(cmd_decrypt, "Decrypt a blob from stdin to stdout"),
        "version": Command(cmd_version, "Print the version"),
    }


def _global_options(p: argparse.ArgumentParser, default) -> None:
    p.add_argument("-k", "--key", default=default, help=f"Path to the age key file (default: ${KEY_FILE_ENV})")
    p.add_argument("-f", "--file", default=default, help="Path to the YAML store file")
    p.add_argument("-v", "--verbose", action="count", default=default, help="More logging on stderr (-vv for debug)")


def build_parser(commands: Dict[str, Command]) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="kvage", description="Key-value store with every value encrypted by age")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    _global_options(p, None)

    # Same options after the command name; SUPPRESS keeps values given before it.
    common = argparse.ArgumentParser(add_help=False)
    _global_options(common, argparse.SUPPRESS)

    sub = p.add_subparsers(dest="cmd", required=True)
    for name, command in commands.items():
        sp = sub.add_parser(name, help=command.help, parents=[common])
        if command.configure is not None:
            command.configure(sp)
        sp.set_defaults(func=command.handler)
    return p
