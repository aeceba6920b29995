#!/usr/bin/env python3
"""
kvage: a personal key-value secret store, every value encrypted with age

Each value is encrypted on its own to the public half of a local X25519
identity and kept as an armored age blob in a YAML file. Keys stay readable,
values never touch disk in plaintext.

Files:
  keys/key.txt          # identity written by generate-key (0600, dir 0700)
      # created: <RFC 3339 time>
      # public key: age1...
      AGE-SECRET-KEY-1...
  kvage.yaml            # store, found as: --file > ./kvage.yaml > <config dir>/kvage/kvage.yaml
      data:
        <key>: |
          -----BEGIN AGE ENCRYPTED FILE-----
          ...
          -----END AGE ENCRYPTED FILE-----

Commands:
  generate-key         Create keys/key.txt (refuses to overwrite without --force)
  set <key> <value>    Encrypt value and store it under key
  get <key>            Decrypt and print one value
  list [--filter s]    Print "key: value" for all (matching) keys, sorted
  rm <key>             Delete a key
  export [--filter s]  Print `export KEY="value"` lines
  encrypt              stdin plaintext -> stdout armored blob (no store)
  decrypt              stdin blob -> stdout plaintext (no store)
  version              Print the version

The key file comes from --key, else $AGE_KEY_FILE.

Known hazard: there is no locking around the store. Two invocations writing
at once lose one update (last writer wins).
"""
from __future__ import annotations

import sys

from typing import List, Optional

from ui.cli import build_commands, build_parser
from utils.errors import KvageError
from utils.logger import get_logger, verbosity_level


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser(build_commands())
    args = parser.parse_args(argv)
    log = get_logger("kvage", verbosity_level(args.verbose or 0))
    try:
        return args.func(args)
    except KvageError as e:
        log.debug(f"{args.cmd} failed: {e!r}")
        print(f"[!] {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
