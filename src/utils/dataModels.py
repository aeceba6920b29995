from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import yaml

from utils.errors import FormatError

VERSION = "0.1.0"
APP_NAME = "kvage"

STORE_FILENAME = "kvage.yaml"
STORE_FIELD = "data"
KEYS_DIR = "keys"
KEY_FILENAME = "key.txt"
KEY_FILE_ENV = "AGE_KEY_FILE"

KEY_DIR_MODE = 0o700
KEY_FILE_MODE = 0o600
STORE_DIR_MODE = 0o755

ARMOR_BEGIN = "-----BEGIN AGE ENCRYPTED FILE-----"
ARMOR_END = "-----END AGE ENCRYPTED FILE-----"
ARMOR_COLUMNS = 64

CREATED_PREFIX = "# created: "
PUBLIC_KEY_PREFIX = "# public key: "


def _strip_prefix(line: str, prefix: str) -> str:
    line = line.rstrip("\r")
    return line[len(prefix):] if line.startswith(prefix) else line


@dataclass
class KeyFile:
    created: str
    public_key: str
    secret_key: str

    def to_text(self) -> str:
        return f"{CREATED_PREFIX}{self.created}\n{PUBLIC_KEY_PREFIX}{self.public_key}\n{self.secret_key}"

    @staticmethod
    def from_text(text: str) -> "KeyFile":
        """Read the three leading lines; anything after the secret key line is ignored.

        Comment lines are carried through as-is and never validated.
        """
        lines = iter(text.split("\n"))
        created = next(lines, None)
        public_key = next(lines, None)
        secret_key = next(lines, None)
        if created is None or public_key is None or secret_key is None:
            raise FormatError("invalid key file format")
        return KeyFile(
            created=_strip_prefix(created, CREATED_PREFIX),
            public_key=_strip_prefix(public_key, PUBLIC_KEY_PREFIX),
            secret_key=secret_key.strip(),
        )


@dataclass
class KeyValue:
    data: Dict[str, Union[str, bytes]] = field(default_factory=dict)

    def sorted_keys(self) -> List[str]:
        return sorted(self.data)

    def to_text(self) -> str:
        return yaml.dump(
            {STORE_FIELD: dict(self.data)},
            Dumper=_StoreDumper,
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )

    @staticmethod
    def from_text(text: str) -> "KeyValue":
        obj: Any = yaml.safe_load(text)
        if obj is None:
            return KeyValue()
        if not isinstance(obj, dict):
            raise ValueError("store root is not a mapping")
        data = obj.get(STORE_FIELD) or {}
        if not isinstance(data, dict):
            raise ValueError(f"store field '{STORE_FIELD}' is not a mapping")
        # binary blobs written by older releases come back as bytes
        return KeyValue(data={str(k): v if isinstance(v, bytes) else str(v) for k, v in data.items()})


class _StoreDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.Node:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_StoreDumper.add_representer(str, _represent_str)
