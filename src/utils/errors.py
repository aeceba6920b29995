class KvageError(Exception):
    """Base class for every error the CLI reports and exits non-zero on."""


class ConfigError(KvageError):
    pass


class FormatError(KvageError):
    pass


class CryptoError(KvageError):
    pass


class StorageIOError(KvageError):
    pass


class KeyNotFoundError(KvageError):
    def __init__(self, key: str):
        super().__init__(f"Key '{key}' not found")
        self.key = key
