"""
crypto.cipher
-------------
Per-value encryption with age (pyrage), one X25519 recipient per value.

- encrypt()/decrypt(): binary age files
- armor()/dearmor(): the PEM-style ASCII armor used for values kept in the store
- encrypt_value()/decrypt_value(): str in, armored str out, and back

age draws a fresh file key and ephemeral share on every call, so the same
plaintext never encrypts to the same blob twice.
"""
from __future__ import annotations

import base64
import binascii

from typing import Union

import pyrage

from crypto.identity import X25519Identity
from utils.dataModels import ARMOR_BEGIN, ARMOR_COLUMNS, ARMOR_END
from utils.errors import CryptoError


def _fail(reason) -> CryptoError:
    return CryptoError(f"decryption failed: {reason}")


# --------- binary age files ----------
def encrypt(data: bytes, recipient: pyrage.x25519.Recipient) -> bytes:
    try:
        return pyrage.encrypt(data, [recipient])
    except (pyrage.EncryptError, ValueError, TypeError) as e:
        raise CryptoError(f"encryption failed: {e}") from e


def decrypt(data: bytes, identity: X25519Identity) -> bytes:
    try:
        return pyrage.decrypt(data, [identity.age_identity])
    except (pyrage.DecryptError, ValueError, TypeError) as e:
        raise _fail(e) from e


# --------- armor ----------
def armor(data: bytes) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    lines = [b64[i:i + ARMOR_COLUMNS] for i in range(0, len(b64), ARMOR_COLUMNS)]
    return "\n".join([ARMOR_BEGIN, *lines, ARMOR_END]) + "\n"


def is_armored(data: Union[str, bytes]) -> bool:
    if isinstance(data, bytes):
        return data.lstrip().startswith(ARMOR_BEGIN.encode("ascii"))
    return data.lstrip().startswith(ARMOR_BEGIN)


def dearmor(text: str) -> bytes:
    lines = [line.strip() for line in text.strip().splitlines()]
    if len(lines) < 2 or lines[0] != ARMOR_BEGIN or lines[-1] != ARMOR_END:
        raise _fail("invalid armor")
    body = lines[1:-1]
    if any(len(line) > ARMOR_COLUMNS for line in body):
        raise _fail("invalid armor: line too long")
    try:
        return base64.b64decode("".join(body), validate=True)
    except binascii.Error as e:
        raise _fail(f"invalid armor: {e}") from e


def to_age_bytes(blob: Union[str, bytes]) -> bytes:
    """Binary age file from an armored blob, or from a raw one kept by older releases."""
    if isinstance(blob, bytes):
        return dearmor(blob.decode("ascii", errors="replace")) if is_armored(blob) else blob
    if is_armored(blob):
        return dearmor(blob)
    return blob.encode("utf-8", errors="surrogateescape")


# --------- store values ----------
def encrypt_value(plaintext: str, identity: X25519Identity) -> str:
    return armor(encrypt(plaintext.encode("utf-8"), identity.recipient()))


def decrypt_value(blob: Union[str, bytes], identity: X25519Identity) -> str:
    plaintext = decrypt(to_age_bytes(blob), identity)
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise _fail(f"plaintext is not valid UTF-8: {e}") from e
