import os
import stat

import pytest

from crypto.identity import X25519Identity, generate_identity, load_identity, parse_recipient
from utils.errors import ConfigError, CryptoError, FormatError, StorageIOError


def test_generate_writes_three_line_key_file(tmp_path):
    identity, path = generate_identity(tmp_path / "keys")
    lines = path.read_text().split("\n")
    assert len(lines) == 3
    assert lines[0].startswith("# created: ")
    assert lines[1] == f"# public key: {identity.recipient()}"
    assert lines[2] == str(identity)
    assert lines[2].startswith("AGE-SECRET-KEY-1")


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
def test_generate_restricts_permissions(tmp_path):
    _, path = generate_identity(tmp_path / "keys")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700


def test_generate_refuses_overwrite_without_force(tmp_path):
    first, path = generate_identity(tmp_path / "keys")
    with pytest.raises(StorageIOError):
        generate_identity(tmp_path / "keys")
    assert str(load_identity(str(path)).recipient()) == str(first.recipient())

    second, _ = generate_identity(tmp_path / "keys", force=True)
    assert str(load_identity(str(path)).recipient()) == str(second.recipient())


def test_generate_fails_when_directory_cannot_be_created(tmp_path):
    blocker = tmp_path / "keys"
    blocker.write_text("not a directory")
    with pytest.raises(StorageIOError):
        generate_identity(blocker)


def test_load_roundtrip(key_file):
    identity = load_identity(str(key_file))
    assert str(identity) == key_file.read_text().split("\n")[2]


def test_load_from_env(key_file):
    identity = load_identity(environ={"AGE_KEY_FILE": str(key_file)})
    assert isinstance(identity, X25519Identity)


def test_explicit_path_beats_env(tmp_path, key_file):
    other, other_path = generate_identity(tmp_path / "other")
    identity = load_identity(str(key_file), environ={"AGE_KEY_FILE": str(other_path)})
    assert str(identity.recipient()) != str(other.recipient())
    assert str(identity) == key_file.read_text().split("\n")[2]


def test_load_without_source_is_config_error():
    with pytest.raises(ConfigError, match="no key file specified"):
        load_identity(environ={})


def test_load_missing_file_is_io_error(tmp_path):
    with pytest.raises(StorageIOError, match="failed to read key file"):
        load_identity(str(tmp_path / "missing.txt"))


def test_short_key_file_is_format_error(tmp_path):
    path = tmp_path / "key.txt"
    path.write_text("# created: now\n# public key: age1xyz")
    with pytest.raises(FormatError, match="invalid key file format"):
        load_identity(str(path))


def test_bad_key_material_is_crypto_error(tmp_path):
    path = tmp_path / "key.txt"
    path.write_text("# created: now\n# public key: age1xyz\nAGE-SECRET-KEY-1NOTAKEY")
    with pytest.raises(CryptoError, match="failed to parse private key"):
        load_identity(str(path))


def test_comment_lines_and_trailing_lines_are_ignored(tmp_path, identity):
    path = tmp_path / "key.txt"
    path.write_text(f"garbage\nmore garbage\n{identity}\nextra line\n")
    assert str(load_identity(str(path)).recipient()) == str(identity.recipient())


def test_key_on_wrong_line_is_unusable(tmp_path, identity):
    path = tmp_path / "key.txt"
    path.write_text(f"{identity}\n# created: now\n# public key: age1xyz\n")
    with pytest.raises(CryptoError):
        load_identity(str(path))


def test_identity_string_roundtrip(identity):
    parsed = X25519Identity.from_string(str(identity))
    assert str(parsed.recipient()) == str(identity.recipient())
    assert str(identity.recipient()).startswith("age1")


def test_recipient_string_parses(identity):
    assert str(parse_recipient(str(identity.recipient()))) == str(identity.recipient())


def test_malformed_recipient_is_crypto_error(identity):
    s = str(identity.recipient())
    flipped = s[:-1] + ("q" if s[-1] != "q" else "p")
    with pytest.raises(CryptoError, match="malformed recipient"):
        parse_recipient(flipped)


def test_repr_hides_secret(identity):
    assert "AGE-SECRET-KEY" not in repr(identity)
    assert str(identity.recipient()) in repr(identity)
