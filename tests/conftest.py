import pytest

from crypto.identity import X25519Identity, generate_identity


@pytest.fixture(autouse=True)
def _no_key_env(monkeypatch):
    monkeypatch.delenv("AGE_KEY_FILE", raising=False)


@pytest.fixture
def identity():
    return X25519Identity.generate()


@pytest.fixture
def key_file(tmp_path):
    _, path = generate_identity(tmp_path / "keys")
    return path
