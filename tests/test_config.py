from __future__ import annotations

from pathlib import Path

import pytest

from config import AppConfig, HashConfig
from errors import ConfigLoadError, InvalidSaltError


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("B256_SALT", raising=False)
    monkeypatch.delenv("B256_CHUNK_SIZE", raising=False)
    cfg = AppConfig.load()
    assert cfg.hashing.salt == (0, 0, 0, 0)
    assert cfg.io.chunk_size == 1024 * 1024


def test_load_toml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("B256_SALT", raising=False)
    monkeypatch.delenv("B256_CHUNK_SIZE", raising=False)
    p = tmp_path / "b256.toml"
    p.write_text(
        '[hashing]\nsalt = "000000010000000200000003ffffffff"\n'
        "[io]\nchunk_size = 4096\nworkers = 2\n",
        encoding="utf-8",
    )
    cfg = AppConfig.load(p)
    assert cfg.hashing.salt == (1, 2, 3, 0xFFFFFFFF)
    assert cfg.hashing.salt_hex == "000000010000000200000003ffffffff"
    assert cfg.io.chunk_size == 4096
    assert cfg.io.workers == 2


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("B256_SALT", "0x" + "00" * 15 + "07")
    monkeypatch.setenv("B256_CHUNK_SIZE", "512")
    cfg = AppConfig.load()
    assert cfg.hashing.salt == (0, 0, 0, 7)
    assert cfg.io.chunk_size == 512


@pytest.mark.parametrize(
    "text",
    [
        "[hashing\n",
        '[hashing]\nsalt = "00"\n',
        "[io]\nchunk_size = 0\n",
        "[hashing]\nsalt = [1, 2, 3]\n",
    ],
)
def test_invalid_toml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, text: str
) -> None:
    monkeypatch.delenv("B256_SALT", raising=False)
    p = tmp_path / "bad.toml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigLoadError):
        AppConfig.load(p)


def test_missing_explicit_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError):
        AppConfig.load(tmp_path / "nope.toml")


def test_bad_env_salt(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("B256_SALT", "xyz")
    with pytest.raises(ConfigLoadError):
        AppConfig.load()


def test_hash_config_build() -> None:
    assert HashConfig.build().salt == (0, 0, 0, 0)
    assert HashConfig.build([1, 2, 3, 4]).salt == (1, 2, 3, 4)
    with pytest.raises(InvalidSaltError):
        HashConfig.build([1, 2])
