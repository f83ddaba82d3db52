"""
CLI smoke tests:

- Ensure help/version work.
- Ensure hash output matches the library for text, files, stdin and trees.
- check/hmac happy paths and the main error exits.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

import pytest
from typer.testing import CliRunner

from blake256 import blake256, hmac_blake256
import cli
from cli import app

runner = CliRunner()

GO = "fd7282ecc105ef201bb94663fc413db1b7696414682090015f17e309b835f1c2"


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("B256_SALT", raising=False)
    monkeypatch.delenv("B256_CHUNK_SIZE", raising=False)


def _digests(output: str) -> Dict[str, str]:
    """name -> digest for every '<hex>  <name>' line."""
    rows = {}
    for line in output.splitlines():
        digest, sep, name = line.partition("  ")
        if sep and len(digest) == 64:
            rows[name] = digest
    return rows


def test_help() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "BLAKE-256" in result.stdout


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "b256sum" in result.stdout.lower()


def test_hash_text() -> None:
    result = runner.invoke(app, ["hash", "--text", "Go"])
    assert result.exit_code == 0
    assert GO in result.stdout


def test_hash_stdin() -> None:
    result = runner.invoke(app, ["hash"], input="Go")
    assert result.exit_code == 0
    assert _digests(result.stdout)["-"] == GO


def test_hash_files_and_tree(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"Go")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_bytes(b"BLAKE")

    result = runner.invoke(app, ["hash", "-r", str(tmp_path)])
    assert result.exit_code == 0
    rows = _digests(result.stdout)
    assert rows[str(tmp_path / "a.txt")] == GO
    assert rows[str(tmp_path / "sub" / "b.txt")] == str(blake256(b"BLAKE"))


def test_hash_directory_without_recursive_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["hash", str(tmp_path)])
    assert result.exit_code == 1


def test_hash_missing_file_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["hash", str(tmp_path / "missing.bin")])
    assert result.exit_code == 1


def test_hash_salt_and_json() -> None:
    salt = "00000001000000020000000300000004"
    result = runner.invoke(app, ["hash", "--text", "Go", "--salt", salt, "--json"])
    assert result.exit_code == 0
    start = result.stdout.index("[")
    payload = json.loads(result.stdout[start:])
    assert payload[0]["algorithm"] == "blake256"
    assert payload[0]["digest"] != GO


def test_hash_bad_salt() -> None:
    result = runner.invoke(app, ["hash", "--text", "Go", "--salt", "00"])
    assert result.exit_code == 1


def test_check(tmp_path: Path) -> None:
    good = tmp_path / "good.txt"
    good.write_bytes(b"Go")
    bad = tmp_path / "bad.txt"
    bad.write_bytes(b"changed")

    listing = tmp_path / "sums.txt"
    listing.write_text(f"{GO}  {good}\n", encoding="utf-8")
    result = runner.invoke(app, ["check", str(listing)])
    assert result.exit_code == 0
    assert f"{good}: OK" in result.stdout

    listing.write_text(f"{GO}  {good}\n{GO}  {bad}\n", encoding="utf-8")
    result = runner.invoke(app, ["check", str(listing)])
    assert result.exit_code == 1
    assert f"{bad}: FAILED" in result.stdout


def test_check_verifies_text_entries(tmp_path: Path) -> None:
    good = tmp_path / "good.txt"
    good.write_bytes(b"Go")
    listing = tmp_path / "sums.txt"
    hashed = runner.invoke(app, ["hash", "--text", "Go"])
    text_digest = _digests(hashed.stdout)['"Go"']
    listing.write_text(f'{text_digest}  "Go"\n{GO}  {good}\n', encoding="utf-8")

    result = runner.invoke(app, ["check", str(listing)])
    assert result.exit_code == 0
    assert '"Go": OK' in result.stdout
    assert "FAILED" not in result.stdout

    listing.write_text(f'{GO}  "Stop"\n', encoding="utf-8")
    result = runner.invoke(app, ["check", str(listing)])
    assert result.exit_code == 1
    assert '"Stop": FAILED' in result.stdout


def test_hmac_text() -> None:
    result = runner.invoke(app, ["hmac", "--key", "secret", "--text", "Go"])
    assert result.exit_code == 0
    assert str(hmac_blake256("Go", "secret")) in result.stdout


def test_hmac_hex_key(tmp_path: Path) -> None:
    f = tmp_path / "m.bin"
    f.write_bytes(b"message")
    result = runner.invoke(app, ["hmac", "--key", "00ff", "--hex-key", str(f)])
    assert result.exit_code == 0
    expected = str(hmac_blake256(b"message", b"\x00\xff"))
    assert _digests(result.stdout)[str(f)] == expected


def test_hmac_bad_hex_key() -> None:
    result = runner.invoke(app, ["hmac", "--key", "zz", "--hex-key", "--text", "Go"])
    assert result.exit_code == 1


def test_hmac_stdin() -> None:
    result = runner.invoke(app, ["hmac", "--key", "secret", "-"], input="Go")
    assert result.exit_code == 0
    assert _digests(result.stdout)["-"] == str(hmac_blake256(b"Go", b"secret"))


def test_hmac_unexpected_failure_exits_cleanly(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "hmac_blake256", boom)
    result = runner.invoke(app, ["hmac", "--key", "secret", "--text", "Go"])
    assert result.exit_code == 1
    assert not isinstance(result.exception, RuntimeError)
