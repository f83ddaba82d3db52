"""
CLI entrypoint (b256sum):
- hash: BLAKE-256 of files, directories (--recursive), text or stdin
- hmac: HMAC-BLAKE256 of files, text or stdin
- check: verify a digest listing produced by `hash` (files and --text entries)
- version
"""

from __future__ import annotations

import json
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

import typer

from blake256 import blake256, create, hmac_blake256
from config import AppConfig, HashConfig
from encoders import Hex, Utf8
from errors import (
    Blake256Error,
    ConfigLoadError,
    EncodingError,
    InternalError,
    InvalidPathError,
    InvalidSaltError,
)
from hash_file import compute_file_digest, digest_stream
from logs import get_logger, init_logging
from mac import HMAC
from walker import iter_files

__version__ = "0.3.0"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="b256sum: BLAKE-256 digests of files and text",
)

log = get_logger("b256.cli")

STDIN = Path("-")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
) -> None:
    init_logging(level="DEBUG" if verbose else None)
    if verbose:
        log.debug("Verbose logging enabled")


@app.command("version")
def version_cmd() -> None:
    typer.echo(f"b256sum v{__version__}")


def _load_config(config_file: Optional[Path], salt: Optional[str]) -> AppConfig:
    """Config file + env, with an explicit --salt taking precedence."""
    cfg = AppConfig.load(config_file)
    if salt is not None:
        cfg = cfg.model_copy(update={"hashing": HashConfig.build(salt)})
    return cfg


def _digest_paths(
    paths: List[Path], cfg: AppConfig, recursive: bool
) -> List[Tuple[str, str]]:
    """(hex digest, display name) per file, in input order."""
    files: List[Path] = []
    for p in paths:
        if p == STDIN:
            files.append(p)
            continue
        files.extend(
            iter_files(
                [p],
                recursive=recursive,
                ignore_hidden=cfg.io.ignore_hidden,
                follow_symlinks=cfg.io.follow_symlinks,
            )
        )

    def worker(p: Path) -> Tuple[str, str]:
        if p == STDIN:
            digest = digest_stream(
                sys.stdin.buffer, config=cfg.hashing, chunk_size=cfg.io.chunk_size
            )
            return (str(digest), "-")
        return (
            compute_file_digest(p, config=cfg.hashing, chunk_size=cfg.io.chunk_size),
            str(p),
        )

    # Engines are not shared: each task builds its own.
    if len(files) <= 1 or cfg.io.workers == 1:
        return [worker(p) for p in files]
    with ThreadPoolExecutor(max_workers=cfg.io.workers) as ex:
        return list(ex.map(worker, files))


def _emit(rows: List[Tuple[str, str]], json_out: bool, algo: str) -> None:
    if json_out:
        payload = [{"algorithm": algo, "digest": d, "name": n} for d, n in rows]
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return
    for digest, name in rows:
        typer.echo(f"{digest}  {name}")


# -------------------------------- hash ----------------------------------------


@app.command("hash")
def hash_cmd(
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Files to hash ('-' for stdin)"
    ),
    text: Optional[str] = typer.Option(
        None, "--text", "-t", help="Hash this text (UTF-8) instead of files"
    ),
    salt: Optional[str] = typer.Option(
        None, "--salt", "-s", help="Salt as 32 hex chars (overrides config/env)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to b256.toml"
    ),
    recursive: bool = typer.Option(
        False, "--recursive", "-r", help="Descend into directories"
    ),
    json_out: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Print BLAKE-256 digests, one '<hex>  <name>' line per input."""
    try:
        cfg = _load_config(config_file, salt)
        if text is not None:
            rows = [(str(blake256(text, cfg.hashing)), f'"{text}"')]
        elif paths:
            rows = _digest_paths(paths, cfg, recursive)
        else:
            rows = _digest_paths([STDIN], cfg, recursive)
        log.info(f"[green]Hashed[/] {len(rows)} input(s)")
        _emit(rows, json_out, "blake256")

    except (InvalidPathError, ConfigLoadError, InvalidSaltError) as exc:
        log.error(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1)
    except OSError as exc:
        log.error(f"[red]Cannot read input:[/] {exc}")
        raise typer.Exit(code=1)
    except Blake256Error as exc:
        log.error(f"[red]Internal error:[/] {exc}")
        raise typer.Exit(code=1)
    except Exception:
        log.exception("Unexpected error while hashing")
        raise typer.Exit(code=1) from InternalError(
            "Unexpected failure. Re-run with -v for details."
        )


# -------------------------------- hmac ----------------------------------------


@app.command("hmac")
def hmac_cmd(
    key: str = typer.Option(..., "--key", "-k", help="MAC key (UTF-8 text)"),
    hex_key: bool = typer.Option(
        False, "--hex-key", help="Interpret --key as hex bytes"
    ),
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Files to authenticate ('-' for stdin)"
    ),
    text: Optional[str] = typer.Option(
        None, "--text", "-t", help="Authenticate this text (UTF-8)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to b256.toml"
    ),
    json_out: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Print HMAC-BLAKE256 tags."""
    try:
        cfg = AppConfig.load(config_file)
        key_buf = Hex.parse(key) if hex_key else Utf8.parse(key)

        rows: List[Tuple[str, str]] = []
        if text is None and not paths:
            raise InvalidPathError("Nothing to authenticate: give files or --text.")
        if text is not None:
            rows.append((str(hmac_blake256(text, key_buf, cfg.hashing)), f'"{text}"'))
        else:
            mac = HMAC(lambda: create(cfg.hashing), key_buf)
            for p in paths or []:
                if p == STDIN:
                    _mac_stream(mac, sys.stdin.buffer, cfg.io.chunk_size)
                    rows.append((str(mac.compute()), "-"))
                    continue
                for f in iter_files([p], ignore_hidden=cfg.io.ignore_hidden):
                    with f.open("rb") as fh:
                        _mac_stream(mac, fh, cfg.io.chunk_size)
                    rows.append((str(mac.compute()), str(f)))
        _emit(rows, json_out, "hmac-blake256")

    except EncodingError as exc:
        log.error(f"[red]Invalid key:[/] {exc}")
        raise typer.Exit(code=1)
    except (InvalidPathError, ConfigLoadError) as exc:
        log.error(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1)
    except OSError as exc:
        log.error(f"[red]Cannot read input:[/] {exc}")
        raise typer.Exit(code=1)
    except Exception:
        log.exception("Unexpected error while authenticating")
        raise typer.Exit(code=1) from InternalError(
            "Unexpected failure. Re-run with -v for details."
        )


def _mac_stream(mac: HMAC, stream: BinaryIO, chunk_size: int) -> None:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        mac.update(chunk)


# -------------------------------- check ---------------------------------------


@app.command("check")
def check_cmd(
    listing: Path = typer.Argument(..., help="File of '<hex>  <path>' lines"),
    salt: Optional[str] = typer.Option(None, "--salt", "-s", help="Salt (32 hex)"),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to b256.toml"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report failures"),
) -> None:
    """Re-hash the files named in a listing and compare digests."""
    try:
        cfg = _load_config(config_file, salt)
        lines = listing.read_text(encoding="utf-8").splitlines()
    except (ConfigLoadError, InvalidSaltError) as exc:
        log.error(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1)
    except OSError as exc:
        log.error(f"[red]Cannot read listing:[/] {exc}")
        raise typer.Exit(code=1)

    failures = 0
    for lineno, line in enumerate(lines, 1):
        if not line.strip():
            continue
        expected, sep, name = line.partition("  ")
        if not sep or len(expected) != 64:
            log.warning(f"{listing}:{lineno}: malformed line skipped")
            continue
        try:
            if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
                # Written by `hash --text`: the entry is the text itself.
                actual = str(blake256(name[1:-1], cfg.hashing))
            else:
                actual = compute_file_digest(
                    Path(name), config=cfg.hashing, chunk_size=cfg.io.chunk_size
                )
        except OSError:
            typer.echo(f"{name}: FAILED open or read")
            failures += 1
            continue
        if actual == expected.lower():
            if not quiet:
                typer.echo(f"{name}: OK")
        else:
            typer.echo(f"{name}: FAILED")
            failures += 1

    if failures:
        log.warning(f"{failures} computed digest(s) did NOT match")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
