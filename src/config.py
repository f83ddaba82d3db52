# src/config.py
"""
Configuration with validation and safe error handling.

- HashConfig: the per-engine salt (four 32-bit words, default zero).
- IoConfig: how the CLI streams files (chunk size, workers, traversal).
- AppConfig.load(): reads an optional b256.toml plus env overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import ConfigLoadError, InvalidSaltError
from wordbuf import WordBuffer

SALT_WORDS = 4

Salt = Tuple[int, int, int, int]


class HashConfig(BaseModel):
    """Per-engine hashing parameters."""

    model_config = ConfigDict(frozen=True)

    salt: Salt = Field(
        default=(0, 0, 0, 0), description="Four 32-bit salt words (big-endian)."
    )

    @field_validator("salt", mode="before")
    @classmethod
    def _coerce_salt(cls, v: Any) -> Any:
        """Accept hex text, 16 raw bytes or a WordBuffer besides a 4-int sequence."""
        if isinstance(v, str):
            text = v.strip().lower()
            if text.startswith("0x"):
                text = text[2:]
            try:
                v = bytes.fromhex(text)
            except ValueError as exc:
                raise ValueError(f"salt is not valid hex: {v!r}") from exc
        if isinstance(v, WordBuffer):
            v = v.to_bytes()
        if isinstance(v, (bytes, bytearray, memoryview)):
            raw = bytes(v)
            if len(raw) != SALT_WORDS * 4:
                raise ValueError(
                    f"salt must be {SALT_WORDS * 4} bytes, got {len(raw)}"
                )
            return tuple(
                int.from_bytes(raw[i : i + 4], "big") for i in range(0, len(raw), 4)
            )
        if isinstance(v, (list, tuple)) and len(v) != SALT_WORDS:
            raise ValueError(f"salt must be {SALT_WORDS} words, got {len(v)}")
        return v

    @field_validator("salt", mode="after")
    @classmethod
    def _check_word_range(cls, v: Salt) -> Salt:
        for w in v:
            if not 0 <= w <= 0xFFFFFFFF:
                raise ValueError(f"salt word out of 32-bit range: {w:#x}")
        return v

    @classmethod
    def build(cls, salt: Any = None) -> "HashConfig":
        """
        Validate `salt` into a HashConfig.

        Raises:
            InvalidSaltError: on a wrong word count or out-of-range word.
        """
        if salt is None:
            return cls()
        try:
            return cls(salt=salt)
        except ValidationError as exc:
            raise InvalidSaltError(f"Invalid salt: {_first_error(exc)}") from exc

    @property
    def salt_hex(self) -> str:
        return "".join(f"{w:08x}" for w in self.salt)


class IoConfig(BaseModel):
    """How files are streamed through the engine."""

    chunk_size: int = Field(default=1024 * 1024, gt=0, description="Read size in bytes")
    workers: int = Field(default=4, gt=0, description="Parallel file hashers")
    ignore_hidden: bool = True
    follow_symlinks: bool = False


class AppConfig(BaseModel):
    """Root application configuration object."""

    hashing: HashConfig = HashConfig()
    io: IoConfig = IoConfig()

    @staticmethod
    def load(path: Optional[Path] = None) -> "AppConfig":
        """
        Load config from TOML if present; otherwise return defaults.

        Load order:
          1) Provided path (if any).
          2) ./b256.toml in the current working directory.
        Env overrides:
          - B256_SALT: overrides hashing.salt (32 hex chars)
          - B256_CHUNK_SIZE: overrides io.chunk_size

        Raises:
            ConfigLoadError: if a TOML file exists but cannot be read or validated,
                or if an explicitly provided path does not exist.
        """
        cfg = AppConfig()
        toml_path = path or (Path.cwd() / "b256.toml")

        if path is not None and not path.exists():
            raise ConfigLoadError(f"Config file not found: {path}")

        if toml_path.exists():
            import tomllib

            try:
                raw_text = toml_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ConfigLoadError(
                    f"Failed to read config file: {toml_path}"
                ) from exc

            try:
                data = tomllib.loads(raw_text)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigLoadError(
                    f"Invalid TOML in config file: {toml_path}"
                ) from exc

            try:
                cfg = AppConfig(
                    hashing=HashConfig(**data.get("hashing", {})),
                    io=IoConfig(**data.get("io", {})),
                )
            except (ValidationError, TypeError) as exc:
                raise ConfigLoadError(
                    f"Invalid configuration values in {toml_path}"
                ) from exc

        salt_env = os.getenv("B256_SALT")
        if salt_env:
            try:
                cfg = cfg.model_copy(update={"hashing": HashConfig.build(salt_env)})
            except InvalidSaltError as exc:
                raise ConfigLoadError(f"Invalid B256_SALT value: {salt_env}") from exc

        chunk_env = os.getenv("B256_CHUNK_SIZE")
        if chunk_env:
            try:
                io = IoConfig(**{**cfg.io.model_dump(), "chunk_size": int(chunk_env)})
            except (ValueError, ValidationError) as exc:
                raise ConfigLoadError(
                    f"Invalid B256_CHUNK_SIZE value: {chunk_env}"
                ) from exc
            cfg = cfg.model_copy(update={"io": io})

        return cfg


def _first_error(exc: ValidationError) -> str:
    errs = exc.errors()
    return str(errs[0].get("msg", exc)) if errs else str(exc)
