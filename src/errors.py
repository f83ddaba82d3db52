"""
Centralized, typed exceptions for the package.

Having explicit exception types lets us:
- Surface user-friendly messages in the CLI.
- Keep decoding failures distinct from contract violations.
- Write more precise tests (e.g., expect InvalidSaltError).
"""

from __future__ import annotations


class Blake256Error(Exception):
    """Base class for all custom errors in blake256."""


class ConfigLoadError(Blake256Error):
    """Raised when a configuration file is missing, unreadable, or invalid."""


class InvalidSaltError(Blake256Error, ValueError):
    """Raised when a salt is not exactly four 32-bit words."""


class EncodingError(Blake256Error, ValueError):
    """Raised when text cannot be converted to or from a word buffer."""


class InvalidPathError(Blake256Error):
    """Raised when a provided path does not exist or cannot be hashed."""


class InternalError(Blake256Error):
    """Raised for unexpected internal failures to be reported gracefully."""
