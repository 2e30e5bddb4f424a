"""
Utility functions for the voice routing migration tool.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from subprocess import CompletedProcess
from typing import Final

_LOG_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_LOG_FILE: Final[str] = "migration.log"


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass path format is invalid."""


class PassphraseRequiredError(PassError):
    """Raised when a GPG passphrase is required for the pass utility."""


def setup_logging(*, verbosity: int = 0) -> None:
    """Configure logging for the migration process.

    The log file always receives DEBUG output. The console shows warnings by
    default, INFO with -v and DEBUG with -vv.
    """
    if verbosity >= 2:
        console_level = logging.DEBUG
    elif verbosity == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    file_handler = logging.FileHandler(_LOG_FILE, mode="a")
    file_handler.setLevel(logging.DEBUG)

    logging.basicConfig(
        level=logging.DEBUG,
        format=_LOG_FORMAT,
        handlers=[console_handler, file_handler],
    )
    # Request-level noise from urllib3 only belongs in the file at -vv
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbosity >= 2 else logging.WARNING)


def _validate_pass_path(pass_path: str) -> None:
    """Reject pass entry names that could be read as options or escape the store."""
    if not re.fullmatch(r"(?:[A-Za-z0-9_-]+)(?:/[A-Za-z0-9_.-]+)*", pass_path):
        msg = f"Invalid pass path for an admin token: {pass_path}"
        raise ValueError(msg)


def _run_pass(pass_path: str, *, passphrase: str | None = None) -> CompletedProcess[str]:
    env = None
    if passphrase is not None:
        env = os.environ.copy() | {"PASSWORD_STORE_GPG_OPTS": "--pinentry-mode=loopback --passphrase-fd 0"}
    return subprocess.run(  # noqa: S603
        ["pass", pass_path], input=passphrase, capture_output=True, text=True, check=True, env=env
    )


def _needs_passphrase(error: subprocess.CalledProcessError) -> bool:
    stderr = error.stderr.lower()
    return error.returncode == 2 and "gpg" in stderr and "public key decryption failed" in stderr


def _read_with_passphrase(pass_path: str) -> CompletedProcess[str]:
    """Ask for the GPG passphrase on the terminal and read the entry again."""
    try:
        passphrase = input(f"GPG passphrase to unlock '{pass_path}': ")
    except EOFError as e:
        msg = f"Token '{pass_path}' is locked and no passphrase could be read; run the migration interactively."
        raise PassphraseRequiredError(msg) from e
    try:
        return _run_pass(pass_path, passphrase=passphrase)
    except subprocess.CalledProcessError as e:
        msg = f"Could not unlock token '{pass_path}' with the given passphrase: {e.stderr.strip()}"
        raise PassphraseRequiredError(msg) from e


def get_pass_value(pass_path: str) -> str:
    """Read an admin API token from the ``pass`` password store.

    Surrounding whitespace is stripped. A locked GPG key triggers one
    passphrase prompt.

    Raises:
        ValueError: If ``pass_path`` is not a plain entry name
        InvalidPassPathError: If the store has no such entry
        PassphraseRequiredError: If the entry cannot be unlocked
        PassError: If ``pass`` is missing or fails otherwise
    """
    _validate_pass_path(pass_path)

    try:
        result = _run_pass(pass_path)
    except FileNotFoundError as e:
        msg = "The 'pass' utility is not installed; set the token through its environment variable instead"
        raise PassError(msg) from e
    except subprocess.CalledProcessError as e:
        if e.returncode == 1 and "not in the password store" in e.stderr.lower():
            msg = f"No token stored in pass at '{pass_path}'"
            raise InvalidPassPathError(msg) from e
        if not _needs_passphrase(e):
            msg = f"pass exited with code {e.returncode} reading '{pass_path}': {e.stderr.strip()}"
            raise PassError(msg) from e
        result = _read_with_passphrase(pass_path)

    return result.stdout.strip()
