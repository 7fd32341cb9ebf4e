"""API key resolution and caching.

The key is taken from, in order:

1. an explicit value (``-k``), used for this run only;
2. the cached key file, when present, readable and non-empty;
3. an interactive prompt on the controlling terminal. The answer is written
   to the key file with owner-only permissions before it is returned.

The key is never checked locally; a wrong key only shows up as failed uploads.
"""
from __future__ import annotations

import getpass
import logging
import os
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

KEY_FILE_MODE = 0o600
PROMPT = "TinyPNG API key: "


class CredentialError(Exception):
    """Raised when no API key could be obtained."""


def _prompt_terminal(prompt: str) -> str:
    return getpass.getpass(prompt)


def read_key_file(key_file: Path) -> str | None:
    """Return the cached key, or ``None`` when there is nothing usable."""

    if not key_file.is_file():
        return None
    try:
        key = key_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning("Cannot read API key file %s: %s", key_file, exc)
        return None
    if not key:
        logger.debug("API key file %s is empty", key_file)
        return None
    return key


def write_key_file(key_file: Path, key: str) -> None:
    """Create or overwrite *key_file* with *key*, readable by the owner only."""

    fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(key + "\n")
    # O_CREAT leaves the mode of an existing file alone
    os.chmod(key_file, KEY_FILE_MODE)
    logger.info("Saved API key to %s", key_file)


def resolve_api_key(
    key_file: Path,
    *,
    explicit: str | None = None,
    prompt: Callable[[str], str] | None = None,
) -> str:
    if explicit:
        logger.debug("Using API key given on the command line")
        return explicit

    cached = read_key_file(key_file)
    if cached is not None:
        logger.debug("Using API key from %s", key_file)
        return cached

    ask = prompt or _prompt_terminal
    try:
        entered = ask(PROMPT).strip()
    except EOFError as exc:
        raise CredentialError("No API key entered") from exc
    if not entered:
        raise CredentialError("No API key entered")

    write_key_file(key_file, entered)
    return entered
