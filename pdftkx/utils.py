"""Utility helpers shared by pdftkx modules."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Sequence

_MASKED_OPTIONS = frozenset({"input_pw", "user_pw", "owner_pw"})


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


_LOGGER = get_logger("pdftkx.utils")


def is_path_like(value: object) -> bool:
    """Return ``True`` for strings and :class:`os.PathLike` objects."""

    return isinstance(value, (str, os.PathLike))


def is_buffer(value: object) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def read_file(path: str | os.PathLike[str]) -> bytes:
    """Read *path* fully into memory."""

    return Path(path).read_bytes()


def ensure_parent_dir(path: Path) -> None:
    """Create parent directory for *path* if it does not exist."""

    path.parent.mkdir(parents=True, exist_ok=True)


def which(executable: str) -> str | None:
    """Return the resolved location of *executable* on ``PATH``."""

    found = shutil.which(executable)
    if found:
        _LOGGER.debug("Detected external tool: %s -> %s", executable, found)
    return found


def mask_arguments(arguments: Sequence[str]) -> List[str]:
    """Return a copy of *arguments* with password operands hidden."""

    masked: List[str] = []
    hide_next = False
    for token in arguments:
        masked.append("***" if hide_next else token)
        hide_next = token in _MASKED_OPTIONS
    return masked


def format_command(command: str, arguments: Iterable[str]) -> str:
    return " ".join([command, *mask_arguments(list(arguments))])


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
