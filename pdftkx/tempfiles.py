"""Staging of in-memory inputs as temporary files.

pdftk only reads documents from paths, so buffers handed to a request are
written under a dedicated directory first. Every staged file belongs to the
:class:`TempFileManager` that created it and is removed by
:meth:`TempFileManager.cleanup`.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import List, Tuple

from .exceptions import MaterializationError
from .utils import get_logger

LOGGER = get_logger("pdftkx.tempfiles")

TOKEN_BYTES = 16


class TempFileManager:
    """Tracks temporary files created for a single request."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        self._paths: List[Path] = []

    @property
    def paths(self) -> Tuple[Path, ...]:
        return tuple(self._paths)

    def owns(self, path: str | os.PathLike[str]) -> bool:
        return Path(path) in self._paths

    def materialize(self, data: bytes | bytearray | memoryview, suffix: str = ".pdf") -> Path:
        """Write *data* to a uniquely named file and register it for cleanup."""

        target = self.directory / f"{secrets.token_hex(TOKEN_BYTES)}{suffix}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(bytes(data))
        except OSError as exc:
            raise MaterializationError(
                f"Unable to stage input buffer at {target}: {exc}"
            ) from exc

        self._paths.append(target)
        LOGGER.debug("Materialized %d bytes to %s", len(data), target)
        return target

    def cleanup(self) -> None:
        """Delete every managed file. Failures are logged, never raised."""

        paths, self._paths = self._paths, []
        for path in paths:
            try:
                path.unlink()
            except FileNotFoundError:
                LOGGER.debug("Temporary file already removed: %s", path)
            except OSError as exc:
                LOGGER.warning("Failed to remove temporary file %s: %s", path, exc)
            else:
                LOGGER.debug("Removed temporary file %s", path)

    def __len__(self) -> int:
        return len(self._paths)
