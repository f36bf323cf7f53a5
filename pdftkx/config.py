"""Runtime configuration for :mod:`pdftkx`."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from .utils import get_logger, which

LOGGER = get_logger("pdftkx.config")

DEFAULT_COMMAND = "pdftk"
TEMP_DIR_NAME = "pdftkx-tmp"

COMMAND_ENV = "PDFTKX_COMMAND"
TEMP_DIR_ENV = "PDFTKX_TMPDIR"


@dataclass(frozen=True)
class PdftkConfig:
    """Where to find pdftk and where to stage in-memory inputs."""

    command: str = DEFAULT_COMMAND
    temp_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        if isinstance(self.temp_dir, (str, os.PathLike)) and not isinstance(self.temp_dir, Path):
            object.__setattr__(self, "temp_dir", Path(self.temp_dir))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PdftkConfig":
        env = os.environ if environ is None else environ
        command = env.get(COMMAND_ENV) or DEFAULT_COMMAND
        temp_dir = env.get(TEMP_DIR_ENV) or None
        LOGGER.debug("Loaded configuration: command=%s temp_dir=%s", command, temp_dir)
        return cls(command=command, temp_dir=Path(temp_dir) if temp_dir else None)

    def with_updates(
        self,
        *,
        command: str | None = None,
        temp_dir: str | os.PathLike[str] | None = None,
    ) -> "PdftkConfig":
        return replace(
            self,
            command=command or self.command,
            temp_dir=Path(temp_dir) if temp_dir else self.temp_dir,
        )

    def resolved_temp_dir(self) -> Path:
        """Return the staging directory for materialized inputs.

        Only the path is resolved. The directory itself is created by
        :class:`~pdftkx.tempfiles.TempFileManager` on the first materialization.
        """

        return self.temp_dir or Path(tempfile.gettempdir()) / TEMP_DIR_NAME

    def executable(self) -> str | None:
        return which(self.command)
