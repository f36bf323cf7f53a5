"""
Custom exceptions for pdftkx.

This module defines all custom exceptions used throughout the library.
"""

from __future__ import annotations

from typing import Optional


class PdftkError(Exception):
    """Base exception for all pdftkx errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown pdftk error occurred."


class InputNotFoundError(PdftkError):
    """Raised when an input file handed to a request does not exist."""

    def __init__(self, path: str = "", message: str = "") -> None:
        self.path = path
        if not message and path:
            message = f'The input file "{path}" does not exist'
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "The input file does not exist."


class PdftkArgumentError(PdftkError):
    """Raised when an operation receives arguments of the wrong shape."""

    @property
    def default_message(self) -> str:
        return "Invalid arguments for pdftk operation."


class MaterializationError(PdftkError):
    """Raised when an in-memory input cannot be written to the temp directory."""

    @property
    def default_message(self) -> str:
        return "Unable to stage input buffer as a temporary file."


class PdftkExecutionError(PdftkError):
    """Raised when pdftk reports an error on stderr or exits non-zero."""

    def __init__(
        self,
        message: str = "",
        *,
        stderr: Optional[bytes] = None,
        returncode: Optional[int] = None,
    ) -> None:
        self.stderr = stderr
        self.returncode = returncode
        if not message:
            if stderr:
                message = stderr.decode("utf-8", errors="replace").strip()
            elif returncode is not None:
                message = f"pdftk exited with status {returncode}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "pdftk failed."


class OutputWriteError(PdftkError):
    """Raised when a successful run cannot persist its output file."""

    @property
    def default_message(self) -> str:
        return "Unable to write pdftk output to disk."


class RequestConsumedError(PdftkError):
    """Raised when a request that already ran is executed again."""

    @property
    def default_message(self) -> str:
        return "This pdftk request has already been executed."
