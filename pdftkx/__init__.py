"""
pdftkx - build and run pdftk command lines from Python.

Quick Start:
    >>> from pdftkx import PdfTk
    >>> pdf = PdfTk.input({"A": "one.pdf", "B": "two.pdf"}).cat("A1-2 B3").run()
    >>> filled = PdfTk.input("form.pdf").fill_form({"name": "Ada"}).flatten().run()

Main Classes:
    - PdfTk: Fluent request builder and runner
    - PdftkConfig: Executable name and temp directory
    - PendingResult: Result of the non-chainable burst/unpack_files shortcuts

Encoders:
    - generate_fdf: Form data (FDF) payload from a mapping
    - generate_info: Info-text payload from a mapping

For CLI usage, use the 'pdftkx' command after installation.
"""

from pdftkx.codec import generate_fdf, generate_info
from pdftkx.config import PdftkConfig
from pdftkx.exceptions import (
    InputNotFoundError,
    MaterializationError,
    OutputWriteError,
    PdftkArgumentError,
    PdftkError,
    PdftkExecutionError,
    RequestConsumedError,
)
from pdftkx.request import PdfTk
from pdftkx.runner import PendingResult, execute
from pdftkx.tempfiles import TempFileManager

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    "PdfTk",
    "PdftkConfig",
    "PendingResult",
    "TempFileManager",
    "execute",
    "generate_fdf",
    "generate_info",
    "PdftkError",
    "InputNotFoundError",
    "PdftkArgumentError",
    "MaterializationError",
    "PdftkExecutionError",
    "OutputWriteError",
    "RequestConsumedError",
    "__version__",
]
