"""Fluent builder for pdftk command lines.

A :class:`PdfTk` request collects input documents, one or more operations
and output options, then runs pdftk once::

    >>> from pdftkx import PdfTk
    >>> data = PdfTk.input(["a.pdf", "b.pdf"]).cat("1-5 end").run()

Operation methods return the request itself. :meth:`PdfTk.output` and
:meth:`PdfTk.run` execute it. :meth:`PdfTk.burst` and
:meth:`PdfTk.unpack_files` end the chain and return a
:class:`~pdftkx.runner.PendingResult` rather than the builder; inside a
running event loop the run starts at once, otherwise on the first
``result()`` or ``await``.

Staged temporary inputs are removed after the run, or when a request that
never ran is garbage collected.
"""

from __future__ import annotations

import asyncio
import os
import weakref
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from . import codec
from .config import PdftkConfig
from .exceptions import (
    InputNotFoundError,
    OutputWriteError,
    PdftkArgumentError,
    RequestConsumedError,
)
from .operations import STDIN_MARKER, Operation, RangeSpec, render, split_tokens
from .runner import PendingResult, execute, render_arguments
from .tempfiles import TempFileManager
from .utils import ensure_parent_dir, get_logger, is_buffer, is_path_like, read_file

LOGGER = get_logger("pdftkx.request")

PathType = Union[str, "os.PathLike[str]"]
Buffer = Union[bytes, bytearray, memoryview]
InputSpec = Union[PathType, Buffer, Mapping[str, PathType]]
StdinSource = Union[PathType, Buffer]
FormData = Union[PathType, Buffer, Mapping[str, codec.FieldValue]]
InfoData = Union[PathType, Buffer, Mapping[str, str]]


def _check_exists(path: PathType) -> str:
    path_str = os.fspath(path)
    if not os.path.exists(path_str):
        raise InputNotFoundError(path_str)
    return path_str


def _normalize_source(spec: object, temp_files: TempFileManager) -> List[str]:
    if is_buffer(spec):
        return [str(temp_files.materialize(spec))]  # type: ignore[arg-type]
    if isinstance(spec, Mapping):
        entries = []
        for handle, path in spec.items():
            if not isinstance(handle, str) or not handle or "=" in handle:
                raise PdftkArgumentError(f"Invalid input handle: {handle!r}")
            entries.append(f"{handle}={_check_exists(path)}")
        return entries
    if is_path_like(spec):
        return [_check_exists(spec)]  # type: ignore[arg-type]
    raise PdftkArgumentError(f"Unsupported input type: {type(spec).__name__}")


class PdfTk:
    """A single pdftk invocation under construction."""

    def __init__(
        self,
        sources: Sequence[str],
        *,
        config: Optional[PdftkConfig] = None,
        temp_files: Optional[TempFileManager] = None,
    ) -> None:
        self.config = config or PdftkConfig()
        self.sources: Tuple[str, ...] = tuple(sources)
        if temp_files is None:
            temp_files = TempFileManager(self.config.resolved_temp_dir())
        self.temp_files = temp_files
        self._finalizer = weakref.finalize(self, temp_files.cleanup)
        self.stdin: Optional[bytes] = None
        self._operations: List[Operation] = []
        self._options: List[Operation] = []
        self._consumed = False

    @classmethod
    def input(
        cls,
        src: Union[InputSpec, Sequence[InputSpec]],
        *,
        config: Optional[PdftkConfig] = None,
    ) -> "PdfTk":
        """Create a request from one input specifier or a list of them.

        Each specifier is a path, a ``{handle: path}`` mapping or the raw
        bytes of a document. Bytes are written to the temp directory and
        removed again once the request has run.
        """

        config = config or PdftkConfig()
        temp_files = TempFileManager(config.resolved_temp_dir())
        specs: Iterable[object]
        if isinstance(src, (list, tuple)):
            specs = src
        else:
            specs = [src]

        sources: List[str] = []
        try:
            for spec in specs:
                sources.extend(_normalize_source(spec, temp_files))
        except Exception:
            temp_files.cleanup()
            raise

        LOGGER.debug("Created request with %d input(s)", len(sources))
        return cls(sources, config=config, temp_files=temp_files)

    @property
    def command(self) -> str:
        return self.config.command

    @property
    def args(self) -> List[str]:
        """Input specifiers followed by the operation tokens."""

        return [*self.sources, *render(self._operations)]

    @property
    def post_args(self) -> List[str]:
        """Output options, placed after ``output <dest>`` on the command line."""

        return render(self._options)

    @property
    def tmp_files(self) -> Tuple[Path, ...]:
        return self.temp_files.paths

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _add(self, keyword: str, *operands: object) -> "PdfTk":
        self._operations.append(Operation.of(keyword, *operands))
        return self

    def _add_option(self, keyword: str, *operands: object) -> "PdfTk":
        self._options.append(Operation.of(keyword, *operands))
        return self

    def _add_ranges(self, keyword: str, ranges: RangeSpec) -> "PdfTk":
        return self._add(keyword, *split_tokens(ranges))

    def _command_with_stdin(self, keyword: str, payload: StdinSource) -> "PdfTk":
        if self.stdin is not None:
            raise PdftkArgumentError(
                f'"{keyword}" needs stdin, which is already used by an earlier operation'
            )
        if is_buffer(payload):
            data = bytes(payload)  # type: ignore[arg-type]
        elif is_path_like(payload):
            data = read_file(_check_exists(payload))  # type: ignore[arg-type]
        else:
            raise PdftkArgumentError(f"Unsupported stdin source: {type(payload).__name__}")
        self.stdin = data
        LOGGER.debug("Attached %d byte stdin payload for %s", len(data), keyword)
        return self._add(keyword, STDIN_MARKER)

    # Page assembly -------------------------------------------------------

    def cat(self, ranges: RangeSpec) -> "PdfTk":
        """Assemble pages from the inputs, e.g. ``"A1-5 B2 Aend"``."""

        return self._add_ranges("cat", ranges)

    def shuffle(self, ranges: RangeSpec) -> "PdfTk":
        """Collate pages, taking one page from each range in turn."""

        return self._add_ranges("shuffle", ranges)

    def rotate(self, ranges: RangeSpec) -> "PdfTk":
        """Rotate the given pages, e.g. ``"1east 2-end"``."""

        return self._add_ranges("rotate", ranges)

    def burst(self, output_options: Union[str, Sequence[str], None] = None) -> PendingResult[bytes]:
        """Split the input into single pages and end the chain.

        *output_options* is the filename pattern, e.g. ``"out/page_%02d.pdf"``.
        A list holds the pattern followed by output options such as
        ``"compress"``, each passed to pdftk as its own argument.
        """

        destination: Optional[str] = None
        if isinstance(output_options, str):
            destination = output_options
        elif output_options:
            destination, *options = split_tokens(output_options)
            for option in options:
                self._add_option(option)
        self._add("burst")
        return PendingResult(lambda: self.output(output_dest=destination))

    # Forms and overlays --------------------------------------------------

    def generate_fdf(self) -> "PdfTk":
        return self._add("generate_fdf")

    def fill_form(self, data: FormData) -> "PdfTk":
        """Fill form fields from a mapping, raw FDF/XFDF bytes, or an FDF file path."""

        if isinstance(data, Mapping):
            data = codec.generate_fdf(data)
        return self._command_with_stdin("fill_form", data)

    def background(self, file: StdinSource) -> "PdfTk":
        return self._command_with_stdin("background", file)

    def multi_background(self, file: StdinSource) -> "PdfTk":
        return self._command_with_stdin("multibackground", file)

    def stamp(self, file: StdinSource) -> "PdfTk":
        return self._command_with_stdin("stamp", file)

    def multi_stamp(self, file: StdinSource) -> "PdfTk":
        return self._command_with_stdin("multistamp", file)

    # Reports -------------------------------------------------------------

    def dump_data(self) -> "PdfTk":
        return self._add("dump_data")

    def dump_data_utf8(self) -> "PdfTk":
        return self._add("dump_data_utf8")

    def dump_data_fields(self) -> "PdfTk":
        return self._add("dump_data_fields")

    def dump_data_fields_utf8(self) -> "PdfTk":
        return self._add("dump_data_fields_utf8")

    def dump_data_annots(self) -> "PdfTk":
        return self._add("dump_data_annots")

    # Metadata ------------------------------------------------------------

    def update_info(self, data: InfoData) -> "PdfTk":
        if isinstance(data, Mapping):
            data = codec.generate_info(data)
        return self._command_with_stdin("update_info", data)

    def update_info_utf8(self, data: InfoData) -> "PdfTk":
        if isinstance(data, Mapping):
            data = codec.generate_info(data)
        return self._command_with_stdin("update_info_utf8", data)

    # Attachments ---------------------------------------------------------

    def attach_files(self, files: Union[PathType, Sequence[PathType], None]) -> "PdfTk":
        if not files:
            raise PdftkArgumentError('The "attach_files" method requires a file')
        if is_path_like(files):
            files = [files]  # type: ignore[list-item]
        return self._add("attach_files", *(os.fspath(file) for file in files))  # type: ignore[union-attr]

    def to_page(self, page_no: int) -> "PdfTk":
        """Attach the files given to :meth:`attach_files` to *page_no*."""

        return self._add("to_page", page_no)

    def unpack_files(self, output_dir: PathType) -> PendingResult[bytes]:
        """Extract attachments into *output_dir* and end the chain."""

        self._add("unpack_files")
        destination = os.fspath(output_dir)
        return PendingResult(lambda: self.output(output_dest=destination))

    # Output options ------------------------------------------------------

    def flatten(self) -> "PdfTk":
        return self._add_option("flatten")

    def need_appearances(self) -> "PdfTk":
        return self._add_option("need_appearances")

    def compress(self) -> "PdfTk":
        return self._add_option("compress")

    def uncompress(self) -> "PdfTk":
        return self._add_option("uncompress")

    def keep_first_id(self) -> "PdfTk":
        return self._add_option("keep_first_id")

    def keep_final_id(self) -> "PdfTk":
        return self._add_option("keep_final_id")

    def drop_xfa(self) -> "PdfTk":
        return self._add_option("drop_xfa")

    def verbose(self) -> "PdfTk":
        return self._add_option("verbose")

    def dont_ask(self) -> "PdfTk":
        return self._add_option("dont_ask")

    def do_ask(self) -> "PdfTk":
        return self._add_option("do_ask")

    def input_pw(self, password: str) -> "PdfTk":
        return self._add_option("input_pw", password)

    def user_pw(self, password: str) -> "PdfTk":
        return self._add_option("user_pw", password)

    def owner_pw(self, password: str) -> "PdfTk":
        return self._add_option("owner_pw", password)

    def allow(self, perms: Union[str, Sequence[str], None] = None) -> "PdfTk":
        """Grant permissions on the encrypted output.

        Choices are Printing, DegradedPrinting, ModifyContents, Assembly,
        CopyContents, ScreenReaders, ModifyAnnotations, FillIn and
        AllFeatures. Passing nothing disables every feature.
        """

        if not perms:
            return self._add_option("allow")
        return self._add_option("allow", *split_tokens(perms))

    def encrypt_40bit(self) -> "PdfTk":
        return self._add_option("encrypt_40bit")

    def encrypt_128bit(self) -> "PdfTk":
        return self._add_option("encrypt_128bit")

    # Execution -----------------------------------------------------------

    def build_args(self, output_dest: Optional[PathType] = None) -> List[str]:
        """Return the complete argument vector for *output_dest*."""

        destination = os.fspath(output_dest) if output_dest else None
        return render_arguments(self.args, self.post_args, destination)

    async def output(
        self,
        write_file: Optional[PathType] = None,
        output_dest: Optional[PathType] = None,
    ) -> bytes:
        """Run pdftk and return its stdout.

        Args:
            write_file: Also write the returned bytes to this path.
            output_dest: Let pdftk write its output to this path instead of
                stdout. The returned bytes are then whatever pdftk printed.
        """

        if self._consumed:
            raise RequestConsumedError()
        self._consumed = True

        arguments = self.build_args(output_dest)
        try:
            result = await execute(self.command, arguments, stdin=self.stdin)
        finally:
            self.temp_files.cleanup()

        if write_file:
            target = Path(write_file)
            try:
                ensure_parent_dir(target)
                await asyncio.to_thread(target.write_bytes, result)
            except OSError as exc:
                raise OutputWriteError(f"Unable to write output to {target}: {exc}") from exc
            LOGGER.debug("Wrote %d bytes to %s", len(result), target)
        return result

    def run(
        self,
        write_file: Optional[PathType] = None,
        output_dest: Optional[PathType] = None,
    ) -> bytes:
        """Synchronous counterpart of :meth:`output`."""

        return asyncio.run(self.output(write_file, output_dest))

    def __repr__(self) -> str:
        return f"PdfTk(command={self.command!r}, args={self.args!r}, post_args={self.post_args!r})"
