"""Subprocess execution for assembled pdftk command lines."""

from __future__ import annotations

import asyncio
from asyncio.subprocess import DEVNULL, PIPE
from typing import Awaitable, Callable, Generator, Generic, List, Optional, Sequence, Set, TypeVar

from .exceptions import PdftkExecutionError
from .operations import OUTPUT_KEYWORD, STDIN_MARKER
from .utils import format_command, get_logger

LOGGER = get_logger("pdftkx.runner")

CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


def render_arguments(
    args: Sequence[str],
    post_args: Sequence[str],
    output_dest: Optional[str] = None,
) -> List[str]:
    """Place the single ``output`` marker between leaf and trailing tokens."""

    return [*args, OUTPUT_KEYWORD, output_dest or STDIN_MARKER, *post_args]


async def _feed(stream: asyncio.StreamWriter, payload: bytes) -> None:
    try:
        stream.write(payload)
        await stream.drain()
        LOGGER.debug("Wrote %d bytes to pdftk stdin", len(payload))
    except (BrokenPipeError, ConnectionResetError) as exc:
        # The exit status reports why pdftk stopped reading.
        LOGGER.debug("pdftk closed stdin early: %s", exc)
    finally:
        stream.close()


async def _drain(stream: asyncio.StreamReader) -> bytes:
    chunks: List[bytes] = []
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


async def _abort(process: asyncio.subprocess.Process, tasks: Sequence[asyncio.Future]) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


async def execute(
    command: str,
    arguments: Sequence[str],
    stdin: Optional[bytes] = None,
) -> bytes:
    """Run *command* with *arguments* and return everything it wrote to stdout.

    Any output on stderr fails the run immediately, whatever the eventual
    exit status would have been. pdftk also prints some warnings there, so
    this policy can reject runs that would have produced usable output.
    """

    LOGGER.info("Running %s", command)
    LOGGER.debug("Command line: %s", format_command(command, arguments))
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *arguments,
            stdin=PIPE if stdin is not None else DEVNULL,
            stdout=PIPE,
            stderr=PIPE,
        )
    except OSError as exc:
        raise PdftkExecutionError(f"Unable to start {command}: {exc}") from exc

    if process.stdout is None or process.stderr is None or (stdin is not None and process.stdin is None):
        raise PdftkExecutionError(f"Unable to open pipes to {command}")
    background: List[asyncio.Future] = [asyncio.ensure_future(_drain(process.stdout))]
    if process.stdin is not None and stdin is not None:
        background.append(asyncio.ensure_future(_feed(process.stdin, stdin)))

    stderr_output = await process.stderr.read(CHUNK_SIZE)
    if stderr_output:
        LOGGER.debug("pdftk wrote %d bytes to stderr", len(stderr_output))
        await _abort(process, background)
        raise PdftkExecutionError(stderr=stderr_output)

    stdout_output, *_ = await asyncio.gather(*background)
    returncode = await process.wait()
    LOGGER.debug("pdftk exited with %s after writing %d bytes", returncode, len(stdout_output))
    if returncode != 0:
        raise PdftkExecutionError(returncode=returncode)
    return stdout_output


# Strong references to runs started in the background until they finish.
_BACKGROUND_RUNS: Set[asyncio.Future] = set()


class PendingResult(Generic[T]):
    """Result of a run started by a terminal shortcut.

    Created inside a running event loop, the run starts at once. Otherwise it
    starts on the first :meth:`result` call or ``await``. The outcome is
    kept, so awaiting again or calling :meth:`result` again returns the same
    bytes or raises the same error. Unlike builder methods this is not
    chainable.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._task: Optional[asyncio.Future] = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            LOGGER.debug("No running event loop, run deferred until result() or await")
        else:
            task = self._ensure_task()
            _BACKGROUND_RUNS.add(task)
            task.add_done_callback(_BACKGROUND_RUNS.discard)

    @property
    def started(self) -> bool:
        return self._task is not None

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def _ensure_task(self) -> asyncio.Future:
        if self._task is None:
            self._task = asyncio.ensure_future(self._factory())
        return self._task

    def __await__(self) -> Generator[object, None, T]:
        return self._ensure_task().__await__()

    def result(self) -> T:
        if self._task is None:
            return asyncio.run(self._run())
        if not self._task.done():
            raise RuntimeError("The run is still in progress in another event loop; await it instead")
        return self._task.result()

    async def _run(self) -> T:
        return await self._ensure_task()
