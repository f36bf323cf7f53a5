from __future__ import annotations

import json
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdftkx.config import PdftkConfig  # noqa: E402

_FAKE_TOOL = '''#!{python}
import json
import sys

stdout_chunks = {stdout_chunks!r}
stderr = {stderr!r}
returncode = {returncode!r}
echo_stdin = {echo_stdin!r}

received = []
while True:
    chunk = sys.stdin.buffer.read(65536)
    if not chunk:
        break
    received.append(chunk)
    if echo_stdin:
        sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()
data = b"".join(received)

with open({log!r}, "w") as handle:
    json.dump({{"argv": sys.argv[1:], "stdin": data.hex()}}, handle)

for chunk in stdout_chunks:
    sys.stdout.buffer.write(chunk)
    sys.stdout.buffer.flush()
if stderr:
    sys.stderr.buffer.write(stderr)
    sys.stderr.buffer.flush()
sys.exit(returncode)
'''


@dataclass
class FakePdftk:
    command: str
    log_path: Path

    @property
    def called(self) -> bool:
        return self.log_path.exists()

    @property
    def argv(self) -> list[str]:
        return json.loads(self.log_path.read_text())["argv"]

    @property
    def stdin(self) -> bytes:
        return bytes.fromhex(json.loads(self.log_path.read_text())["stdin"])


@pytest.fixture()
def fake_pdftk(tmp_path: Path) -> Callable[..., FakePdftk]:
    """Write an executable stand-in for pdftk that records how it was called."""

    counter = iter(range(1000))

    def _create(
        stdout: bytes | list[bytes] = b"",
        stderr: bytes = b"",
        returncode: int = 0,
        echo_stdin: bool = False,
    ) -> FakePdftk:
        index = next(counter)
        script = tmp_path / "bin" / f"pdftk-{index}"
        log_path = tmp_path / "bin" / f"pdftk-{index}.json"
        script.parent.mkdir(exist_ok=True)
        chunks = stdout if isinstance(stdout, list) else [stdout]
        script.write_text(
            _FAKE_TOOL.format(
                python=sys.executable,
                stdout_chunks=chunks,
                stderr=stderr,
                returncode=returncode,
                echo_stdin=echo_stdin,
                log=str(log_path),
            )
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakePdftk(command=str(script), log_path=log_path)

    return _create


@pytest.fixture()
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "staging"


@pytest.fixture()
def config(staging_dir: Path) -> PdftkConfig:
    return PdftkConfig(command="pdftk", temp_dir=staging_dir)


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    for _ in range(5):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdftkx-tests", "/Title": "Sample"})
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[[str], Path]:
    def _create(filename: str) -> Path:
        path = tmp_path / filename
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        with path.open("wb") as handle:
            writer.write(handle)
        return path

    return _create


@pytest.fixture()
def pdf_bytes(sample_pdf: Path) -> bytes:
    return sample_pdf.read_bytes()


@pytest.fixture()
def in_tmp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path

