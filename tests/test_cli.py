from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from pdftkx.cli import cli
from pdftkx.codec import generate_fdf, generate_info


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def data_json(tmp_path: Path) -> Path:
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"name": "Ada", "city": "London"}), encoding="utf-8")
    return path


def _invoke(runner: CliRunner, tool, staging_dir: Path, *args: str):
    return runner.invoke(cli, ["--command", tool.command, "--temp-dir", str(staging_dir), *args])


def test_cat_writes_output(runner, fake_pdftk, pdf_factory, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stdout=b"%PDF-cat")
    first, second = pdf_factory("one.pdf"), pdf_factory("two.pdf")
    output = tmp_path / "merged.pdf"

    result = _invoke(runner, tool, staging_dir, "cat", str(first), str(second), "-r", "1 2", "-o", str(output))

    assert result.exit_code == 0, result.output
    assert output.read_bytes() == b"%PDF-cat"
    assert tool.argv == [str(first), str(second), "cat", "1", "2", "output", "-"]


def test_fill_form_sends_fdf(runner, fake_pdftk, sample_pdf: Path, data_json: Path, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stdout=b"%PDF-filled")
    output = tmp_path / "filled.pdf"

    result = _invoke(
        runner, tool, staging_dir, "fill-form", str(sample_pdf), str(data_json), "-o", str(output), "--flatten"
    )

    assert result.exit_code == 0, result.output
    assert tool.stdin == generate_fdf({"name": "Ada", "city": "London"})
    assert tool.argv[-1] == "flatten"


def test_update_info_utf8(runner, fake_pdftk, sample_pdf: Path, data_json: Path, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stdout=b"%PDF")
    result = _invoke(
        runner, tool, staging_dir, "update-info", str(sample_pdf), str(data_json), "-o", str(tmp_path / "o.pdf"), "--utf8"
    )

    assert result.exit_code == 0, result.output
    assert tool.argv[1:3] == ["update_info_utf8", "-"]
    assert tool.stdin == generate_info({"name": "Ada", "city": "London"})


def test_dump_data_prints_report(runner, fake_pdftk, sample_pdf: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stdout=b"NumberOfPages: 5\n")
    result = _invoke(runner, tool, staging_dir, "dump-data", str(sample_pdf), "--fields")

    assert result.exit_code == 0, result.output
    assert "NumberOfPages: 5" in result.output
    assert tool.argv[1] == "dump_data_fields"


def test_burst_uses_pattern(runner, fake_pdftk, sample_pdf: Path, staging_dir: Path) -> None:
    tool = fake_pdftk()
    result = _invoke(runner, tool, staging_dir, "burst", str(sample_pdf), "-p", "pg_%02d.pdf")

    assert result.exit_code == 0, result.output
    assert tool.argv == [str(sample_pdf), "burst", "output", "pg_%02d.pdf"]


def test_encrypt_options(runner, fake_pdftk, sample_pdf: Path, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stdout=b"%PDF-enc")
    result = _invoke(
        runner, tool, staging_dir,
        "encrypt", str(sample_pdf), "-o", str(tmp_path / "enc.pdf"),
        "--user-pw", "u", "--allow", "Printing", "--allow", "FillIn", "--strength", "40",
    )

    assert result.exit_code == 0, result.output
    assert tool.argv[1:] == ["output", "-", "user_pw", "u", "allow", "Printing", "FillIn", "encrypt_40bit"]


def test_encrypt_requires_password(runner, fake_pdftk, sample_pdf: Path, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk()
    result = _invoke(runner, tool, staging_dir, "encrypt", str(sample_pdf), "-o", str(tmp_path / "enc.pdf"))
    assert result.exit_code != 0
    assert not tool.called


def test_pdftk_failure_exits_with_error(runner, fake_pdftk, sample_pdf: Path, staging_dir: Path) -> None:
    tool = fake_pdftk(stderr=b"Error: Failed to open PDF file")
    result = _invoke(runner, tool, staging_dir, "dump-data", str(sample_pdf))

    assert result.exit_code == 1
    assert "Failed to open PDF file" in result.output


def test_fdf_to_file(runner, data_json: Path, tmp_path: Path) -> None:
    output = tmp_path / "data.fdf"
    result = runner.invoke(cli, ["fdf", str(data_json), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.read_bytes() == generate_fdf({"name": "Ada", "city": "London"})


def test_check_reports_missing_tool(runner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["--command", str(tmp_path / "absent"), "check"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_check_finds_tool(runner, fake_pdftk) -> None:
    tool = fake_pdftk()
    result = runner.invoke(cli, ["--command", tool.command, "check"])
    assert result.exit_code == 0, result.output


def test_fill_form_rejects_non_string_values(runner, fake_pdftk, sample_pdf: Path, tmp_path: Path, staging_dir: Path) -> None:
    tool = fake_pdftk()
    data = tmp_path / "numbers.json"
    data.write_text(json.dumps({"age": 3}), encoding="utf-8")

    result = _invoke(runner, tool, staging_dir, "fill-form", str(sample_pdf), str(data), "-o", str(tmp_path / "o.pdf"))

    assert result.exit_code == 1
    assert "✗ Error" in result.output
    assert not tool.called


def test_malformed_json_exits_with_error(runner, tmp_path: Path) -> None:
    data = tmp_path / "broken.json"
    data.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["fdf", str(data)])

    assert result.exit_code == 1
    assert "✗ Error" in result.output
