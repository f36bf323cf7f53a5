"""
Command-line interface for pdftkx.
"""

import json
import os
import sys

import click
from rich.console import Console
from rich.table import Table

from pdftkx import __version__
from pdftkx.codec import generate_fdf
from pdftkx.config import PdftkConfig
from pdftkx.exceptions import PdftkError
from pdftkx.request import PdfTk
from pdftkx.utils import format_file_size

console = Console()
err_console = Console(stderr=True)


def _load_json(path):
    with open(path, 'r', encoding='utf-8') as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise click.BadParameter('JSON data must be an object of field names to values')
    return data


def _fail(exc):
    err_console.print(f"\n[bold red]✗ Error:[/bold red] {exc}")
    sys.exit(1)


def _report(output_path, data):
    console.print(f"\n[bold green]✓ Wrote {format_file_size(len(data))}[/bold green]")
    console.print(f"[dim]Output file: {os.path.abspath(output_path)}[/dim]\n")


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--command',
    default=None,
    help='pdftk executable to run (default: $PDFTKX_COMMAND or "pdftk")',
)
@click.option(
    '--temp-dir',
    default=None,
    help='Directory for staged inputs (default: $PDFTKX_TMPDIR or the system temp dir)',
    type=click.Path(file_okay=False),
)
@click.pass_context
def cli(ctx, command, temp_dir):
    """
    pdftkx - Drive pdftk from the command line.
    """
    ctx.obj = PdftkConfig.from_env().with_updates(command=command, temp_dir=temp_dir)


@cli.command(name="check")
@click.pass_obj
def check(config):
    """
    Show whether the configured pdftk executable can be found.
    """
    executable = config.executable()

    table = Table(title="pdftk", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Command", config.command)
    table.add_row("Resolved", executable or "[red]not found[/red]")
    table.add_row("Temp directory", str(config.resolved_temp_dir()))
    console.print(table)

    if executable is None:
        sys.exit(1)


@cli.command(name="cat")
@click.argument('inputs', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--ranges', '-r', default=None, help='Page ranges, e.g. "1-5 end"')
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(), help='Output PDF')
@click.pass_obj
def cat(config, inputs, ranges, output_path):
    """
    Concatenate INPUTS, optionally selecting page ranges.

    Examples:

        pdftkx cat a.pdf b.pdf -o merged.pdf

        pdftkx cat a.pdf -r "1-3 5" -o selection.pdf
    """
    try:
        request = PdfTk.input(list(inputs), config=config)
        request.cat(ranges or [])
        data = request.run(write_file=output_path)
        _report(output_path, data)
    except PdftkError as exc:
        _fail(exc)


@cli.command(name="fill-form")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.argument('data_json', type=click.Path(exists=True))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(), help='Output PDF')
@click.option('--flatten', is_flag=True, help='Merge the filled fields into the page content')
@click.pass_obj
def fill_form(config, input_pdf, data_json, output_path, flatten):
    """
    Fill the form fields of INPUT_PDF from a JSON object.
    """
    try:
        request = PdfTk.input(input_pdf, config=config).fill_form(_load_json(data_json))
        if flatten:
            request.flatten()
        data = request.run(write_file=output_path)
        _report(output_path, data)
    except (PdftkError, json.JSONDecodeError) as exc:
        _fail(exc)


@cli.command(name="update-info")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.argument('data_json', type=click.Path(exists=True))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(), help='Output PDF')
@click.option('--utf8', is_flag=True, help='Use update_info_utf8')
@click.pass_obj
def update_info(config, input_pdf, data_json, output_path, utf8):
    """
    Replace document info entries of INPUT_PDF from a JSON object.
    """
    try:
        request = PdfTk.input(input_pdf, config=config)
        info = _load_json(data_json)
        if utf8:
            request.update_info_utf8(info)
        else:
            request.update_info(info)
        data = request.run(write_file=output_path)
        _report(output_path, data)
    except (PdftkError, json.JSONDecodeError) as exc:
        _fail(exc)


@cli.command(name="dump-data")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--utf8', is_flag=True, help='Use dump_data_utf8')
@click.option('--fields', is_flag=True, help='Report form fields instead of metadata')
@click.pass_obj
def dump_data(config, input_pdf, utf8, fields):
    """
    Print the metadata report of INPUT_PDF.
    """
    try:
        request = PdfTk.input(input_pdf, config=config)
        if fields and utf8:
            request.dump_data_fields_utf8()
        elif fields:
            request.dump_data_fields()
        elif utf8:
            request.dump_data_utf8()
        else:
            request.dump_data()
        data = request.run()
    except PdftkError as exc:
        _fail(exc)
    click.echo(data.decode('utf-8', errors='replace'), nl=False)


@cli.command(name="burst")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option(
    '--pattern', '-p',
    default='pg_%04d.pdf',
    show_default=True,
    help='Output filename pattern, e.g. "pages/pg_%04d.pdf"',
)
@click.pass_obj
def burst(config, input_pdf, pattern):
    """
    Split INPUT_PDF into single pages.
    """
    try:
        PdfTk.input(input_pdf, config=config).burst(pattern).result()
    except PdftkError as exc:
        _fail(exc)
    console.print("\n[bold green]✓ Burst complete[/bold green]\n")


@cli.command(name="encrypt")
@click.argument('input_pdf', type=click.Path(exists=True))
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(), help='Output PDF')
@click.option('--user-pw', default=None, help='Password required to open the document')
@click.option('--owner-pw', default=None, help='Password required to change permissions')
@click.option('--allow', 'permissions', multiple=True, help='Permission to grant (repeatable)')
@click.option(
    '--strength',
    type=click.Choice(['40', '128']),
    default='128',
    show_default=True,
    help='Encryption strength in bits',
)
@click.pass_obj
def encrypt(config, input_pdf, output_path, user_pw, owner_pw, permissions, strength):
    """
    Encrypt INPUT_PDF with the given passwords and permissions.
    """
    if not user_pw and not owner_pw:
        raise click.UsageError('Provide --user-pw and/or --owner-pw')
    try:
        request = PdfTk.input(input_pdf, config=config)
        if user_pw:
            request.user_pw(user_pw)
        if owner_pw:
            request.owner_pw(owner_pw)
        if permissions:
            request.allow(list(permissions))
        if strength == '40':
            request.encrypt_40bit()
        else:
            request.encrypt_128bit()
        data = request.run(write_file=output_path)
        _report(output_path, data)
    except PdftkError as exc:
        _fail(exc)


@cli.command(name="fdf")
@click.argument('data_json', type=click.Path(exists=True))
@click.option('--output', '-o', 'output_path', default=None, type=click.Path(), help='Write to file instead of stdout')
def fdf(data_json, output_path):
    """
    Encode a JSON object as an FDF document without running pdftk.
    """
    try:
        payload = generate_fdf(_load_json(data_json))
    except (PdftkError, json.JSONDecodeError) as exc:
        _fail(exc)
    if output_path:
        with open(output_path, 'wb') as handle:
            handle.write(payload)
        _report(output_path, payload)
    else:
        click.get_binary_stream('stdout').write(payload)


if __name__ == '__main__':  # pragma: no cover
    cli()
