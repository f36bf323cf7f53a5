"""Encoders for the stdin payloads understood by pdftk.

Two formats are produced from key/value mappings:

* FDF (forms data format) consumed by ``fill_form``.
* The plain-text info format consumed by ``update_info`` and
  ``update_info_utf8``.

Both encoders are pure: the same mapping, iterated in the same order, yields
byte-identical output.

FDF string values are emitted between literal ``(`` and ``)`` delimiters
without escaping. Values containing unbalanced parentheses or backslashes
will corrupt the payload; callers must avoid them.
"""

from __future__ import annotations

from typing import Mapping, Union

from .exceptions import PdftkArgumentError

FieldValue = Union[str, bytes]

# Four high-bit bytes on the second line mark the payload as binary.
FDF_SIGNATURE = bytes((0xE2, 0xE3, 0xCF, 0xD3))

FDF_HEADER = (
    b"%FDF-1.2\n"
    + FDF_SIGNATURE
    + b"\n1 0 obj\n<<\n/FDF\n<<\n/Fields [\n"
)

FDF_FOOTER = b"]\n>>\n>>\nendobj\ntrailer\n\n<<\n/Root 1 0 R\n>>\n%%EOF\n"

UTF16_BOM = b"\xfe\xff"


def encode_fdf_string(value: FieldValue) -> bytes:
    """Encode *value* as raw bytes suitable for an FDF string literal.

    Latin-1 text maps byte-for-byte. Text outside Latin-1 is written as
    UTF-16BE with a byte-order mark. ``bytes`` pass through untouched.
    """

    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise PdftkArgumentError(
            f"FDF keys and values must be str or bytes, got {type(value).__name__}"
        )
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return UTF16_BOM + value.encode("utf-16-be")


def generate_fdf(data: Mapping[str, FieldValue]) -> bytes:
    """Build an FDF document assigning each key of *data* its value."""

    records = [FDF_HEADER]
    for key, value in data.items():
        records.append(b"<<\n/T (")
        records.append(encode_fdf_string(key))
        records.append(b")\n/V (")
        records.append(encode_fdf_string(value))
        records.append(b")\n>>\n")
    records.append(FDF_FOOTER)
    return b"".join(records)


def generate_info(data: Mapping[str, str]) -> bytes:
    """Build an info-text payload with one ``InfoBegin`` block per entry."""

    blocks = []
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise PdftkArgumentError(
                f"Info keys and values must be str, got {type(key).__name__}: {type(value).__name__}"
            )
        blocks.append(f"InfoBegin\nInfoKey: {key}\nInfoValue: {value}\n")
    return "".join(blocks).encode("utf-8")


__all__ = [
    "FDF_FOOTER",
    "FDF_HEADER",
    "FDF_SIGNATURE",
    "encode_fdf_string",
    "generate_fdf",
    "generate_info",
]
