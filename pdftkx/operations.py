"""Typed records for the tokens a request contributes to the pdftk command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

RangeSpec = Union[str, Sequence[str]]

# Operand that tells pdftk to read the operation's file from stdin.
STDIN_MARKER = "-"
OUTPUT_KEYWORD = "output"


@dataclass(frozen=True)
class Operation:
    """A pdftk keyword followed by its positional operands."""

    keyword: str
    operands: Tuple[str, ...] = ()

    @classmethod
    def of(cls, keyword: str, *operands: object) -> "Operation":
        return cls(keyword, tuple(str(operand) for operand in operands))

    def tokens(self) -> List[str]:
        return [self.keyword, *self.operands]


def split_tokens(spec: RangeSpec) -> List[str]:
    """Split a whitespace-delimited string, or copy an explicit token list."""

    if isinstance(spec, str):
        return spec.split()
    return [str(token) for token in spec]


def render(operations: Iterable[Operation]) -> List[str]:
    tokens: List[str] = []
    for operation in operations:
        tokens.extend(operation.tokens())
    return tokens
