"""Parsing of bulk id input ("1,2,4,5" or a list)."""

from collections import Counter
from typing import Iterable

from .errors import DuplicateIds, ParseError


def parse_ids(value: str | Iterable[int | str]) -> list[int]:
    """
    Parse a comma-separated string or a list into unique integer ids.

    Empty string / empty list -> []. Raises ParseError on a non-numeric
    token and DuplicateIds when an id repeats.
    """
    if isinstance(value, str):
        tokens: list = value.split(",") if value.strip() else []
    else:
        tokens = list(value)

    ids = []
    for token in tokens:
        if isinstance(token, bool):
            raise ParseError(str(token))
        if isinstance(token, int):
            if token < 0:
                raise ParseError(str(token))
            ids.append(token)
            continue
        text = str(token).strip()
        # isdigit alone lets through digits int() cannot read, e.g. "²"
        if not (text.isascii() and text.isdigit()):
            raise ParseError(text)
        ids.append(int(text))

    repeated = [i for i, n in Counter(ids).items() if n > 1]
    if repeated:
        raise DuplicateIds(repeated)
    return ids


def format_ids(ids: Iterable[int]) -> str:
    """Inverse of parse_ids: [1, 2] -> "1,2", [] -> ""."""
    return ",".join(str(i) for i in ids)
