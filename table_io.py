"""Delimited-text loading: tokenizer, line parser and file reader."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Union

from config import get_settings
from logs import get_logger
from table_engine import SchemaMismatch, SourceUnavailable, Table

log = get_logger("io")

QUOTE = '"'


def split_delimited(line: str, delimiter: str = ",") -> List[str]:
    """Split one line on ``delimiter``, ignoring delimiters inside double quotes.

    A quote only toggles the quoted state; there is no escape sequence.
    """
    out: List[str] = []
    start = 0
    in_quotes = False
    for i, ch in enumerate(line):
        if ch == QUOTE:
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            out.append(_clean(line[start:i]))
            start = i + 1
    out.append(_clean(line[start:]))
    return out


def _clean(token: str) -> str:
    token = token.strip()
    if token.startswith(QUOTE):
        token = token[1:]
    if token.endswith(QUOTE):
        token = token[:-1]
    return token.strip()


def parse_lines(lines: Iterable[str], delimiter: str = ",") -> Table:
    """Build a table from raw lines; the first non-blank line is the header."""
    columns: Optional[List[str]] = None
    rows: List[List[str]] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        fields = split_delimited(line, delimiter)
        if columns is None:
            columns = fields
            continue
        if len(fields) != len(columns):
            raise SchemaMismatch(len(columns), len(fields), line_number)
        rows.append(fields)

    if columns is None:
        return Table()
    return Table.from_rows(columns, rows)


def parse_text(text: str, delimiter: str = ",") -> Table:
    return parse_lines(text.splitlines(), delimiter)


def load_table(
    path: Union[str, Path],
    delimiter: Optional[str] = None,
    encoding: Optional[str] = None,
) -> Table:
    """Read a delimited file into a :class:`Table`.

    Unset ``delimiter``/``encoding`` fall back to :func:`config.get_settings`.
    Raises :class:`SourceUnavailable` when the file cannot be opened or decoded
    and :class:`SchemaMismatch` on a row of the wrong width.
    """
    settings = get_settings()
    path = Path(path)
    try:
        with path.open("r", encoding=encoding or settings.encoding, newline="") as handle:
            table = parse_lines(handle, delimiter or settings.delimiter)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceUnavailable(str(path), exc.__class__.__name__) from exc

    log.info("loaded %s: %d columns, %d rows", path, len(table.columns), len(table.rows))
    return table


__all__ = ["load_table", "parse_lines", "parse_text", "split_delimited"]
