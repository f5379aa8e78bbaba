from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from logs import get_logger

log = get_logger("engine")

DEFAULT_COLUMN_WIDTH = 20

Row = Tuple[str, ...]


########################
# Errors
########################

class ErrorKind(enum.Enum):
    COLUMN_NOT_FOUND = "ColumnNotFound"
    SCHEMA_MISMATCH = "SchemaMismatch"
    SOURCE_UNAVAILABLE = "SourceUnavailable"


class TableError(Exception):
    """Base error for the table engine. ``kind`` names the failure category."""
    kind: ErrorKind


class ColumnNotFound(TableError):
    kind = ErrorKind.COLUMN_NOT_FOUND

    def __init__(self, column: str, available: Sequence[str]):
        self.column = column
        self.available = tuple(available)
        super().__init__(f"Column {column!r} not in schema {list(self.available)}")


class SchemaMismatch(TableError):
    kind = ErrorKind.SCHEMA_MISMATCH

    def __init__(self, expected: int, actual: int, line_number: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        self.line_number = line_number
        where = f" on line {line_number}" if line_number is not None else ""
        super().__init__(f"Expected {expected} fields but found {actual}{where}")


class SourceUnavailable(TableError):
    kind = ErrorKind.SOURCE_UNAVAILABLE

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to open: {source}" + (f" ({reason})" if reason else ""))


@dataclass(frozen=True)
class Result:
    """Outcome of :func:`attempt`: exactly one of ``table`` / ``error`` is set."""
    table: Optional["Table"] = None
    error: Optional[TableError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> "Table":
        if self.error is not None:
            raise self.error
        return self.table


def attempt(fn: Callable[..., "Table"], *args: Any, **kwargs: Any) -> Result:
    """Run a table operation and report failure as a value instead of raising.

    Only :class:`TableError` is captured; anything else is a bug and propagates.
    """
    try:
        return Result(table=fn(*args, **kwargs))
    except TableError as exc:
        log.debug("%s failed: %s", getattr(fn, "__name__", fn), exc)
        return Result(error=exc)


########################
# Table
########################

@dataclass(frozen=True)
class Table:
    """Schema plus rows of text cells. Rows are kept as-is (bag semantics)."""
    columns: Tuple[str, ...] = ()
    rows: Tuple[Row, ...] = ()

    def __post_init__(self):
        columns = tuple(_to_str(c) for c in self.columns)
        rows = []
        for r in self.rows:
            row = tuple(_to_str(c) for c in r)
            if len(row) != len(columns):
                raise SchemaMismatch(len(columns), len(row))
            rows.append(row)
        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "rows", tuple(rows))

    @classmethod
    def from_rows(cls, columns: Iterable[str], rows: Iterable[Iterable[Any]]) -> "Table":
        return cls(tuple(columns), tuple(tuple(r) for r in rows))

    def __len__(self) -> int:
        return len(self.rows)

    def index_of(self, column: str) -> int:
        # first occurrence wins when a projection repeated a name
        try:
            return self.columns.index(column)
        except ValueError:
            raise ColumnNotFound(column, self.columns) from None

    def to_records(self) -> List[Dict[str, str]]:
        return [dict(zip(self.columns, row)) for row in self.rows]

    def to_csv(self, delimiter: str = ",") -> str:
        """Delimited text the loader reads back, except cells holding both a quote and the delimiter.

        Quotes have no escape form, so such cells are written as-is and a warning is logged.
        """
        def cell(value: str) -> str:
            if delimiter not in value:
                return value
            if '"' in value:
                log.warning("to_csv: cell %r holds a quote and the delimiter; it will not load back", value)
            return f'"{value}"'

        out = [delimiter.join(map(cell, self.columns))]
        for r in self.rows:
            out.append(delimiter.join(map(cell, r)))
        return "\n".join(out)

    def pretty(self, max_width: int = 24) -> str:
        cols = list(self.columns)
        data = [cols] + [list(r) for r in self.rows]
        widths = [0] * len(cols)
        for row in data:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))
        widths = [min(w, max_width) for w in widths]

        def fmt(row):
            cells = []
            for i, cell in enumerate(row):
                if len(cell) > widths[i]:
                    cell = cell[: max(0, widths[i] - 1)] + "…"
                cells.append(cell.ljust(widths[i]))
            return " | ".join(cells)

        lines = [fmt(cols), "-+-".join("-" * w for w in widths)]
        for r in self.rows:
            lines.append(fmt(r))
        return "\n".join(lines)


def _to_str(x: Any) -> str:
    return x if isinstance(x, str) else str(x)


########################
# Core Operations
########################

# sigma - keep rows whose cell at `column` is exactly `value`
def select(table: Table, column: str, value: str) -> Table:
    idx = table.index_of(column)
    new_rows = [row for row in table.rows if row[idx] == value]
    log.debug("select %s=%r: %d of %d rows", column, value, len(new_rows), len(table.rows))
    return Table(table.columns, tuple(new_rows))


# pi - idxs holds the source position of each requested name, in request order
# Schema = ["EID","Name","Age"], columns = ["Age","Name"] -> idxs = [2, 1]
def project(table: Table, columns: Sequence[str]) -> Table:
    idxs = [table.index_of(c) for c in columns]
    new_rows = [tuple(row[i] for i in idxs) for row in table.rows]
    log.debug("project %s: %d rows", list(columns), len(new_rows))
    return Table(tuple(columns), tuple(new_rows))


# Join relation (inner equi-join on one shared column name)
# 1.  Output schema: every left column, then the right columns whose name is
#     not already on the left. The right join key is always dropped this way.
# 2.  Hash join: bucket the right rows by key, in scan order, so each bucket
#     keeps the right side's relative order.
# 3.  Probe with each left row in order; a left row without a bucket emits nothing.
def join(left: Table, right: Table, column: str) -> Table:
    left_idx = left.index_of(column)
    right_idx = right.index_of(column)

    keep = _retained_right_columns(left, right)
    out_columns = left.columns + tuple(right.columns[j] for j in keep)

    buckets: Dict[str, List[Row]] = {}
    for row in right.rows:
        buckets.setdefault(row[right_idx], []).append(row)

    out_rows = []
    for lrow in left.rows:
        for rrow in buckets.get(lrow[left_idx], ()):
            out_rows.append(lrow + tuple(rrow[j] for j in keep))

    log.debug(
        "join on %s: %d x %d rows -> %d rows", column, len(left.rows), len(right.rows), len(out_rows)
    )
    return Table(out_columns, tuple(out_rows))


def _retained_right_columns(left: Table, right: Table) -> List[int]:
    taken = set(left.columns)
    return [j for j, col in enumerate(right.columns) if col not in taken]


#############################
# Presentation
#############################

def render(table: Table, width: int = DEFAULT_COLUMN_WIDTH) -> str:
    """Fixed-width, left-aligned text: header, dashed rule, one line per row.

    Cells wider than ``width`` are printed whole and shift the rest of their line.
    """
    lines = ["".join(col.ljust(width) for col in table.columns), "-" * (width * len(table.columns))]
    for row in table.rows:
        lines.append("".join(cell.ljust(width) for cell in row))
    return "\n".join(lines)


__all__ = [
    "ColumnNotFound",
    "DEFAULT_COLUMN_WIDTH",
    "ErrorKind",
    "Result",
    "SchemaMismatch",
    "SourceUnavailable",
    "Table",
    "TableError",
    "attempt",
    "join",
    "project",
    "render",
    "select",
]
