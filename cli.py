"""Command-line driver: load one or two tables, run operators, print the result."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

from config import check_column_width, check_delimiter, get_settings
from logs import configure_logging, get_logger
from table_engine import Table, TableError, join, project, render, select
from table_io import load_table, parse_text

log = get_logger("cli")

SAMPLE_BUYERS = """PartNo, Name, Buyer
1, "Bolt, hex", Ada
2, Screw, Grace
4, Washer, Linus
"""

SAMPLE_SUPPLIERS = """PartNo, Supplier, Dept
1, Acme, 23
1, Globex, 07
2, Initech, 23
3, Umbrella, 12
"""


class UsageError(Exception):
    """Bad combination of arguments detected after parsing; exits with status 2."""


def _selection(text: str) -> Tuple[str, str]:
    column, sep, value = text.partition("=")
    if not sep or not column:
        raise argparse.ArgumentTypeError(f"expected COLUMN=VALUE, got {text!r}")
    return column, value


def _column_list(text: str) -> List[str]:
    columns = [c.strip() for c in text.split(",") if c.strip()]
    if not columns:
        raise argparse.ArgumentTypeError("empty projection list")
    return columns


def _delimiter(text: str) -> str:
    try:
        return check_delimiter(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _width(text: str) -> int:
    try:
        return check_column_width(int(text))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mini-table",
        description="Select, project and join delimited text tables.",
    )
    parser.add_argument("left", nargs="?", type=Path, help="Left (or only) input table.")
    parser.add_argument("right", nargs="?", type=Path, help="Optional right table to join with.")
    parser.add_argument("--join", metavar="COLUMN", help="Join column (defaults to the first shared column).")
    parser.add_argument(
        "--select",
        metavar="COLUMN=VALUE",
        type=_selection,
        action="append",
        default=[],
        help="Keep rows where COLUMN equals VALUE. Repeatable; applied in order.",
    )
    parser.add_argument("--project", metavar="COLS", type=_column_list, help="Comma separated output columns.")
    parser.add_argument(
        "--delimiter", type=_delimiter, help="Field separator (default from MINITABLE_DELIMITER or ',')."
    )
    parser.add_argument("--width", type=_width, help="Column width of the printed tables (at least 1).")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default from MINITABLE_LOG_LEVEL).",
    )
    parser.add_argument("--demo", action="store_true", help="Run the built-in buyers/suppliers example.")
    return parser


def _print_table(title: str, table: Table, width: int) -> None:
    print(f"=== {title} ===")
    print(render(table, width))
    print()


def run_demo(width: int) -> None:
    buyers = parse_text(SAMPLE_BUYERS)
    suppliers = parse_text(SAMPLE_SUPPLIERS)

    _print_table("BUYERS TABLE", buyers, width)
    _print_table("SUPPLIERS IN DEPT 23", select(suppliers, "Dept", "23"), width)
    _print_table("JOINED DATA", join(buyers, suppliers, "PartNo"), width)


def run_pipeline(args: argparse.Namespace, delimiter: str, width: int) -> Table:
    left = load_table(args.left, delimiter)
    result = left
    right = None
    if args.right is not None:
        right = load_table(args.right, delimiter)
        result = join(left, right, args.join or _shared_column(left, right))

    for column, value in args.select:
        result = select(result, column, value)
    if args.project:
        result = project(result, args.project)

    _print_table(args.left.stem.upper(), left, width)
    if right is not None:
        _print_table(args.right.stem.upper(), right, width)
    _print_table("RESULT", result, width)
    return result


def _shared_column(left: Table, right: Table) -> str:
    for column in left.columns:
        if column in right.columns:
            return column
    raise UsageError("tables share no column; pass --join")


def _check_combination(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.demo:
        if args.left is not None or args.join or args.select or args.project:
            parser.error("--demo takes no input tables or operator flags")
        return
    if args.left is None:
        parser.error("an input table is required unless --demo is given")
    if args.join and args.right is None:
        parser.error("--join needs a right table")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Return 0 on success and 1 when a table operation fails."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    _check_combination(parser, args)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level, settings.log_format, stream=sys.stderr)
    width = args.width if args.width is not None else settings.column_width
    delimiter = args.delimiter if args.delimiter is not None else settings.delimiter

    try:
        if args.demo:
            run_demo(width)
        else:
            run_pipeline(args, delimiter, width)
    except UsageError as exc:
        parser.error(str(exc))
    except TableError as exc:
        log.debug("pipeline aborted", exc_info=True)
        print(f"Error [{exc.kind.value}]: {exc}", file=sys.stderr)
        return 1
    return 0


def console_entrypoint() -> NoReturn:
    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - manual execution path
    console_entrypoint()
