from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import polars as pl

from perch._log import setup_logging
from perch.core.errors import ColumnNotFound, JoinKeyMismatch, TypeMismatch
from perch.core.table import Table
from perch.io import IoError, Settings, read_table
from perch.viz import PlotSpec, Theme, save
from perch.viz import theme as theme_component

from .workshop import LESSONS, RECIPES

logger = logging.getLogger(__name__)

# MalformedValue, InsufficientRows, PaletteTooSmall and pydantic's ValidationError are ValueErrors
_DATA_ERRORS = (
    IoError,
    ColumnNotFound,
    JoinKeyMismatch,
    TypeMismatch,
    ValueError,
)


def _print_table(table: Table, n: int | None) -> None:
    """Print a table (optionally its first n rows) via Polars."""
    df = table.to_polars()
    with pl.Config(tbl_rows=-1 if n is None else n):
        print(df if n is None else df.head(n))


def _load(settings: Settings, data: str | None) -> Table:
    path = Path(data or settings.data_path)
    print(f"[INFO] Reading {path}")
    return read_table(path)


def _cmd_lesson(argv: list[str], settings: Settings) -> int:
    p = argparse.ArgumentParser(prog="perch lesson", description="Print the result of a workshop lesson.")
    p.add_argument("name", choices=sorted(LESSONS), help="Lesson to run.")
    p.add_argument("--data", type=str, default=None, help="eBird CSV (default from settings).")
    p.add_argument("--n", type=int, default=None, help="Rows to display (default: all).")
    p.add_argument("--year", type=int, default=None, help="Year for median_samplesize_after / sampled_state_presence.")
    p.add_argument(
        "--kind",
        choices=["inner", "left", "right", "full"],
        default="full",
        help="Join kind for join_years.",
    )
    p.add_argument("--seed", type=int, default=settings.seed, help="Seed for sampled_state_presence.")
    args = p.parse_args(argv)

    ebird = _load(settings, args.data)
    fn = LESSONS[args.name]
    if args.name == "join_years":
        result = fn(ebird, kind=args.kind)
    elif args.name == "sampled_state_presence":
        kwargs = {"seed": args.seed}
        if args.year is not None:
            kwargs["year"] = args.year
        result = fn(ebird, **kwargs)
    elif args.name == "median_samplesize_after" and args.year is not None:
        result = fn(ebird, year=args.year)
    else:
        result = fn(ebird)

    tables = result if isinstance(result, tuple) else (result,)
    for table in tables:
        _print_table(table, args.n)
    return 0


def _cmd_plot(argv: list[str], settings: Settings) -> int:
    p = argparse.ArgumentParser(prog="perch plot", description="Export a workshop plot recipe.")
    p.add_argument("recipe", choices=sorted(RECIPES), help="Recipe to draw.")
    p.add_argument("--out", type=str, default=None, help="Output file; suffix picks the format.")
    p.add_argument("--data", type=str, default=None, help="eBird CSV (default from settings).")
    p.add_argument("--width", type=float, default=settings.width, help="Figure width in --unit.")
    p.add_argument("--height", type=float, default=settings.height, help="Figure height in --unit.")
    p.add_argument("--unit", choices=["in", "cm", "mm", "px"], default=settings.unit, help="Size unit.")
    p.add_argument("--dpi", type=int, default=settings.dpi, help="PNG resolution.")
    p.add_argument("--theme", type=str, default=None, help="Theme preset overriding the recipe's.")
    args = p.parse_args(argv)

    out = Path(args.out) if args.out else Path(settings.out_dir) / f"{args.recipe}.html"
    ebird = _load(settings, args.data)
    figure = RECIPES[args.recipe](ebird)

    if isinstance(figure, PlotSpec):
        if args.theme:
            figure = figure + theme_component(args.theme)
        elif figure.theme == Theme():
            figure = figure + theme_component(settings.theme)
    elif args.theme:
        logger.warning("--theme is ignored for composite figure %r", args.recipe)

    written = save(figure, out, width=args.width, height=args.height, unit=args.unit, dpi=args.dpi)
    print(f"[INFO] Wrote {args.recipe} to {written}")
    return 0


def _cmd_recipes(argv: list[str], settings: Settings) -> int:
    argparse.ArgumentParser(prog="perch recipes", description="List plot recipes.").parse_args(argv)
    for name, fn in sorted(RECIPES.items()):
        summary = (fn.__doc__ or "").strip().splitlines()
        print(f"{name}" + (f"  - {summary[0]}" if summary else ""))
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="perch", description="eBird workshop lessons and plots.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("lesson")
    sub.add_parser("plot")
    sub.add_parser("recipes")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    settings = Settings.load()
    setup_logging(settings.log_level)
    cmd, rest = argv[0], argv[1:]
    commands = {"lesson": _cmd_lesson, "plot": _cmd_plot, "recipes": _cmd_recipes}
    if cmd not in commands:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = commands[cmd](rest, settings)
    except _DATA_ERRORS as exc:
        print(f"[ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
