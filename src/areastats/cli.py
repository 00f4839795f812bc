"""Command line entry point: import the datasets and print them as tables or JSON."""

from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Optional, Set, Tuple

import click

from areastats.config import APP_NAME, APP_VERSION, DATA_DIR, LOG_LEVEL
from areastats.core.datasets import DATASETS, InputFileSource, get_dataset
from areastats.core.errors import ValidationError
from areastats.core.loader import load_all
from areastats.core.render import write_table

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")

YEARS_ERROR = "Invalid input for years argument"


# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------

def _split_values(values: Iterable[str]) -> List[str]:
    """Flatten repeated options and comma-separated lists into single values."""
    out: List[str] = []
    for value in values or ():
        for part in str(value).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def _wants_all(values: List[str]) -> bool:
    return any(v.lower() == "all" for v in values)


def parse_datasets_arg(values: Iterable[str]) -> List[InputFileSource]:
    """
    Datasets to import. Omitted, or containing 'all' in any case, means every
    known dataset. Raises ValidationError for an unknown dataset code.
    """
    codes = _split_values(values)
    if not codes or _wants_all(codes):
        return list(DATASETS)

    selected: List[InputFileSource] = []
    for code in codes:
        dataset = get_dataset(code)
        if dataset not in selected:
            selected.append(dataset)
    return selected


def parse_areas_arg(values: Iterable[str]) -> Set[str]:
    """Authority codes to import; an empty set means all areas."""
    codes = _split_values(values)
    if _wants_all(codes):
        return set()
    return set(codes)


def parse_measures_arg(values: Iterable[str]) -> Set[str]:
    """Measure codenames (lowercased) to import; an empty set means all measures."""
    codes = _split_values(values)
    if _wants_all(codes):
        return set()
    return {c.lower() for c in codes}


def parse_years_arg(value: Optional[str]) -> Tuple[int, int]:
    """
    Parse 'YYYY' or 'YYYY-ZZZZ' into an inclusive (start, end) tuple.
    '0', '0-0' or no value means all years, returned as (0, 0).
    """
    if value is None or str(value).strip() == "":
        return 0, 0

    parts = str(value).strip().split("-")
    if len(parts) > 2 or not all(p.isdigit() for p in parts):
        raise ValidationError(YEARS_ERROR)

    start = int(parts[0])
    end = int(parts[-1])
    if start == 0 and end == 0:
        return 0, 0

    four_digits = all(1000 <= y <= 9999 for y in (start, end))
    if not four_digits or start > end:
        raise ValidationError(YEARS_ERROR)
    return start, end


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------

@click.command(
    help=f"{APP_NAME} {APP_VERSION}\n\nImport and analyse Welsh Government statistics by area.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--dir",
    "data_dir",
    default=str(DATA_DIR),
    show_default=True,
    help="Directory (or http(s) base URL) holding the dataset files.",
)
@click.option(
    "-d",
    "--datasets",
    multiple=True,
    help="Dataset code(s) to import, comma-separated or repeated (omit or 'all' for every dataset).",
)
@click.option(
    "-a",
    "--areas",
    multiple=True,
    help="Authority code(s) to import (omit or 'all' for every area).",
)
@click.option(
    "-m",
    "--measures",
    multiple=True,
    help="Measure code(s) to import (omit or 'all' for every measure).",
)
@click.option(
    "-y",
    "--years",
    default="0",
    show_default=True,
    help="A year (YYYY) or inclusive range of years (YYYY-ZZZZ); 0 for all years.",
)
@click.option("-j", "--json", "as_json", is_flag=True, help="Print the output as JSON instead of tables.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    default=LOG_LEVEL.lower() if LOG_LEVEL.lower() in LOG_LEVEL_CHOICES else "warning",
    show_default=True,
)
def main(
    data_dir: str,
    datasets: Tuple[str, ...],
    areas: Tuple[str, ...],
    measures: Tuple[str, ...],
    years: str,
    as_json: bool,
    log_level: str,
) -> None:
    configure_logging(log_level)

    try:
        datasets_to_import = parse_datasets_arg(datasets)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="'--datasets'") from exc
    try:
        years_filter = parse_years_arg(years)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="'--years'") from exc

    areas_filter = parse_areas_arg(areas)
    measures_filter = parse_measures_arg(measures)

    logger.info(
        "Loading datasets=%s areas=%s measures=%s years=%s from %s",
        [d.code for d in datasets_to_import],
        sorted(areas_filter),
        sorted(measures_filter),
        years_filter,
        data_dir,
    )

    data, report = load_all(
        data_dir,
        datasets_to_import,
        areas_filter=areas_filter,
        measures_filter=measures_filter,
        years_filter=years_filter,
    )

    for code, message in report.failures.items():
        click.echo(f"Error importing dataset {code}:\n{message}", err=True)

    if as_json:
        click.echo(data.to_json())
    else:
        write_table(data, sys.stdout)


if __name__ == "__main__":
    main()
