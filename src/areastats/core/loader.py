from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from areastats.core.areas import ALL_YEARS, Areas, StringFilterSet, YearFilterTuple
from areastats.core.datasets import AREAS, InputFileSource
from areastats.core.errors import AreaStatsError
from areastats.core.input_source import resolve_source

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """
    Outcome of loading several datasets into one Areas instance.

    A dataset that fails is recorded in `failures` (code -> message) and
    the remaining datasets are still loaded.
    """
    loaded: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures


def _load_one(
    areas: Areas,
    root: Union[str, Path],
    dataset: InputFileSource,
    areas_filter: Optional[StringFilterSet],
    measures_filter: Optional[StringFilterSet],
    years_filter: Optional[YearFilterTuple],
) -> None:
    source = resolve_source(root, dataset.file)
    logger.info("Importing dataset %s from %s", dataset.code, source.source)
    with source as stream:
        areas.populate(
            stream,
            dataset.parser,
            dataset.cols,
            areas_filter=areas_filter,
            measures_filter=measures_filter,
            years_filter=years_filter,
        )


def load_datasets(
    areas: Areas,
    root: Union[str, Path],
    datasets: Iterable[InputFileSource],
    areas_filter: Optional[StringFilterSet] = None,
    measures_filter: Optional[StringFilterSet] = None,
    years_filter: Optional[YearFilterTuple] = ALL_YEARS,
    report: Optional[LoadReport] = None,
) -> LoadReport:
    """
    Import each dataset found under root (a directory or base URL).

    Errors from one dataset are logged and recorded in the report; the data
    merged before the error stays in `areas`.
    """
    report = report if report is not None else LoadReport()
    t0 = time.perf_counter()

    for dataset in datasets:
        try:
            _load_one(areas, root, dataset, areas_filter, measures_filter, years_filter)
        except AreaStatsError as exc:
            logger.error("Error importing dataset %s: %s", dataset.code, exc)
            report.failures[dataset.code] = str(exc)
            continue
        report.loaded.append(dataset.code)

    report.elapsed_seconds += time.perf_counter() - t0
    return report


def load_areas(
    areas: Areas,
    root: Union[str, Path],
    areas_filter: Optional[StringFilterSet] = None,
    report: Optional[LoadReport] = None,
) -> LoadReport:
    """Import the authority code list (areas.csv) found under root."""
    return load_datasets(areas, root, [AREAS], areas_filter=areas_filter, report=report)


def load_all(
    root: Union[str, Path],
    datasets: Iterable[InputFileSource],
    areas_filter: Optional[StringFilterSet] = None,
    measures_filter: Optional[StringFilterSet] = None,
    years_filter: Optional[YearFilterTuple] = ALL_YEARS,
) -> Tuple[Areas, LoadReport]:
    """
    Convenience helper: fresh Areas with areas.csv and then the datasets.

    Returns (areas, report).
    """
    areas = Areas()
    report = load_areas(areas, root, areas_filter)
    load_datasets(
        areas,
        root,
        datasets,
        areas_filter=areas_filter,
        measures_filter=measures_filter,
        years_filter=years_filter,
        report=report,
    )
    return areas, report
