from __future__ import annotations

import copy
import json
import logging
import math
from typing import AbstractSet, Any, Dict, Iterator, List, Optional, TextIO, Tuple

import pandas as pd

from areastats.core.area import Area
from areastats.core.datasets import SourceColumn, SourceColumnMapping, SourceDataType
from areastats.core.errors import FormatError, NotFoundError, ValidationError
from areastats.core.measure import Measure

logger = logging.getLogger(__name__)

StringFilterSet = AbstractSet[str]
YearFilterTuple = Tuple[int, int]

ALL_YEARS: YearFilterTuple = (0, 0)

# Language codes used for the names found in the datasets.
LANG_ENG = "eng"
LANG_CYM = "cym"


# ---------------------------------------------------------------------------
# Filter helpers
# ---------------------------------------------------------------------------

def _included(value: str, wanted: Optional[StringFilterSet]) -> bool:
    """Empty/None filter means everything; otherwise membership is required."""
    if not wanted:
        return True
    return value in wanted


def _year_included(year: int, years_filter: Optional[YearFilterTuple]) -> bool:
    if years_filter is None:
        return True
    start, end = int(years_filter[0]), int(years_filter[1])
    if start == 0 and end == 0:
        return True
    return start <= year <= end


# ---------------------------------------------------------------------------
# Token / column helpers
# ---------------------------------------------------------------------------

def _require_col(cols: SourceColumnMapping, role: SourceColumn) -> str:
    value = cols.get(role)
    if value is None or str(value) == "":
        raise ValidationError(f"Not enough columns in cols: missing {role.value}")
    return str(value)


def _parse_year(token: Any, context: str) -> int:
    if isinstance(token, bool):
        raise FormatError(f"{context}: invalid year {token!r}")
    if isinstance(token, int):
        return token
    try:
        return int(str(token).strip())
    except ValueError:
        raise FormatError(f"{context}: invalid year {token!r}") from None


def _parse_value(token: Any, context: str) -> float:
    # JSON readings arrive either as numbers or as numeric strings.
    if isinstance(token, bool) or token is None:
        raise FormatError(f"{context}: invalid value {token!r}")
    if isinstance(token, (int, float)):
        value = float(token)
    elif isinstance(token, str):
        try:
            value = float(token.strip())
        except ValueError:
            raise FormatError(f"{context}: invalid value {token!r}") from None
    else:
        raise FormatError(f"{context}: unsupported value type {type(token).__name__}")

    # NaN / Infinity have no JSON representation.
    if not math.isfinite(value):
        raise FormatError(f"{context}: invalid value {token!r}")
    return value


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _read_csv(stream: TextIO, context: str) -> pd.DataFrame:
    """
    Read a comma-separated stream as strings, header row included as row 0.

    Explicitly empty cells come back as "", cells missing from a short row
    come back as NaN. A row longer than the header is a parser error.
    """
    try:
        df = pd.read_csv(
            stream,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise FormatError(f"{context}: file is empty") from exc
    except pd.errors.ParserError as exc:
        raise FormatError(f"{context}: malformed file ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise FormatError(f"{context}: file is not valid UTF-8") from exc

    if df.empty:
        raise FormatError(f"{context}: file is empty")
    return df


class Areas:
    """
    Registry of every Area, keyed by local authority code.

    This is where datasets are imported: populate() dispatches to the
    parser for the file layout, which creates Areas and Measures the first
    time it sees them and updates them in place afterwards.
    """

    def __init__(self) -> None:
        self._areas: Dict[str, Area] = {}

    # ---------------------------------------------------------------------
    # Container access
    # ---------------------------------------------------------------------

    def set_area(self, local_authority_code: str, area: Area) -> None:
        """
        Add an Area, combining it with any Area already stored under the code.

        Names and measures are unioned; on a shared language code or measure
        codename the incoming Area's data wins (measures are merged year by
        year, see Measure.merge()). The registry keeps its own copies, so the
        caller's Area and Measures stay independent of it.
        """
        existing = self._areas.get(local_authority_code)
        if existing is None:
            self._areas[local_authority_code] = copy.deepcopy(area)
            return

        existing.names.update(area.names)
        for codename, measure in area.measures.items():
            current = existing.measures.get(codename)
            if current is None:
                existing.measures[codename] = copy.deepcopy(measure)
            else:
                current.merge(measure)

    def get_area(self, local_authority_code: str) -> Area:
        try:
            return self._areas[local_authority_code]
        except KeyError:
            raise NotFoundError(f"No area found matching {local_authority_code}") from None

    def _get_or_create(self, local_authority_code: str) -> Area:
        area = self._areas.get(local_authority_code)
        if area is None:
            area = Area(local_authority_code)
            self._areas[local_authority_code] = area
        return area

    def codes(self) -> List[str]:
        return sorted(self._areas)

    def size(self) -> int:
        return len(self._areas)

    def __len__(self) -> int:
        return len(self._areas)

    def __contains__(self, local_authority_code: object) -> bool:
        return local_authority_code in self._areas

    def __iter__(self) -> Iterator[Area]:
        for code in sorted(self._areas):
            yield self._areas[code]

    def items(self) -> Iterator[Tuple[str, Area]]:
        """(registry key, Area) pairs in code order."""
        for code in sorted(self._areas):
            yield code, self._areas[code]

    # ---------------------------------------------------------------------
    # Import dispatch
    # ---------------------------------------------------------------------

    def populate(
        self,
        stream: TextIO,
        source_type: SourceDataType,
        cols: SourceColumnMapping,
        areas_filter: Optional[StringFilterSet] = None,
        measures_filter: Optional[StringFilterSet] = None,
        years_filter: Optional[YearFilterTuple] = ALL_YEARS,
    ) -> None:
        """
        Import one dataset stream into this registry.

        Parameters:
          - stream: open text stream positioned at the start of the dataset
          - source_type: file layout (SourceDataType or its string value)
          - cols: SourceColumn -> header / field name for this dataset
          - areas_filter: authority codes to import (empty/None = all)
          - measures_filter: lowercase measure codenames to import (empty/None = all)
          - years_filter: inclusive (start, end); (0, 0) = all years

        Raises ValidationError or FormatError; data merged before the error
        stays in the registry.
        """
        try:
            kind = SourceDataType(source_type)
        except ValueError:
            raise ValidationError(f"Areas.populate: Unexpected data type {source_type!r}") from None

        if kind is SourceDataType.AUTHORITY_CODE_CSV:
            self.populate_from_authority_code_csv(stream, cols, areas_filter)
        elif kind is SourceDataType.AUTHORITY_BY_YEAR_CSV:
            self.populate_from_authority_by_year_csv(
                stream, cols, areas_filter, measures_filter, years_filter
            )
        else:
            self.populate_from_welsh_stats_json(
                stream, cols, areas_filter, measures_filter, years_filter
            )

    # ---------------------------------------------------------------------
    # Format A: authority code, English name, Welsh name
    # ---------------------------------------------------------------------

    def populate_from_authority_code_csv(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: Optional[StringFilterSet] = None,
    ) -> None:
        """
        Import the reference list of authority codes and their names.

        Expected header (names come from cols):
          Local authority code,Name (eng),Name (cym)

        Each row overwrites the 'eng' and 'cym' names of its Area; measures
        already attached to the Area are left alone.
        """
        code_col = _require_col(cols, SourceColumn.AUTH_CODE)
        eng_col = _require_col(cols, SourceColumn.AUTH_NAME_ENG)
        cym_col = _require_col(cols, SourceColumn.AUTH_NAME_CYM)

        df = _read_csv(stream, "Authority code CSV")
        headings = [str(h) for h in df.iloc[0].tolist()]
        if len(headings) != 3:
            raise FormatError(
                f"Authority code CSV: expected 3 columns, found {len(headings)}: {headings}"
            )

        try:
            code_idx = headings.index(code_col)
            eng_idx = headings.index(eng_col)
            cym_idx = headings.index(cym_col)
        except ValueError:
            raise ValidationError(
                f"Authority code CSV: malformed header {headings}, "
                f"expected {[code_col, eng_col, cym_col]}"
            ) from None

        imported = 0
        for idx, row in df.iloc[1:].iterrows():
            if row.isna().any():
                raise FormatError(f"Authority code CSV: row {idx} has fewer than 3 columns")

            code = str(row[code_idx])
            if code.strip() == "":
                logger.warning("Skipping row %s with an empty authority code.", idx)
                continue
            if not _included(code, areas_filter):
                continue

            area = self._get_or_create(code)
            area.set_name(LANG_ENG, str(row[eng_idx]))
            area.set_name(LANG_CYM, str(row[cym_idx]))
            imported += 1

        logger.info("Imported %d areas from authority code CSV.", imported)

    # ---------------------------------------------------------------------
    # Format B: authority code followed by one column per year
    # ---------------------------------------------------------------------

    def populate_from_authority_by_year_csv(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: Optional[StringFilterSet] = None,
        measures_filter: Optional[StringFilterSet] = None,
        years_filter: Optional[YearFilterTuple] = ALL_YEARS,
    ) -> None:
        """
        Import a single-measure table laid out as:

          Local authority code,1991,1992,1993,...
          W06000001,711.6801,711.6801,...

        The measure is identified by SINGLE_MEASURE_CODE / SINGLE_MEASURE_NAME.
        Empty cells mean "no reading for that year" and are skipped.
        """
        measure_code = _require_col(cols, SourceColumn.SINGLE_MEASURE_CODE).lower()
        measure_label = _require_col(cols, SourceColumn.SINGLE_MEASURE_NAME)

        df = _read_csv(stream, "Authority by year CSV")
        headings = [str(h) for h in df.iloc[0].tolist()]

        code_col = cols.get(SourceColumn.AUTH_CODE)
        if code_col and headings[0] != code_col:
            raise ValidationError(
                f"Authority by year CSV: first column is {headings[0]!r}, expected {code_col!r}"
            )

        years = [_parse_year(h, "Authority by year CSV header") for h in headings[1:]]

        # The whole file is one measure, so the measure filter is all-or-nothing.
        if not _included(measure_code, measures_filter):
            logger.debug("Measure %s excluded by filter; nothing to import.", measure_code)
            return

        readings = 0
        for idx, row in df.iloc[1:].iterrows():
            code = row[0]
            if _is_missing(code):
                logger.warning("Skipping row %s with an empty authority code.", idx)
                continue
            code = str(code)
            if not _included(code, areas_filter):
                continue

            for col_idx, year in enumerate(years, start=1):
                if not _year_included(year, years_filter):
                    continue
                cell = row[col_idx]
                if _is_missing(cell):
                    continue
                value = _parse_value(cell, f"Authority by year CSV row {idx}, year {year}")

                area = self._get_or_create(code)
                if not area.has_measure(measure_code):
                    area.set_measure(measure_code, Measure(measure_code, measure_label))
                area.get_measure(measure_code).set_value(year, value)
                readings += 1

        logger.info("Imported %d readings for measure %s.", readings, measure_code)

    # ---------------------------------------------------------------------
    # Format C: StatsWales JSON records
    # ---------------------------------------------------------------------

    def populate_from_welsh_stats_json(
        self,
        stream: TextIO,
        cols: SourceColumnMapping,
        areas_filter: Optional[StringFilterSet] = None,
        measures_filter: Optional[StringFilterSet] = None,
        years_filter: Optional[YearFilterTuple] = ALL_YEARS,
    ) -> None:
        """
        Import StatsWales JSON, where the "value" member is a list of records
        such as:

          {"Localauthority_Code": "W06000001",
           "Localauthority_ItemName_ENG": "Isle of Anglesey",
           "Measure_Code": "DENS", "Measure_ItemName_ENG": "Population density",
           "Year_Code": "1991", "Data": 97.126504}

        Files without a measure field use SINGLE_MEASURE_CODE / SINGLE_MEASURE_NAME.
        Records excluded by any filter are skipped without validation.
        """
        code_field = _require_col(cols, SourceColumn.AUTH_CODE)
        name_field = _require_col(cols, SourceColumn.AUTH_NAME_ENG)
        year_field = _require_col(cols, SourceColumn.YEAR)
        value_field = _require_col(cols, SourceColumn.VALUE)

        try:
            payload = json.load(stream)
        except json.JSONDecodeError as exc:
            raise FormatError(f"StatsWales JSON: invalid JSON ({exc})") from exc
        except UnicodeDecodeError as exc:
            raise FormatError("StatsWales JSON: file is not valid UTF-8") from exc

        if isinstance(payload, dict):
            records = payload.get("value")
        else:
            records = payload
        if not isinstance(records, list):
            raise FormatError("StatsWales JSON: expected a list of records under 'value'")

        readings = 0
        for i, record in enumerate(records):
            context = f"StatsWales JSON record {i}"
            if not isinstance(record, dict):
                raise FormatError(f"{context}: expected an object, got {type(record).__name__}")

            code = record.get(code_field)
            if _is_missing(code):
                raise ValidationError(f"{context}: missing field {code_field!r}")
            code = str(code)

            if not _included(code, areas_filter):
                continue
            if code not in self._areas:
                name = record.get(name_field)
                if _is_missing(name):
                    raise ValidationError(f"{context}: missing field {name_field!r}")
                area = Area(code)
                area.set_name(LANG_ENG, str(name))
                self._areas[code] = area
            area = self._areas[code]

            measure_code = self._json_measure_code(record, cols, context)
            if not _included(measure_code, measures_filter):
                continue
            if not area.has_measure(measure_code):
                label = self._json_measure_label(record, cols, context)
                area.set_measure(measure_code, Measure(measure_code, label))

            year = _parse_year(record.get(year_field), context)
            if not _year_included(year, years_filter):
                continue

            value = _parse_value(record.get(value_field), context)
            area.get_measure(measure_code).set_value(year, value)
            readings += 1

        logger.info("Imported %d readings from %d StatsWales records.", readings, len(records))

    @staticmethod
    def _json_measure_code(record: Dict[str, Any], cols: SourceColumnMapping, context: str) -> str:
        field_name = cols.get(SourceColumn.MEASURE_CODE)
        if field_name is None:
            return _require_col(cols, SourceColumn.SINGLE_MEASURE_CODE).lower()
        code = record.get(field_name)
        if _is_missing(code):
            raise ValidationError(f"{context}: missing field {field_name!r}")
        return str(code).lower()

    @staticmethod
    def _json_measure_label(record: Dict[str, Any], cols: SourceColumnMapping, context: str) -> str:
        field_name = cols.get(SourceColumn.MEASURE_NAME)
        if field_name is None:
            return _require_col(cols, SourceColumn.SINGLE_MEASURE_NAME)
        label = record.get(field_name)
        if _is_missing(label):
            raise ValidationError(f"{context}: missing field {field_name!r}")
        return str(label)

    # ---------------------------------------------------------------------
    # Output
    # ---------------------------------------------------------------------

    def to_json(self) -> str:
        from areastats.core.render import areas_to_json

        return areas_to_json(self)

    def __str__(self) -> str:
        from areastats.core.render import format_areas

        return format_areas(self)
