from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Optional, TextIO

import pandas as pd

from areastats.core.area import Area
from areastats.core.areas import Areas
from areastats.core.measure import Measure

NO_MEASURES = "<no measures>"
NO_DATA = "<no data>"

# Column names for the DataFrame views
CODE_COL = "code"
AREA_COL = "area"
MEASURE_COL = "measure"
LABEL_COL = "label"
YEAR_COL = "year"
VALUE_COL = "value"
AVERAGE_COL = "average"
DIFF_COL = "diff"
DIFF_PCT_COL = "diff_pct"


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def areas_to_dict(areas: Areas) -> Dict[str, Any]:
    """
    Nested dict form of the registry:

      {"<code>": {"names": {"<lang>": "<name>", ...},
                  "measures": {"<codename>": {"<year>": <value>, ...}, ...}},
       ...}

    Empty "names"/"measures" members are left out, as are measures without
    readings and areas with neither.
    """
    out: Dict[str, Any] = {}
    for code, area in areas.items():
        entry: Dict[str, Any] = {}
        if area.names:
            entry["names"] = {lang: area.names[lang] for lang in sorted(area.names)}

        measures = {
            measure.codename: {str(year): value for year, value in measure.items()}
            for measure in area
            if len(measure) > 0
        }
        if measures:
            entry["measures"] = measures

        if entry:
            out[code] = entry
    return out


def areas_to_json(areas: Areas) -> str:
    return json.dumps(areas_to_dict(areas), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Text table
# ---------------------------------------------------------------------------

def _column_width(value: float) -> int:
    """
    Width of a right-aligned column for numbers printed to 6 decimal places:
    the integer digits of value plus 7 (point + 6 decimals), minimum 8.
    """
    if not math.isfinite(value):
        return 8
    return 7 + len(str(abs(int(value))))


def format_measure(measure: Measure) -> str:
    """
    Render one measure block:

      Population density (dens)
           1991      1992      1993   Average    Diff.   %Diff.
      97.126504 97.486216 98.038430 97.550383 0.911926 0.938905
    """
    title = f"{measure.label} ({measure.codename})"
    if len(measure) == 0:
        return f"{title}\n{NO_DATA}\n"

    readings = list(measure.items())
    largest = max(0.0, max(value for _, value in readings))
    diff = measure.difference()
    diff_pct = measure.difference_as_percentage()

    width = _column_width(largest)
    diff_width = _column_width(diff)
    pct_width = _column_width(diff_pct)

    heading = [f"{year:>{width}}" for year, _ in readings]
    heading += [f"{'Average':>{width}}", f"{'Diff.':>{diff_width}}", f"{'%Diff.':>{pct_width}}"]

    row = [f"{value:>{width}.6f}" for _, value in readings]
    row += [
        f"{measure.average():>{width}.6f}",
        f"{diff:>{diff_width}.6f}",
        f"{diff_pct:>{pct_width}.6f}",
    ]

    return "\n".join([title, " ".join(heading), " ".join(row)]) + "\n"


def format_area(area: Area, code: Optional[str] = None) -> str:
    """Area block; code overrides the Area's own code (the registry key)."""
    code = code if code is not None else area.local_authority_code
    lines: List[str] = [f"{area.display_name()} ({code})\n"]
    if len(area) == 0:
        lines.append(f"{NO_MEASURES}\n\n")
        return "".join(lines)

    for measure in area:
        lines.append(format_measure(measure))
        lines.append("\n")
    return "".join(lines)


def format_areas(areas: Areas) -> str:
    return "".join(format_area(area, code) for code, area in areas.items())


def write_table(areas: Areas, stream: TextIO) -> None:
    """Write every area, ordered by authority code, as aligned text tables."""
    for code, area in areas.items():
        stream.write(format_area(area, code))


# ---------------------------------------------------------------------------
# DataFrames (explorer UI)
# ---------------------------------------------------------------------------

def areas_to_frame(areas: Areas) -> pd.DataFrame:
    """Long-form readings: one row per (area, measure, year)."""
    records: List[Dict[str, Any]] = []
    for code, area in areas.items():
        name = area.display_name()
        for measure in area:
            for year, value in measure.items():
                records.append(
                    {
                        CODE_COL: code,
                        AREA_COL: name,
                        MEASURE_COL: measure.codename,
                        LABEL_COL: measure.label,
                        YEAR_COL: year,
                        VALUE_COL: value,
                    }
                )

    columns = [CODE_COL, AREA_COL, MEASURE_COL, LABEL_COL, YEAR_COL, VALUE_COL]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame.from_records(records, columns=columns)


def measure_summary_frame(areas: Areas) -> pd.DataFrame:
    """One row per (area, measure) with average / diff / % diff."""
    records: List[Dict[str, Any]] = []
    for code, area in areas.items():
        for measure in area:
            records.append(
                {
                    CODE_COL: code,
                    AREA_COL: area.display_name(),
                    MEASURE_COL: measure.codename,
                    LABEL_COL: measure.label,
                    AVERAGE_COL: measure.average(),
                    DIFF_COL: measure.difference(),
                    DIFF_PCT_COL: measure.difference_as_percentage(),
                }
            )

    columns = [CODE_COL, AREA_COL, MEASURE_COL, LABEL_COL, AVERAGE_COL, DIFF_COL, DIFF_PCT_COL]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame.from_records(records, columns=columns)
