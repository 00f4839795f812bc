from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping

from areastats.core.errors import ValidationError


class SourceDataType(Enum):
    """Layout of a dataset file; selects the parser in Areas.populate()."""

    AUTHORITY_CODE_CSV = "authority_code_csv"
    AUTHORITY_BY_YEAR_CSV = "authority_by_year_csv"
    WELSH_STATS_JSON = "welsh_stats_json"


class SourceColumn(str, Enum):
    """
    Logical column roles. A column mapping maps these roles to the literal
    header (CSV) or field name (JSON) used by a particular dataset file.

    SINGLE_MEASURE_CODE / SINGLE_MEASURE_NAME are not column names: they
    carry the measure identity for files holding a single measure.
    """

    AUTH_CODE = "AUTH_CODE"
    AUTH_NAME_ENG = "AUTH_NAME_ENG"
    AUTH_NAME_CYM = "AUTH_NAME_CYM"
    MEASURE_CODE = "MEASURE_CODE"
    MEASURE_NAME = "MEASURE_NAME"
    SINGLE_MEASURE_CODE = "SINGLE_MEASURE_CODE"
    SINGLE_MEASURE_NAME = "SINGLE_MEASURE_NAME"
    VALUE = "VALUE"
    YEAR = "YEAR"


SourceColumnMapping = Mapping[SourceColumn, str]


@dataclass(frozen=True)
class InputFileSource:
    name: str
    code: str
    file: str
    parser: SourceDataType
    cols: Dict[SourceColumn, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Known datasets
# ---------------------------------------------------------------------------

AREAS = InputFileSource(
    name="Areas",
    code="areas",
    file="areas.csv",
    parser=SourceDataType.AUTHORITY_CODE_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.AUTH_NAME_ENG: "Name (eng)",
        SourceColumn.AUTH_NAME_CYM: "Name (cym)",
    },
)

POPDEN = InputFileSource(
    name="Population density",
    code="popden",
    file="popu1009.json",
    parser=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Localauthority_Code",
        SourceColumn.AUTH_NAME_ENG: "Localauthority_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Measure_Code",
        SourceColumn.MEASURE_NAME: "Measure_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

BIZ = InputFileSource(
    name="Active Businesses",
    code="biz",
    file="econ0080.json",
    parser=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Variable_Code",
        SourceColumn.MEASURE_NAME: "Variable_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

AQI = InputFileSource(
    name="Air Quality Indicators",
    code="aqi",
    file="envi0201.json",
    parser=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Pollutant_ItemName_ENG",
        SourceColumn.MEASURE_NAME: "Pollutant_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

TRAINS = InputFileSource(
    name="Rail passenger journeys",
    code="trains",
    file="tran0152.json",
    parser=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "LocalAuthority_Code",
        SourceColumn.AUTH_NAME_ENG: "LocalAuthority_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
        SourceColumn.SINGLE_MEASURE_CODE: "rail",
        SourceColumn.SINGLE_MEASURE_NAME: "Rail passenger journeys",
    },
)

COMPLETE_POPDEN = InputFileSource(
    name="Population density (complete)",
    code="complete-popden",
    file="complete-popu1009-popden.csv",
    parser=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.SINGLE_MEASURE_CODE: "dens",
        SourceColumn.SINGLE_MEASURE_NAME: "Population density",
    },
)

COMPLETE_POP = InputFileSource(
    name="Population (complete)",
    code="complete-pop",
    file="complete-popu1009-pop.csv",
    parser=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.SINGLE_MEASURE_CODE: "pop",
        SourceColumn.SINGLE_MEASURE_NAME: "Population",
    },
)

COMPLETE_AREA = InputFileSource(
    name="Land area (complete)",
    code="complete-area",
    file="complete-popu1009-area.csv",
    parser=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.SINGLE_MEASURE_CODE: "area",
        SourceColumn.SINGLE_MEASURE_NAME: "Land area",
    },
)

DATASETS: List[InputFileSource] = [
    POPDEN,
    BIZ,
    AQI,
    TRAINS,
    COMPLETE_POPDEN,
    COMPLETE_POP,
    COMPLETE_AREA,
]


def dataset_codes() -> List[str]:
    return [d.code for d in DATASETS]


def get_dataset(code: str) -> InputFileSource:
    wanted = str(code).strip()
    for dataset in DATASETS:
        if dataset.code == wanted:
            return dataset
    raise ValidationError(f"No dataset matches key: {code}")
