from __future__ import annotations

import time
import traceback
from typing import List, Optional, Set, Tuple

import streamlit as st

from areastats.config import APP_NAME, APP_VERSION, DATA_DIR, REMOTE_BASE_URL
from areastats.core.areas import Areas
from areastats.core.datasets import DATASETS, InputFileSource
from areastats.core.loader import LoadReport, load_all
from areastats.core.render import (
    AREA_COL,
    MEASURE_COL,
    VALUE_COL,
    YEAR_COL,
    areas_to_frame,
    areas_to_json,
    format_areas,
    measure_summary_frame,
)


def _parse_code_list(text: str, lower: bool = False) -> Set[str]:
    codes = {part.strip() for part in (text or "").split(",") if part.strip()}
    if any(c.lower() == "all" for c in codes):
        return set()
    return {c.lower() for c in codes} if lower else codes


def _render_sidebar() -> Tuple[str, List[InputFileSource], Set[str], Set[str], Tuple[int, int]]:
    st.sidebar.header("Data")
    default_dir = REMOTE_BASE_URL or DATA_DIR
    data_dir = st.sidebar.text_input("Data directory or base URL", value=default_dir)

    by_code = {d.code: d for d in DATASETS}
    chosen = st.sidebar.multiselect(
        "Datasets",
        options=list(by_code.keys()),
        default=list(by_code.keys()),
        format_func=lambda code: f"{by_code[code].name} ({code})",
    )

    st.sidebar.header("Filters")
    areas_text = st.sidebar.text_input("Authority codes (comma-separated, blank = all)", value="")
    measures_text = st.sidebar.text_input("Measure codes (comma-separated, blank = all)", value="")

    all_years = st.sidebar.checkbox("All years", value=True)
    years_filter = (0, 0)
    if not all_years:
        start, end = st.sidebar.slider("Years", min_value=1950, max_value=2030, value=(1991, 2019))
        years_filter = (int(start), int(end))

    return (
        data_dir.strip(),
        [by_code[c] for c in chosen],
        _parse_code_list(areas_text),
        _parse_code_list(measures_text, lower=True),
        years_filter,
    )


def _render_report(report: LoadReport) -> None:
    if report.loaded:
        st.success(f"Loaded: {', '.join(report.loaded)} in {report.elapsed_seconds:0.2f}s")
    for code, message in report.failures.items():
        st.error(f"Error importing dataset {code}: {message}")


def _render_results(areas: Areas) -> None:
    st.write(f"Areas loaded: {len(areas)}")

    readings = areas_to_frame(areas)
    if readings.empty:
        st.info("No readings matched the selected datasets and filters.")
    else:
        st.subheader("Summary by measure")
        st.dataframe(measure_summary_frame(areas), use_container_width=True)

        st.subheader("Readings")
        st.dataframe(readings, use_container_width=True)

        codename: Optional[str] = st.selectbox(
            "Chart measure",
            options=sorted(readings[MEASURE_COL].unique().tolist()),
        )
        if codename:
            chart = (
                readings[readings[MEASURE_COL] == codename]
                .pivot_table(index=YEAR_COL, columns=AREA_COL, values=VALUE_COL)
                .sort_index()
            )
            st.line_chart(chart)

    with st.expander("Text tables", expanded=False):
        st.code(format_areas(areas) or "(empty)", language=None)

    st.download_button(
        "Download JSON",
        data=areas_to_json(areas),
        file_name="areas.json",
        mime="application/json",
    )


def run_app() -> None:
    st.set_page_config(page_title=APP_NAME, layout="wide")
    st.title(APP_NAME)
    st.caption(f"Version {APP_VERSION}")

    data_dir, datasets, areas_filter, measures_filter, years_filter = _render_sidebar()

    if st.button("Import datasets", key="import_btn"):
        status = st.status("Importing datasets…", expanded=True)
        t0 = time.perf_counter()
        try:
            areas, report = load_all(
                data_dir,
                datasets,
                areas_filter=areas_filter,
                measures_filter=measures_filter,
                years_filter=years_filter,
            )
            status.write(f"Import finished in {time.perf_counter() - t0:0.2f}s")
            status.update(label="Done.", state="complete")
            st.session_state["areas"] = areas
            st.session_state["report"] = report
        except Exception as e:
            status.update(label="Unexpected error.", state="error")
            st.error("Unexpected error while importing datasets.")
            st.code(repr(e))
            st.text_area("Traceback", value=traceback.format_exc(), height=280)

    report = st.session_state.get("report")
    if report is not None:
        _render_report(report)

    areas = st.session_state.get("areas")
    if areas is not None:
        _render_results(areas)
    else:
        st.write("Choose datasets and filters, then import.")


if __name__ == "__main__":
    run_app()
