"""
@file report.py
@brief Row assembly and Excel rendering of the market research report

@details
Each city that yielded a detail record becomes one ReportRow. Columns are the
fixed leading columns followed by the detail fields in registry order, so the
registry drives the table layout and no key lookup by field name is needed
when rendering.

The workbook is rendered with pandas on the openpyxl engine into memory and
handed to the artifact store as bytes.

@author Market Research Project
@date 2025-03-19
@version 1.0
@license AGPL-3.0
"""

import io
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

CITY_COLUMN = "City"
METRO_COLUMN = "Closest Metro Area"
GROWTH_COLUMN = "Job Growth (%)"
CITY_URL_COLUMN = "City Data URL"
BLS_URL_COLUMN = "BLS URL"

LEADING_COLUMNS = [CITY_COLUMN, METRO_COLUMN, GROWTH_COLUMN, CITY_URL_COLUMN, BLS_URL_COLUMN]

EXCEL_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
JSON_CONTENT_TYPE = "application/json"

COLUMN_WIDTH = 20


@dataclass
class ReportRow:
    """
    @brief One city's merged output

    @details
    details holds the extracted fields in registry order. job_growth is a
    ratio (0.021 for +2.1%).
    """
    city: str
    city_data_url: str
    details: Dict[str, Optional[str]] = field(default_factory=dict)
    closest_metro_area: Optional[str] = None
    job_growth: Optional[float] = None
    bls_url: Optional[str] = None

    def values(self, field_names: List[str]) -> List[Any]:
        return [
            self.city,
            self.closest_metro_area,
            self.job_growth,
            self.city_data_url,
            self.bls_url,
        ] + [self.details.get(name) for name in field_names]


def report_columns(field_names: List[str]) -> List[str]:
    return LEADING_COLUMNS + list(field_names)


def build_report_frame(rows: List[ReportRow], field_names: List[str]) -> pd.DataFrame:
    return pd.DataFrame(
        [row.values(field_names) for row in rows],
        columns=report_columns(field_names),
    )


def render_excel(rows: List[ReportRow], field_names: List[str], sheet_name: str) -> bytes:
    """
    @brief Render the report rows as an .xlsx workbook

    @param rows Report rows in scrape order
    @param field_names Detail field names in registry order
    @param sheet_name Worksheet title, the state name
    @return Workbook bytes
    """
    frame = build_report_frame(rows, field_names)
    # Excel limits sheet titles to 31 characters
    sheet_name = sheet_name[:31]

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]

        for index in range(1, len(frame.columns) + 1):
            worksheet.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTH
        for cell in worksheet[1]:
            cell.font = Font(bold=True)

        growth_column = LEADING_COLUMNS.index(GROWTH_COLUMN) + 1
        for (cell,) in worksheet.iter_rows(
            min_row=2, min_col=growth_column, max_col=growth_column
        ):
            cell.number_format = "0.00%"

    return buffer.getvalue()


def render_roster(roster: Dict[str, int]) -> bytes:
    """Serialize a city roster as compact JSON."""
    return json.dumps(roster, separators=(",", ":")).encode("utf-8")
