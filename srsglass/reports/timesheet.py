"""Timesheet writer.

Serializes an assembled Timesheet to a single-sheet .xlsx workbook:

  A:J  one row per region -- name (highlighted by category), link,
       population, nations before, minor/major offsets as elapsed
       durations, delegate votes, endorsements (highlighted when the
       region has no delegate), embassies, factbook
  L:M  world figures -- population, update lengths and rates, tool
       version, generation time, dump date

The workbook is saved to a temporary sibling and moved into place, so a
failure mid-write never leaves a finished-looking timesheet behind.
"""

import logging
import os
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import Cell
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from srsglass.analysis.classifier import HighlightCategory
from srsglass.analysis.estimator import elapsed_number_format
from srsglass.reports.assembly import Timesheet
from srsglass.schemas.models import WorldSummary
from srsglass.utils import truncate_cell

logger = logging.getLogger(__name__)

HEADERS = [
    "Region",
    "Link",
    "Population",
    "Total Nations",
    "Minor",
    "Major",
    "Del. Votes",
    "Del. Endos",
    "Embassies",
    "WFE",
]

COLUMN_WIDTHS = {
    "A": 30,
    "B": 18,
    "C": 12,
    "D": 14,
    "E": 12,
    "F": 12,
    "G": 11,
    "H": 11,
    "I": 40,
    "J": 60,
    "L": 22,
    "M": 22,
}

CATEGORY_FILLS = {
    HighlightCategory.FULLY_OPEN: PatternFill(fill_type="solid", fgColor="FF00FF00"),
    HighlightCategory.DELEGATE_RISK: PatternFill(fill_type="solid", fgColor="FFFFFF00"),
    HighlightCategory.LOCKED: PatternFill(fill_type="solid", fgColor="FFFF0000"),
}

NO_DELEGATE_FILL = PatternFill(fill_type="solid", fgColor="FFFF9999")

SUMMARY_COLUMN = 12  # L
DATETIME_FORMAT = "yyyy-mm-dd hh:mm:ss"
DATE_FORMAT = "yyyy-mm-dd"
RATE_FORMAT = "0.000000"


class TimesheetWriter:
    """Writes timesheets as .xlsx workbooks."""

    def __init__(self, sheet_title: str = "Timesheet"):
        self.sheet_title = sheet_title

    def write(self, timesheet: Timesheet, output_path: Path | str) -> Path:
        """Write the timesheet and return the final path."""
        output_path = Path(output_path)
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self.sheet_title

        self._write_header(sheet)
        self._write_rows(sheet, timesheet)
        self._write_summary(sheet, timesheet.summary)
        for column, width in COLUMN_WIDTHS.items():
            sheet.column_dimensions[column].width = width
        sheet.freeze_panes = "A2"

        output_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = output_path.with_suffix(".tmp")
        try:
            workbook.save(tmp_path)
            os.replace(str(tmp_path), str(output_path))
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        logger.info("Timesheet with %d regions written to %s", len(timesheet.rows), output_path)
        return output_path

    def _write_header(self, sheet: Worksheet) -> None:
        bold = Font(bold=True)
        for col, title in enumerate(HEADERS, start=1):
            sheet.cell(row=1, column=col, value=title).font = bold

    def _write_rows(self, sheet: Worksheet, timesheet: Timesheet) -> None:
        duration_format = elapsed_number_format(timesheet.precision)

        for index, row in enumerate(timesheet.rows, start=2):
            name_cell = self._write_text(sheet, index, 1, row.name)
            fill = CATEGORY_FILLS.get(row.category)
            if fill is not None:
                name_cell.fill = fill

            link_cell = sheet.cell(row=index, column=2, value=row.link)
            link_cell.hyperlink = row.link
            link_cell.style = "Hyperlink"

            sheet.cell(row=index, column=3, value=row.population)
            sheet.cell(row=index, column=4, value=row.nations_before)

            minor_cell = sheet.cell(row=index, column=5, value=row.minor.to_timedelta())
            minor_cell.number_format = duration_format
            major_cell = sheet.cell(row=index, column=6, value=row.major.to_timedelta())
            major_cell.number_format = duration_format

            sheet.cell(row=index, column=7, value=row.delegate_votes)
            endos_cell = sheet.cell(row=index, column=8, value=row.endorsements)
            if row.no_delegate:
                endos_cell.fill = NO_DELEGATE_FILL

            self._write_text(sheet, index, 9, truncate_cell(row.embassies))
            self._write_text(sheet, index, 10, truncate_cell(row.factbook))

    @staticmethod
    def _write_text(sheet: Worksheet, row: int, column: int, text: str) -> Cell:
        """Write user text as a string cell, even when it starts with '='."""
        cell = sheet.cell(row=row, column=column, value=text)
        cell.data_type = "s"
        return cell

    def _write_summary(self, sheet: Worksheet, summary: WorldSummary) -> None:
        label_col = SUMMARY_COLUMN
        value_col = SUMMARY_COLUMN + 1
        bold = Font(bold=True)

        sheet.cell(row=1, column=label_col, value="World Data").font = bold

        entries = [
            ("Nations", summary.total_population, None),
            ("Major Length", summary.major_length, None),
            ("Secs/Nation (Major)", summary.major_seconds_per_nation, RATE_FORMAT),
            ("Nations/Sec (Major)", summary.major_nations_per_second, RATE_FORMAT),
            ("Minor Length", summary.minor_length, None),
            ("Secs/Nation (Minor)", summary.minor_seconds_per_nation, RATE_FORMAT),
            ("Nations/Sec (Minor)", summary.minor_nations_per_second, RATE_FORMAT),
            (None, None, None),
            ("srsglass Version", summary.version, None),
            ("Date Generated", summary.generated_at, DATETIME_FORMAT),
            ("Dump Date", summary.dump_date, DATE_FORMAT),
        ]
        for offset, (label, value, number_format) in enumerate(entries, start=2):
            if label is None:
                continue
            sheet.cell(row=offset, column=label_col, value=label)
            cell = sheet.cell(row=offset, column=value_col, value=value)
            if number_format:
                cell.number_format = number_format

        logger.debug("Side panel written in columns %s:%s",
                     get_column_letter(label_col), get_column_letter(value_col))
