"""Tests for the .xlsx timesheet writer.

Writes real workbooks to tmp_path and reads them back with openpyxl.
"""

from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest
from openpyxl import load_workbook

from srsglass.reports.assembly import assemble
from srsglass.reports.timesheet import (
    CATEGORY_FILLS,
    HEADERS,
    NO_DELEGATE_FILL,
    TimesheetWriter,
)
from srsglass.analysis.classifier import HighlightCategory
from srsglass.schemas.models import Dump, Region
from srsglass.utils import MAX_CELL_LENGTH

GENERATED_AT = datetime(2026, 10, 18, 9, 30, 0)


def _make_timesheet(precision=0, factbook="Hello", embassies=None):
    regions = [
        Region(name="Open Plains", population=500, delegate_votes=0, delegate_exec=False,
               nations_before=0, factbook=factbook, embassies=embassies or []),
        Region(name="Exec Harbor", population=250, delegate_votes=5, delegate_exec=True,
               nations_before=500, factbook="Harbor"),
        Region(name="Fortress", population=240, delegate_votes=2, delegate_exec=False,
               nations_before=750, factbook="Walls"),
        Region(name="Quiet Town", population=10, delegate_votes=2, delegate_exec=False,
               nations_before=990, factbook="Calm"),
    ]
    dump = Dump(
        regions=regions,
        total_population=1000,
        ungoverned=["Open Plains"],
        unsecured=["Open Plains", "Exec Harbor", "Quiet Town"],
        dump_date=date(2026, 10, 17),
    )
    return assemble(dump, 3600, 1800, precision=precision, generated_at=GENERATED_AT)


def _seconds(value) -> float:
    """Duration cell value in seconds, whichever way openpyxl reads it back."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value) * 86400


def _write_and_load(tmp_path, timesheet, name="sheet.xlsx"):
    path = TimesheetWriter().write(timesheet, tmp_path / name)
    return path, load_workbook(path).active


class TestTimesheetLayout:
    """Header, rows and side panel land in the expected cells."""

    def test_header_row(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        assert [ws.cell(row=1, column=c).value for c in range(1, 11)] == HEADERS
        assert HEADERS == [
            "Region", "Link", "Population", "Total Nations", "Minor", "Major",
            "Del. Votes", "Del. Endos", "Embassies", "WFE",
        ]

    def test_region_row_values(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        assert ws["A3"].value == "Exec Harbor"
        assert ws["C3"].value == 250
        assert ws["D3"].value == 500
        assert ws["G3"].value == 5
        assert ws["H3"].value == 4
        assert ws["J3"].value == "Harbor"

    def test_hyperlink(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        assert ws["B2"].value == "https://www.nationstates.net/region=open_plains"
        assert ws["B2"].hyperlink.target == "https://www.nationstates.net/region=open_plains"

    def test_durations_are_elapsed_time(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        # Exec Harbor: progress 0.5 -> minor 900s, major 1800s
        assert _seconds(ws["E3"].value) == pytest.approx(900, abs=1e-3)
        assert _seconds(ws["F3"].value) == pytest.approx(1800, abs=1e-3)
        assert ws["F3"].number_format == "[h]:mm:ss"

    def test_duration_format_follows_precision(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet(precision=3))
        assert ws["E2"].number_format == "[h]:mm:ss.000"
        assert ws["F5"].number_format == "[h]:mm:ss.000"

    def test_side_panel(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        panel = {ws.cell(row=r, column=12).value: ws.cell(row=r, column=13).value
                 for r in range(2, 14) if ws.cell(row=r, column=12).value}
        assert ws["L1"].value == "World Data"
        assert panel["Nations"] == 1000
        assert panel["Major Length"] == 3600
        assert panel["Minor Length"] == 1800
        assert panel["Secs/Nation (Major)"] == pytest.approx(3.6)
        assert panel["Nations/Sec (Minor)"] == pytest.approx(1000 / 1800)
        assert panel["srsglass Version"]
        assert abs(panel["Date Generated"] - GENERATED_AT) < timedelta(seconds=1)
        assert panel["Dump Date"].date() == date(2026, 10, 17)


class TestTimesheetHighlighting:
    """Category fills on the region cell, flag fill on endorsements."""

    def _rgb(self, cell):
        return cell.fill.fgColor.rgb if cell.fill.fill_type == "solid" else None

    def test_category_fills(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        assert self._rgb(ws["A2"]) == CATEGORY_FILLS[HighlightCategory.FULLY_OPEN].fgColor.rgb
        assert self._rgb(ws["A3"]) == CATEGORY_FILLS[HighlightCategory.DELEGATE_RISK].fgColor.rgb
        assert self._rgb(ws["A4"]) == CATEGORY_FILLS[HighlightCategory.LOCKED].fgColor.rgb
        assert self._rgb(ws["A5"]) is None

    def test_no_delegate_flag(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet())
        assert ws["H2"].value == 0
        assert self._rgb(ws["H2"]) == NO_DELEGATE_FILL.fgColor.rgb
        assert self._rgb(ws["H3"]) is None


class TestTimesheetText:
    """Free text is truncated only at serialization."""

    def test_factbook_truncated_to_cell_limit(self, tmp_path):
        sheet = _make_timesheet(factbook="y" * 40000)
        _, ws = _write_and_load(tmp_path, sheet)
        assert len(ws["J2"].value) == MAX_CELL_LENGTH
        assert len(sheet.rows[0].factbook) == 40000

    def test_embassies_joined(self, tmp_path):
        _, ws = _write_and_load(tmp_path, _make_timesheet(embassies=["Lazarus", "Osiris"]))
        assert ws["I2"].value == "Lazarus, Osiris"

    def test_leading_equals_written_as_text(self, tmp_path):
        factbook = "=== Welcome to our region ==="
        _, ws = _write_and_load(tmp_path, _make_timesheet(factbook=factbook, embassies=["=SUM(A1)"]))
        assert ws["J2"].data_type == "s"
        assert ws["J2"].value == factbook
        assert ws["I2"].data_type == "s"
        assert ws["I2"].value == "=SUM(A1)"
        assert ws["A2"].data_type == "s"


class TestAtomicWrite:
    """A failed save leaves neither the target nor a temp file."""

    def test_no_temp_file_left(self, tmp_path):
        path, _ = _write_and_load(tmp_path, _make_timesheet())
        assert path.exists()
        assert not (tmp_path / "sheet.tmp").exists()

    def test_failed_save_leaves_nothing(self, tmp_path):
        def _fail(self, filename):
            with open(filename, "wb") as f:
                f.write(b"partial")
            raise OSError("disk full")

        with patch("srsglass.reports.timesheet.Workbook.save", _fail):
            with pytest.raises(OSError):
                TimesheetWriter().write(_make_timesheet(), tmp_path / "sheet.xlsx")
        assert not (tmp_path / "sheet.xlsx").exists()
        assert not (tmp_path / "sheet.tmp").exists()

    def test_creates_parent_directory(self, tmp_path):
        path = TimesheetWriter().write(_make_timesheet(), tmp_path / "out" / "sheet.xlsx")
        assert path.exists()
