# tests/test_reports.py

"""
Tests for report summaries and CSV exports.
"""

from datetime import date, datetime, timezone

from core.csv_export import export_filename, to_csv
from models.enums import ReportType
from services.reports import (
    USER_EXPORT_COLUMNS,
    approval_trends,
    build_summary,
    report_rows,
    user_export_rows,
)
from tests.conftest import USERS, WARDS, ZONES


NOW = datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc)


def test_csv_quotes_commas_quotes_and_newlines():
    rows = [{"Name": 'Ada "The Admin"', "Address": "1 Main St, Lagos", "Notes": "line1\nline2"}]
    text = to_csv(rows)

    assert text.splitlines()[0] == "Name,Address,Notes"
    assert '"Ada ""The Admin"""' in text
    assert '"1 Main St, Lagos"' in text
    assert '"line1\nline2"' in text


def test_csv_with_no_rows_keeps_header():
    assert to_csv([], ["Name", "Email"]) == "Name,Email\n"
    assert to_csv([]) == ""


def test_export_filename():
    assert export_filename("users", date(2024, 3, 5)) == "users-2024-03-05.csv"


def test_user_export_rows_resolve_names():
    [row] = user_export_rows([u for u in USERS if u["id"] == "member-1"], ZONES, WARDS)

    assert list(row.keys()) == USER_EXPORT_COLUMNS
    assert row["Ward"] == "Ward One"
    assert row["Zone"] == "Zone A"
    assert row["Status"] == "pending"
    assert row["Application Date"] == "2024-03-01"


def test_report_types_select_rows():
    assert len(report_rows(ReportType.all_users, USERS, ZONES, WARDS)) == 6
    assert len(report_rows(ReportType.verified_users, USERS, ZONES, WARDS)) == 4
    assert len(report_rows(ReportType.pending_users, USERS, ZONES, WARDS)) == 2
    assert len(report_rows(ReportType.admin_users, USERS, ZONES, WARDS)) == 3
    assert len(report_rows(ReportType.zone_performance, USERS, ZONES, WARDS)) == 3
    assert report_rows(ReportType.ward_performance, USERS, ZONES, WARDS)[0]["Ward"] == "Ward One"


def test_summary():
    summary = build_summary(USERS, ZONES, WARDS, now=NOW)

    assert summary["total_users"] == 6
    assert summary["admin_users"] == 3
    assert summary["approval_rate"] == 67
    # three members registered within the last 30 days
    assert summary["growth_rate"] == 50
    assert len(summary["zone_performance"]) == 3


def test_approval_trends_cover_last_seven_days():
    trends = approval_trends(USERS, now=NOW)

    assert [t["date"] for t in trends][-1] == "2024-03-05"
    assert len(trends) == 7
    assert {"date": "2024-03-02", "approvals": 1} in trends
