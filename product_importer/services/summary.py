from __future__ import annotations

from ..models.import_report import ImportReport

"""SUMMARY line rendering for the CLI.

Format:
SUMMARY rows={total} inserted={inserted} failed={failed} committed={yes|no} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    # integers without decimals, tiny values without scientific notation
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(report: ImportReport, elapsed_seconds: float) -> str:
    """Render the SUMMARY line for one import.

    Examples:
        >>> report = ImportReport(success=True, processed_count=3, committed=True, total_rows=3)
        >>> render_summary_line(report, 2.0)
        'SUMMARY rows=3 inserted=3 failed=0 committed=yes elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={report.total_rows} "
        f"inserted={report.processed_count} "
        f"failed={report.failed_count} "
        f"committed={'yes' if report.committed else 'no'} "
        f"elapsed_sec={_format_number(elapsed_seconds)}"
    )
