"""
formatter.py -- Renders a financial Report to terminal output, JSON, CSV, HTML or Markdown.
"""

import csv
import html
import io
import json
import os
import re
import sys
from dataclasses import asdict
from datetime import date
from typing import Optional

from .reports import Report

W = 68  # output width

# Table columns per report type: (row key, heading). Keys that are not plain
# row fields are produced by _flatten_row.
REPORT_COLUMNS = {
    "forecast": [
        ("month", "Month"),
        ("asset_count", "Assets"),
        ("total_depreciation", "Depreciation"),
        ("total_opex", "OPEX"),
        ("total_cost", "Total"),
    ],
    "current-value": [
        ("asset_tag", "Asset Tag"),
        ("name", "Name"),
        ("sku_code", "SKU"),
        ("purchase_price", "Purchase"),
        ("current_value", "Current Value"),
        ("monthly_depreciation", "Depr/Month"),
        ("monthly_opex", "OPEX/Month"),
    ],
    "depreciation-schedule": [
        ("asset_tag", "Asset Tag"),
        ("name", "Name"),
        ("purchase_price", "Purchase"),
        ("monthly_depreciation", "Depr/Month"),
        ("total_depreciated", "Depreciated"),
        ("remaining_value", "Remaining"),
        ("go_live_date", "Go-Live"),
        ("depreciation_end_date", "Fully Depr."),
        ("months_remaining", "Months Left"),
    ],
    "opex-breakdown": [
        ("asset_tag", "Asset Tag"),
        ("name", "Name"),
        ("warranty_monthly_cost", "Warranty"),
        ("maintenance_monthly_cost", "Maintenance"),
        ("total_monthly_cost", "Total/Month"),
        ("active_warranties", "Warranties"),
        ("active_maintenance", "Contracts"),
    ],
}

_TITLES = {
    "forecast": "COST FORECAST",
    "current-value": "CURRENT VALUE",
    "depreciation-schedule": "DEPRECIATION SCHEDULE",
    "opex-breakdown": "OPEX BREAKDOWN",
}

# ---------------------------------------------------------------------------
# ANSI color control
# ---------------------------------------------------------------------------

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from a string."""
    return _ANSI_RE.sub("", text)


def _use_color() -> bool:
    """Return True if stdout is a TTY and color has not been disabled.

    Respects NO_COLOR env var (https://no-color.org) and checks sys.stdout.isatty().
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_color_enabled: Optional[bool] = None  # None = auto-detect


def disable_color() -> None:
    """Force-disable color output (called when --no-color flag is set)."""
    global _color_enabled
    _color_enabled = False


def enable_color() -> None:
    """Force-enable color output."""
    global _color_enabled
    _color_enabled = True


def _color_active() -> bool:
    if _color_enabled is not None:
        return _color_enabled
    return _use_color()


def _reset() -> str:
    return "\033[0m" if _color_active() else ""


def _bold() -> str:
    return "\033[1m" if _color_active() else ""


def _dim() -> str:
    return "\033[2m" if _color_active() else ""


# ---------------------------------------------------------------------------
# Layout helpers
# ---------------------------------------------------------------------------


def _bar(char: str = "═") -> str:
    return char * W


def _section(title: str) -> str:
    bold = _bold()
    reset = _reset()
    return f"\n  {bold}{title}{reset}\n  {'─' * (W - 2)}"


def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()


def _display(value) -> str:
    """Render one cell for humans: money-like floats with two decimals and separators."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def _flatten_row(row: dict) -> dict:
    """Reduce a report row to scalar cells.

    The nested SKU summary contributes sku_code; contract lists contribute
    their counts.
    """
    flat = {k: v for k, v in row.items() if not isinstance(v, (dict, list))}
    sku = row.get("sku")
    if isinstance(sku, dict):
        flat["sku_code"] = sku.get("sku_code", "")
    if "warranties" in row:
        flat["active_warranties"] = len(row["warranties"])
    if "maintenance" in row:
        flat["active_maintenance"] = len(row["maintenance"])
    return flat


def _summary_lines(summary: dict) -> list[tuple[str, str]]:
    lines = []
    for key, value in summary.items():
        if key == "forecast_period":
            lines.append(("Forecast period", f"{value['start']} to {value['end']}"))
        elif isinstance(value, dict):
            for sub_key, sub_value in value.items():
                lines.append((f"{_label(key)} / {sub_key}", _display(sub_value)))
        else:
            lines.append((_label(key), _display(value)))
    return lines


# ---------------------------------------------------------------------------
# Terminal renderer
# ---------------------------------------------------------------------------


def print_report(report: Report) -> None:
    bold = _bold()
    reset = _reset()
    dim = _dim()
    columns = REPORT_COLUMNS.get(report.type, [])

    # -- Header ---------------------------------------------------------------
    print(f"\n{bold}{_bar()}{reset}")
    print(f"  {bold}AssetLedger{reset}  │  {_TITLES.get(report.type, report.type.upper())}")
    print(f"{bold}{_bar()}{reset}")

    # -- Summary --------------------------------------------------------------
    print(_section("SUMMARY"))
    for label, value in _summary_lines(report.summary):
        print(f"    {label:<32}  {value}")

    # -- Detail ---------------------------------------------------------------
    print(_section("DETAIL"))
    if not report.data:
        print(f"    {dim}No assets matched.{reset}")
        print(f"\n{_bar()}\n")
        return

    cells = [[_display(_flatten_row(r).get(key, "")) for key, _ in columns] for r in report.data]
    widths = [max(len(heading), *(len(row[i]) for row in cells)) for i, (_, heading) in enumerate(columns)]

    heading = "  ".join(h.ljust(widths[i]) for i, (_, h) in enumerate(columns))
    print(f"    {bold}{heading}{reset}")
    for row in cells:
        print("    " + "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))

    print(f"\n{_bar()}\n")


# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def to_json(report: Report) -> str:
    """Return the report as the same {type, data, summary} JSON the API serves."""
    return json.dumps(asdict(report), indent=2)


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------

_FORMULA_PREFIXES = ("=", "+", "-", "@")


def _sanitize_csv_cell(value):
    """Neutralise spreadsheet formula injection (CWE-1236).

    Text cells starting with =, +, - or @ get a leading tab so spreadsheet
    applications treat them as text. Numbers pass through untouched.
    """
    if isinstance(value, str) and value.startswith(_FORMULA_PREFIXES):
        return "\t" + value
    return value


def to_csv(report: Report) -> str:
    """Render the report rows as CSV. Numbers are written unformatted."""
    columns = REPORT_COLUMNS.get(report.type, [])

    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([key for key, _ in columns])
    for row in report.data:
        flat = _flatten_row(row)
        writer.writerow([_sanitize_csv_cell(flat.get(key, "")) for key, _ in columns])

    return buf.getvalue()


# ---------------------------------------------------------------------------
# HTML export
# ---------------------------------------------------------------------------

_HTML_STYLE = """
    body { font-family: Arial, sans-serif; margin: 32px; background: #f9fafb; color: #111827; }
    h1 { font-size: 1.5rem; margin-bottom: 4px; }
    p.subtitle { color: #6b7280; margin-top: 0; margin-bottom: 24px; font-size: 0.9rem; }
    dl { display: grid; grid-template-columns: max-content auto; gap: 4px 16px; margin-bottom: 24px; }
    dt { color: #6b7280; }
    table { border-collapse: collapse; width: 100%; background: #ffffff; }
    th { background: #1f2937; color: #f9fafb; text-align: left; padding: 10px 12px; font-size: 0.85rem; }
    td { padding: 9px 12px; font-size: 0.85rem; border-bottom: 1px solid #e5e7eb; }
    td.num { text-align: right; font-variant-numeric: tabular-nums; }
    tr:nth-child(even) td { background: #f3f4f6; }
"""


def to_html(report: Report) -> str:
    """Render the report as a self-contained HTML page.

    No external CSS or JS dependencies -- all styles are inline.
    """
    today = date.today().isoformat()
    title = html.escape(_TITLES.get(report.type, report.type.upper()).title())
    columns = REPORT_COLUMNS.get(report.type, [])

    summary_html = "\n".join(
        f"    <dt>{html.escape(label)}</dt><dd>{html.escape(value)}</dd>" for label, value in _summary_lines(report.summary)
    )
    head_html = "".join(f"<th>{html.escape(h)}</th>" for _, h in columns)

    rows_html = []
    for row in report.data:
        flat = _flatten_row(row)
        cells = []
        for key, _ in columns:
            value = flat.get(key, "")
            css = ' class="num"' if isinstance(value, (int, float)) and not isinstance(value, bool) else ""
            cells.append(f"<td{css}>{html.escape(_display(value))}</td>")
        rows_html.append(f"      <tr>{''.join(cells)}</tr>")

    rows = "\n".join(rows_html)

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"  <title>AssetLedger &mdash; {title}</title>\n"
        f"  <style>{_HTML_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        f"  <h1>AssetLedger &mdash; {title}</h1>\n"
        f'  <p class="subtitle">Generated {today} &nbsp;&bull;&nbsp; {len(report.data)} row(s)</p>\n'
        "  <dl>\n"
        f"{summary_html}\n"
        "  </dl>\n"
        "  <table>\n"
        f"    <thead><tr>{head_html}</tr></thead>\n"
        "    <tbody>\n"
        f"{rows}\n"
        "    </tbody>\n"
        "  </table>\n"
        "</body>\n"
        "</html>\n"
    )


# ---------------------------------------------------------------------------
# Markdown export
# ---------------------------------------------------------------------------


def to_markdown(report: Report) -> str:
    """Render the report rows as a Markdown table followed by the summary.

    Suitable for GitHub issues, wikis and chat.
    """
    columns = REPORT_COLUMNS.get(report.type, [])
    lines = [
        "| " + " | ".join(h for _, h in columns) + " |",
        "|" + "|".join("-" * (len(h) + 2) for _, h in columns) + "|",
    ]

    for row in report.data:
        flat = _flatten_row(row)
        # Escape HTML and pipe characters in free-text cells.
        cells = [html.escape(_display(flat.get(key, ""))).replace("|", "\\|") for key, _ in columns]
        lines.append("| " + " | ".join(cells) + " |")

    lines.append("")
    for label, value in _summary_lines(report.summary):
        lines.append(f"- **{label}**: {value}")

    return "\n".join(lines) + "\n"
