# Output formatters for issue listings

import csv
import io
import json

from core.constants import CSV_COLUMNS

TITLE_WIDTH = 40


def format_text(issues: list[dict], verbose: bool = False) -> str:
    """
    Format issues as plain text.

    Returns - Formatted text string
    """
    if not issues:
        return "No issues found.\n"

    output = []
    for i, issue in enumerate(issues, 1):
        output.append(f"\n{i}. [{issue.get('severity', '?')}] {issue.get('title', 'N/A')}")
        output.append(f"   Site: {issue.get('site', 'N/A')}  Status: {issue.get('status', 'N/A')}")
        if verbose:
            output.append(f"   ID: {issue.get('id', 'N/A')}")
            output.append(f"   Created: {issue.get('createdAt', 'N/A')}")
            output.append(f"   {issue.get('description', '')}")
        output.append("")

    return "\n".join(output)


def format_json(issues: list[dict]) -> str:
    """
    Format issues as JSON.

    Returns - JSON string
    """
    return json.dumps(issues, indent=2, default=str)


def format_table(issues: list[dict], verbose: bool = False) -> str:
    """
    Format issues as a fixed-width table.

    Returns - Table string
    """
    if not issues:
        return "No issues found.\n"

    columns = ["#", "Title", "Site", "Severity", "Status", "Created"]
    if verbose:
        columns.append("ID")
    keys = {
        "Title": "title",
        "Site": "site",
        "Severity": "severity",
        "Status": "status",
        "Created": "createdAt",
        "ID": "id",
    }

    rows = []
    for i, issue in enumerate(issues, 1):
        row = {"#": str(i)}
        for col in columns[1:]:
            row[col] = str(issue.get(keys[col], "") or "")
        row["Title"] = row["Title"][:TITLE_WIDTH]
        rows.append(row)

    widths = {col: max(len(col), *(len(row[col]) for row in rows)) for col in columns}

    output = []
    header = " | ".join(col.ljust(widths[col]) for col in columns)
    output.append(header)
    output.append("-" * len(header))
    for row in rows:
        output.append(" | ".join(row[col].ljust(widths[col]) for col in columns))

    return "\n".join(output) + "\n"


def format_csv(issues: list[dict]) -> str:
    """
    Format issues as CSV using the bulk-import column layout.

    The output can be fed back into ``tracker import``.
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(CSV_COLUMNS), extrasaction="ignore")
    writer.writeheader()
    for issue in issues:
        writer.writerow(issue)
    return output.getvalue()


def format_output(issues: list[dict], format_type: str = "text", verbose: bool = False) -> str:
    """Dispatch to the formatter for ``format_type``."""
    if format_type == "json":
        return format_json(issues)
    if format_type == "table":
        return format_table(issues, verbose)
    if format_type == "csv":
        return format_csv(issues)
    return format_text(issues, verbose)
