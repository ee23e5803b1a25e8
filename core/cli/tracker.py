"""
Trial Issue Tracker CLI.

Uses the same repository, query engine and CSV import pipeline as the API.

    tracker init-db
    tracker seed
    tracker import issues.csv
    tracker list --status open --sort-by severity --format table
    tracker stats
"""

import argparse
import json
import sys

from dotenv import load_dotenv

from core.cli.formatters import format_output
from core.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    SortField,
    SortOrder,
    VALID_SEVERITIES,
    VALID_STATUSES,
)
from core.db import db
from core.exceptions import CsvImportError
from core.logging import LogContext, cli_logger, configure_logging
from core.repositories import IssueRepository
from core.services import QueryParams, import_csv, query_issues

load_dotenv()

SEED_ISSUES = [
    {
        "title": "Missing consent form",
        "description": "Consent form not in file for patient 003",
        "site": "Site-101",
        "severity": "major",
        "status": "open",
    },
    {
        "title": "Temperature log incomplete",
        "description": "Temperature log missing entries for days 5-7",
        "site": "Site-102",
        "severity": "minor",
        "status": "in_progress",
    },
    {
        "title": "Protocol deviation",
        "description": "Patient 015 received incorrect dosage on visit 3",
        "site": "Site-101",
        "severity": "critical",
        "status": "open",
    },
    {
        "title": "Equipment calibration overdue",
        "description": "Centrifuge calibration certificate expired 2 weeks ago",
        "site": "Site-103",
        "severity": "major",
        "status": "resolved",
    },
    {
        "title": "Documentation error",
        "description": "Visit date incorrectly recorded in CRF",
        "site": "Site-102",
        "severity": "minor",
        "status": "open",
    },
    {
        "title": "Sample storage issue",
        "description": "Blood samples not stored at required temperature",
        "site": "Site-101",
        "severity": "critical",
        "status": "in_progress",
    },
    {
        "title": "Missing lab results",
        "description": "Lab results for patient 022 not received",
        "site": "Site-103",
        "severity": "major",
        "status": "open",
    },
    {
        "title": "IRB approval pending",
        "description": "Amendment approval still pending from IRB",
        "site": "Site-102",
        "severity": "major",
        "status": "in_progress",
    },
]


def _init_database(database_url: str | None = None):
    """Initialize the database and make sure the tables exist."""
    db.initialize(database_url)
    db.create_all_tables()


def cmd_init_db(args):
    _init_database(args.database_url)
    print("Database initialized.")
    return 0


def cmd_seed(args):
    """Insert the sample clinical-trial issues."""
    _init_database(args.database_url)
    with db.session() as session:
        repo = IssueRepository(session)
        for fields in SEED_ISSUES:
            issue = repo.create(**fields)
            print(f"Created issue: {issue.title} ({issue.id})")
    cli_logger.info("database_seeded", count=len(SEED_ISSUES))
    print(f"\nSuccessfully seeded {len(SEED_ISSUES)} issues!")
    return 0


def cmd_import(args):
    """Bulk import issues from a CSV file."""
    _init_database(args.database_url)

    try:
        with open(args.file, encoding="utf-8-sig", newline="") as f:
            raw_text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        cli_logger.warning("csv_file_unreadable", path=args.file, error=str(e))
        print(f"Cannot read {args.file}: {e}")
        return 1

    try:
        with LogContext(source_file=args.file), db.session() as session:
            repo = IssueRepository(session)
            report = import_csv(raw_text, lambda fields: repo.create_isolated(**fields))
            payload = report.to_dict()
    except CsvImportError as e:
        print(f"Import failed: {e.error}" + (f" - {e.message}" if e.message else ""))
        return 1

    if args.format == "json":
        print(json.dumps(payload, indent=2))
    else:
        print(f"Rows: {payload['total']}  Created: {payload['created']}  Failed: {payload['failed']}")
        for error in payload["errors"]:
            print(f"  Row {error['row']}: {error['error']}")
    return 0 if payload["failed"] == 0 else 2


def cmd_list(args):
    """List issues with the same filters as GET /api/issues."""
    _init_database(args.database_url)
    params = QueryParams(
        page=args.page,
        page_size=args.page_size,
        search=args.search.strip() if args.search and args.search.strip() else None,
        status=args.status,
        severity=args.severity,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
    )

    with db.session() as session:
        page, pagination = query_issues(IssueRepository(session).list_all(), params)
        issues = [issue.to_dict() for issue in page]

    print(format_output(issues, args.format, args.verbose), end="")
    if args.format in ("text", "table"):
        print(
            f"\nPage {pagination.page} of {pagination.total_pages} "
            f"({pagination.total} matching issues)"
        )
    return 0


def cmd_stats(args):
    _init_database(args.database_url)
    with db.session() as session:
        repo = IssueRepository(session)
        by_status = repo.count_by("status")
        by_severity = repo.count_by("severity")
        total = repo.count()

    print(f"Total issues: {total}")
    print("By status:")
    for status in VALID_STATUSES:
        print(f"  {status:<12} {by_status.get(status, 0)}")
    print("By severity:")
    for severity in VALID_SEVERITIES:
        print(f"  {severity:<12} {by_severity.get(severity, 0)}")
    return 0


def _page_size(value: str) -> int:
    size = int(value)
    if not 1 <= size <= MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"page size must be between 1 and {MAX_PAGE_SIZE}")
    return size


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracker", description="Clinical-trial issue tracker")
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    seed_parser = subparsers.add_parser("seed", help="Insert sample issues")
    seed_parser.set_defaults(func=cmd_seed)

    import_parser = subparsers.add_parser("import", help="Bulk import issues from CSV")
    import_parser.add_argument("file", help="CSV file with a header row")
    import_parser.add_argument("--format", choices=["text", "json"], default="text")
    import_parser.set_defaults(func=cmd_import)

    list_parser = subparsers.add_parser("list", help="List issues")
    list_parser.add_argument("--search", help="Case-insensitive title search")
    list_parser.add_argument("--status", choices=VALID_STATUSES)
    list_parser.add_argument("--severity", choices=VALID_SEVERITIES)
    list_parser.add_argument(
        "--sort-by", choices=[f.value for f in SortField], default=SortField.CREATED_AT.value
    )
    list_parser.add_argument(
        "--sort-order", choices=[o.value for o in SortOrder], default=SortOrder.DESC.value
    )
    list_parser.add_argument("--page", type=_positive_int, default=DEFAULT_PAGE)
    list_parser.add_argument("--page-size", type=_page_size, default=DEFAULT_PAGE_SIZE)
    list_parser.add_argument(
        "--format", choices=["text", "json", "table", "csv"], default="text"
    )
    list_parser.add_argument("--verbose", "-v", action="store_true")
    list_parser.set_defaults(func=cmd_list)

    stats_parser = subparsers.add_parser("stats", help="Issue counts by status and severity")
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(level="WARNING")
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
