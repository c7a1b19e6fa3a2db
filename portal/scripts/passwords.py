# portal/scripts/passwords.py
"""Print every student's login password so staff can hand them out.

Loads the roster the same way the API does, so the printed passwords are
exactly the ones login accepts. Rows go to stdout as CSV
(Preferred Name, Student ID, Password); log messages go to stderr.

    portal-passwords > student_passwords.csv
"""
import argparse
import asyncio
import csv
import logging
import sys
from typing import List, Optional, TextIO

from portal.core.airtable import AirtableClient
from portal.core.config import Settings, get_settings
from portal.core.errors import ConfigError, UpstreamError
from portal.crud.student import build_students, fetch_roster
from portal.main import configure_logging
from portal.schemas.student import Student

logger = logging.getLogger(__name__)

HEADER = ["Preferred Name", "Student ID", "Password"]


async def collect_credentials(client: AirtableClient, settings: Settings) -> List[Student]:
    records = await fetch_roster(client, settings)
    return list(build_students(records, settings.PORTAL_PW_SECRET).values())


def write_credentials(students: List[Student], out: TextIO) -> None:
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HEADER)
    for student in students:
        writer.writerow([student.preferred_name, student.student_id, student.password])


async def export_passwords(settings: Settings, out: TextIO, sort_by_name: bool = False) -> int:
    client = AirtableClient(settings)
    try:
        students = await collect_credentials(client, settings)
    finally:
        await client.aclose()

    if sort_by_name:
        students.sort(key=lambda s: s.preferred_name.strip().lower())
    write_credentials(students, out)
    return len(students)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Print derived student passwords as CSV")
    parser.add_argument(
        "--sort",
        action="store_true",
        help="Order rows by preferred name instead of roster order",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as e:
        configure_logging()
        logger.error(f"❌ [Passwords] {e.message}: {e.details}")
        return 1

    configure_logging(settings.LOG_LEVEL)
    try:
        count = asyncio.run(export_passwords(settings, sys.stdout, sort_by_name=args.sort))
    except UpstreamError as e:
        logger.error(f"❌ [Passwords] Could not load the roster: {e.message} {e.details or ''}".rstrip())
        return 1

    logger.info(f"✅ [Passwords] Exported {count} students")
    return 0


if __name__ == "__main__":
    sys.exit(main())
