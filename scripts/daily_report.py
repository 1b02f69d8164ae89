"""
Write today's report (new bookings, upcoming check-ins, day passes).

    python scripts/daily_report.py [--date 2024-06-01]
"""
import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from palina.core.logging import setup_logging
from palina.database import AsyncSessionLocal, init_db
from palina.services.booking_store import BookingStore
from palina.services.excel_service import ExcelService


async def run(report_date, directory):
    await init_db()

    async with AsyncSessionLocal() as session:
        excel = ExcelService(BookingStore(session))
        report, saved = await excel.generate_daily_report(report_date, directory)

    print(f"📅 Daily report for {report.date}")
    print(f"   New bookings today:   {len(report.new_bookings)}")
    print(f"   Upcoming check-ins:   {len(report.upcoming_checkins)}")
    print(f"   Today's day passes:   {len(report.todays_day_passes)}")
    print(f"   Saved to {saved.filepath}")


def main():
    parser = argparse.ArgumentParser(description="Generate the daily booking report")
    parser.add_argument("--date", type=date.fromisoformat, help="report date, YYYY-MM-DD")
    parser.add_argument("--dir", dest="directory", help="output directory")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(run(args.date, args.directory))


if __name__ == "__main__":
    main()
