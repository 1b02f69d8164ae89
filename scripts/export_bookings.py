"""
Export bookings to an xlsx file in EXPORT_DIR (or --dir).

Meant for cron or manual use:
    python scripts/export_bookings.py --status confirmed
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from palina.core.logging import setup_logging
from palina.database import AsyncSessionLocal, init_db
from palina.services.booking_store import BookingStore
from palina.services.excel_service import ExcelService


async def export_now(status, booking_type, directory):
    await init_db()

    async with AsyncSessionLocal() as session:
        excel = ExcelService(BookingStore(session))
        result = await excel.export_to_file(
            status=status, booking_type=booking_type, directory=directory
        )

    print(f"✅ Exported {result.count} bookings to {result.filepath}")


def main():
    parser = argparse.ArgumentParser(description="Export bookings to Excel")
    parser.add_argument("--status", help="pending, confirmed, cancelled or completed")
    parser.add_argument("--type", dest="booking_type", help="cabin or day_pass")
    parser.add_argument("--dir", dest="directory", help="output directory")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(export_now(args.status, args.booking_type, args.directory))


if __name__ == "__main__":
    main()
