"""
Excel export/import of bookings and the daily report.
"""
import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Iterable, List, Optional
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from palina.core.config import settings
from palina.core.exceptions import (
    BookingNotFoundError,
    ImportRowError,
    ValidationError,
)
from palina.models import Booking, BookingStatus, BookingType, utc_now
from palina.services.booking_store import MAX_INTEGER, BookingStore

logger = logging.getLogger(__name__)


# Column name -> width
BOOKING_COLUMNS = [
    ("Booking ID", 12),
    ("Guest Name", 25),
    ("Phone", 18),
    ("Email", 30),
    ("Type", 12),
    ("Check-in Date", 14),
    ("Check-out Date", 14),
    ("Visit Date", 14),
    ("Number of Guests", 8),
    ("Total Price ($)", 12),
    ("Status", 12),
    ("Special Requests", 40),
    ("Admin Notes", 40),
    ("WhatsApp Notified", 12),
    ("Created At", 20),
    ("Updated At", 20),
]

VALID_STATUSES = {s.value for s in BookingStatus}


@dataclass
class ExportFile:
    filename: str
    filepath: str
    count: int


@dataclass
class ImportResult:
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class DailyReport:
    date: date
    new_bookings: List[Booking]
    upcoming_checkins: List[Booking]
    todays_day_passes: List[Booking]


def _iso(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def booking_to_row(booking: Booking) -> list:
    """One spreadsheet row, same order as BOOKING_COLUMNS"""
    return [
        booking.id,
        booking.guest_name,
        booking.guest_phone,
        booking.guest_email or "",
        "Cabin Stay" if booking.booking_type == BookingType.CABIN else "Day Pass",
        _iso(booking.check_in_date),
        _iso(booking.check_out_date),
        _iso(booking.visit_date),
        booking.number_of_guests,
        float(booking.total_price),
        booking.status.value.capitalize(),
        booking.special_requests or "",
        booking.admin_notes or "",
        "Yes" if booking.whatsapp_notified else "No",
        _iso(booking.created_at),
        _iso(booking.updated_at),
    ]


def _write_sheet(ws, headers: Iterable[str], rows: Iterable[list], widths=None) -> None:
    ws.append(list(headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)
    if widths:
        for idx, width in enumerate(widths, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = width


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _parse_int(value: Any, default: int) -> int:
    try:
        parsed = int(float(_cell_text(value)))
    except (ValueError, OverflowError):
        return default
    return parsed if 1 <= parsed <= MAX_INTEGER else default


def _parse_price(value: Any) -> Decimal:
    try:
        price = Decimal(_cell_text(value).lstrip("$").replace(",", ""))
    except InvalidOperation:
        return Decimal("0")
    return price if price.is_finite() else Decimal("0")


def build_daily_report(bookings: Iterable[Booking], today: date, window_days: int = 7) -> DailyReport:
    """Filter a booking list against date windows around `today`."""
    bookings = list(bookings)
    horizon = today + timedelta(days=window_days)

    new_bookings = [
        b for b in bookings if b.created_at and b.created_at.date() == today
    ]
    upcoming = [
        b
        for b in bookings
        if b.booking_type == BookingType.CABIN
        and b.status == BookingStatus.CONFIRMED
        and b.check_in_date
        and today <= b.check_in_date <= horizon
    ]
    day_passes = [
        b
        for b in bookings
        if b.booking_type == BookingType.DAY_PASS
        and b.status == BookingStatus.CONFIRMED
        and b.visit_date == today
    ]
    return DailyReport(
        date=today,
        new_bookings=new_bookings,
        upcoming_checkins=upcoming,
        todays_day_passes=day_passes,
    )


class ExcelService:
    """Bookings <-> xlsx workbooks"""

    def __init__(self, store: BookingStore, export_dir: Optional[str] = None):
        self.store = store
        self.export_dir = export_dir or settings.export_dir

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def build_workbook(self, status=None, booking_type=None) -> tuple[Workbook, int]:
        bookings = await self.store.list(status=status, booking_type=booking_type)
        stats = await self.store.stats()

        wb = Workbook()
        ws = wb.active
        ws.title = "Bookings"
        _write_sheet(
            ws,
            [name for name, _ in BOOKING_COLUMNS],
            (booking_to_row(b) for b in bookings),
            [width for _, width in BOOKING_COLUMNS],
        )

        summary = wb.create_sheet("Summary")
        _write_sheet(
            summary,
            ["Metric", "Value"],
            [
                ["Total Pending", stats.pending],
                ["Total Confirmed", stats.confirmed],
                ["Cabin Bookings", stats.cabin_bookings],
                ["Day Pass Bookings", stats.day_pass_bookings],
                ["Export Date", _iso(utc_now())],
            ],
            [20, 25],
        )
        return wb, len(bookings)

    async def export_to_buffer(self, status=None, booking_type=None) -> bytes:
        wb, count = await self.build_workbook(status, booking_type)
        buffer = BytesIO()
        wb.save(buffer)
        logger.info(f"📊 Exported {count} bookings to xlsx buffer")
        return buffer.getvalue()

    async def export_to_file(
        self, status=None, booking_type=None, directory: Optional[str] = None
    ) -> ExportFile:
        wb, count = await self.build_workbook(status, booking_type)
        directory = directory or self.export_dir
        os.makedirs(directory, exist_ok=True)

        filename = f"palina_bookings_{utc_now().strftime('%Y-%m-%dT%H-%M-%S')}.xlsx"
        filepath = os.path.join(directory, filename)
        wb.save(filepath)

        logger.info(f"📊 Exported {count} bookings to {filepath}")
        return ExportFile(filename=filename, filepath=filepath, count=count)

    def resolve_export_path(self, filename: str) -> str:
        """Path of a previously saved file; only bare names inside export_dir"""
        if not filename or os.path.basename(filename) != filename or filename.startswith("."):
            raise ValidationError(f"Invalid file name: {filename!r}")
        filepath = os.path.join(self.export_dir, filename)
        if not os.path.isfile(filepath):
            raise FileNotFoundError(filepath)
        return filepath

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def _read_rows(self, source) -> List[dict]:
        try:
            wb = load_workbook(source, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, OSError, KeyError, ValueError) as e:
            raise ValidationError(f"Could not read workbook: {e}") from e

        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header = next(rows, None)
        if not header:
            wb.close()
            return []
        names = [_cell_text(h) for h in header]

        records = []
        for values in rows:
            if all(v is None or _cell_text(v) == "" for v in values):
                continue
            records.append(dict(zip(names, values)))
        wb.close()
        return records

    async def _apply_update(self, row_number: int, row: dict, result: ImportResult) -> None:
        raw_id = _cell_text(row.get("Booking ID"))
        try:
            booking_id = int(raw_id) if raw_id.lstrip("-").isdigit() else int(float(raw_id))
        except (ValueError, OverflowError):
            raise ImportRowError(row_number, f"invalid Booking ID {raw_id!r}") from None
        if not 1 <= booking_id <= MAX_INTEGER:
            raise ImportRowError(row_number, f"invalid Booking ID {raw_id!r}")

        # Blank status means pending
        status = _cell_text(row.get("Status")).lower() or BookingStatus.PENDING.value
        if status not in VALID_STATUSES:
            logger.info(f"Import row {row_number}: status {status!r} not recognized, skipped")
            result.skipped += 1
            return

        admin_notes = _cell_text(row.get("Admin Notes")) or None
        try:
            await self.store.update_status(booking_id, status, admin_notes)
        except BookingNotFoundError:
            raise ImportRowError(row_number, f"booking #{booking_id} not found") from None
        result.updated += 1

    async def _apply_create(self, row_number: int, row: dict, result: ImportResult) -> None:
        guest_name = _cell_text(row.get("Guest Name"))
        guest_phone = _cell_text(row.get("Phone"))
        if not guest_name or not guest_phone:
            raise ImportRowError(row_number, "missing required fields (Guest Name, Phone)")

        booking_type = (
            BookingType.CABIN
            if "cabin" in _cell_text(row.get("Type")).lower()
            else BookingType.DAY_PASS
        )
        data = {
            "guest_name": guest_name,
            "guest_phone": guest_phone,
            "guest_email": _cell_text(row.get("Email")) or None,
            "booking_type": booking_type,
            "check_in_date": row.get("Check-in Date") or None,
            "check_out_date": row.get("Check-out Date") or None,
            "visit_date": row.get("Visit Date") or None,
            "number_of_guests": _parse_int(row.get("Number of Guests"), 1),
            "total_price": _parse_price(row.get("Total Price ($)")),
            "special_requests": _cell_text(row.get("Special Requests")) or None,
        }
        try:
            await self.store.create(data)
        except ValidationError as e:
            raise ImportRowError(row_number, str(e)) from None
        result.imported += 1

    async def import_rows(self, rows: List[dict]) -> ImportResult:
        """Apply rows one by one; a bad row is reported and the rest continue."""
        result = ImportResult()

        # Row 1 is the header
        for row_number, row in enumerate(rows, start=2):
            try:
                if _cell_text(row.get("Booking ID")):
                    await self._apply_update(row_number, row, result)
                else:
                    await self._apply_create(row_number, row, result)
            except (ImportRowError, ValidationError) as e:
                result.errors.append(str(e))

        logger.info(
            f"📥 Import finished: {result.imported} imported, {result.updated} updated, "
            f"{result.skipped} skipped, {len(result.errors)} errors"
        )
        return result

    async def import_from_buffer(self, data: bytes) -> ImportResult:
        return await self.import_rows(self._read_rows(BytesIO(data)))

    async def import_from_file(self, filepath: str) -> ImportResult:
        return await self.import_rows(self._read_rows(filepath))

    # ------------------------------------------------------------------
    # Daily report
    # ------------------------------------------------------------------

    async def daily_report(self, today: Optional[date] = None) -> DailyReport:
        # created_at is naive UTC, so "today" is the UTC date too
        today = today or utc_now().date()
        bookings = await self.store.list()
        return build_daily_report(bookings, today, settings.daily_report_window_days)

    async def generate_daily_report(
        self, today: Optional[date] = None, directory: Optional[str] = None
    ) -> tuple[DailyReport, ExportFile]:
        report = await self.daily_report(today)

        wb = Workbook()
        ws = wb.active
        ws.title = "Summary"
        _write_sheet(
            ws,
            ["Report", "Date"],
            [
                ["Daily Summary", report.date.isoformat()],
                ["", ""],
                ["New Bookings Today", len(report.new_bookings)],
                [
                    f"Upcoming Check-ins ({settings.daily_report_window_days} days)",
                    len(report.upcoming_checkins),
                ],
                ["Today's Day Passes", len(report.todays_day_passes)],
            ],
            [30, 15],
        )

        if report.upcoming_checkins:
            _write_sheet(
                wb.create_sheet("Upcoming Check-ins"),
                ["Guest", "Phone", "Check-in", "Check-out", "Guests"],
                (
                    [
                        b.guest_name,
                        b.guest_phone,
                        _iso(b.check_in_date),
                        _iso(b.check_out_date),
                        b.number_of_guests,
                    ]
                    for b in report.upcoming_checkins
                ),
            )

        if report.todays_day_passes:
            _write_sheet(
                wb.create_sheet("Today's Day Passes"),
                ["Guest", "Phone", "Guests", "Total"],
                (
                    [b.guest_name, b.guest_phone, b.number_of_guests, f"${b.total_price}"]
                    for b in report.todays_day_passes
                ),
            )

        directory = directory or self.export_dir
        os.makedirs(directory, exist_ok=True)
        filename = f"palina_daily_report_{report.date.isoformat()}.xlsx"
        filepath = os.path.join(directory, filename)
        wb.save(filepath)

        logger.info(f"📅 Daily report for {report.date} written to {filepath}")
        return report, ExportFile(filename=filename, filepath=filepath, count=len(report.new_bookings))
