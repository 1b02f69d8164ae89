from datetime import date
from typing import Optional

from pydantic import BaseModel


class ExportFilters(BaseModel):
    status: Optional[str] = None
    booking_type: Optional[str] = None


class ExportSaveIn(BaseModel):
    filters: ExportFilters = ExportFilters()


class ExportFileOut(BaseModel):
    filename: str
    filepath: str
    count: int


class ImportResultOut(BaseModel):
    imported: int
    updated: int
    skipped: int
    errors: list[str]


class DailyReportOut(BaseModel):
    date: date
    new_bookings_today: int
    upcoming_checkins: int
    todays_day_passes: int
    filename: str
    filepath: str
