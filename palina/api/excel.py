from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, Response

from palina.api.deps import get_excel_service
from palina.core.exceptions import ValidationError
from palina.models import utc_now
from palina.schemas.excel import (
    DailyReportOut,
    ExportFileOut,
    ExportSaveIn,
    ImportResultOut,
)
from palina.services.excel_service import ExcelService

router = APIRouter(prefix="/api", tags=["excel"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/export/excel")
async def export_excel(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    type_filter: Optional[str] = Query(default=None, alias="type"),
    excel: ExcelService = Depends(get_excel_service),
):
    content = await excel.export_to_buffer(status=status_filter, booking_type=type_filter)
    timestamp = utc_now().strftime("%Y-%m-%dT%H-%M-%S")
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename=palina_bookings_{timestamp}.xlsx"
        },
    )


@router.post("/export/excel/save", response_model=ExportFileOut)
async def export_excel_to_server(
    payload: Optional[ExportSaveIn] = None,
    excel: ExcelService = Depends(get_excel_service),
):
    filters = (payload or ExportSaveIn()).filters
    result = await excel.export_to_file(status=filters.status, booking_type=filters.booking_type)
    return asdict(result)


@router.post("/import/excel", response_model=ImportResultOut)
async def import_excel(
    file: UploadFile = File(...),
    excel: ExcelService = Depends(get_excel_service),
):
    data = await file.read()
    if not data:
        raise ValidationError("No file uploaded")
    result = await excel.import_from_buffer(data)
    return asdict(result)


@router.get("/export/daily-report", response_model=DailyReportOut)
async def daily_report(excel: ExcelService = Depends(get_excel_service)):
    report, saved = await excel.generate_daily_report()
    return {
        "date": report.date,
        "new_bookings_today": len(report.new_bookings),
        "upcoming_checkins": len(report.upcoming_checkins),
        "todays_day_passes": len(report.todays_day_passes),
        "filename": saved.filename,
        "filepath": saved.filepath,
    }


@router.get("/download/{filename}")
async def download_file(filename: str, excel: ExcelService = Depends(get_excel_service)):
    try:
        filepath = excel.resolve_export_path(filename)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(filepath, media_type=XLSX_MEDIA_TYPE, filename=filename)
