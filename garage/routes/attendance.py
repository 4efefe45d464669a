# garage/routes/attendance.py
from typing import List

from fastapi import APIRouter, Depends, status

from garage.models import (
    AttendanceReport,
    AttendanceReportInput,
    AttendanceReportUpdate,
    DashboardMetrics,
    ReportFilters,
    ReportPage,
)
from garage.services.attendance import AttendanceService
from .deps import attendance_service, report_filters

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.get("/reports", response_model=ReportPage)
def list_reports(
    filters: ReportFilters = Depends(report_filters),
    svc: AttendanceService = Depends(attendance_service),
):
    return svc.list_reports(filters)


@router.get("/reports/all", response_model=List[AttendanceReport])
def list_all_reports(
    filters: ReportFilters = Depends(report_filters),
    svc: AttendanceService = Depends(attendance_service),
):
    return svc.list_all_reports(filters)


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(
    filters: ReportFilters = Depends(report_filters),
    svc: AttendanceService = Depends(attendance_service),
):
    # Only the date window applies
    return svc.get_metrics(filters)


@router.post("/reports", response_model=AttendanceReport, status_code=status.HTTP_201_CREATED)
def create_report(data: AttendanceReportInput, svc: AttendanceService = Depends(attendance_service)):
    return svc.create_report(data)


@router.patch("/reports/{report_id}", response_model=AttendanceReport)
def update_report(
    report_id: str,
    data: AttendanceReportUpdate,
    svc: AttendanceService = Depends(attendance_service),
):
    return svc.update_report(report_id, data)


@router.delete("/reports/{report_id}")
def delete_report(report_id: str, svc: AttendanceService = Depends(attendance_service)):
    svc.delete_report(report_id)
    return {"status": "deleted", "id": report_id}
