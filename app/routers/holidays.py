from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.permissions import SessionContext
from app.database import get_db
from app.routers.auth_deps import get_session_context
from app.schemas.holiday import BulkImportResult, CountryImportRequest, HolidayCreate, HolidayResponse, HolidayUpdate
from app.services.holiday_registry import HolidayRegistry

router = APIRouter(prefix="/holidays", tags=["Holidays"])


@router.get("/", response_model=List[HolidayResponse])
def list_holidays(
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).list(year)


@router.post("/", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
def create_holiday(
    data: HolidayCreate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).create(ctx, data)


@router.post("/import", response_model=BulkImportResult)
def import_holidays(
    # Raw items: a malformed entry aborts the batch at its index instead of failing the whole body
    candidates: List[Dict[str, Any]] = Body(...),
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).bulk_import(ctx, candidates)


@router.get("/import/preview", response_model=List[HolidayCreate])
def preview_country_holidays(
    country: str = Query(..., min_length=2, max_length=3),
    year: int = Query(..., ge=1900, le=2100),
    ctx: SessionContext = Depends(get_session_context),
):
    """Candidates from the country's calendar; post the chosen ones to /import."""
    ctx.require("can_manage_holidays", "manage holidays")
    return HolidayRegistry.country_candidates(country, year)


@router.post("/import/country", response_model=BulkImportResult)
def import_country_holidays(
    data: CountryImportRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).import_country(ctx, data.country, data.year)


@router.get("/export")
def export_holidays(
    format: Literal["csv", "json"] = "csv",
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    registry = HolidayRegistry(db)
    holidays = registry.list(year)
    suffix = f"_{year}" if year else ""
    if format == "json":
        return Response(
            content=registry.export_json(holidays),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="holidays{suffix}.json"'},
        )
    return Response(
        content=registry.export_csv(holidays),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="holidays{suffix}.csv"'},
    )


@router.get("/{holiday_id}", response_model=HolidayResponse)
def get_holiday(
    holiday_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).get(holiday_id)


@router.patch("/{holiday_id}", response_model=HolidayResponse)
def update_holiday(
    holiday_id: int,
    data: HolidayUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayRegistry(db).update(ctx, holiday_id, data)


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(
    holiday_id: int,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    HolidayRegistry(db).delete(ctx, holiday_id)
