from pydantic import BaseModel, ConfigDict, Field
import datetime as dt
from datetime import datetime
from typing import Optional
from app.models.holiday import HolidayType

class HolidayBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    date: dt.date
    holiday_type: HolidayType = HolidayType.COMPANY
    is_mandatory: bool = True

class HolidayCreate(HolidayBase):
    pass

class HolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[dt.date] = None
    holiday_type: Optional[HolidayType] = None
    is_mandatory: Optional[bool] = None

class HolidayResponse(HolidayBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

class BulkImportResult(BaseModel):
    imported: int
    skipped: int

class CountryImportRequest(BaseModel):
    country: str = Field(..., min_length=2, max_length=3, description="ISO 3166 country code, e.g. ES")
    year: int = Field(..., ge=1900, le=2100)
