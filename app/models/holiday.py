from sqlalchemy import Column, Integer, String, Date, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base
import enum


class HolidayType(str, enum.Enum):
    NATIONAL = "national"
    REGIONAL = "regional"
    LOCAL = "local"
    COMPANY = "company"


def normalize_holiday_name(name: str) -> str:
    """Case-insensitive, whitespace-collapsed key used for duplicate detection."""
    return " ".join(name.lower().split())


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (UniqueConstraint("name_key", "date", name="uq_holiday_name_date"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    name_key = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    holiday_type = Column(String, default=HolidayType.COMPANY.value, nullable=False)
    is_mandatory = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Holiday(date={self.date}, name={self.name})>"
