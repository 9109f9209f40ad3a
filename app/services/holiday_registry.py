"""
Holiday Registry

Company holiday calendar with duplicate detection. Two holidays are the
same when their normalized names (case and whitespace insensitive) and
their dates match exactly. The (name_key, date) unique constraint backs
the check at the database level.
"""
import csv
import io
import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import holidays as holiday_calendars
from holidays.constants import PUBLIC
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AppException,
    BulkImportAbortedError,
    DuplicateHolidayError,
    NotFoundError,
    ValidationError,
)
from app.core.permissions import SessionContext
from app.models.holiday import Holiday, HolidayType, normalize_holiday_name
from app.schemas.holiday import BulkImportResult, HolidayCreate, HolidayResponse, HolidayUpdate
from app.services.base import BaseService

HolidayKey = Tuple[str, date]

CSV_HEADERS = ["Name", "Date", "Type", "Mandatory"]


class HolidayRegistry(BaseService):

    def __init__(self, db: Session):
        super().__init__(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, holiday_id: int) -> Holiday:
        holiday = self.db.get(Holiday, holiday_id)
        if not holiday:
            raise NotFoundError("Holiday", holiday_id)
        return holiday

    def list(self, year: Optional[int] = None) -> List[Holiday]:
        query = self.db.query(Holiday)
        if year is not None:
            query = query.filter(Holiday.date >= date(year, 1, 1), Holiday.date <= date(year, 12, 31))
        return query.order_by(Holiday.date.asc(), Holiday.id.asc()).all()

    def find_duplicate(self, name: str, day: date, exclude_id: Optional[int] = None) -> Optional[Holiday]:
        query = self.db.query(Holiday).filter(
            Holiday.name_key == normalize_holiday_name(name),
            Holiday.date == day,
        )
        if exclude_id is not None:
            query = query.filter(Holiday.id != exclude_id)
        return query.first()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Holiday name is required")
        return cleaned

    def _commit_or_duplicate(self, name: str, day: date):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateHolidayError(name, day)
        except Exception:
            self.db.rollback()
            raise

    def create(self, ctx: SessionContext, data: HolidayCreate) -> Holiday:
        ctx.require("can_manage_holidays", "manage holidays")
        name = self._clean_name(data.name)

        if self.find_duplicate(name, data.date):
            self.log_warning(f"Duplicate holiday rejected: {name} on {data.date}")
            raise DuplicateHolidayError(name, data.date)

        holiday = Holiday(
            name=name,
            name_key=normalize_holiday_name(name),
            date=data.date,
            holiday_type=HolidayType(data.holiday_type).value,
            is_mandatory=data.is_mandatory,
            created_by=ctx.user_id,
        )
        self.db.add(holiday)
        self._commit_or_duplicate(name, data.date)
        self.db.refresh(holiday)

        self.log_info(f"Holiday {holiday.id} created: {holiday.name} on {holiday.date}")
        return holiday

    def update(self, ctx: SessionContext, holiday_id: int, data: HolidayUpdate) -> Holiday:
        ctx.require("can_manage_holidays", "manage holidays")
        holiday = self.get(holiday_id)

        changes = data.model_dump(exclude_unset=True)
        name = self._clean_name(changes["name"]) if changes.get("name") is not None else holiday.name
        day = changes["date"] if changes.get("date") is not None else holiday.date

        if self.find_duplicate(name, day, exclude_id=holiday.id):
            self.log_warning(f"Duplicate holiday rejected on update of {holiday.id}: {name} on {day}")
            raise DuplicateHolidayError(name, day)

        holiday.name = name
        holiday.name_key = normalize_holiday_name(name)
        holiday.date = day
        if changes.get("holiday_type") is not None:
            holiday.holiday_type = HolidayType(changes["holiday_type"]).value
        if changes.get("is_mandatory") is not None:
            holiday.is_mandatory = changes["is_mandatory"]

        self._commit_or_duplicate(name, day)
        self.db.refresh(holiday)

        self.log_info(f"Holiday {holiday.id} updated")
        return holiday

    def delete(self, ctx: SessionContext, holiday_id: int) -> None:
        ctx.require("can_manage_holidays", "manage holidays")
        holiday = self.get(holiday_id)
        with self.unit_of_work():
            self.db.delete(holiday)
        self.log_info(f"Holiday {holiday_id} deleted")

    def bulk_import(
        self,
        ctx: SessionContext,
        candidates: Sequence[Union[HolidayCreate, Dict[str, Any]]],
    ) -> BulkImportResult:
        """
        Import candidates one by one. Duplicates (of stored holidays or of
        earlier candidates in the batch) are skipped. Any other failure stops
        the batch; holidays imported before it stay committed and the error
        reports the counts so far.
        """
        ctx.require("can_manage_holidays", "manage holidays")

        imported = 0
        skipped = 0
        seen: Set[HolidayKey] = set()

        for index, raw in enumerate(candidates):
            try:
                candidate = raw if isinstance(raw, HolidayCreate) else HolidayCreate.model_validate(raw)
                name = self._clean_name(candidate.name)
                key = (normalize_holiday_name(name), candidate.date)

                if key in seen or self.find_duplicate(name, candidate.date):
                    skipped += 1
                    seen.add(key)
                    continue

                self.db.add(Holiday(
                    name=name,
                    name_key=key[0],
                    date=candidate.date,
                    holiday_type=HolidayType(candidate.holiday_type).value,
                    is_mandatory=candidate.is_mandatory,
                    created_by=ctx.user_id,
                ))
                try:
                    self.db.commit()
                except IntegrityError:
                    # Lost a race with a concurrent insert of the same holiday
                    self.db.rollback()
                    skipped += 1
                    seen.add(key)
                    continue
                seen.add(key)
                imported += 1
            except (PydanticValidationError, AppException, SQLAlchemyError) as e:
                self.db.rollback()
                self.log_warning(f"Holiday import aborted at candidate {index}: {e}")
                raise BulkImportAbortedError(
                    f"Import aborted at item {index}: {e}",
                    imported=imported,
                    skipped=skipped,
                    failed_index=index,
                ) from e

        self.log_info(f"Holiday import finished: {imported} imported, {skipped} skipped")
        return BulkImportResult(imported=imported, skipped=skipped)

    # ------------------------------------------------------------------
    # Country calendars
    # ------------------------------------------------------------------

    @staticmethod
    def country_candidates(country: str, year: int) -> List[HolidayCreate]:
        """
        Holidays a country observes in a year, ready for bulk_import.

        Public holidays come in as national; any other category the
        calendar supports (bank, optional, ...) comes in as local. All are
        mandatory, matching a manual import.
        """
        code = (country or "").strip().upper()
        try:
            public = holiday_calendars.country_holidays(code, years=year)
        except NotImplementedError:
            raise ValidationError(f"No holiday calendar for country '{country}'", details={"country": country})

        sources = [(public, HolidayType.NATIONAL)]
        other_categories = tuple(c for c in public.supported_categories if c != PUBLIC)
        if other_categories:
            sources.append((
                holiday_calendars.country_holidays(code, years=year, categories=other_categories),
                HolidayType.LOCAL,
            ))

        candidates: List[HolidayCreate] = []
        seen: Set[HolidayKey] = set()
        for calendar, holiday_type in sources:
            for day in sorted(calendar):
                for name in calendar.get_list(day):
                    key = (normalize_holiday_name(name), day)
                    if key in seen:
                        continue
                    seen.add(key)
                    candidates.append(HolidayCreate(name=name, date=day, holiday_type=holiday_type, is_mandatory=True))

        candidates.sort(key=lambda candidate: candidate.date)
        return candidates

    def import_country(self, ctx: SessionContext, country: str, year: int) -> BulkImportResult:
        ctx.require("can_manage_holidays", "manage holidays")
        candidates = self.country_candidates(country, year)
        self.log_info(f"Importing {len(candidates)} holiday(s) for {country.upper()} {year}")
        return self.bulk_import(ctx, candidates)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @staticmethod
    def export_csv(holidays: Sequence[Holiday]) -> str:
        """Header row, then one line per holiday; every field is quoted."""
        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for holiday in holidays:
            writer.writerow([
                holiday.name,
                holiday.date.isoformat(),
                holiday.holiday_type,
                "Yes" if holiday.is_mandatory else "No",
            ])
        return output.getvalue()

    @staticmethod
    def export_json(holidays: Sequence[Holiday]) -> str:
        payload = [HolidayResponse.model_validate(h).model_dump(mode="json") for h in holidays]
        return json.dumps(payload, indent=2, ensure_ascii=False)
