import csv
import io
import json
import pytest
from datetime import date
from app.core.exceptions import (
    AccessDeniedError,
    BulkImportAbortedError,
    DuplicateHolidayError,
    NotFoundError,
    ValidationError,
)
from app.models.holiday import Holiday, HolidayType, normalize_holiday_name
from app.schemas.holiday import HolidayCreate, HolidayUpdate
from app.services.holiday_registry import HolidayRegistry


def _holiday(name, day, **kwargs):
    return HolidayCreate(name=name, date=day, **kwargs)


def test_normalize_holiday_name():
    assert normalize_holiday_name("  Christmas   DAY ") == "christmas day"


def test_create_holiday(db_session, hr_user, ctx_for):
    holiday = HolidayRegistry(db_session).create(
        ctx_for(hr_user), _holiday(" Christmas Day ", date(2025, 12, 25), holiday_type=HolidayType.NATIONAL)
    )
    assert holiday.id is not None
    assert holiday.name == "Christmas Day"
    assert holiday.holiday_type == "national"
    assert holiday.is_mandatory is True
    assert holiday.created_by == hr_user.id


def test_only_hr_manages_holidays(db_session, manager_user, ctx_for):
    with pytest.raises(AccessDeniedError):
        HolidayRegistry(db_session).create(ctx_for(manager_user), _holiday("Christmas Day", date(2025, 12, 25)))


def test_duplicate_is_case_and_space_insensitive(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Christmas Day", date(2025, 12, 25)))

    with pytest.raises(DuplicateHolidayError):
        registry.create(ctx, _holiday("christmas   day", date(2025, 12, 25)))
    assert db_session.query(Holiday).count() == 1


def test_same_name_other_date_is_allowed(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Christmas Day", date(2025, 12, 25)))
    registry.create(ctx, _holiday("Christmas Day", date(2026, 12, 25)))
    assert db_session.query(Holiday).count() == 2


def test_blank_name_is_rejected(db_session, hr_user, ctx_for):
    with pytest.raises(ValidationError):
        HolidayRegistry(db_session).create(ctx_for(hr_user), _holiday("   ", date(2025, 12, 25)))


def test_update_checks_duplicates_against_others(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Labour Day", date(2025, 5, 1)))
    other = registry.create(ctx, _holiday("Company Day", date(2025, 9, 15)))

    with pytest.raises(DuplicateHolidayError):
        registry.update(ctx, other.id, HolidayUpdate(name="LABOUR DAY", date=date(2025, 5, 1)))

    # Renaming to itself is not a duplicate
    updated = registry.update(ctx, other.id, HolidayUpdate(name="Company  Day", is_mandatory=False))
    assert updated.name == "Company  Day"
    assert updated.is_mandatory is False
    assert updated.date == date(2025, 9, 15)


def test_delete_holiday(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    holiday = registry.create(ctx, _holiday("Labour Day", date(2025, 5, 1)))
    registry.delete(ctx, holiday.id)

    with pytest.raises(NotFoundError):
        registry.get(holiday.id)


def test_list_by_year_in_date_order(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Christmas Day", date(2025, 12, 25)))
    registry.create(ctx, _holiday("New Year's Day", date(2025, 1, 1)))
    registry.create(ctx, _holiday("New Year's Day", date(2026, 1, 1)))

    assert [h.date for h in registry.list(2025)] == [date(2025, 1, 1), date(2025, 12, 25)]
    assert len(registry.list()) == 3


def test_bulk_import_skips_duplicates(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Labour Day", date(2025, 5, 1)))

    result = registry.bulk_import(ctx, [
        {"name": "labour day", "date": "2025-05-01"},
        {"name": "Epiphany", "date": "2025-01-06", "holiday_type": "national"},
        {"name": "EPIPHANY", "date": "2025-01-06"},
        _holiday("Christmas Day", date(2025, 12, 25)),
    ])

    assert result.imported == 2
    assert result.skipped == 2
    assert db_session.query(Holiday).count() == 3


def test_bulk_import_aborts_and_keeps_earlier_rows(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)

    with pytest.raises(BulkImportAbortedError) as exc:
        registry.bulk_import(ctx_for(hr_user), [
            {"name": "Epiphany", "date": "2025-01-06"},
            {"name": "Epiphany", "date": "2025-01-06"},
            {"name": "Broken", "date": "not-a-date"},
            {"name": "Christmas Day", "date": "2025-12-25"},
        ])

    assert exc.value.details == {"imported": 1, "skipped": 1, "failed_index": 2}
    assert [h.name for h in registry.list()] == ["Epiphany"]


def test_bulk_import_requires_hr(db_session, employee_user, ctx_for):
    with pytest.raises(AccessDeniedError):
        HolidayRegistry(db_session).bulk_import(ctx_for(employee_user), [])


def test_export_csv(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("Christmas, Day", date(2025, 12, 25), holiday_type=HolidayType.NATIONAL))
    registry.create(ctx, _holiday("Team Offsite", date(2025, 6, 1), is_mandatory=False))

    rows = list(csv.reader(io.StringIO(HolidayRegistry.export_csv(registry.list()))))
    assert rows == [
        ["Name", "Date", "Type", "Mandatory"],
        ["Team Offsite", "2025-06-01", "company", "No"],
        ["Christmas, Day", "2025-12-25", "national", "Yes"],
    ]


def test_export_json(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    registry.create(ctx_for(hr_user), _holiday("Christmas Day", date(2025, 12, 25)))

    payload = json.loads(HolidayRegistry.export_json(registry.list()))
    assert len(payload) == 1
    assert payload[0]["name"] == "Christmas Day"
    assert payload[0]["date"] == "2025-12-25"
    assert payload[0]["holiday_type"] == "company"


def test_country_candidates_maps_public_holidays_to_national():
    candidates = HolidayRegistry.country_candidates("us", 2025)
    by_key = {(c.name, c.date): c for c in candidates}

    christmas = by_key[("Christmas Day", date(2025, 12, 25))]
    assert christmas.holiday_type == HolidayType.NATIONAL
    assert christmas.is_mandatory is True
    assert ("Independence Day", date(2025, 7, 4)) in by_key

    assert all(c.date.year == 2025 for c in candidates)
    assert [c.date for c in candidates] == sorted(c.date for c in candidates)
    assert {c.holiday_type for c in candidates} <= {HolidayType.NATIONAL, HolidayType.LOCAL}


def test_country_candidates_unknown_country():
    with pytest.raises(ValidationError):
        HolidayRegistry.country_candidates("XX", 2025)


def test_import_country_skips_existing(db_session, hr_user, ctx_for):
    registry = HolidayRegistry(db_session)
    ctx = ctx_for(hr_user)
    registry.create(ctx, _holiday("christmas  day", date(2025, 12, 25)))
    expected = len(HolidayRegistry.country_candidates("US", 2025))

    result = registry.import_country(ctx, "US", 2025)
    assert result.skipped == 1
    assert result.imported == expected - 1

    again = registry.import_country(ctx, "US", 2025)
    assert again.imported == 0
    assert again.skipped == expected


def test_import_country_requires_capability(db_session, employee_user, ctx_for):
    with pytest.raises(AccessDeniedError):
        HolidayRegistry(db_session).import_country(ctx_for(employee_user), "US", 2025)
