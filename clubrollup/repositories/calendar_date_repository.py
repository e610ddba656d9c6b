import calendar
from datetime import date, timedelta

from sqlalchemy.orm import Session

from clubrollup.models.calendar_date import CalendarDate


class CalendarDateRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_range(self, start_date: date, end_date: date) -> dict[date, CalendarDate]:
        """Calendar rows with ``start_date <= calendar_date < end_date``, keyed by date."""
        rows = (
            self.db.query(CalendarDate)
            .filter(
                CalendarDate.calendar_date >= start_date,
                CalendarDate.calendar_date < end_date,
            )
            .all()
        )
        return {row.calendar_date: row for row in rows}

    def populate(
        self,
        start_date: date,
        end_date: date,
        holidays: dict[date, str] | None = None,
    ) -> int:
        """Insert calendar rows for ``start_date <= d < end_date`` that are missing.

        Returns:
            Number of rows inserted.
        """
        holidays = holidays or {}
        existing = self.get_range(start_date, end_date)
        inserted = 0
        day = start_date
        while day < end_date:
            if day not in existing:
                self.db.add(_build_calendar_row(day, holidays.get(day)))
                inserted += 1
            day += timedelta(days=1)
        if inserted:
            self.db.commit()
        return inserted


def _build_calendar_row(day: date, holiday_name: str | None) -> CalendarDate:
    _, iso_week, iso_weekday = day.isocalendar()
    is_weekend = iso_weekday >= 6
    is_holiday = holiday_name is not None
    return CalendarDate(
        calendar_date=day,
        year=day.year,
        quarter=(day.month - 1) // 3 + 1,
        month=day.month,
        month_name=calendar.month_name[day.month],
        day_of_month=day.day,
        day_of_year=day.timetuple().tm_yday,
        iso_day_of_week=iso_weekday,
        day_name=calendar.day_name[day.weekday()],
        iso_week_of_year=iso_week,
        is_weekend=is_weekend,
        is_holiday=is_holiday,
        holiday_name=holiday_name,
        is_business_day=not (is_weekend or is_holiday),
    )
