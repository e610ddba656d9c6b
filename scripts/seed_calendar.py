"""Populate the calendar_dates table for a range of years.

Usage events on a date without a calendar row are left out of every rollup,
so the table must cover each year the club reports on.

    python scripts/seed_calendar.py 2024 2027
"""

import argparse
import logging
from datetime import date

from clubrollup.core.database import SessionLocal, init_db
from clubrollup.repositories.calendar_date_repository import CalendarDateRepository

logger = logging.getLogger(__name__)

# Fixed-date holidays observed by the club
FIXED_HOLIDAYS = {
    (1, 1): "New Year's Day",
    (7, 4): "Independence Day",
    (12, 25): "Christmas Day",
}


def holidays_for(year: int) -> dict[date, str]:
    return {date(year, month, day): name for (month, day), name in FIXED_HOLIDAYS.items()}


def seed(first_year: int, last_year: int) -> int:
    init_db()
    db = SessionLocal()
    try:
        repo = CalendarDateRepository(db)
        inserted = 0
        for year in range(first_year, last_year + 1):
            inserted += repo.populate(date(year, 1, 1), date(year + 1, 1, 1), holidays_for(year))
        logger.info("Inserted %d calendar rows for %d-%d", inserted, first_year, last_year)
        return inserted
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("first_year", type=int)
    parser.add_argument("last_year", type=int)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    print(seed(args.first_year, args.last_year))
