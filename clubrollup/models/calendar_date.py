from sqlalchemy import Boolean, Column, Date, Integer, String

from clubrollup.core.database import Base


class CalendarDate(Base):
    """Calendar dimension: one row per date the club reports on.

    Usage on a date with no row here is excluded from aggregation.
    """

    __tablename__ = "calendar_dates"

    calendar_date = Column(Date, primary_key=True)
    year = Column(Integer, nullable=False)
    quarter = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    month_name = Column(String(20), nullable=False)
    day_of_month = Column(Integer, nullable=False)
    day_of_year = Column(Integer, nullable=False)
    iso_day_of_week = Column(Integer, nullable=False)
    day_name = Column(String(20), nullable=False)
    iso_week_of_year = Column(Integer, nullable=False)
    is_weekend = Column(Boolean, nullable=False, default=False)
    is_holiday = Column(Boolean, nullable=False, default=False)
    holiday_name = Column(String(100), nullable=True)
    is_business_day = Column(Boolean, nullable=False, default=True)
