"""Visit record model definition."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clinic_desk.utils.config import get_settings

VISIT_DATE_FORMAT = "%Y-%m-%d"
VISIT_TIME_FORMAT = "%H:%M:%S"


class VisitRecord(BaseModel):
    """A single dated clinical encounter."""

    model_config = ConfigDict(frozen=True)

    registered_at: datetime
    chief_complaint: str = Field(min_length=1)
    body_temperature: float

    @field_validator("chief_complaint")
    @classmethod
    def _complaint_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Chief complaint cannot be empty.")
        return cleaned

    @field_validator("body_temperature")
    @classmethod
    def _temperature_in_range(cls, value: float) -> float:
        settings = get_settings()
        low = settings.min_body_temperature
        high = settings.max_body_temperature
        if not low <= value <= high:
            raise ValueError(
                f"Body temperature must be between {low:.1f} and {high:.1f} degrees Celsius."
            )
        return value

    @property
    def visit_date(self) -> date:
        return self.registered_at.date()

    def is_within(self, days: int, today: Optional[date] = None) -> bool:
        """True when the visit happened on or after ``today - days``."""

        today = today or date.today()
        return self.visit_date >= today - timedelta(days=days)

    def __str__(self) -> str:
        return (
            f"{self.registered_at:%m/%d/%Y %H:%M:%S} - {self.chief_complaint} "
            f"({self.body_temperature:.1f}°C)"
        )


def parse_visit_date(date_text: str, time_text: Optional[str] = None) -> datetime:
    """Parse ``yyyy-MM-dd`` plus an optional ``HH:mm:ss`` into a timestamp."""

    try:
        visit_day = datetime.strptime(date_text.strip(), VISIT_DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError("Invalid visit date. Please use yyyy-MM-dd.") from exc

    visit_time = time()
    if time_text:
        try:
            visit_time = datetime.strptime(time_text.strip(), VISIT_TIME_FORMAT).time()
        except ValueError as exc:
            raise ValueError("Invalid visit time. Please use HH:mm:ss.") from exc

    return datetime.combine(visit_day, visit_time)
