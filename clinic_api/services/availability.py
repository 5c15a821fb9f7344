"""
Doctor availability: the fixed daily slot catalog minus live bookings.
"""
from datetime import date, datetime, time, timezone
from typing import List, Union
import logging

from sqlalchemy.orm import Session

from ..models.appointment import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

# Clinic opening-hour sequence; order is significant
SLOT_CATALOG = (
    "09:00 AM",
    "10:00 AM",
    "11:00 AM",
    "12:00 PM",
    "01:00 PM",
    "02:00 PM",
    "03:00 PM",
    "04:00 PM",
)


def normalize_date(value: Union[str, date, datetime]) -> datetime:
    """
    Return midnight of the given calendar day as a naive UTC datetime.

    The calendar day is taken as written: ``2024-05-01T23:30:00-05:00`` is
    May 1st, not the UTC instant it converts to.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("date is required")
        try:
            if len(text) == 10:
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")

    if isinstance(value, datetime):
        day = value.date()
    elif isinstance(value, date):
        day = value
    else:
        raise ValueError("Invalid date")

    midnight = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return midnight.replace(tzinfo=None)


def booked_slots(db: Session, doctor_id: int, day: datetime) -> set:
    rows = db.query(Appointment.time).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == day,
        Appointment.status != AppointmentStatus.CANCELLED
    ).all()
    return {row.time for row in rows}


def available_slots(db: Session, doctor_id: int, day: Union[str, date, datetime]) -> List[str]:
    """Free slot labels for a doctor on a day, in catalog order."""
    normalized = normalize_date(day)
    taken = booked_slots(db, doctor_id, normalized)
    free = [slot for slot in SLOT_CATALOG if slot not in taken]
    logger.debug(
        f"Doctor {doctor_id} on {normalized.date()}: {len(free)} of {len(SLOT_CATALOG)} slots free"
    )
    return free
