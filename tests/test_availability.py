from datetime import date, datetime

import pytest

from clinic_api.models.appointment import Appointment, AppointmentStatus
from clinic_api.services.availability import SLOT_CATALOG, available_slots, normalize_date


def _book(db, doctor_id, patient_id, day, slot, status=AppointmentStatus.PENDING):
    db.add(Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        date=normalize_date(day),
        time=slot,
        type="Regular Checkup",
        status=status,
    ))
    db.commit()


class TestNormalizeDate:

    def test_plain_date_string(self):
        assert normalize_date("2030-05-01") == datetime(2030, 5, 1)

    def test_time_is_dropped(self):
        assert normalize_date("2030-05-01T15:45:00") == datetime(2030, 5, 1)

    def test_calendar_day_taken_as_written(self):
        assert normalize_date("2030-05-01T23:30:00-05:00") == datetime(2030, 5, 1)

    def test_date_and_datetime_objects(self):
        assert normalize_date(date(2030, 5, 1)) == datetime(2030, 5, 1)
        assert normalize_date(datetime(2030, 5, 1, 9, 30)) == datetime(2030, 5, 1)

    @pytest.mark.parametrize("raw", ["", "tomorrow", "2030-13-01", 42])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            normalize_date(raw)


class TestAvailableSlots:

    def test_empty_day_is_full_catalog(self, db_session, doctor):
        assert available_slots(db_session, doctor.id, "2030-05-01") == list(SLOT_CATALOG)

    def test_booked_slots_removed_in_catalog_order(self, db_session, doctor, patient):
        _book(db_session, doctor.id, patient.id, "2030-05-01", "11:00 AM")
        _book(db_session, doctor.id, patient.id, "2030-05-01", "09:00 AM")

        free = available_slots(db_session, doctor.id, "2030-05-01")
        assert free == [slot for slot in SLOT_CATALOG if slot not in ("09:00 AM", "11:00 AM")]

    def test_cancelled_bookings_free_the_slot(self, db_session, doctor, patient):
        _book(db_session, doctor.id, patient.id, "2030-05-01", "02:00 PM", AppointmentStatus.CANCELLED)
        assert "02:00 PM" in available_slots(db_session, doctor.id, "2030-05-01")

    def test_other_days_and_doctors_ignored(self, db_session, doctor, other_doctor, patient):
        _book(db_session, doctor.id, patient.id, "2030-05-02", "09:00 AM")
        _book(db_session, other_doctor.id, patient.id, "2030-05-01", "09:00 AM")
        assert available_slots(db_session, doctor.id, "2030-05-01") == list(SLOT_CATALOG)

    def test_fully_booked_day(self, db_session, doctor, patient):
        for slot in SLOT_CATALOG:
            _book(db_session, doctor.id, patient.id, "2030-05-01", slot)
        assert available_slots(db_session, doctor.id, "2030-05-01") == []
