from clinic_api.services.availability import SLOT_CATALOG


class TestBooking:

    def test_patient_books_pending_appointment(self, client, patient, doctor, book):
        data = book(patient, doctor.id, date="2030-05-01T18:00:00")

        assert data["status"] == "pending"
        assert data["patient_id"] == patient.id
        assert data["doctor"]["name"] == "Dr. Grey"
        assert data["date"].startswith("2030-05-01T00:00:00")

    def test_doctor_cannot_book(self, client, doctor, other_doctor):
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": other_doctor.id, "date": "2030-05-01", "time": "10:00 AM", "type": "Consult"},
            headers=doctor.headers
        )
        assert response.status_code == 403

    def test_unknown_slot_rejected(self, client, patient, doctor):
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "date": "2030-05-01", "time": "10:30 AM", "type": "Consult"},
            headers=patient.headers
        )
        assert response.status_code == 422

    def test_unapproved_doctor_not_bookable(self, client, patient, make_account):
        from clinic_api.core.security import UserRole
        pending = make_account(
            "Dr. Pending", "pending@clinic.org", UserRole.DOCTOR, is_approved=False,
            specialization="Oncology", license_id="MD-77"
        )
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": pending.id, "date": "2030-05-01", "time": "10:00 AM", "type": "Consult"},
            headers=patient.headers
        )
        assert response.status_code == 404

    def test_taken_slot_conflicts(self, client, patient, other_patient, doctor, book):
        book(patient, doctor.id)
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor.id, "date": "2030-05-01", "time": "10:00 AM", "type": "Consult"},
            headers=other_patient.headers
        )
        assert response.status_code == 409

    def test_cancelled_slot_can_be_rebooked(self, client, patient, other_patient, doctor, book):
        first = book(patient, doctor.id)
        client.put(
            f"/api/v1/appointments/{first['id']}/status",
            json={"status": "cancelled"},
            headers=patient.headers
        )
        second = book(other_patient, doctor.id)
        assert second["time"] == "10:00 AM"


class TestAvailability:

    def test_availability_excludes_booked(self, client, patient, doctor, book):
        book(patient, doctor.id, time="09:00 AM")

        response = client.get(
            f"/api/v1/appointments/doctor/{doctor.id}/availability",
            params={"date": "2030-05-01"},
            headers=patient.headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2030-05-01"
        assert data["available_time_slots"] == list(SLOT_CATALOG[1:])

    def test_availability_requires_date(self, client, patient, doctor):
        response = client.get(
            f"/api/v1/appointments/doctor/{doctor.id}/availability",
            headers=patient.headers
        )
        assert response.status_code == 400

    def test_availability_bad_doctor_id(self, client, patient):
        response = client.get(
            "/api/v1/appointments/doctor/abc/availability",
            params={"date": "2030-05-01"},
            headers=patient.headers
        )
        assert response.status_code == 400

    def test_availability_unknown_doctor(self, client, patient):
        response = client.get(
            "/api/v1/appointments/doctor/999/availability",
            params={"date": "2030-05-01"},
            headers=patient.headers
        )
        assert response.status_code == 404


class TestStatusTransitions:

    def test_doctor_confirms_own_appointment(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)

        response = client.put(
            f"/api/v1/appointments/{appointment['id']}/status",
            json={"status": "confirmed"},
            headers=doctor.headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        stored = client.get(f"/api/v1/appointments/{appointment['id']}", headers=patient.headers)
        assert stored.json()["status"] == "confirmed"

    def test_patient_cannot_confirm(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)

        response = client.put(
            f"/api/v1/appointments/{appointment['id']}/status",
            json={"status": "confirmed"},
            headers=patient.headers
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Patients can only cancel their own appointments"

    def test_cancel_is_idempotent(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)
        url = f"/api/v1/appointments/{appointment['id']}/status"

        first = client.put(url, json={"status": "cancelled"}, headers=patient.headers)
        second = client.put(url, json={"status": "cancelled"}, headers=patient.headers)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["status"] == "cancelled"

    def test_other_doctor_cannot_touch(self, client, patient, doctor, other_doctor, book):
        appointment = book(patient, doctor.id)

        response = client.put(
            f"/api/v1/appointments/{appointment['id']}/status",
            json={"status": "confirmed"},
            headers=other_doctor.headers
        )
        assert response.status_code == 403

    def test_unknown_status_value(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)
        response = client.put(
            f"/api/v1/appointments/{appointment['id']}/status",
            json={"status": "teleported"},
            headers=doctor.headers
        )
        assert response.status_code == 422


class TestReadAccess:

    def test_other_patient_forbidden(self, client, patient, other_patient, doctor, book):
        appointment = book(patient, doctor.id)
        response = client.get(f"/api/v1/appointments/{appointment['id']}", headers=other_patient.headers)
        assert response.status_code == 403

    def test_error_order(self, client, other_patient):
        # Malformed id first, then existence, then permission
        assert client.get("/api/v1/appointments/abc", headers=other_patient.headers).status_code == 400
        assert client.get("/api/v1/appointments/0", headers=other_patient.headers).status_code == 400
        assert client.get("/api/v1/appointments/99999999999999999999", headers=other_patient.headers).status_code == 400
        assert client.get("/api/v1/appointments/12345", headers=other_patient.headers).status_code == 404

    def test_list_scoped_by_role(self, client, admin, patient, other_patient, doctor, other_doctor, book):
        book(patient, doctor.id, time="09:00 AM")
        book(other_patient, other_doctor.id, time="09:00 AM")

        assert len(client.get("/api/v1/appointments", headers=patient.headers).json()) == 1
        assert len(client.get("/api/v1/appointments", headers=doctor.headers).json()) == 1
        assert len(client.get("/api/v1/appointments", headers=admin.headers).json()) == 2

    def test_requires_authentication(self, client):
        assert client.get("/api/v1/appointments").status_code == 401


class TestClinicalNotes:

    def test_doctor_adds_diagnosis(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)
        response = client.put(
            f"/api/v1/appointments/{appointment['id']}",
            json={"diagnosis": "Seasonal allergies", "follow_up_date": "2030-06-01T00:00:00"},
            headers=doctor.headers
        )
        assert response.status_code == 200
        assert response.json()["diagnosis"] == "Seasonal allergies"

    def test_patient_cannot_add_diagnosis(self, client, patient, doctor, book):
        appointment = book(patient, doctor.id)
        response = client.put(
            f"/api/v1/appointments/{appointment['id']}",
            json={"diagnosis": "Self-diagnosed"},
            headers=patient.headers
        )
        assert response.status_code == 403

    def test_only_admin_deletes(self, client, admin, patient, doctor, book):
        appointment = book(patient, doctor.id)
        url = f"/api/v1/appointments/{appointment['id']}"

        assert client.delete(url, headers=doctor.headers).status_code == 403
        response = client.delete(url, headers=admin.headers)
        assert response.status_code == 200
        assert client.get(url, headers=admin.headers).status_code == 404


class TestIdentifierBounds:

    def test_oversized_ids_are_invalid(self, client, admin):
        oversized = "99999999999999999999"
        for path in (
            f"/api/v1/appointments/{oversized}",
            f"/api/v1/prescriptions/{oversized}",
            f"/api/v1/medical-records/patient/{oversized}",
            f"/api/v1/appointments/doctor/{oversized}/availability?date=2030-05-01",
        ):
            response = client.get(path, headers=admin.headers)
            assert response.status_code == 400, path

        assert client.get("/api/v1/appointments/2147483647", headers=admin.headers).status_code == 404

    def test_oversized_doctor_id_in_body(self, client, patient):
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": 99999999999999999999, "date": "2030-05-01", "time": "10:00 AM", "type": "Consult"},
            headers=patient.headers
        )
        assert response.status_code == 422
