from clinic_api.core.security import UserRole


class TestAccountAdministration:

    def test_admin_cannot_delete_self(self, client, admin):
        response = client.delete(f"/api/v1/users/{admin.id}", headers=admin.headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Cannot delete your own account"

    def test_admin_deletes_other_account(self, client, admin, patient):
        response = client.delete(f"/api/v1/users/{patient.id}", headers=admin.headers)
        assert response.status_code == 200
        assert client.get(f"/api/v1/users/{patient.id}", headers=admin.headers).status_code == 404

    def test_non_admin_cannot_delete(self, client, doctor, patient):
        response = client.delete(f"/api/v1/users/{patient.id}", headers=doctor.headers)
        assert response.status_code == 403

    def test_malformed_id(self, client, admin):
        assert client.get("/api/v1/users/not-an-id", headers=admin.headers).status_code == 400

    def test_admin_changes_role(self, client, admin, patient):
        response = client.put(
            f"/api/v1/users/{patient.id}",
            json={"role": "pharmacist", "license_id": "PH-5"},
            headers=admin.headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "pharmacist"

    def test_list_users_admin_only(self, client, admin, doctor, patient):
        assert len(client.get("/api/v1/users", headers=admin.headers).json()) == 3
        assert client.get("/api/v1/users", headers=doctor.headers).status_code == 403


class TestApproval:

    def test_approval_flow(self, client, admin):
        client.post("/api/v1/auth/register", json={
            "name": "Dr. Later",
            "email": "later@clinic.org",
            "password": "Pending123",
            "role": "doctor",
            "specialization": "Pediatrics",
            "license_id": "MD-404"
        })
        pending = client.get("/api/v1/users/pending-approval", headers=admin.headers).json()
        assert [u["email"] for u in pending] == ["later@clinic.org"]

        response = client.put(f"/api/v1/users/{pending[0]['id']}/approve", headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["is_approved"] is True

        login = client.post(
            "/api/v1/auth/login",
            json={"email": "later@clinic.org", "password": "Pending123"}
        )
        assert login.status_code == 200

    def test_patients_are_not_approvable(self, client, admin, patient):
        response = client.put(f"/api/v1/users/{patient.id}/approve", headers=admin.headers)
        assert response.status_code == 400


class TestDirectory:

    def test_doctors_lists_approved_only(self, client, patient, doctor, make_account):
        make_account(
            "Dr. Hidden", "hidden@clinic.org", UserRole.DOCTOR, is_approved=False,
            specialization="Oncology", license_id="MD-8"
        )
        response = client.get("/api/v1/users/doctors", headers=patient.headers)
        assert response.status_code == 200
        assert [d["name"] for d in response.json()] == ["Dr. Grey"]

    def test_patients_list_for_clinicians(self, client, doctor, patient, pharmacist):
        assert len(client.get("/api/v1/users/patients", headers=doctor.headers).json()) == 1
        assert client.get("/api/v1/users/patients", headers=pharmacist.headers).status_code == 403

    def test_doctor_reads_account(self, client, doctor, patient):
        response = client.get(f"/api/v1/users/{patient.id}", headers=doctor.headers)
        assert response.status_code == 200
        assert response.json()["email"] == patient.email

    def test_patient_details(self, client, doctor, patient, book):
        book(patient, doctor.id)
        response = client.get(f"/api/v1/users/patient/{patient.id}/details", headers=doctor.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["patient"]["id"] == patient.id
        assert len(data["appointments"]) == 1
        assert data["prescriptions"] == []
