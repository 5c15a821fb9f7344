from clinic_api.core.security import create_access_token

test_user_data = {
    "name": "Test User",
    "email": "Test@Example.com",
    "password": "TestPassword123",
    "role": "patient"
}

test_login_data = {
    "email": "test@example.com",
    "password": "TestPassword123"
}

test_doctor_data = {
    "name": "Dr. New",
    "email": "new.doctor@example.com",
    "password": "DoctorPass123",
    "role": "doctor",
    "specialization": "Dermatology",
    "license_id": "MD-9001"
}


class TestRegistration:

    def test_register_patient(self, client):
        """Patients are approved on registration."""
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 201

        data = response.json()
        assert data["email"] == "test@example.com"
        assert data["role"] == "patient"
        assert data["is_approved"] is True
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_doctor_pending(self, client):
        response = client.post("/api/v1/auth/register", json=test_doctor_data)
        assert response.status_code == 201
        assert response.json()["is_approved"] is False

    def test_register_doctor_requires_specialization(self, client):
        data = dict(test_doctor_data)
        del data["specialization"]
        response = client.post("/api/v1/auth/register", json=data)
        assert response.status_code == 422

    def test_register_pharmacist_requires_license(self, client):
        data = dict(test_doctor_data, role="pharmacist", license_id=None)
        response = client.post("/api/v1/auth/register", json=data)
        assert response.status_code == 422

    def test_register_admin_rejected(self, client):
        data = dict(test_user_data, role="admin")
        response = client.post("/api/v1/auth/register", json=data)
        assert response.status_code == 422

    def test_register_duplicate_email(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 409
        assert response.json()["message"] == "User already exists"

    def test_register_invalid_password(self, client):
        invalid_data = dict(test_user_data, password="weak")
        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422
        assert "message" in response.json()


class TestLogin:

    def test_login_success(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["expires_in"] > 0
        assert data["user"]["email"] == "test@example.com"

    def test_login_email_case_insensitive(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "TEST@example.com", "password": "TestPassword123"}
        )
        assert response.status_code == 200

    def test_login_invalid_credentials(self, client):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "nonexistent@example.com", "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_login_wrong_password(self, client):
        client.post("/api/v1/auth/register", json=test_user_data)

        wrong_login = dict(test_login_data, password="wrongpassword")
        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401

    def test_login_pending_doctor(self, client):
        client.post("/api/v1/auth/register", json=test_doctor_data)

        response = client.post(
            "/api/v1/auth/login",
            json={"email": test_doctor_data["email"], "password": test_doctor_data["password"]}
        )
        assert response.status_code == 401
        assert "pending approval" in response.json()["message"]

    def test_login_rate_limited(self, client, monkeypatch):
        from clinic_api.core.config import settings
        monkeypatch.setattr(settings, "RATE_LIMIT_PER_HOUR", 2)

        for _ in range(2):
            client.post("/api/v1/auth/login", json=test_login_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 429


class TestCurrentUser:

    def test_get_current_user(self, client, patient):
        response = client.get("/api/v1/auth/me", headers=patient.headers)
        assert response.status_code == 200
        assert response.json()["email"] == patient.email

    def test_get_current_user_without_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_get_current_user_invalid_token(self, client):
        response = client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Bearer invalid_token"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    def test_token_for_deleted_user(self, client):
        token = create_access_token({"sub": "999", "email": "ghost@example.com", "role": "patient"})
        response = client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    def test_unapproved_user_token_rejected(self, client, make_account):
        from clinic_api.core.security import UserRole
        pending = make_account(
            "Dr. Wait", "wait@clinic.org", UserRole.DOCTOR, is_approved=False,
            specialization="Oncology", license_id="MD-3"
        )
        response = client.get("/api/v1/auth/me", headers=pending.headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Account pending approval"

    def test_verify_token(self, client, doctor):
        response = client.post("/api/v1/auth/verify-token", headers=doctor.headers)
        assert response.status_code == 200

        data = response.json()
        assert data["valid"] is True
        assert data["user_id"] == str(doctor.id)
        assert data["role"] == "doctor"


class TestProfile:

    def test_update_profile(self, client, patient):
        response = client.put(
            "/api/v1/auth/profile",
            json={"phone": "555-0100", "address": "1 Main St"},
            headers=patient.headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["phone"] == "555-0100"
        assert data["name"] == "Pat Patient"

    def test_update_profile_cannot_change_role(self, client, patient):
        response = client.put(
            "/api/v1/auth/profile",
            json={"role": "admin"},
            headers=patient.headers
        )
        assert response.status_code == 200
        assert response.json()["role"] == "patient"

    def test_update_profile_rejects_null_name(self, client, patient):
        response = client.put(
            "/api/v1/auth/profile",
            json={"name": None},
            headers=patient.headers
        )
        assert response.status_code == 422

    def test_update_profile_email_taken(self, client, patient, other_patient):
        response = client.put(
            "/api/v1/auth/profile",
            json={"email": other_patient.email},
            headers=patient.headers
        )
        assert response.status_code == 409

    def test_change_password(self, client, patient):
        response = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "Secret123", "new_password": "NewSecret456"},
            headers=patient.headers
        )
        assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login",
            json={"email": patient.email, "password": "NewSecret456"}
        )
        assert response.status_code == 200

    def test_change_password_wrong_current(self, client, patient):
        response = client.post(
            "/api/v1/auth/change-password",
            json={"current_password": "nope-nope", "new_password": "NewSecret456"},
            headers=patient.headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"
