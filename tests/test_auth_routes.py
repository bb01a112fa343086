from career_api.core.config import get_settings
from career_api.db.mongodb import COLLECTIONS
from tests.conftest import auth_headers

STUDENT = {
    "email": "Thabo@Example.com",
    "password": "secret123",
    "confirm_password": "secret123",
    "role": "student",
    "first_name": "Thabo",
    "last_name": "Mokoena",
    "date_of_birth": "2004-05-17",
    "phone": "+26650000000",
    "high_school": "Maseru High",
    "graduation_year": 2022,
}

INSTITUTION = {
    "email": "admissions@nul.example.com",
    "password": "secret123",
    "confirm_password": "secret123",
    "role": "institution",
    "organization_name": "National University",
    "contact_phone": "+26622000000",
    "contact_email": "info@nul.example.com",
    "location": "Roma",
    "slogan": "Learning for life",
    "description": "A public university",
}


def test_register_student_creates_user_and_profile(client, store):
    response = client.post("/api/auth/register", json=STUDENT)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["role"] == "student"

    user = store.get(COLLECTIONS["users"], body["user_id"])
    assert user["email"] == "thabo@example.com"
    assert user["password_hash"] != "secret123"

    profile = store.get(COLLECTIONS["students"], body["user_id"])
    assert profile["first_name"] == "Thabo"
    assert profile["date_of_birth"] == "2004-05-17"
    assert profile["applications_count"] == {}


def test_register_institution_starts_unapproved(client, store):
    body = client.post("/api/auth/register", json=INSTITUTION).json()
    institution = store.get(COLLECTIONS["institutions"], body["user_id"])
    assert institution["name"] == "National University"
    assert institution["approved"] is False


def test_register_rejects_duplicate_email(client):
    assert client.post("/api/auth/register", json=STUDENT).status_code == 201
    response = client.post("/api/auth/register", json=STUDENT)
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Email already registered"}


def test_register_validation_errors_are_400(client):
    response = client.post("/api/auth/register", json={**STUDENT, "confirm_password": "different"})
    assert response.status_code == 400
    assert response.json()["error"] == "Passwords do not match"

    response = client.post("/api/auth/register", json={**INSTITUTION, "slogan": None})
    assert response.status_code == 400
    assert "slogan" in response.json()["error"]

    response = client.post("/api/auth/register", json={**STUDENT, "password": "abc", "confirm_password": "abc"})
    assert response.status_code == 400


def test_admin_registration_requires_secret(client):
    admin = {
        "email": "root@example.com",
        "password": "secret123",
        "confirm_password": "secret123",
        "role": "admin",
        "first_name": "Site",
        "last_name": "Admin",
        "admin_secret": "wrong",
    }
    assert client.post("/api/auth/register", json=admin).status_code == 403

    admin["admin_secret"] = get_settings().admin_registration_secret
    assert client.post("/api/auth/register", json=admin).status_code == 201


def test_login_and_me(client):
    user_id = client.post("/api/auth/register", json=STUDENT).json()["user_id"]

    response = client.post("/api/auth/login", json={"email": "thabo@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["user_id"] == user_id

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["user"]
    assert me["id"] == user_id
    assert me["role"] == "student"
    assert me["first_name"] == "Thabo"
    assert "password_hash" not in me


def test_login_with_wrong_password(client):
    client.post("/api/auth/register", json=STUDENT)
    response = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "nope12345"})
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_deactivated_account_cannot_login(client, store):
    user_id = client.post("/api/auth/register", json=STUDENT).json()["user_id"]
    store.update(COLLECTIONS["users"], user_id, {"active": False})
    response = client.post("/api/auth/login", json={"email": STUDENT["email"], "password": "secret123"})
    assert response.status_code == 403


def test_missing_and_invalid_tokens(client):
    assert client.get("/api/auth/me").status_code == 401
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"
    assert client.get("/api/auth/me", headers=auth_headers("ghost", "student")).status_code == 401


def test_role_guards(client, make_user):
    _, company_headers = make_user("company")
    response = client.get("/api/students/profile", headers=company_headers)
    assert response.status_code == 403
    assert client.get("/api/admin/dashboard", headers=company_headers).status_code == 403
