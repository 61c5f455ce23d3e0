"""Fixtures communes: base MongoDB en mémoire (mongomock) et client HTTP."""

import mongomock
import pytest
from fastapi.testclient import TestClient

from app_factory import create_app
from config import Settings
from database import ensure_indexes
from utils.lead_workflow import LeadWorkflow
from utils.user_workflow import UserWorkflow

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"

LEAD_FIELDS = {
    "clientName": "Acme Corp contact",
    "companyName": "Acme Corp",
    "email": "buyer@acme.com",
    "phone": "+91 98765 43210",
    "businessType": "Retail",
    "projectRequirements": "E-commerce website",
    "budget": "50k-1L",
}


@pytest.fixture
def settings():
    return Settings(
        env="test",
        mongo_uri="mongodb://localhost:27017",
        mongo_db_name="leopay_test",
        jwt_secret="test-secret-key-for-leopay",
        jwt_expire="1h",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        admin_name="Admin",
        log_level="DEBUG",
    )


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def db(mongo_client, settings):
    database = mongo_client[settings.mongo_db_name]
    ensure_indexes(database)
    return database


@pytest.fixture
def user_workflow(db, settings):
    return UserWorkflow(db, settings)


@pytest.fixture
def lead_workflow(db):
    return LeadWorkflow(db)


@pytest.fixture
def app(settings, mongo_client):
    return create_app(settings, mongo_client=mongo_client)


@pytest.fixture
def client(app):
    # Le context manager déclenche l'événement de démarrage (index + admin)
    with TestClient(app) as test_client:
        yield test_client


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, email="hunter@example.com", password="secret123", name="Hunter", phone="9999999999"):
    response = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "phone": phone},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    return body["user"], body["token"]


def admin_token(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()["token"]
