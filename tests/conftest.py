# tests/conftest.py
"""Shared fixtures: in-memory SQLite store, fake classifier, API client, users."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""
os.environ["AUTH_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ.pop("ANTHROPIC_API_KEY", None)

import json
import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, create_tables, get_db
from app.main import app
from app.models.document import Document
from app.models.user import UserRole
from app.models.vehicle import Vehicle
from app.services.auth_service import create_access_token, create_user
from app.services.classifier import Classifier, get_classifier
from app.utils.json_codec import encode_analysis, encode_images

RC_VERDICT = {
    "detectedType": "Registration Certificate",
    "regNumber": "DL01AB1234",
    "status": "VALID",
    "issues": [],
}
SAMPLE_IMAGE = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUg=="


class FakeClassifier(Classifier):
    """Returns a canned answer and records every call."""

    def __init__(self, reply: str = json.dumps(RC_VERDICT)):
        self.reply = reply
        self.calls = []

    def generate(self, prompt, images):
        self.calls.append((prompt, images))
        return self.reply


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    create_tables(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def client(db, classifier):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.state.classifier = classifier
    yield TestClient(app)
    app.dependency_overrides.clear()
    del app.state.classifier


@pytest.fixture
def make_user(db):
    def _make(username="asha", role=UserRole.CITIZEN, password="correct-horse"):
        return create_user(db, username, password, f"{username}@example.org", role)
    return _make


@pytest.fixture
def citizen(make_user):
    return make_user("Asha", UserRole.CITIZEN)


@pytest.fixture
def police(make_user):
    return make_user("officer", UserRole.POLICE)


@pytest.fixture
def admin(make_user):
    return make_user("root", UserRole.ADMIN)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def add_vehicle(db, owner, reg_number="DL01AB1234", model="Honda City", token="veh-token-1"):
    vehicle = Vehicle(
        owner_id=owner.id,
        reg_number=reg_number,
        model=model,
        vehicle_type="Car",
        token=token,
        created_at=datetime.utcnow(),
    )
    db.add(vehicle)
    db.commit()
    return vehicle


def add_document(db, analysis, token="doc-token-1", status=None, user=None, vehicle=None,
                 doc_type="Registration Certificate"):
    document = Document(
        doc_type=doc_type,
        image_url=encode_images([SAMPLE_IMAGE]),
        analysis_result=encode_analysis(analysis),
        status=status or analysis["status"],
        token=token,
        user_id=user.id if user else None,
        vehicle_id=vehicle.id if vehicle else None,
        created_at=datetime.utcnow(),
    )
    db.add(document)
    db.commit()
    return document
