import os

os.environ.setdefault("SESSION_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import get_current_user
from database import get_db
from main import app
from models import Base, User, StudentProfile
from stream import DataStream


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def guest_client(client):
    response = client.post("/auth/guest")
    assert response.status_code == 200
    return client


@pytest.fixture
def student(db):
    user = User(email="student@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student_profile(db, student):
    profile = StudentProfile(
        user_id=student.id,
        target_major="Computer Science",
        college="University of Mumbai",
        cgpa=8.7,
        gre_quant_score=165,
        gre_verbal_score=155,
        toefl_score=110,
        work_exp_months=24,
        publications=1,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def student_client(client, student):
    """Client signed in as a non-guest student, as the external auth framework would."""
    app.dependency_overrides[get_current_user] = lambda: student
    return client


@pytest.fixture
def data_stream():
    return DataStream()


@pytest.fixture
def program_payload():
    return {
        "programName": "MS in Computer Science",
        "universityName": "Carnegie Mellon University",
        "overview": "A research-heavy master's program.",
        "greRequirement": "Optional",
        "toeflRequirement": "100",
        "deadlineHint": "December 15",
        "duration": "16 months",
        "costHint": "$58,000 per year",
        "highlight1": "Capstone with industry partners",
        "highlight2": "AI specialisation",
        "officialLink": "https://www.cs.cmu.edu/",
        "imageUrls": ["https://images.example.com/cmu.jpg"],
        "matchScore": 72,
        "choiceType": "ambitious",
    }
