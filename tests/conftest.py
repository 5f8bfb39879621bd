import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.main import app
from database.connection import Base, build_engine, get_db
from database.models import Customer
from services.auth import create_user, create_access_token
from app.core import UserRole


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def admin_user(db):
    user = create_user(db, "admin@dutchthrift.nl", "admin-pass-123", name="Admin", role=UserRole.ADMIN)
    db.commit()
    return user


@pytest.fixture()
def consignor_user(db):
    customer = Customer(name="Sanne de Vries", email="sanne@example.nl", city="Utrecht")
    db.add(customer)
    db.flush()
    user = create_user(
        db, "sanne@example.nl", "consignor-pass-1", name="Sanne de Vries",
        role=UserRole.CONSIGNOR, customer_id=customer.id,
    )
    db.commit()
    return user


@pytest.fixture()
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


@pytest.fixture()
def consignor_headers(consignor_user):
    return {"Authorization": f"Bearer {create_access_token(consignor_user)}"}
