from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from crm_ledger.core.dependencies import get_db_session
from crm_ledger.database.db import build_engine
from crm_ledger.main import app
from crm_ledger.models import Base, Company, Customer, Employee


@pytest.fixture
def session_factory():
    tmp_root = Path(".test_tmp")
    tmp_root.mkdir(exist_ok=True)
    db_path = tmp_root / f"crm_ledger_test_{uuid.uuid4().hex}.db"
    engine = build_engine(f"sqlite:///{db_path}")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db_session):
    """Two companies, a customer in each, and one employee in the first."""
    acme_co = Company(id=1, name="Northwind")
    other_co = Company(id=2, name="Contoso")
    db_session.add_all([acme_co, other_co])
    db_session.flush()

    customer = Customer(company_id=1, customer_name="Acme Corp.", email="ops@acme.test", mobile_number="5550100")
    foreign_customer = Customer(company_id=2, customer_name="Globex", email="ap@globex.test")
    employee = Employee(company_id=1, name="Dana Reyes", email="dana@northwind.test")
    foreign_employee = Employee(company_id=2, name="Sam Ito", email="sam@contoso.test")
    db_session.add_all([customer, foreign_customer, employee, foreign_employee])
    db_session.commit()
    return SimpleNamespace(
        company_id=1,
        other_company_id=2,
        customer_id=customer.id,
        foreign_customer_id=foreign_customer.id,
        employee_id=employee.id,
        foreign_employee_id=foreign_employee.id,
    )


@pytest.fixture
def client(session_factory):
    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _override_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
