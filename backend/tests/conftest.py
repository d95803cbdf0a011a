import pytest
from fastapi.testclient import TestClient

from hrdocs.config import Settings
from hrdocs.database import get_engine, get_session_factory, init_db
from hrdocs.main import create_app
from hrdocs.models import AccidentReport, Company, Employee, IllnessReport, Receipt

from fakes import FakeDrive

NOW = "2026-01-01T00:00:00Z"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        environment="production",
        database_url=f"sqlite:///{tmp_path / 'hrdocs.sqlite'}",
        microsoft_tenant_id="tenant",
        microsoft_client_id="client",
        microsoft_client_secret="secret",
        microsoft_admin_email="admin@example.com",
    )


@pytest.fixture
def session_factory(settings):
    engine = get_engine(settings.database_url)
    init_db(engine)
    yield get_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    db = session_factory()
    db.add_all([
        Company(id="C1", name="Acme Ltd.", company_number=7, created_at=NOW),
        Company(id="C2", name="No Number GmbH", company_number=None, created_at=NOW),
    ])
    db.flush()
    db.add_all([
        Employee(id="E1", company_id="C1", first_name="Jane", last_name="Doe", employee_number=3, created_at=NOW),
        Employee(id="E2", company_id="C2", first_name="Max", last_name="Muster", employee_number=1, created_at=NOW),
    ])
    db.flush()
    db.add_all([
        AccidentReport(id="R1", company_id="C1", employee_id="E1", created_at=NOW),
        IllnessReport(id="R2", company_id="C1", employee_id="E1", form_number=12, created_at=NOW),
        AccidentReport(id="R3", company_id="C2", employee_id="E2", created_at=NOW),
        Receipt(id="RC1", company_id="C1", merchant_name="Office Supplies", receipt_number="REC-1", created_at=NOW),
    ])
    db.commit()
    db.close()


@pytest.fixture
def db(session_factory, seeded):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def drive():
    return FakeDrive()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def no_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)

    return _sleep


@pytest.fixture
def app(settings, drive, session_factory, seeded, no_sleep):
    return create_app(settings, drive=drive, session_factory=session_factory, retry_sleep=no_sleep)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth():
    return {"Authorization": "Bearer test-token"}
