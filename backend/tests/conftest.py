"""
SubTrack - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import Callable, Generator

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
UPLOAD_ROOT = tempfile.mkdtemp(prefix="subtrack-uploads-")
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['UPLOAD_DIR'] = UPLOAD_ROOT
os.environ['LOG_LEVEL'] = 'WARNING'

from subtrack.main import app  # noqa: E402
from subtrack.config import get_settings  # noqa: E402
from subtrack.database import Base, get_db  # noqa: E402
from subtrack.models import Role, User  # noqa: E402
from subtrack.security import Claim, create_access_token, get_password_hash  # noqa: E402

fake = Faker()

PASSWORD = 'Password123'
PDF_BYTES = b'%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n'

test_engine = create_engine(
    'sqlite://',
    connect_args={'check_same_thread': False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def upload_root() -> str:
    return UPLOAD_ROOT


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture(autouse=True)
def clean_uploads():
    """Empty the upload directory between tests"""
    yield
    for name in os.listdir(UPLOAD_ROOT):
        os.remove(os.path.join(UPLOAD_ROOT, name))


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create fresh tables and a session for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client whose requests each get their own session on the test engine"""
    def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session, settings) -> Callable[..., User]:
    """Factory inserting a user directly into the database"""
    def _make(role: Role = Role.STUDENT, email: str = None, name: str = None) -> User:
        user = User(
            name=name or fake.name(),
            email=(email or fake.unique.email()).lower(),
            password_hash=get_password_hash(PASSWORD, settings.bcrypt_rounds),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


def headers_for(user: User, settings) -> dict:
    """Authentication headers for a user"""
    token = create_access_token(Claim(user.id, user.role, user.name), settings)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def student(make_user):
    return make_user(Role.STUDENT)


@pytest.fixture
def other_student(make_user):
    return make_user(Role.STUDENT)


@pytest.fixture
def faculty(make_user):
    return make_user(Role.FACULTY)


@pytest.fixture
def other_faculty(make_user):
    return make_user(Role.FACULTY)


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN)


@pytest.fixture
def auth(settings) -> Callable[[User], dict]:
    return lambda user: headers_for(user, settings)


@pytest.fixture
def upload(client: TestClient, auth) -> Callable[..., dict]:
    """Upload a report as the given student and return the response JSON"""
    def _upload(user: User, title: str = 'Summer Internship Report', type: str = 'internship',
                content: bytes = PDF_BYTES, filename: str = 'my report.pdf',
                expect: int = 201, **fields) -> dict:
        data = {'title': title, 'type': type, **fields}
        response = client.post(
            '/submissions/upload',
            data=data,
            files={'report': (filename, content, 'application/pdf')},
            headers=auth(user),
        )
        assert response.status_code == expect, response.text
        return response.json()
    return _upload


@pytest.fixture
def assign(client: TestClient, auth) -> Callable[..., dict]:
    def _assign(admin_user: User, submission_id: str, faculty_id: str, expect: int = 200):
        response = client.post(
            '/admin/assign',
            json={'submissionId': submission_id, 'facultyId': faculty_id},
            headers=auth(admin_user),
        )
        assert response.status_code == expect, response.text
        return response.json()
    return _assign


@pytest.fixture
def review(client: TestClient, auth) -> Callable[..., dict]:
    def _review(faculty_user: User, submission_id: str, decision: str = 'Approved',
                marks: int = 80, remarks: str = 'Good work', expect: int = 200):
        response = client.post(
            '/faculty/review',
            json={'submissionId': submission_id, 'decision': decision,
                  'marks': marks, 'remarks': remarks},
            headers=auth(faculty_user),
        )
        assert response.status_code == expect, response.text
        return response.json()
    return _review
