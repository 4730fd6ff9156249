import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_iam.db")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from iam.database import get_db
from iam.models.base import Base
from iam.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from iam.models.landlord import Landlord
from iam.models.tenant import Tenant
from iam.models.user import User
from iam.models.role import Role
from iam.models.permission import Permission
from iam.models.policy import Policy
from iam.models.role_permission import RolePermission
from iam.models.user_tenant_role import UserTenantRole
from iam.services.setup_service import SetupService
# Import FastAPI app AFTER model imports
from iam.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id, expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User UUID (or any value, to test rejection) for the 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user: User) -> dict:
    """Authorization headers for requests made as ``user``"""
    return {"Authorization": f"Bearer {create_test_token(user.id)}"}


def make_user(db, email: str, name: str = "Test User", is_active: bool = True) -> User:
    user = User(name=name, email=email, password_hash="not-a-real-hash", is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def grant(db, user: User, tenant: Tenant, role: Role) -> UserTenantRole:
    row = UserTenantRole(user_id=user.id, tenant_id=tenant.id, role_id=role.id)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def role_by_code(db, landlord: Landlord, code: str) -> Role:
    return db.query(Role).filter(Role.landlord_id == landlord.id, Role.code == code).one()


def permission_by_key(db, landlord: Landlord, action: str, resource: str) -> Permission:
    return (
        db.query(Permission)
        .filter(
            Permission.landlord_id == landlord.id,
            Permission.action == action,
            Permission.resource == resource,
        )
        .one()
    )


@pytest.fixture
def landlord(db_session):
    """Landlord with the default catalogue installed"""
    landlord = Landlord(name="Iron Dojo Network", description="Test network", config={})
    db_session.add(landlord)
    db_session.commit()
    db_session.refresh(landlord)
    SetupService(db_session).install_defaults(landlord.id)
    return landlord


@pytest.fixture
def primary_tenant(db_session, landlord):
    """The HQ tenant created by install_defaults (holds the default policies)"""
    return db_session.query(Tenant).filter(Tenant.name == "Iron Dojo Network HQ").one()


@pytest.fixture
def branch_tenant(db_session, landlord):
    """Second tenant of the same landlord"""
    tenant = Tenant(name="Iron Dojo Downtown", config={}, landlord_id=landlord.id)
    db_session.add(tenant)
    db_session.commit()
    db_session.refresh(tenant)
    return tenant


@pytest.fixture
def other_landlord(db_session):
    """Unrelated landlord with its own catalogue"""
    landlord = Landlord(name="Tiger Gym Network", config={})
    db_session.add(landlord)
    db_session.commit()
    db_session.refresh(landlord)
    SetupService(db_session).install_defaults(landlord.id)
    return landlord


@pytest.fixture
def super_admin_role(db_session, landlord):
    role = Role(landlord_id=landlord.id, code=settings.SUPER_ADMIN_ROLE_CODE, name="Super Admin")
    db_session.add(role)
    db_session.commit()
    db_session.refresh(role)
    return role


@pytest.fixture
def instructor(db_session, landlord, primary_tenant):
    """User holding the instructor role in the primary tenant"""
    user = make_user(db_session, "instructor@irondojo.test", "Ines Instructor")
    grant(db_session, user, primary_tenant, role_by_code(db_session, landlord, "instructor"))
    return user


@pytest.fixture
def admin(db_session, landlord, primary_tenant):
    """User holding the admin role in the primary tenant"""
    user = make_user(db_session, "admin@irondojo.test", "Ada Admin")
    grant(db_session, user, primary_tenant, role_by_code(db_session, landlord, "admin"))
    return user


@pytest.fixture
def financial_manager(db_session, landlord, primary_tenant):
    user = make_user(db_session, "finance@irondojo.test", "Fin Manager")
    grant(db_session, user, primary_tenant, role_by_code(db_session, landlord, "financial_manager"))
    return user


@pytest.fixture
def super_admin(db_session, primary_tenant, super_admin_role):
    """User holding the reserved super-admin role"""
    user = make_user(db_session, "root@irondojo.test", "Root")
    grant(db_session, user, primary_tenant, super_admin_role)
    return user


@pytest.fixture
def outsider(db_session):
    """Active user without any grant"""
    return make_user(db_session, "outsider@example.test", "Otto Outsider")
