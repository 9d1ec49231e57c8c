"""
Test configuration and shared fixtures for the subscription manager test suite.
Provides database setup, authentication, and sample data factories.
"""

from datetime import date, timedelta
from typing import Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from submanager.accounts.dao import AccountDAO
from submanager.accounts.schemas import AccountCreate
from submanager.accounts.service import AccountService
from submanager.activity.schemas import Actor
from submanager.app import create_app
from submanager.auth.security import create_access_token, hash_password
from submanager.core.database import create_all_tables, drop_all_tables, get_db
from submanager.customers.dao import CustomerDAO
from submanager.customers.schemas import CustomerCreate
from submanager.customers.service import CustomerService
from submanager.expenses.dao import ExpenseCategoryDAO, ExpenseDAO
from submanager.expenses.schemas import ExpenseCreate
from submanager.expenses.service import ExpenseCategoryService, ExpenseService
from submanager.packages.dao import PackageDAO
from submanager.packages.schemas import PackageCreate
from submanager.packages.service import PackageService
from submanager.users.models import User, UserRole

ADMIN_PASSWORD = "admin-secret"
USER_PASSWORD = "user-secret"


# ===== DATABASE SETUP =====

@pytest.fixture(scope="session")
def engine():
    """Create in-memory SQLite engine shared by every session in a test"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    create_all_tables(bind=engine)
    return engine


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(engine, session_factory) -> Generator[Session, None, None]:
    """Database session for one test; all tables are reset afterwards"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_all_tables(bind=engine)
        create_all_tables(bind=engine)


@pytest.fixture
def app(db_session, session_factory):
    """FastAPI app sharing the test session"""
    app = create_app(session_factory=session_factory)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


# ===== USERS AND AUTH =====

def _make_user(db_session: Session, name: str, email: str, password: str, role: UserRole) -> User:
    user = User(name=name, email=email, password=hash_password(password), role=role.value)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def admin_user(db_session) -> User:
    return _make_user(db_session, "Admin", "admin@example.com", ADMIN_PASSWORD, UserRole.ADMIN)


@pytest.fixture
def plain_user(db_session) -> User:
    return _make_user(db_session, "Operator", "operator@example.com", USER_PASSWORD, UserRole.USER)


@pytest.fixture
def admin_credentials(admin_user) -> Dict[str, str]:
    return {"email": admin_user.email, "password": ADMIN_PASSWORD}


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user.id, admin_user.role)}"}


@pytest.fixture
def user_headers(plain_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(plain_user.id, plain_user.role)}"}


@pytest.fixture
def admin_actor(admin_user) -> Actor:
    return Actor.model_validate(admin_user)


# ===== SERVICES =====

@pytest.fixture
def account_service(db_session, admin_actor) -> AccountService:
    return AccountService(AccountDAO(db_session), admin_actor)


@pytest.fixture
def package_service(db_session, admin_actor) -> PackageService:
    return PackageService(PackageDAO(db_session), admin_actor)


@pytest.fixture
def customer_service(db_session, admin_actor) -> CustomerService:
    return CustomerService(CustomerDAO(db_session), admin_actor)


@pytest.fixture
def expense_service(db_session, admin_actor) -> ExpenseService:
    return ExpenseService(ExpenseDAO(db_session), admin_actor)


@pytest.fixture
def category_service(db_session, admin_actor) -> ExpenseCategoryService:
    return ExpenseCategoryService(ExpenseCategoryDAO(db_session), admin_actor)


# ===== SAMPLE DATA FACTORIES =====

@pytest.fixture
def make_account(account_service) -> Callable:
    def factory(name: str = "Netflix Main", type: str = "subscription", **extra):
        return account_service.create(AccountCreate(name=name, type=type, **extra))

    return factory


@pytest.fixture
def make_package(package_service) -> Callable:
    def factory(account_id: str, name: str = "Netflix 1 Screen", price=None, **extra):
        if price is None:
            price = [{"duration": 1, "price": 9.99}, {"duration": 3, "price": 27.0}]
        return package_service.create(
            PackageCreate(account_id=account_id, name=name, price=price, **extra)
        )

    return factory


@pytest.fixture
def make_customer(customer_service) -> Callable:
    def factory(
        name: str = "Sara",
        phone: str = "0501234567",
        package_id: Optional[str] = None,
        start_date: Optional[date] = None,
        duration: int = 1,
        **extra,
    ):
        history = None
        if package_id is not None:
            history = [
                {
                    "packageId": package_id,
                    "startDate": (start_date or date.today()).isoformat(),
                    "duration": duration,
                }
            ]
        return customer_service.create(
            CustomerCreate(name=name, phone=phone, subscription_history=history, **extra)
        )

    return factory


@pytest.fixture
def subscription_account(make_account):
    return make_account("Netflix Main", "subscription", expiry_date=date.today() + timedelta(days=60))


@pytest.fixture
def subscription_package(make_package, subscription_account):
    return make_package(subscription_account.id)


@pytest.fixture
def make_expense(expense_service) -> Callable:
    def factory(amount: float = 50.0, category: str = "Hosting", day: Optional[date] = None, **extra):
        return expense_service.create(
            ExpenseCreate(date=day or date.today(), category=category, amount=amount, **extra)
        )

    return factory
