"""Shared pytest fixtures

- Test environment variables (set before the application is imported)
- In-memory SQLite session with the full schema
- Factories for customers, products, branches, packages, conversations
- Recording notifier
"""
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# ============================================================================
# TEST ENVIRONMENT
# ============================================================================

os.environ["NOTIFIER_ENABLED"] = "false"
os.environ["DEFAULT_TIMEZONE"] = "Asia/Ho_Chi_Minh"
os.environ["OPENAI_API_KEY"] = "sk-test"

from aetherchat.models import (  # noqa: E402
    Base,
    Branch,
    Conversation,
    Customer,
    CustomerProduct,
    Product,
)
from aetherchat.services.session.session_ledger import set_total_sessions, set_used_sessions  # noqa: E402
from aetherchat.services.settings.settings_service import SettingsService  # noqa: E402

VENUE_TZ = ZoneInfo("Asia/Ho_Chi_Minh")

# 2030-06-01 is a Saturday; 2030-06-04 a Tuesday
NOW = datetime(2030, 6, 1, 8, 0, tzinfo=VENUE_TZ)
TUESDAY = "2030-06-04"
WEDNESDAY = "2030-06-05"
SATURDAY = "2030-06-08"
SUNDAY = "2030-06-09"
MONDAY = "2030-06-10"


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: pure function test")
    config.addinivalue_line("markers", "integration: test against the database")
    config.addinivalue_line("markers", "api: HTTP route test")


# ============================================================================
# DATABASE
# ============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    yield session
    session.close()


# ============================================================================
# NOTIFIER
# ============================================================================

class RecordingNotifier:
    """Keeps every event in memory"""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def notify(self, event_kind: str, payload: Dict[str, Any]) -> None:
        self.events.append((event_kind, payload))

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.events]


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ============================================================================
# FACTORIES
# ============================================================================

@pytest.fixture
def app_settings(db):
    """Global settings with three hourly slots and one staff member"""
    settings = SettingsService.get_settings(db)
    settings.working_hours = ["09:00", "10:00", "11:00"]
    settings.number_of_staff = 1
    db.commit()
    return settings


@pytest.fixture
def customer(db):
    customer = Customer(phone_number="0901234567", name="Nguyễn Văn A")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def other_customer(db):
    customer = Customer(phone_number="0907654321", name="Trần Thị B")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def conversation(db, customer):
    conversation = Conversation(customer_id=customer.id, status="open")
    db.add(conversation)
    db.commit()
    return conversation


@pytest.fixture
def make_product(db):
    def _make(**kwargs):
        values = {"name": "Gội đầu dưỡng sinh", "type": "service", "is_active": True, "is_schedulable": True}
        values.update(kwargs)
        product = Product(**values)
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def branch(db):
    branch = Branch(name="Chi nhánh Quận 1", is_active=True, specific_day_overrides=[])
    db.add(branch)
    db.commit()
    return branch


@pytest.fixture
def make_customer_product(db):
    def _make(customer, product, total=5, used=0, expiry_date=None):
        customer_product = CustomerProduct(
            customer_id=customer.id,
            product_id=product.id,
            product_name=product.name,
            assigned_date=datetime(2030, 5, 1, tzinfo=timezone.utc),
            expiry_date=expiry_date,
            is_active=True,
        )
        set_total_sessions(customer_product, total)
        set_used_sessions(customer_product, used)
        db.add(customer_product)
        db.commit()
        return customer_product
    return _make
