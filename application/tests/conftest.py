"""Shared fixtures: in-memory SQLite, fixed clock, services and an API client."""
import os
import tempfile

# must be set before any app module reads OMSConfigs
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["DEBUG"] = "true"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["FIREHOSE_ENABLED"] = "false"
os.environ["AUDIT_LOGGING_ENABLED"] = "false"
os.environ["SLACK_WEBHOOK_URL"] = ""
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="promo-oms-logs-")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.connections.database import Base, create_tables
from app.services.analytics_service import AnalyticsService
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.promotion_service import PromotionService

from helpers import NOW


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def engine():
    """In-memory SQLite DB shared by every session of a test."""
    _engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=_engine)
    yield _engine
    Base.metadata.drop_all(_engine)
    _engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def product_service(session_factory):
    return ProductService(session_factory)


@pytest.fixture
def promotion_service(session_factory, clock):
    return PromotionService(session_factory, clock=clock)


@pytest.fixture
def order_service(session_factory, clock):
    return OrderService(session_factory, clock=clock)


@pytest.fixture
def analytics_service(session_factory, clock):
    return AnalyticsService(session_factory, clock=clock)


@pytest.fixture
def client(session_factory, clock):
    """API client wired to the test database and clock."""
    from fastapi.testclient import TestClient

    from app.main import app
    from app.routes import dependencies

    app.dependency_overrides[dependencies.get_order_service] = lambda: OrderService(session_factory, clock=clock)
    app.dependency_overrides[dependencies.get_product_service] = lambda: ProductService(session_factory)
    app.dependency_overrides[dependencies.get_promotion_service] = lambda: PromotionService(session_factory, clock=clock)
    app.dependency_overrides[dependencies.get_analytics_service] = lambda: AnalyticsService(session_factory, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
