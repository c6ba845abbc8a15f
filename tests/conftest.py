"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient

from service_planner.api.dependencies import get_service_repository
from service_planner.api.main import create_app
from service_planner.domain.enums import RateUnit, ServiceType
from service_planner.domain.models import ServiceRate
from service_planner.domain.money import Money
from service_planner.domain.service import Service
from service_planner.infrastructure.repositories import ServiceRepository


@pytest.fixture
def repo() -> ServiceRepository:
    """Fresh service registry per test"""
    return ServiceRepository()


@pytest.fixture
def client(repo: ServiceRepository) -> TestClient:
    """Create FastAPI test client backed by the test registry"""
    app = create_app()
    app.dependency_overrides[get_service_repository] = lambda: repo
    return TestClient(app)


@pytest.fixture
def usd_rate() -> ServiceRate:
    """$50 per hour"""
    return ServiceRate(amount=Money.from_major(50, "USD"), unit=RateUnit.PER_HOUR)


@pytest.fixture
def service(usd_rate: ServiceRate) -> Service:
    """Consulting service with no costs and no capacity yet"""
    return Service.initialize("Strategy Consulting", usd_rate, ServiceType.TIME_BASED, "Consulting")


@pytest.fixture
def planned_service(service: Service) -> Service:
    """$50/hour, $25/unit cost of service, 12 months x 160 hours from 2025-01"""
    service.add_cost("Consultant labor", Money.from_major(20, "USD"))
    service.add_cost("Tooling", Money.from_major(2.5, "USD"), quantity=2, unit="hour")
    service.generate_capacity_plan(12, 160, 0, "2025-01")
    return service
