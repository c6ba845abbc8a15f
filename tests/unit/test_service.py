"""Unit tests for the service entity: metadata, cost breakdown and serialization"""

import json
from decimal import Decimal

import pytest

from service_planner.domain.enums import RateUnit, ServiceStatus, ServiceType
from service_planner.domain.exceptions import (
    CurrencyMismatchError,
    InvalidArgumentError,
    ItemNotFoundError,
)
from service_planner.domain.models import CostItem, ServiceRate
from service_planner.domain.money import Money
from service_planner.domain.service import Service


def usd(amount) -> Money:
    return Money.from_major(amount, "USD")


def test_initialize_defaults(service: Service):
    assert service.id.startswith("svc-")
    assert service.slug == "strategy-consulting"
    assert service.status == ServiceStatus.ACTIVE
    assert service.type == ServiceType.TIME_BASED
    assert service.metadata.description.text == "A new service."
    assert not service.has_capacity()
    assert not service.has_cost_breakdown()
    assert service.validate_self() is True


@pytest.mark.parametrize("name,category", [("", "Other"), ("   ", "Other"), ("Audit", "")])
def test_initialize_rejects_blank_text(usd_rate: ServiceRate, name, category):
    with pytest.raises(InvalidArgumentError):
        Service.initialize(name, usd_rate, category=category)


def test_set_name_regenerates_slug(service: Service):
    service.set_name("Data Pipeline Audit!")
    assert service.slug == "data-pipeline-audit"


def test_set_rate_amount_must_be_positive(service: Service):
    with pytest.raises(InvalidArgumentError):
        service.set_rate_amount(0)

    service.set_rate_amount(75)
    assert service.rate.amount == usd(75)


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), Decimal("NaN"), Decimal("-Infinity")])
def test_set_rate_amount_rejects_non_finite(service: Service, amount):
    with pytest.raises(InvalidArgumentError):
        service.set_rate_amount(amount)

    assert service.rate.amount == usd(50)
    assert service.unit_margin == 1.0


def test_set_rate_unit(service: Service):
    service.set_rate_unit(RateUnit.PER_SESSION)
    assert service.rate.unit == RateUnit.PER_SESSION

    with pytest.raises(InvalidArgumentError):
        service.set_rate_unit("Per Fortnight")


def test_description_setters_and_seo(service: Service):
    service.set_description("<p>Hands-on</p>", "Hands-on")
    assert service.seo == "Hands-on"

    service.set_description_seo("Best consulting")
    assert service.seo == "Best consulting"

    service.set_description_seo("  ")
    assert service.metadata.description.seo is None

    with pytest.raises(InvalidArgumentError):
        service.set_description_text("")


def test_set_type(service: Service):
    service.set_type(ServiceType.USAGE_BASED)
    assert service.type == ServiceType.USAGE_BASED

    with pytest.raises(InvalidArgumentError):
        service.set_type("Subscription")


def test_mutations_stamp_last_update(service: Service):
    service.last_update = "2000-01-01T00:00:00+00:00"
    service.add_capacity("2025-01", 10)
    assert service.last_update > "2000-01-01T00:00:00+00:00"


def test_add_cost_computes_subtotal(service: Service):
    item = service.add_cost("Labor", usd(12.5), quantity=2, unit="hour")

    assert item.id.startswith("svccost-")
    assert item.subtotal == usd(25)
    assert service.has_cost_breakdown()


@pytest.mark.parametrize(
    "name,quantity",
    [("", 1), ("Labor", 0), ("Labor", -2), ("Labor", float("nan")), ("Labor", float("inf"))],
)
def test_add_cost_rejects_invalid(service: Service, name, quantity):
    with pytest.raises(InvalidArgumentError):
        service.add_cost(name, usd(1), quantity=quantity)


def test_add_cost_currency_mismatch(service: Service):
    """Test mismatched currency is rejected when the item is added"""
    with pytest.raises(CurrencyMismatchError):
        service.add_cost("Labor", Money.from_major(10, "EUR"))
    assert not service.has_cost_breakdown()


def test_update_cost(service: Service):
    item = service.add_cost("Labor", usd(10))

    service.update_cost(item.id, quantity=3, name="Senior labor", unit="hour")
    updated = service.cost_items[0]

    assert updated.item == "Senior labor"
    assert updated.subtotal == usd(30)

    with pytest.raises(CurrencyMismatchError):
        service.update_cost(item.id, quantity=5, unit_cost=Money.from_major(1, "EUR"))
    assert service.cost_items[0].quantity == 3  # nothing applied

    with pytest.raises(ItemNotFoundError):
        service.update_cost("missing", quantity=1)


def test_set_cost_is_all_or_nothing(service: Service):
    service.add_cost("Labor", usd(10))
    good = CostItem(id="c1", item="Materials", unit_cost=usd(2), quantity=1)
    bad = CostItem(id="c2", item="Import", unit_cost=Money.from_major(2, "EUR"), quantity=1)

    with pytest.raises(CurrencyMismatchError):
        service.set_cost([good, bad])
    assert [i.item for i in service.cost_items] == ["Labor"]

    service.set_cost([good])
    assert service.unit_cost == usd(2)


def test_push_remove_and_clear_cost(service: Service):
    service.push_cost(CostItem(id="c1", item="Materials", unit_cost=usd(4), quantity=2))
    service.add_cost("Labor", usd(1))
    assert service.unit_cost == usd(9)

    service.remove_cost("c1")
    assert service.unit_cost == usd(1)

    with pytest.raises(ItemNotFoundError):
        service.remove_cost("c1")

    service.clear_cost_breakdown()
    assert service.unit_cost == usd(0)


def test_cost_items_are_copies(service: Service):
    service.add_cost("Labor", usd(10))
    service.cost_items[0].quantity = 100
    assert service.unit_cost == usd(10)


def test_metadata_is_a_copy(planned_service: Service):
    """Test edits to the returned metadata never reach the finance figures"""
    assert planned_service.gross_revenue == usd(96000)

    metadata = planned_service.metadata
    metadata.rate = ServiceRate(amount=usd(100))
    metadata.category = "Changed"
    planned_service.metadata.rate.unit = RateUnit.PER_DAY

    assert planned_service.gross_revenue == usd(96000)
    assert planned_service.category == "Consulting"
    assert planned_service.rate.unit == RateUnit.PER_HOUR

    planned_service.set_rate(ServiceRate(amount=usd(100)))
    assert planned_service.gross_revenue == usd(192000)


def test_set_rate_currency_must_match_cost_items(service: Service):
    service.add_cost("Labor", usd(10))

    with pytest.raises(CurrencyMismatchError):
        service.set_rate(ServiceRate(amount=Money.from_major(50, "EUR")))

    service.clear_cost_breakdown()
    service.set_rate(ServiceRate(amount=Money.from_major(50, "EUR")))
    assert service.rate.currency == "EUR"


def test_validate_self_reports_missing_fields(service: Service):
    service.name = ""

    assert service.validate_self() is False
    with pytest.raises(InvalidArgumentError):
        service.validate_self(throw_error=True)


def test_round_trip_preserves_finance(planned_service: Service):
    """Test serialize → reconstruct gives identical figures for every month"""
    planned_service.update_capacity_adjustment("2025-04", -7)
    restored = Service.parse_from_json(planned_service.to_json())

    assert restored.id == planned_service.id
    assert restored.capacity == planned_service.capacity
    assert [i.to_dict() for i in restored.cost_items] == [i.to_dict() for i in planned_service.cost_items]
    assert restored.gross_revenue == planned_service.gross_revenue
    assert restored.gross_cost == planned_service.gross_cost
    assert restored.gross_profit == planned_service.gross_profit
    for entry in planned_service.capacity:
        assert restored.monthly_revenue(entry.month) == planned_service.monthly_revenue(entry.month)
        assert restored.monthly_cost(entry.month) == planned_service.monthly_cost(entry.month)
        assert restored.monthly_profit(entry.month) == planned_service.monthly_profit(entry.month)


def test_round_trip_from_dict_restores_money_types(planned_service: Service):
    data = json.loads(json.dumps(planned_service.to_dict()))
    restored = Service.parse_from_json(data)

    assert isinstance(restored.rate.amount, Money)
    assert isinstance(restored.finance.revenue.gross.value, Money)
    assert restored.finance == planned_service.finance


def test_parse_requires_core_fields(planned_service: Service):
    data = planned_service.to_dict()
    del data["settings"]

    with pytest.raises(InvalidArgumentError):
        Service.parse_from_json(data)
    with pytest.raises(InvalidArgumentError):
        Service.parse_from_json("{not json")


def test_finalize_assigns_new_id(planned_service: Service):
    data = planned_service.finalize()

    assert data["id"] != planned_service.id
    assert data["name"] == planned_service.name
