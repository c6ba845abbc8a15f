"""Service entity - composes metadata, cost breakdown, capacity plan and finance"""

import json
import math
from copy import deepcopy
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

from service_planner.domain.capacity import CapacityPlanner
from service_planner.domain.enums import (
    CapacityPeriodResizeMode,
    RateUnit,
    ServiceStatus,
    ServiceType,
)
from service_planner.domain.exceptions import (
    CurrencyMismatchError,
    InvalidArgumentError,
    ItemNotFoundError,
)
from service_planner.domain.finance import FinanceAggregator
from service_planner.domain.models import (
    CostItem,
    MonthlyCapacity,
    MonthlySnapshot,
    ServiceDescription,
    ServiceFinance,
    ServiceMetadata,
    ServiceRate,
    ServiceSettings,
)
from service_planner.domain.money import Money
from service_planner.utils.date_utils import StartInput
from service_planner.utils.identifiers import autogenerate_id, generate_slug

SERVICE_ID_PREFIX = "svc"
COST_ID_PREFIX = "svccost"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_text(value: Optional[str], label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{label} must be a valid non-empty string")
    return value


def _require_quantity(quantity: object) -> float:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidArgumentError("Cost quantity must be a number")
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidArgumentError("Cost quantity must be a finite number greater than zero")
    return quantity


class Service:
    """
    A billable service with a cost breakdown and a monthly capacity plan.

    The service owns one CapacityPlanner and one FinanceAggregator. Every
    mutator funnels through `_touch()`, which stamps `last_update` and
    marks the finance cache dirty.
    """

    def __init__(
        self,
        name: str,
        metadata: ServiceMetadata,
        settings: Optional[ServiceSettings] = None,
        id: Optional[str] = None,
        slug: Optional[str] = None,
        cost_items: Optional[Iterable[CostItem]] = None,
        capacity_plan: Optional[Iterable[MonthlyCapacity]] = None,
        finance: Optional[ServiceFinance] = None,
        timestamp: Optional[str] = None,
        last_update: Optional[str] = None,
    ):
        self.id = id or autogenerate_id(SERVICE_ID_PREFIX)
        self.name = name
        self.slug = slug or generate_slug(name)
        self._metadata = deepcopy(metadata)
        self.settings = settings or ServiceSettings()
        self.timestamp = timestamp or _now_iso()
        self.last_update = last_update or self.timestamp

        self._cost_items: List[CostItem] = []
        for item in cost_items or []:
            self._check_cost_item(item)
            self._cost_items.append(replace(item))

        self._planner = CapacityPlanner(capacity_plan, on_change=self._touch)
        self._finance = FinanceAggregator(
            self._planner,
            rate=lambda: self._metadata.rate,
            cost_items=lambda: self._cost_items,
            snapshot=finance,
        )

    @classmethod
    def initialize(
        cls,
        name: str,
        rate: ServiceRate,
        type: ServiceType = ServiceType.TIME_BASED,
        category: str = "Other",
        description_text: Optional[str] = None,
        sku: Optional[str] = None,
    ) -> "Service":
        """Create a new active, private service with an empty plan"""
        _require_text(name, "Name")
        _require_text(category, "Category")

        metadata = ServiceMetadata(
            description=ServiceDescription(text=description_text or "A new service."),
            type=ServiceType(type),
            category=category,
            rate=replace(rate),
            sku=sku,
        )
        return cls(name=name, metadata=metadata, settings=ServiceSettings())

    def _touch(self) -> None:
        """Single invalidation point called by every mutator"""
        self.last_update = _now_iso()
        self._finance.invalidate()

    def _assert_currency(self, money: Money) -> None:
        if money.currency != self._metadata.rate.currency:
            raise CurrencyMismatchError(
                f"Currency {money.currency} does not match service rate currency "
                f"{self._metadata.rate.currency}"
            )

    # ------------------ metadata ------------------

    @property
    def metadata(self) -> ServiceMetadata:
        """Copy of the metadata; change it through the set_* methods"""
        return deepcopy(self._metadata)

    @property
    def rate(self) -> ServiceRate:
        return replace(self._metadata.rate)

    @property
    def type(self) -> ServiceType:
        return self._metadata.type

    @property
    def category(self) -> str:
        return self._metadata.category

    @property
    def status(self) -> ServiceStatus:
        return self.settings.status

    @property
    def seo(self) -> str:
        """SEO text when set, otherwise the plain description text"""
        seo = self._metadata.description.seo
        if seo and seo.strip():
            return seo
        return self._metadata.description.text

    def set_name(self, name: str) -> None:
        self.name = _require_text(name, "Name")
        self.slug = generate_slug(name)
        self.last_update = _now_iso()

    def set_rate(self, rate: ServiceRate) -> None:
        for item in self._cost_items:
            if item.unit_cost.currency != rate.currency:
                raise CurrencyMismatchError(
                    f"Rate currency {rate.currency} does not match cost item "
                    f"{item.id} currency {item.unit_cost.currency}"
                )
        self._metadata.rate = replace(rate)
        self._touch()

    def set_rate_unit(self, unit: RateUnit) -> None:
        try:
            self._metadata.rate.unit = RateUnit(unit)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid rate unit: {unit!r}") from e
        self._touch()

    def set_rate_amount(self, amount: Union[int, float, Decimal]) -> None:
        if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
            raise InvalidArgumentError("Rate amount must be a number")
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidArgumentError("Rate amount must be a finite positive number")
        self._metadata.rate.amount = Money.from_major(amount, self._metadata.rate.currency)
        self._touch()

    def set_category(self, category: str) -> None:
        self._metadata.category = _require_text(category, "Category")
        self.last_update = _now_iso()

    def set_description(self, html: str, text: str) -> None:
        _require_text(html, "HTML")
        _require_text(text, "Text")
        self._metadata.description.html = html
        self._metadata.description.text = text
        self.last_update = _now_iso()

    def set_description_text(self, text: str) -> None:
        self._metadata.description.text = _require_text(text, "Description text")
        self.last_update = _now_iso()

    def set_description_html(self, html: str) -> None:
        self._metadata.description.html = _require_text(html, "Description HTML")
        self.last_update = _now_iso()

    def set_description_seo(self, text: Optional[str]) -> None:
        """Set SEO text; blank or None clears it"""
        self._metadata.description.seo = text if text and text.strip() else None
        self.last_update = _now_iso()

    def set_type(self, type: ServiceType) -> None:
        try:
            self._metadata.type = ServiceType(type)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid service type: {type!r}") from e
        self.last_update = _now_iso()

    # ------------------ cost of service ------------------

    def _check_cost_item(self, item: CostItem) -> None:
        _require_text(item.id, "Cost item id")
        _require_text(item.item, "Cost item name")
        _require_quantity(item.quantity)
        self._assert_currency(item.unit_cost)

    def _find_cost(self, item_id: str) -> CostItem:
        for item in self._cost_items:
            if item.id == item_id:
                return item
        raise ItemNotFoundError(f"Cost item {item_id} not found")

    @property
    def cost_items(self) -> List[CostItem]:
        return [replace(item) for item in self._cost_items]

    def has_cost_breakdown(self) -> bool:
        return len(self._cost_items) > 0

    def add_cost(
        self,
        name: str,
        unit_cost: Money,
        quantity: float = 1,
        unit: Optional[str] = None,
    ) -> CostItem:
        """Add a cost line and return a copy of it (with its generated id)"""
        _require_text(name, "Cost name")
        _require_quantity(quantity)
        self._assert_currency(unit_cost)

        item = CostItem(
            id=autogenerate_id(COST_ID_PREFIX),
            item=name,
            unit_cost=unit_cost,
            quantity=quantity,
            unit=unit,
        )
        self._cost_items.append(item)
        self._touch()
        return replace(item)

    def push_cost(self, item: CostItem) -> None:
        """Append an existing cost item (subtotal is always derived)"""
        self._check_cost_item(item)
        self._cost_items.append(replace(item))
        self._touch()

    def update_cost(
        self,
        item_id: str,
        quantity: Optional[float] = None,
        unit_cost: Optional[Money] = None,
        unit: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        item = self._find_cost(item_id)

        # Validate everything before touching the item
        if quantity is not None:
            _require_quantity(quantity)
        if unit_cost is not None:
            self._assert_currency(unit_cost)

        if quantity is not None:
            item.quantity = quantity
        if unit_cost is not None:
            item.unit_cost = unit_cost
        if name and name.strip():
            item.item = name
        if unit is not None:
            item.unit = unit

        self._touch()

    def set_cost(self, items: Iterable[CostItem]) -> None:
        """Replace all cost items; one invalid item rejects the whole batch"""
        items = list(items)
        for item in items:
            self._check_cost_item(item)
        self._cost_items = [replace(item) for item in items]
        self._touch()

    def remove_cost(self, item_id: str) -> None:
        self._cost_items.remove(self._find_cost(item_id))
        self._touch()

    def clear_cost_breakdown(self) -> None:
        self._cost_items.clear()
        self._touch()

    # ------------------ capacity ------------------

    @property
    def capacity(self) -> List[MonthlyCapacity]:
        return self._planner.entries

    def has_capacity(self) -> bool:
        return self._planner.has_entries()

    @property
    def total_capacity(self) -> int:
        return self._planner.total_capacity

    @property
    def average_monthly_capacity(self) -> float:
        return self._planner.average_monthly_capacity

    @property
    def earliest_capacity_month(self) -> Optional[str]:
        return self._planner.earliest_month

    @property
    def latest_capacity_month(self) -> Optional[str]:
        return self._planner.latest_month

    @property
    def max_supply_month(self) -> Optional[MonthlyCapacity]:
        return self._planner.entry_with_max_supply

    @property
    def min_supply_month(self) -> Optional[MonthlyCapacity]:
        return self._planner.entry_with_min_supply

    def generate_capacity_plan(
        self,
        months: int,
        amount: Union[int, float],
        growth_rate: Union[int, float] = 0,
        start: StartInput = None,
    ) -> None:
        self._planner.generate(months, amount, growth_rate, start)

    def set_capacity(self, capacity_plan: Iterable[MonthlyCapacity]) -> None:
        self._planner.set_all(capacity_plan)

    def add_capacity(self, month: str, capacity: int, adjustment: Optional[int] = None) -> None:
        self._planner.add(month, capacity, adjustment)

    def update_capacity_units(self, month: str, capacity: int) -> None:
        self._planner.update_units(month, capacity)

    def update_capacity_adjustment(self, month: str, adjustment: Optional[int] = None) -> None:
        self._planner.update_adjustment(month, adjustment)

    def remove_capacity(self, month: str) -> None:
        self._planner.remove(month)

    def clear_capacity(self) -> None:
        self._planner.clear()

    def normalize_capacity_units(self, amount: int) -> None:
        self._planner.normalize_units(amount)

    def recompute_capacity_period(
        self,
        start: str,
        end: str,
        mode: CapacityPeriodResizeMode = CapacityPeriodResizeMode.DEFAULT,
    ) -> None:
        self._planner.recompute_period(start, end, mode)

    # ------------------ finance ------------------

    @property
    def finance(self) -> ServiceFinance:
        return self._finance.snapshot()

    @property
    def finance_recompute_count(self) -> int:
        return self._finance.recompute_count

    @property
    def gross_revenue(self) -> Money:
        return self._finance.gross_revenue

    @property
    def gross_cost(self) -> Money:
        return self._finance.gross_cost

    @property
    def gross_profit(self) -> Money:
        return self._finance.gross_profit

    @property
    def gross_income(self) -> Money:
        return self._finance.gross_income

    @property
    def gross_margin(self) -> float:
        return self._finance.gross_margin

    @property
    def average_monthly_revenue(self) -> Money:
        return self._finance.average_monthly_revenue

    @property
    def average_monthly_profit(self) -> Money:
        return self._finance.average_monthly_profit

    @property
    def unit_cost(self) -> Money:
        return self._finance.unit_cost

    @property
    def unit_profit(self) -> Money:
        return self._finance.unit_profit

    @property
    def unit_margin(self) -> float:
        return self._finance.unit_margin

    @property
    def price(self) -> Money:
        return self._finance.price

    def monthly_revenue(self, month: str) -> Money:
        return self._finance.monthly_revenue(month)

    def monthly_cost(self, month: str) -> Money:
        return self._finance.monthly_cost(month)

    def monthly_profit(self, month: str) -> Money:
        return self._finance.monthly_profit(month)

    def monthly_margin(self, month: str) -> float:
        return self._finance.monthly_margin(month)

    def net_revenue(
        self,
        month: str,
        discounts: Optional[Money] = None,
        returns: Optional[Money] = None,
        allowances: Optional[Money] = None,
    ) -> Money:
        return self._finance.net_revenue(month, discounts, returns, allowances)

    def net_profit(
        self,
        month: str,
        operating_expenses: Optional[Money] = None,
        taxes: Optional[Money] = None,
        discounts: Optional[Money] = None,
        returns: Optional[Money] = None,
        allowances: Optional[Money] = None,
    ) -> Money:
        return self._finance.net_profit(
            month, operating_expenses, taxes, discounts, returns, allowances
        )

    net_income = net_profit

    def monthly_snapshot(self, month: str) -> MonthlySnapshot:
        return self._finance.monthly_snapshot(month)

    # ------------------ validation & serialization ------------------

    def validate_self(self, throw_error: bool = False) -> bool:
        """
        Check that required fields are present.

        Returns False on the first missing field, or raises
        InvalidArgumentError when throw_error is set.
        """
        required = [
            (self.id, "ID"),
            (self.timestamp, "Timestamp"),
            (self.name, "Service Name"),
            (self._metadata.description.text, "Description"),
            (self._metadata.rate.amount, "Rate Amount"),
            (self._metadata.rate.unit, "Rate Unit"),
        ]
        for value, label in required:
            if value is None or value == "":
                if throw_error:
                    raise InvalidArgumentError(
                        f"Validation failed: Missing or invalid property - {label}"
                    )
                return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-safe representation; Money values as {amount, currency}"""
        finance = self._finance.snapshot()
        metadata = self._metadata
        return {
            "__type": "Service",
            "__object": "json",
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "category": metadata.category,
            "type": metadata.type.value,
            "status": self.settings.status.value,
            "rate": metadata.rate.to_dict(),
            "timestamp": self.timestamp,
            "last_update": self.last_update,
            "metadata": {
                "sku": metadata.sku,
                "description": metadata.description.to_dict(),
                "photos": list(metadata.photos),
                "type": metadata.type.value,
                "category": metadata.category,
                "rate": metadata.rate.to_dict(),
                "cos": [item.to_dict() for item in self._cost_items],
                "capacity_plan": [entry.to_dict() for entry in self._planner.entries],
                "finance": finance.to_dict(),
            },
            "settings": self.settings.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def finalize(self) -> Dict[str, Any]:
        """Serialized copy carrying a freshly generated id"""
        data = self.to_dict()
        data["id"] = autogenerate_id(SERVICE_ID_PREFIX)
        return data

    @classmethod
    def parse_from_json(cls, data: Union[str, Dict[str, Any]]) -> "Service":
        """Rebuild a service from `to_dict()` output or its JSON string"""
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise InvalidArgumentError(f"Invalid service JSON: {e}") from e

        for key in ("id", "timestamp", "metadata", "settings"):
            if not data.get(key):
                raise InvalidArgumentError(f"Missing required property: '{key}'")

        raw = data["metadata"]
        try:
            metadata = ServiceMetadata(
                description=ServiceDescription.from_dict(raw["description"]),
                type=ServiceType(raw["type"]),
                category=raw["category"],
                rate=ServiceRate.from_dict(raw["rate"]),
                sku=raw.get("sku"),
                photos=list(raw.get("photos") or []),
            )
            cost_items = [CostItem.from_dict(c) for c in raw.get("cos") or []]
            capacity_plan = [MonthlyCapacity.from_dict(m) for m in raw.get("capacity_plan") or []]
            finance = ServiceFinance.from_dict(raw["finance"]) if raw.get("finance") else None
            settings = ServiceSettings.from_dict(data["settings"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Invalid service payload: {e}") from e

        return cls(
            name=data.get("name", ""),
            metadata=metadata,
            settings=settings,
            id=data["id"],
            slug=data.get("slug"),
            cost_items=cost_items,
            capacity_plan=capacity_plan,
            finance=finance,
            timestamp=data["timestamp"],
            last_update=data.get("last_update"),
        )
