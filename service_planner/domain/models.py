"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from service_planner.domain.enums import (
    RateUnit,
    ServiceStatus,
    ServiceType,
    ServiceVisibility,
)
from service_planner.domain.money import Money


@dataclass
class MonthlyCapacity:
    """Planned units for one calendar month"""

    month: str  # YYYY-MM
    capacity: int
    adjustment: Optional[int] = None  # signed delta on top of capacity

    @property
    def effective_units(self) -> int:
        return self.capacity + (self.adjustment or 0)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"month": self.month, "capacity": self.capacity}
        if self.adjustment is not None:
            data["adjustment"] = self.adjustment
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonthlyCapacity":
        return cls(
            month=data["month"],
            capacity=data["capacity"],
            adjustment=data.get("adjustment"),
        )


@dataclass
class CostItem:
    """Cost of service line (labor, materials, subcontractor fees), priced per unit of capacity"""

    id: str
    item: str
    unit_cost: Money
    quantity: float
    unit: Optional[str] = None  # e.g. "hour", "session"

    @property
    def subtotal(self) -> Money:
        return self.unit_cost.multiply(self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item,
            "unit_cost": self.unit_cost.to_dict(),
            "quantity": self.quantity,
            "unit": self.unit,
            "subtotal": self.subtotal.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostItem":
        # subtotal is derived; any stored value is ignored
        return cls(
            id=data["id"],
            item=data["item"],
            unit_cost=Money.from_dict(data["unit_cost"]),
            quantity=data["quantity"],
            unit=data.get("unit"),
        )


@dataclass
class ServiceRate:
    """Price per billing unit"""

    amount: Money
    unit: RateUnit = RateUnit.PER_HOUR

    @property
    def currency(self) -> str:
        return self.amount.currency

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount.to_dict(), "unit": self.unit.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceRate":
        return cls(amount=Money.from_dict(data["amount"]), unit=RateUnit(data["unit"]))


@dataclass
class ValueRatio:
    """Money value paired with its margin against revenue"""

    value: Money
    margin_ratio: float

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value.to_dict(), "margin_ratio": self.margin_ratio}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValueRatio":
        return cls(value=Money.from_dict(data["value"]), margin_ratio=data["margin_ratio"])


@dataclass
class GrossNet:
    gross: ValueRatio
    net: ValueRatio

    def to_dict(self) -> Dict[str, Any]:
        return {"gross": self.gross.to_dict(), "net": self.net.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GrossNet":
        return cls(gross=ValueRatio.from_dict(data["gross"]), net=ValueRatio.from_dict(data["net"]))


@dataclass
class ServiceFinance:
    """Cached aggregate finance figures for the whole capacity plan"""

    revenue: GrossNet
    cos: GrossNet
    income: GrossNet
    profit: GrossNet

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenue": self.revenue.to_dict(),
            "cos": self.cos.to_dict(),
            "income": self.income.to_dict(),
            "profit": self.profit.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceFinance":
        return cls(
            revenue=GrossNet.from_dict(data["revenue"]),
            cos=GrossNet.from_dict(data["cos"]),
            income=GrossNet.from_dict(data["income"]),
            profit=GrossNet.from_dict(data["profit"]),
        )


@dataclass
class MonthlySnapshot:
    """Finance figures for a single month, computed on demand"""

    month: str
    revenue: Money
    cost: Money
    profit: Money
    margin: float
    net_revenue: Money
    net_income: Money


@dataclass
class ServiceDescription:
    text: str
    html: Optional[str] = None
    seo: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "html": self.html, "seo": self.seo}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceDescription":
        return cls(text=data["text"], html=data.get("html"), seo=data.get("seo"))


@dataclass
class SystemFlags:
    is_restricted: bool = False
    restricted_until: Optional[str] = None  # ISO timestamp


@dataclass
class ServiceSettings:
    """Status, visibility and system flags"""

    status: ServiceStatus = ServiceStatus.ACTIVE
    visibility: ServiceVisibility = ServiceVisibility.PRIVATE
    system: SystemFlags = field(default_factory=SystemFlags)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "visibility": self.visibility.value,
            "system": {
                "is_restricted": self.system.is_restricted,
                "restricted_until": self.system.restricted_until,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceSettings":
        system = data.get("system") or {}
        return cls(
            status=ServiceStatus(data["status"]),
            visibility=ServiceVisibility(data["visibility"]),
            system=SystemFlags(
                is_restricted=bool(system.get("is_restricted", False)),
                restricted_until=system.get("restricted_until"),
            ),
        )


@dataclass
class ServiceMetadata:
    """Descriptive metadata of a service (cost items and capacity live on the service)"""

    description: ServiceDescription
    type: ServiceType
    category: str
    rate: ServiceRate
    sku: Optional[str] = None
    photos: List[str] = field(default_factory=list)
