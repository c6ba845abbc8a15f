"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from service_planner.domain.enums import CapacityPeriodResizeMode, RateUnit, ServiceType
from service_planner.domain.models import CostItem, MonthlyCapacity, MonthlySnapshot
from service_planner.domain.money import Money
from service_planner.domain.service import Service

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class MoneySchema(BaseModel):
    """Monetary amount; serialized as a decimal string to keep precision"""

    amount: Decimal
    currency: str

    @classmethod
    def from_money(cls, money: Money) -> "MoneySchema":
        return cls(amount=money.amount, currency=money.currency)


class ServiceCreateRequest(BaseModel):
    """Request body for POST /v1/services"""

    name: str = Field(..., min_length=1, description="Service name")
    rate_amount: Decimal = Field(..., gt=0, description="Price per billing unit")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO currency code")
    rate_unit: RateUnit = RateUnit.PER_HOUR
    type: ServiceType = ServiceType.TIME_BASED
    category: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None


class RateUpdateRequest(BaseModel):
    """Request body for PUT /v1/services/{service_id}/rate"""

    amount: Decimal = Field(..., gt=0)
    unit: Optional[RateUnit] = None


class CostItemRequest(BaseModel):
    """Request body for POST /v1/services/{service_id}/cos"""

    name: str = Field(..., min_length=1)
    unit_cost: Decimal = Field(..., ge=0)
    quantity: float = Field(1, gt=0)
    unit: Optional[str] = None


class CostItemSchema(BaseModel):
    id: str
    item: str
    unit_cost: MoneySchema
    quantity: float
    unit: Optional[str] = None
    subtotal: MoneySchema

    @classmethod
    def from_item(cls, item: CostItem) -> "CostItemSchema":
        return cls(
            id=item.id,
            item=item.item,
            unit_cost=MoneySchema.from_money(item.unit_cost),
            quantity=item.quantity,
            unit=item.unit,
            subtotal=MoneySchema.from_money(item.subtotal),
        )


class CapacityEntrySchema(BaseModel):
    """Single month in a capacity plan"""

    month: str = Field(..., pattern=MONTH_PATTERN)
    capacity: int = Field(..., ge=0)
    adjustment: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: MonthlyCapacity) -> "CapacityEntrySchema":
        return cls(month=entry.month, capacity=entry.capacity, adjustment=entry.adjustment)


class CapacityUpdateRequest(BaseModel):
    """Request body for PATCH /v1/services/{service_id}/capacity/{month}"""

    capacity: Optional[int] = Field(None, ge=0)
    adjustment: Optional[int] = None  # explicit null clears the adjustment


class GeneratePlanRequest(BaseModel):
    """Request body for POST /v1/services/{service_id}/capacity/generate"""

    months: Optional[int] = Field(None, gt=0, description="Defaults to the configured plan length")
    amount: float = Field(..., ge=0, description="Units in the first month")
    growth_rate: float = Field(0, ge=0, description="Month-over-month growth, e.g. 0.03")
    start: Optional[str] = Field(None, description="YYYY-MM or ISO date; defaults to current month")


class RecomputePeriodRequest(BaseModel):
    """Request body for POST /v1/services/{service_id}/capacity/recompute"""

    start: str = Field(..., pattern=MONTH_PATTERN)
    end: str = Field(..., pattern=MONTH_PATTERN)
    mode: CapacityPeriodResizeMode = CapacityPeriodResizeMode.DEFAULT


class NormalizeRequest(BaseModel):
    amount: int = Field(..., ge=0)


class CapacityPlanResponse(BaseModel):
    service_id: str
    total_capacity: int
    average_monthly_capacity: float
    earliest_month: Optional[str] = None
    latest_month: Optional[str] = None
    entries: List[CapacityEntrySchema]

    @classmethod
    def from_service(cls, service: Service) -> "CapacityPlanResponse":
        return cls(
            service_id=service.id,
            total_capacity=service.total_capacity,
            average_monthly_capacity=service.average_monthly_capacity,
            earliest_month=service.earliest_capacity_month,
            latest_month=service.latest_capacity_month,
            entries=[CapacityEntrySchema.from_entry(e) for e in service.capacity],
        )


class ServiceResponse(BaseModel):
    """Response for service endpoints"""

    id: str
    slug: str
    name: str
    type: ServiceType
    category: str
    status: str
    rate: MoneySchema
    rate_unit: RateUnit
    cost_items: List[CostItemSchema]
    capacity_plan: List[CapacityEntrySchema]
    last_update: str

    @classmethod
    def from_service(cls, service: Service) -> "ServiceResponse":
        return cls(
            id=service.id,
            slug=service.slug,
            name=service.name,
            type=service.type,
            category=service.category,
            status=service.status.value,
            rate=MoneySchema.from_money(service.rate.amount),
            rate_unit=service.rate.unit,
            cost_items=[CostItemSchema.from_item(i) for i in service.cost_items],
            capacity_plan=[CapacityEntrySchema.from_entry(e) for e in service.capacity],
            last_update=service.last_update,
        )


class FinanceSummaryResponse(BaseModel):
    """Response for GET /v1/services/{service_id}/finance"""

    service_id: str
    total_capacity: int
    gross_revenue: MoneySchema
    gross_cost: MoneySchema
    gross_profit: MoneySchema
    profit_margin: float
    cost_margin: float
    average_monthly_revenue: MoneySchema
    average_monthly_profit: MoneySchema
    unit_cost: MoneySchema
    unit_profit: MoneySchema
    unit_margin: float

    @classmethod
    def from_service(cls, service: Service) -> "FinanceSummaryResponse":
        finance = service.finance
        return cls(
            service_id=service.id,
            total_capacity=service.total_capacity,
            gross_revenue=MoneySchema.from_money(finance.revenue.gross.value),
            gross_cost=MoneySchema.from_money(finance.cos.gross.value),
            gross_profit=MoneySchema.from_money(finance.profit.gross.value),
            profit_margin=finance.profit.gross.margin_ratio,
            cost_margin=finance.cos.gross.margin_ratio,
            average_monthly_revenue=MoneySchema.from_money(service.average_monthly_revenue),
            average_monthly_profit=MoneySchema.from_money(service.average_monthly_profit),
            unit_cost=MoneySchema.from_money(service.unit_cost),
            unit_profit=MoneySchema.from_money(service.unit_profit),
            unit_margin=service.unit_margin,
        )


class MonthlyFinanceResponse(BaseModel):
    """Response for GET /v1/services/{service_id}/finance/{month}"""

    month: str
    revenue: MoneySchema
    cost: MoneySchema
    profit: MoneySchema
    margin: float
    net_revenue: MoneySchema
    net_income: MoneySchema

    @classmethod
    def from_snapshot(cls, snapshot: MonthlySnapshot) -> "MonthlyFinanceResponse":
        return cls(
            month=snapshot.month,
            revenue=MoneySchema.from_money(snapshot.revenue),
            cost=MoneySchema.from_money(snapshot.cost),
            profit=MoneySchema.from_money(snapshot.profit),
            margin=snapshot.margin,
            net_revenue=MoneySchema.from_money(snapshot.net_revenue),
            net_income=MoneySchema.from_money(snapshot.net_income),
        )
