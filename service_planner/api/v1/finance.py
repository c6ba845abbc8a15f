"""/v1/services/{service_id}/finance - aggregate and monthly finance figures"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from service_planner.api.dependencies import get_service
from service_planner.api.v1.schemas import (
    FinanceSummaryResponse,
    MoneySchema,
    MonthlyFinanceResponse,
)
from service_planner.domain.money import Money
from service_planner.domain.service import Service

router = APIRouter()


@router.get("/services/{service_id}/finance", response_model=FinanceSummaryResponse)
def get_finance_summary(service: Service = Depends(get_service)):
    """Whole-plan gross revenue, cost, profit and margins (served from the finance cache)"""
    return FinanceSummaryResponse.from_service(service)


@router.get("/services/{service_id}/finance/{month}", response_model=MonthlyFinanceResponse)
def get_monthly_finance(month: str, service: Service = Depends(get_service)):
    """Finance for one month; unplanned months report zeros"""
    return MonthlyFinanceResponse.from_snapshot(service.monthly_snapshot(month))


@router.get("/services/{service_id}/finance/{month}/net-profit", response_model=MoneySchema)
def get_monthly_net_profit(
    month: str,
    operating_expenses: Optional[Decimal] = Query(None, ge=0),
    taxes: Optional[Decimal] = Query(None, ge=0),
    discounts: Optional[Decimal] = Query(None, ge=0),
    returns: Optional[Decimal] = Query(None, ge=0),
    allowances: Optional[Decimal] = Query(None, ge=0),
    service: Service = Depends(get_service),
):
    """Monthly revenue less the supplied deductions, opex and taxes (all in the rate currency)"""
    currency = service.rate.currency

    def money(value: Optional[Decimal]) -> Optional[Money]:
        return Money.from_major(value, currency) if value is not None else None

    net = service.net_profit(
        month,
        operating_expenses=money(operating_expenses),
        taxes=money(taxes),
        discounts=money(discounts),
        returns=money(returns),
        allowances=money(allowances),
    )
    return MoneySchema.from_money(net)
