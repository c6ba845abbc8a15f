"""Finance aggregation - revenue, cost of service, profit and margins derived from the capacity plan"""

import copy
import logging
from typing import Callable, Optional, Sequence

from service_planner.domain.capacity import CapacityPlanner
from service_planner.domain.models import (
    CostItem,
    GrossNet,
    MonthlySnapshot,
    ServiceFinance,
    ServiceRate,
    ValueRatio,
)
from service_planner.domain.money import Money

logger = logging.getLogger(__name__)


class FinanceAggregator:
    """
    Derives finance figures from {rate, capacity plan, cost items}.

    Whole-plan aggregates are cached in one ServiceFinance snapshot guarded
    by a dirty flag: the owner calls `invalidate()` on every mutation and
    the next aggregate read recomputes once. Monthly queries always read
    current state directly.
    """

    def __init__(
        self,
        planner: CapacityPlanner,
        rate: Callable[[], ServiceRate],
        cost_items: Callable[[], Sequence[CostItem]],
        snapshot: Optional[ServiceFinance] = None,
    ):
        self._planner = planner
        self._rate = rate
        self._cost_items = cost_items
        self._snapshot = snapshot
        self._dirty = True
        self._version = 0  # bumped by every invalidate()
        self.recompute_count = 0

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def invalidate(self) -> None:
        self._dirty = True
        self._version += 1

    def _zero(self) -> Money:
        return Money.zero(self._rate().currency)

    # ------------------ unit level ------------------

    @property
    def unit_cost(self) -> Money:
        """Sum of cost item subtotals: cost of delivering one unit"""
        total = self._zero()
        for item in self._cost_items():
            total = total.add(item.subtotal)
        return total

    @property
    def unit_profit(self) -> Money:
        return self._rate().amount.subtract(self.unit_cost)

    @property
    def unit_margin(self) -> float:
        rate_amount = self._rate().amount
        return 0.0 if rate_amount.is_zero() else self.unit_profit.ratio(rate_amount)

    @property
    def price(self) -> Money:
        rate_amount = self._rate().amount
        return self._zero() if rate_amount.is_zero() else rate_amount

    # ------------------ aggregates ------------------

    def _compute_gross_revenue(self) -> Money:
        rate_amount = self._rate().amount
        total = self._zero()
        for entry in self._planner.entries:
            total = total.add(rate_amount.multiply(entry.effective_units))
        return total

    def _compute_gross_cost(self) -> Money:
        # Cost items are per-unit costs, scaled by each month's effective units
        unit_cost = self.unit_cost
        total = self._zero()
        for entry in self._planner.entries:
            total = total.add(unit_cost.multiply(entry.effective_units))
        return total

    def _recompute(self) -> None:
        if not self._dirty and self._snapshot is not None:
            return

        version = self._version
        gross_revenue = self._compute_gross_revenue()
        gross_cost = self._compute_gross_cost()
        gross_profit = gross_revenue.subtract(gross_cost)

        if gross_revenue.is_zero():
            revenue_margin = cost_margin = profit_margin = 0.0
        else:
            revenue_margin = 1.0
            cost_margin = gross_cost.ratio(gross_revenue)
            profit_margin = gross_profit.ratio(gross_revenue)

        def same(value: Money, margin: float) -> GrossNet:
            # Whole-plan net equals gross: deductions only exist per month
            return GrossNet(gross=ValueRatio(value, margin), net=ValueRatio(value, margin))

        self._snapshot = ServiceFinance(
            revenue=same(gross_revenue, revenue_margin),
            cos=same(gross_cost, cost_margin),
            income=same(gross_profit, profit_margin),
            profit=same(gross_profit, profit_margin),
        )
        # An invalidate() during the computation keeps the cache dirty
        self._dirty = self._version != version
        self.recompute_count += 1

        logger.debug(
            "Finance snapshot recomputed",
            extra={"months": len(self._planner), "recompute_count": self.recompute_count},
        )

    def snapshot(self) -> ServiceFinance:
        """Fresh copy of the cached finance snapshot"""
        self._recompute()
        return copy.deepcopy(self._snapshot)

    @property
    def gross_revenue(self) -> Money:
        self._recompute()
        return self._snapshot.revenue.gross.value

    @property
    def gross_cost(self) -> Money:
        self._recompute()
        return self._snapshot.cos.gross.value

    @property
    def gross_profit(self) -> Money:
        self._recompute()
        return self._snapshot.profit.gross.value

    @property
    def gross_income(self) -> Money:
        self._recompute()
        return self._snapshot.income.gross.value

    @property
    def gross_margin(self) -> float:
        self._recompute()
        return self._snapshot.profit.gross.margin_ratio

    @property
    def average_monthly_revenue(self) -> Money:
        months = len(self._planner)
        if months == 0:
            return self._zero()
        return self.gross_revenue.divide(months)

    @property
    def average_monthly_profit(self) -> Money:
        months = len(self._planner)
        if months == 0:
            return self._zero()
        return self.gross_profit.divide(months)

    # ------------------ monthly (uncached) ------------------

    def _units_for(self, month: str) -> Optional[int]:
        entry = self._planner.get(month)
        return entry.effective_units if entry is not None else None

    def monthly_revenue(self, month: str) -> Money:
        units = self._units_for(month)
        if units is None:
            return self._zero()
        return self._rate().amount.multiply(units)

    def monthly_cost(self, month: str) -> Money:
        units = self._units_for(month)
        if units is None:
            return self._zero()
        return self.unit_cost.multiply(units)

    def monthly_profit(self, month: str) -> Money:
        return self.monthly_revenue(month).subtract(self.monthly_cost(month))

    def monthly_margin(self, month: str) -> float:
        revenue = self.monthly_revenue(month)
        if revenue.is_zero():
            return 0.0
        return self.monthly_profit(month).ratio(revenue)

    def net_revenue(
        self,
        month: str,
        discounts: Optional[Money] = None,
        returns: Optional[Money] = None,
        allowances: Optional[Money] = None,
    ) -> Money:
        """Monthly revenue less whichever deductions are supplied"""
        net = self.monthly_revenue(month)
        for deduction in (discounts, returns, allowances):
            if deduction is not None:
                net = net.subtract(deduction)
        return net

    def net_profit(
        self,
        month: str,
        operating_expenses: Optional[Money] = None,
        taxes: Optional[Money] = None,
        discounts: Optional[Money] = None,
        returns: Optional[Money] = None,
        allowances: Optional[Money] = None,
    ) -> Money:
        """Net revenue for the month less operating expenses and taxes"""
        net = self.net_revenue(month, discounts, returns, allowances)
        for deduction in (operating_expenses, taxes):
            if deduction is not None:
                net = net.subtract(deduction)
        return net

    # Net income is the same figure as net profit
    net_income = net_profit

    def monthly_snapshot(self, month: str) -> MonthlySnapshot:
        return MonthlySnapshot(
            month=month,
            revenue=self.monthly_revenue(month),
            cost=self.monthly_cost(month),
            profit=self.monthly_profit(month),
            margin=self.monthly_margin(month),
            net_revenue=self.net_revenue(month),
            net_income=self.net_income(month),
        )
