"""Monthly capacity plan - generation, resizing and redistribution of planned units"""

import math
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Callable, Iterable, List, Optional, Union

from service_planner.domain.enums import CapacityPeriodResizeMode
from service_planner.domain.exceptions import (
    DuplicateMonthError,
    EmptyPlanError,
    InvalidArgumentError,
    InvalidRangeError,
    MonthNotFoundError,
)
from service_planner.domain.models import MonthlyCapacity
from service_planner.utils.date_utils import (
    StartInput,
    months_in_period,
    normalize_start_month,
    offset_months,
    require_month_key,
)


def split_units(total: int, parts: int) -> List[int]:
    """
    Split an integer total into `parts` near-equal integer shares.

    Requirements:
    - Shares sum exactly to total (no rounding loss)
    - Any two shares differ by at most one unit
    - The first `total % parts` shares carry the extra unit

    Example:
        1000 units over 3 months → [334, 333, 333]
        1000 // 3 = 333 base, remainder 1
        First month: 333 + 1 = 334
    """
    if parts <= 0:
        raise InvalidArgumentError("Parts must be a positive integer")

    base, remainder = divmod(total, parts)
    return [base + (1 if i < remainder else 0) for i in range(parts)]


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero, at any magnitude"""
    if not math.isfinite(value):
        raise InvalidArgumentError("Capacity value is out of range")

    exact = Decimal(value)
    with localcontext() as ctx:
        # Enough digits to hold the integer part exactly
        ctx.prec = max(ctx.prec, exact.adjusted() + 2)
        return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _check_units(value: object, name: str = "Capacity") -> int:
    if not _is_int(value):
        raise InvalidArgumentError(f"{name} must be an integer")
    if value < 0:  # type: ignore[operator]
        raise InvalidArgumentError(f"{name} cannot be negative")
    return value  # type: ignore[return-value]


def _check_adjustment(value: object) -> Optional[int]:
    if value is not None and not _is_int(value):
        raise InvalidArgumentError("Adjustment must be an integer")
    return value  # type: ignore[return-value]


class CapacityPlanner:
    """
    Owns the chronologically ordered capacity plan of one service.

    Every successful mutation calls `on_change`, which the owning service
    uses to mark its finance cache dirty. Reads hand out copies so callers
    can never mutate the plan behind the planner's back.
    """

    def __init__(
        self,
        entries: Optional[Iterable[MonthlyCapacity]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._entries: List[MonthlyCapacity] = self._validated_copy(entries or [])
        self._on_change = on_change

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    @staticmethod
    def _validated_copy(entries: Iterable[MonthlyCapacity]) -> List[MonthlyCapacity]:
        """Validate every entry before anything is assigned"""
        copied: List[MonthlyCapacity] = []
        seen = set()
        for entry in entries:
            require_month_key(entry.month)
            _check_units(entry.capacity)
            _check_adjustment(entry.adjustment)
            if entry.month in seen:
                raise DuplicateMonthError(f"Month {entry.month} appears more than once")
            seen.add(entry.month)
            copied.append(replace(entry))

        copied.sort(key=lambda e: e.month)
        return copied

    def _find(self, month: str) -> Optional[MonthlyCapacity]:
        for entry in self._entries:
            if entry.month == month:
                return entry
        return None

    def _require(self, month: str) -> MonthlyCapacity:
        require_month_key(month)
        entry = self._find(month)
        if entry is None:
            raise MonthNotFoundError(f"Month {month} not found")
        return entry

    # ------------------ queries ------------------

    def __len__(self) -> int:
        return len(self._entries)

    def has_entries(self) -> bool:
        return len(self._entries) > 0

    @property
    def entries(self) -> List[MonthlyCapacity]:
        return [replace(e) for e in self._entries]

    def get(self, month: str) -> Optional[MonthlyCapacity]:
        """Copy of the entry for a month, or None when unplanned"""
        require_month_key(month)
        entry = self._find(month)
        return replace(entry) if entry is not None else None

    @property
    def total_capacity(self) -> int:
        """Sum of effective units (capacity + adjustment) across all months"""
        return sum(e.effective_units for e in self._entries)

    @property
    def average_monthly_capacity(self) -> float:
        if not self._entries:
            return 0
        return self.total_capacity / len(self._entries)

    @property
    def earliest_month(self) -> Optional[str]:
        if not self._entries:
            return None
        return min(e.month for e in self._entries)

    @property
    def latest_month(self) -> Optional[str]:
        if not self._entries:
            return None
        return max(e.month for e in self._entries)

    @property
    def entry_with_max_supply(self) -> Optional[MonthlyCapacity]:
        """Entry with the most effective units; ties keep the first in plan order"""
        if not self._entries:
            return None
        best = self._entries[0]
        for entry in self._entries[1:]:
            if entry.effective_units > best.effective_units:
                best = entry
        return replace(best)

    @property
    def entry_with_min_supply(self) -> Optional[MonthlyCapacity]:
        """Entry with the fewest effective units; ties keep the first in plan order"""
        if not self._entries:
            return None
        best = self._entries[0]
        for entry in self._entries[1:]:
            if entry.effective_units < best.effective_units:
                best = entry
        return replace(best)

    # ------------------ mutations ------------------

    def generate(
        self,
        months: int,
        base_amount: Union[int, float, Decimal],
        growth_rate: Union[int, float, Decimal] = 0,
        start: StartInput = None,
    ) -> None:
        """
        Replace the plan with `months` consecutive entries from `start`.

        Month i gets round(base_amount * (1 + growth_rate) ** i). Growth
        compounds on the unrounded running value; only the stored capacity
        is rounded (half away from zero).
        """
        if not _is_int(months) or months <= 0:
            raise InvalidArgumentError("Months must be a positive integer")

        if not _is_number(base_amount) or not math.isfinite(base_amount) or base_amount < 0:
            raise InvalidArgumentError("Amount must be a non-negative number")

        if not _is_number(growth_rate) or not math.isfinite(growth_rate) or growth_rate < 0:
            raise InvalidArgumentError("Growth rate must be a non-negative number")

        start_month = normalize_start_month(start)
        current_units = float(base_amount)
        plan: List[MonthlyCapacity] = []

        for i in range(months):
            plan.append(
                MonthlyCapacity(
                    month=offset_months(start_month, i),
                    capacity=round_half_away_from_zero(current_units),
                )
            )
            if growth_rate > 0:
                current_units *= 1 + float(growth_rate)

        self.set_all(plan)

    def set_all(self, entries: Iterable[MonthlyCapacity]) -> None:
        """Replace the plan wholesale; one invalid entry rejects the whole batch"""
        self._entries = self._validated_copy(entries)
        self._changed()

    def add(self, month: str, capacity: int, adjustment: Optional[int] = None) -> None:
        require_month_key(month)
        _check_units(capacity)
        _check_adjustment(adjustment)

        if self._find(month) is not None:
            raise DuplicateMonthError(
                f"Month {month} already exists. Use update_units or update_adjustment"
            )

        # Keep chronological order
        index = len(self._entries)
        for i, entry in enumerate(self._entries):
            if entry.month > month:
                index = i
                break
        self._entries.insert(index, MonthlyCapacity(month, capacity, adjustment))
        self._changed()

    def update_units(self, month: str, capacity: int) -> None:
        entry = self._require(month)
        entry.capacity = _check_units(capacity)
        self._changed()

    def update_adjustment(self, month: str, adjustment: Optional[int] = None) -> None:
        entry = self._require(month)
        entry.adjustment = _check_adjustment(adjustment)
        self._changed()

    def remove(self, month: str) -> None:
        entry = self._require(month)
        self._entries.remove(entry)
        self._changed()

    def clear(self) -> None:
        self._entries = []
        self._changed()

    def normalize_units(self, amount: int) -> None:
        """Set every entry's capacity (adjustments untouched) to the same amount"""
        _check_units(amount, "Amount")

        if not self._entries:
            raise EmptyPlanError("Capacity plan is empty")

        if len(self._entries) == 1:
            return

        for entry in self._entries:
            entry.capacity = amount
        self._changed()

    def recompute_period(
        self,
        start: str,
        end: str,
        mode: Union[CapacityPeriodResizeMode, str] = CapacityPeriodResizeMode.DEFAULT,
    ) -> None:
        """
        Rebuild the plan so it spans exactly [start, end].

        DEFAULT re-dates the old entries by position: new month i takes
        capacity and adjustment from old entry i, and months past the end
        of the old plan repeat the last old entry.

        DISTRIBUTE spreads the old total effective units evenly over the
        new months (see split_units) and drops adjustments, so the new
        total equals the old one exactly.
        """
        require_month_key(start)
        require_month_key(end)

        try:
            mode = CapacityPeriodResizeMode(mode)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown resize mode: {mode!r}") from e

        if not self._entries:
            raise EmptyPlanError("No existing capacity plan to recompute")

        if start > end:
            raise InvalidRangeError(f"Start month {start} must be <= end month {end}")

        new_length = months_in_period(start, end)
        old_plan = self._entries
        new_plan: List[MonthlyCapacity] = []

        if mode is CapacityPeriodResizeMode.DEFAULT:
            for i in range(new_length):
                source = old_plan[i] if i < len(old_plan) else old_plan[-1]
                new_plan.append(
                    MonthlyCapacity(
                        month=offset_months(start, i),
                        capacity=source.capacity,
                        adjustment=source.adjustment,
                    )
                )
        else:
            shares = split_units(self.total_capacity, new_length)
            for i, share in enumerate(shares):
                new_plan.append(MonthlyCapacity(month=offset_months(start, i), capacity=share))

        self._entries = new_plan
        self._changed()
