"""Unit tests for capacity plan generation, resizing and redistribution"""

import pytest

from service_planner.domain.capacity import CapacityPlanner, round_half_away_from_zero, split_units
from service_planner.domain.enums import CapacityPeriodResizeMode
from service_planner.domain.exceptions import (
    DuplicateMonthError,
    EmptyPlanError,
    InvalidArgumentError,
    InvalidRangeError,
    MonthNotFoundError,
)
from service_planner.domain.models import MonthlyCapacity


class ChangeCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


@pytest.fixture
def changes() -> ChangeCounter:
    return ChangeCounter()


@pytest.fixture
def planner(changes: ChangeCounter) -> CapacityPlanner:
    return CapacityPlanner(on_change=changes)


def test_split_units_even():
    """Test even division leaves no remainder"""
    assert split_units(1920, 12) == [160] * 12


def test_split_units_remainder_goes_to_first_months():
    """Test remainder spreads one unit each over the first months"""
    shares = split_units(1000, 3)

    assert shares == [334, 333, 333]
    assert sum(shares) == 1000


@pytest.mark.parametrize("total,parts", [(0, 5), (7, 1), (1, 12), (12345, 17), (-5, 3)])
def test_split_units_sum_and_spread(total, parts):
    """Test shares always sum to total and differ by at most one unit"""
    shares = split_units(total, parts)

    assert len(shares) == parts
    assert sum(shares) == total
    assert max(shares) - min(shares) <= 1


def test_round_half_away_from_zero():
    assert round_half_away_from_zero(2.5) == 3
    assert round_half_away_from_zero(3.5) == 4
    assert round_half_away_from_zero(2.4999) == 2


def test_empty_plan_queries(planner: CapacityPlanner):
    """Test queries on an empty plan return neutral values"""
    assert planner.total_capacity == 0
    assert planner.average_monthly_capacity == 0
    assert planner.earliest_month is None
    assert planner.latest_month is None
    assert planner.entry_with_max_supply is None
    assert planner.entry_with_min_supply is None


def test_generate_flat_plan(planner: CapacityPlanner, changes: ChangeCounter):
    """Test 12 months at 160 units with no growth"""
    planner.generate(12, 160, 0, "2025-01")

    entries = planner.entries
    assert len(entries) == 12
    assert entries[0].month == "2025-01"
    assert entries[-1].month == "2025-12"
    assert all(e.capacity == 160 for e in entries)
    assert planner.total_capacity == 1920
    assert changes.calls == 1


def test_generate_compounds_on_unrounded_value(planner: CapacityPlanner):
    """Test growth compounds on the running float, not on rounded capacities"""
    planner.generate(4, 10, 0.05, "2025-11")

    # 10, 10.5, 11.025, 11.57625
    assert [e.capacity for e in planner.entries] == [10, 11, 11, 12]
    assert [e.month for e in planner.entries] == ["2025-11", "2025-12", "2026-01", "2026-02"]


def test_generate_large_base_amount(planner: CapacityPlanner):
    planner.generate(1, 1e30, 0, "2025-01")
    assert planner.entries[0].capacity == int(1e30)


def test_generate_long_compounding_horizon(planner: CapacityPlanner):
    """Test ten years of doubling keeps exact integer capacities"""
    planner.generate(120, 1000, 1.0, "2025-01")

    entries = planner.entries
    assert len(entries) == 120
    assert entries[1].capacity == 2000
    assert entries[-1].capacity == 1000 * 2**119
    assert entries[-1].month == "2034-12"


def test_generate_rejects_overflowing_growth(planner: CapacityPlanner, changes: ChangeCounter):
    planner.generate(2, 5, 0, "2025-01")
    changes.calls = 0

    with pytest.raises(InvalidArgumentError):
        planner.generate(3, 1e308, 10.0, "2025-01")

    assert [e.capacity for e in planner.entries] == [5, 5]
    assert changes.calls == 0


def test_generate_accepts_dates(planner: CapacityPlanner):
    from datetime import date

    planner.generate(2, 5, start=date(2024, 2, 29))
    assert planner.earliest_month == "2024-02"

    planner.generate(1, 5, start="2023-07-15")
    assert planner.earliest_month == "2023-07"


@pytest.mark.parametrize(
    "months,amount,growth",
    [(0, 10, 0), (-1, 10, 0), (1.5, 10, 0), (3, -1, 0), (3, float("inf"), 0), (3, 10, -0.1)],
)
def test_generate_rejects_invalid_arguments(planner: CapacityPlanner, months, amount, growth):
    with pytest.raises(InvalidArgumentError):
        planner.generate(months, amount, growth, "2025-01")


def test_set_all_copies_and_orders(planner: CapacityPlanner):
    """Test set_all never aliases the caller's entries"""
    source = [MonthlyCapacity("2025-02", 20), MonthlyCapacity("2025-01", 10, -2)]
    planner.set_all(source)

    source[0].capacity = 999
    source.append(MonthlyCapacity("2025-03", 1))

    assert [e.month for e in planner.entries] == ["2025-01", "2025-02"]
    assert planner.total_capacity == 28


def test_set_all_rejects_whole_batch(planner: CapacityPlanner, changes: ChangeCounter):
    """Test one bad entry leaves the existing plan unchanged"""
    planner.set_all([MonthlyCapacity("2025-01", 10)])
    changes.calls = 0

    with pytest.raises(InvalidArgumentError):
        planner.set_all([MonthlyCapacity("2025-02", 10), MonthlyCapacity("2025-13", 10)])
    with pytest.raises(InvalidArgumentError):
        planner.set_all([MonthlyCapacity("2025-02", "10")])
    with pytest.raises(DuplicateMonthError):
        planner.set_all([MonthlyCapacity("2025-02", 1), MonthlyCapacity("2025-02", 2)])

    assert [e.month for e in planner.entries] == ["2025-01"]
    assert changes.calls == 0


def test_entries_are_defensive_copies(planner: CapacityPlanner):
    planner.add("2025-01", 10)

    planner.entries[0].capacity = 500
    planner.get("2025-01").capacity = 500
    planner.entry_with_max_supply.capacity = 500

    assert planner.total_capacity == 10


def test_add_and_duplicate_month(planner: CapacityPlanner):
    """Test add keeps chronological order and rejects existing months"""
    planner.add("2025-03", 30)
    planner.add("2025-01", 10, 5)

    assert [e.month for e in planner.entries] == ["2025-01", "2025-03"]
    assert planner.total_capacity == 45

    with pytest.raises(DuplicateMonthError):
        planner.add("2025-03", 1)


def test_update_and_remove(planner: CapacityPlanner, changes: ChangeCounter):
    planner.add("2025-01", 10)
    planner.update_units("2025-01", 12)
    planner.update_adjustment("2025-01", -3)

    assert planner.get("2025-01").effective_units == 9

    planner.update_adjustment("2025-01")
    assert planner.get("2025-01").adjustment is None

    planner.remove("2025-01")
    assert planner.get("2025-01") is None
    assert changes.calls == 5


def test_missing_month_operations(planner: CapacityPlanner):
    planner.add("2025-01", 10)

    with pytest.raises(MonthNotFoundError):
        planner.update_units("2025-02", 1)
    with pytest.raises(MonthNotFoundError):
        planner.update_adjustment("2025-02", 1)
    with pytest.raises(MonthNotFoundError):
        planner.remove("2025-02")
    with pytest.raises(InvalidArgumentError):
        planner.remove("January")


def test_max_min_supply_tie_keeps_first(planner: CapacityPlanner):
    """Test ties resolve to the first entry in plan order"""
    planner.set_all(
        [
            MonthlyCapacity("2025-01", 10, 5),  # 15
            MonthlyCapacity("2025-02", 15),  # 15
            MonthlyCapacity("2025-03", 5),  # 5
            MonthlyCapacity("2025-04", 8, -3),  # 5
        ]
    )

    assert planner.entry_with_max_supply.month == "2025-01"
    assert planner.entry_with_min_supply.month == "2025-03"
    assert planner.average_monthly_capacity == 10


def test_normalize_units(planner: CapacityPlanner, changes: ChangeCounter):
    """Test normalize sets capacity but keeps adjustments"""
    with pytest.raises(EmptyPlanError):
        planner.normalize_units(10)

    planner.add("2025-01", 3, 2)
    changes.calls = 0
    planner.normalize_units(50)
    assert planner.get("2025-01").capacity == 3  # single entry: no-op
    assert changes.calls == 0

    planner.add("2025-02", 7)
    planner.normalize_units(50)
    assert [e.capacity for e in planner.entries] == [50, 50]
    assert planner.get("2025-01").adjustment == 2


def test_recompute_default_extends_with_last_entry(planner: CapacityPlanner):
    """Test longer period copies by position then holds the last entry"""
    planner.set_all(
        [
            MonthlyCapacity("2024-06", 10, 1),
            MonthlyCapacity("2024-07", 20),
            MonthlyCapacity("2024-08", 30, -5),
        ]
    )

    planner.recompute_period("2025-01", "2025-06")

    entries = planner.entries
    assert [e.month for e in entries] == ["2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06"]
    assert [(e.capacity, e.adjustment) for e in entries] == [
        (10, 1),
        (20, None),
        (30, -5),
        (30, -5),
        (30, -5),
        (30, -5),
    ]


def test_recompute_default_trims_by_position(planner: CapacityPlanner):
    """Test shorter period keeps the first entries re-dated, not calendar matches"""
    planner.generate(12, 100, 0.1, "2025-01")
    original = planner.entries

    planner.recompute_period("2025-06", "2025-08", CapacityPeriodResizeMode.DEFAULT)

    entries = planner.entries
    assert [e.month for e in entries] == ["2025-06", "2025-07", "2025-08"]
    assert [e.capacity for e in entries] == [e.capacity for e in original[:3]]


def test_recompute_distribute_even(planner: CapacityPlanner):
    """Test 1920 units redistributed over 12 months gives 160 each"""
    planner.generate(6, 320, 0, "2024-01")

    planner.recompute_period("2025-01", "2025-12", CapacityPeriodResizeMode.DISTRIBUTE)

    entries = planner.entries
    assert len(entries) == 12
    assert all(e.capacity == 160 and e.adjustment is None for e in entries)
    assert planner.total_capacity == 1920


def test_recompute_distribute_includes_adjustments(planner: CapacityPlanner):
    """Test distribute uses effective units and drops adjustments"""
    planner.set_all([MonthlyCapacity("2025-01", 50, 3), MonthlyCapacity("2025-02", 50, -2)])

    planner.recompute_period("2025-01", "2025-07", "distribute")

    # 53 + 48 = 101 units over 7 months: 14 each, remainder 3
    assert [e.capacity for e in planner.entries] == [15, 15, 15, 14, 14, 14, 14]
    assert planner.total_capacity == 101
    assert all(e.adjustment is None for e in planner.entries)


def test_recompute_validation(planner: CapacityPlanner, changes: ChangeCounter):
    with pytest.raises(InvalidArgumentError):
        planner.recompute_period("2025-1", "2025-12")
    with pytest.raises(EmptyPlanError):
        planner.recompute_period("2025-01", "2025-12")

    planner.add("2025-01", 10)
    changes.calls = 0

    with pytest.raises(InvalidRangeError):
        planner.recompute_period("2025-12", "2025-01")
    with pytest.raises(InvalidArgumentError):
        planner.recompute_period("2025-01", "2025-02", "stretch")

    assert planner.total_capacity == 10
    assert changes.calls == 0


def test_recompute_single_month(planner: CapacityPlanner):
    planner.generate(3, 10, 0, "2025-01")

    planner.recompute_period("2026-04", "2026-04", CapacityPeriodResizeMode.DISTRIBUTE)

    assert [(e.month, e.capacity) for e in planner.entries] == [("2026-04", 30)]
