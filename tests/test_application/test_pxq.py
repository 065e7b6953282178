"""
Tests for PxQ reconciliation
"""
import pytest

from groupbudget.application.pxq import fold_quantity, fold_unit_price, reconcile
from groupbudget.domain.budget_entry import BudgetEntry
from groupbudget.domain.category import CATEGORY_TYPE_DIRECT_COSTS
from groupbudget.domain.errors import BudgetValidationError


def _entry(**kwargs):
    return BudgetEntry(
        company="Group Tech", category=CATEGORY_TYPE_DIRECT_COSTS, concept="Freelancers",
        month=4, year=2026, version_id="base", **kwargs,
    )


def test_price_edit_on_empty_entry_forces_one_unit():
    updated = reconcile(_entry(), "P", 50, "plan")
    assert (updated.plan_units, updated.plan_value) == (1, 50)


def test_quantity_edit_keeps_unit_price():
    updated = reconcile(_entry(plan_units=10, plan_value=500), "Q", 20, "plan")
    assert (updated.plan_units, updated.plan_value) == (20, 1000)


def test_price_edit_scales_total():
    updated = reconcile(_entry(real_units=4, real_value=400), "P", "125", "real")
    assert (updated.real_units, updated.real_value) == (4, 500)


def test_zero_price_on_empty_entry_stays_empty():
    assert fold_unit_price(0, 0) == (0, 0)


def test_quantity_edit_without_price_gives_zero_total():
    assert fold_quantity(0, 0, 8) == (8, 0)


def test_non_numeric_input_counts_as_zero():
    updated = reconcile(_entry(plan_units=10, plan_value=500), "Q", "abc", "plan")
    assert (updated.plan_units, updated.plan_value) == (0, 0)


def test_other_measure_untouched():
    updated = reconcile(_entry(plan_units=10, plan_value=500, real_units=3, real_value=90), "Q", 5, "plan")
    assert (updated.real_units, updated.real_value) == (3, 90)


def test_unit_price_stays_consistent_over_edit_sequence():
    entry = _entry()
    for field, value in [("P", 50), ("Q", 7), ("P", 12.5), ("Q", 3), ("Q", 0), ("P", 80), ("Q", 11)]:
        entry = reconcile(entry, field, value, "plan")
        price = entry.unit_price("plan")
        assert entry.plan_value == pytest.approx(entry.plan_units * price)


def test_unknown_field_rejected():
    with pytest.raises(BudgetValidationError):
        reconcile(_entry(), "T", 10, "plan")
