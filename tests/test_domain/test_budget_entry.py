"""
Tests for BudgetEntry and ExchangeRate records
"""
import pytest

from groupbudget.domain.budget_entry import BudgetEntry, derive_unit_price
from groupbudget.domain.category import CATEGORY_TYPE_INCOME
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.domain.exchange_rate import ExchangeRate


def _entry(**kwargs):
    data = dict(
        company="Group Sales", category=CATEGORY_TYPE_INCOME, concept="Consulting Services",
        month=1, year=2026, version_id="base",
    )
    data.update(kwargs)
    return BudgetEntry(**data)


def test_unit_price_is_derived():
    entry = _entry(plan_units=10, plan_value=15000, real_units=9, real_value=14500)
    assert entry.unit_price("plan") == 1500
    assert entry.unit_price("real") == pytest.approx(14500 / 9)


def test_unit_price_zero_without_units():
    assert derive_unit_price(500, 0) == 0.0
    assert _entry(plan_value=500).unit_price("plan") == 0.0


def test_with_measure_leaves_other_measure():
    entry = _entry(plan_units=10, plan_value=15000, real_units=9, real_value=14500)
    updated = entry.with_measure("plan", 20, 30000)
    assert (updated.plan_units, updated.plan_value) == (20, 30000)
    assert (updated.real_units, updated.real_value) == (9, 14500)
    assert entry.plan_units == 10  # original untouched


def test_key_ignores_storage_id():
    assert _entry(id="7").key == _entry().key


def test_invalid_month_rejected():
    with pytest.raises(BudgetValidationError):
        _entry(month=13)
    with pytest.raises(BudgetValidationError):
        _entry(month=0)


def test_invalid_category_rejected():
    with pytest.raises(BudgetValidationError):
        _entry(category="Taxes")


def test_unknown_measure_rejected():
    with pytest.raises(BudgetValidationError):
        _entry().units("forecast")


def test_rate_availability():
    rate = ExchangeRate(company="Group Tech", month=1, year=2026, version_id="base", plan_rate=1020)
    assert rate.is_available("plan")
    assert not rate.is_available("real")
    assert rate.with_rate("real", 1050).real_rate == 1050
    assert rate.with_rate("real", 1050).plan_rate == 1020
