"""
Tests for projecting February..December from January
"""
import pytest

from groupbudget.application.projection import ProjectionEngine, projected_value
from groupbudget.domain.budget_entry import BudgetEntry
from groupbudget.domain.category import CATEGORY_TYPE_INCOME
from groupbudget.domain.company import ConsolidatedView, RealCompany
from groupbudget.domain.errors import BudgetValidationError


SALES = RealCompany("Group Sales")


def _entry(month, **kwargs):
    return BudgetEntry(
        company="Group Sales", category=CATEGORY_TYPE_INCOME, concept="Consulting Services",
        month=month, year=2026, version_id="base", **kwargs,
    )


def _project(store, target, method, measure="plan", growth_rate=0.0, company=SALES):
    return ProjectionEngine().project(
        store, company, CATEGORY_TYPE_INCOME, "Consulting Services", target, method, measure, growth_rate,
    )


class TestReplicate:
    def test_quantity_uses_each_months_price(self, store):
        store.upsert(_entry(1, plan_units=10, plan_value=1000))  # price 100
        store.upsert(_entry(4, plan_units=2, plan_value=300))  # price 150

        batch = _project(store, "Q", "replicate")
        by_month = {e.month: e for e in batch}

        assert len(batch) == 11
        assert sorted(by_month) == list(range(2, 13))
        assert all(e.plan_units == 10 for e in batch)
        assert by_month[4].plan_value == 1500
        assert by_month[7].plan_value == 1000  # empty month takes January's price

    def test_price_on_empty_months(self, store):
        store.upsert(_entry(1, plan_units=5, plan_value=250))  # price 50
        batch = _project(store, "P", "replicate")
        assert all((e.plan_units, e.plan_value) == (1, 50) for e in batch)

    def test_projection_does_not_touch_store(self, store):
        store.upsert(_entry(1, plan_units=10, plan_value=1000))
        _project(store, "Q", "replicate")
        assert len(store) == 1


class TestCompound:
    def test_price_grows_from_fixed_january_base(self, store):
        store.upsert(_entry(1, plan_units=1, plan_value=100))
        store.upsert(_entry(2, plan_units=1, plan_value=999))  # ignored as a base

        by_month = {e.month: e for e in _project(store, "P", "compound", growth_rate=10)}

        assert by_month[2].unit_price("plan") == pytest.approx(110)
        assert by_month[3].unit_price("plan") == pytest.approx(121)
        assert by_month[12].unit_price("plan") == pytest.approx(100 * 1.1 ** 11)

    def test_minus_hundred_percent_zeroes_later_months(self, store):
        store.upsert(_entry(1, plan_units=8, plan_value=800))
        batch = _project(store, "Q", "compound", growth_rate=-100)
        assert all(e.plan_units == 0 and e.plan_value == 0 for e in batch)

    def test_zero_base_projects_zeros(self, store):
        batch = _project(store, "Q", "compound", growth_rate=25)
        assert len(batch) == 11
        assert all(e.plan_units == 0 for e in batch)

    def test_growth_rate_as_text(self, store):
        store.upsert(_entry(1, real_units=10, real_value=100))
        by_month = {e.month: e for e in _project(store, "Q", "compound", "real", growth_rate="5,0")}
        assert by_month[2].real_units == pytest.approx(10.5)
        assert by_month[2].plan_units == 0

    def test_projected_value(self):
        assert projected_value(100, "replicate", 50, 6) == 100
        assert projected_value(100, "compound", 10, 1) == 100


def test_consolidated_view_yields_empty_batch(store):
    store.upsert(_entry(1, plan_units=10, plan_value=1000))
    batch = _project(store, "Q", "replicate", company=ConsolidatedView())
    assert len(batch) == 0
    assert len(store) == 1


def test_unknown_method_rejected(store):
    with pytest.raises(BudgetValidationError):
        _project(store, "Q", "linear")


def test_unknown_target_rejected(store):
    with pytest.raises(BudgetValidationError):
        _project(store, "T", "replicate")
