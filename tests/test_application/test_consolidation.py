"""
Tests for the consolidated (group) view
"""
import pytest

from groupbudget.application.consolidation import ConsolidationEngine
from groupbudget.application.entry_store import EntryStore
from groupbudget.domain.budget_entry import BudgetEntry
from groupbudget.domain.category import CATEGORY_TYPE_INCOME
from groupbudget.domain.company import CONSOLIDATED_NAME, CompanyDetail
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.domain.exchange_rate import ExchangeRate
from groupbudget.domain.taxonomy import BudgetConfig, default_config


def _entry(company, concept="Consulting Services", month=1, **kwargs):
    return BudgetEntry(
        company=company, category=CATEGORY_TYPE_INCOME, concept=concept,
        month=month, year=2026, version_id="base", **kwargs,
    )


@pytest.fixture
def two_company_store():
    config = BudgetConfig(
        companies=[
            CompanyDetail(id="a", name="Company A", currency="USD"),
            CompanyDetail(id="b", name="Company B", currency="ARS"),
        ],
        categories={CATEGORY_TYPE_INCOME: ["Consulting Services"]},
    )
    store = EntryStore("base", config)
    store.upsert(_entry("Company A", plan_units=2, plan_value=1000))
    store.upsert(_entry("Company B", plan_units=4, plan_value=2_000_000))
    store.upsert(ExchangeRate(company="Company B", month=1, year=2026, version_id="base", plan_rate=1000))
    return store


def test_sums_converted_values(two_company_store):
    engine = ConsolidationEngine(two_company_store.config)
    cell = engine.consolidate(two_company_store, CATEGORY_TYPE_INCOME, "Consulting Services", 1)

    assert cell.plan_value == 3000
    assert cell.plan_units == 6
    assert cell.unit_price("plan") == 500  # average, not a sum of prices
    assert cell.contributors == ("Company A", "Company B")
    assert cell.missing_rates == ()


def test_consolidated_entry_identity(two_company_store):
    cell = ConsolidationEngine(two_company_store.config).consolidate(
        two_company_store, CATEGORY_TYPE_INCOME, "Consulting Services", 1,
    )
    assert cell.company == CONSOLIDATED_NAME
    assert cell.read_only
    assert cell.version_id == "base"


def test_missing_rate_recorded(two_company_store):
    two_company_store.upsert(_entry("Company B", month=2, real_units=1, real_value=5000))
    cell = ConsolidationEngine(two_company_store.config).consolidate(
        two_company_store, CATEGORY_TYPE_INCOME, "Consulting Services", 2,
    )
    assert cell.real_value == 5000
    assert cell.missing_rates == (("Company B", "real"),)


def test_unassigned_company_still_contributes_through_others(store, config):
    config.assignments[(CATEGORY_TYPE_INCOME, "Consulting Services")] = {"Group Sales"}
    store.upsert(_entry("Group Sales", plan_units=1, plan_value=100))
    store.upsert(_entry("Group Consulting", plan_units=1, plan_value=1800))

    cell = ConsolidationEngine(config).consolidate(store, CATEGORY_TYPE_INCOME, "Consulting Services", 1)
    assert cell.plan_value == 100
    assert cell.contributors == ("Group Sales",)


def test_consolidate_row_returns_twelve_months(two_company_store):
    row = ConsolidationEngine(two_company_store.config).consolidate_row(
        two_company_store, CATEGORY_TYPE_INCOME, "Consulting Services",
    )
    assert [c.month for c in row] == list(range(1, 13))
    assert row[0].plan_value == 3000
    assert row[5].plan_value == 0


def test_does_not_modify_store(two_company_store):
    before = two_company_store.entries()
    ConsolidationEngine(two_company_store.config).consolidate_row(
        two_company_store, CATEGORY_TYPE_INCOME, "Consulting Services",
    )
    assert two_company_store.entries() == before


def test_bad_month_rejected():
    store = EntryStore("base", default_config())
    with pytest.raises(BudgetValidationError):
        ConsolidationEngine(store.config).consolidate(store, CATEGORY_TYPE_INCOME, "SaaS Licenses", 0)
