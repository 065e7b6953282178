"""
Seed the demo group: three companies, the default concept taxonomy,
a base scenario with a few months of plan/real figures and an optimistic copy.
Run:  python seed_demo_data.py
"""
# ── bootstrap ────────────────────────────────────────────────────
from groupbudget.config import get_settings
from groupbudget.infrastructure.db.session import get_session_factory
from groupbudget.infrastructure.db.models import CompanyModel, ConceptModel
from groupbudget.infrastructure.repository import (
    SqlBudgetRepository, SqlConfigRepository, SqlScenarioRepository, load_store,
)
from groupbudget.application.budget import EditRateUseCase
from groupbudget.application.entry_store import EntryBatch
from groupbudget.domain.budget_entry import BudgetEntry, MEASURE_PLAN, MEASURE_REAL, MONTHS
from groupbudget.domain.category import CATEGORY_TYPE_INCOME, CATEGORY_TYPES, DEFAULT_CATEGORIES
from groupbudget.domain.company import DEFAULT_COMPANIES, RealCompany

BASE_ID = "base-2026"

settings = get_settings()
db = get_session_factory()()

# ═══════════════════════════════════════════════════════════════
# Phase 1: Companies and concepts
# ═══════════════════════════════════════════════════════════════
config_repo = SqlConfigRepository(db)

if db.query(CompanyModel).count() == 0:
    for company in DEFAULT_COMPANIES:
        config_repo.add_company(company)
    print(f"Companies: {len(DEFAULT_COMPANIES)}")
else:
    print("Companies exist, skipping")

if db.query(ConceptModel).count() == 0:
    for category in CATEGORY_TYPES:
        for concept in DEFAULT_CATEGORIES[category]:
            config_repo.add_concept(category, concept)
    print("Concepts: default taxonomy")
else:
    print("Concepts exist, skipping")

db.commit()

# ═══════════════════════════════════════════════════════════════
# Phase 2: Base scenario
# ═══════════════════════════════════════════════════════════════
scenario_repo = SqlScenarioRepository(db)
existing = {s.id for s in scenario_repo.list_scenarios()}
if BASE_ID in existing:
    print("Base scenario exists, nothing to do")
    db.close()
    raise SystemExit(0)

scenario_repo.create_scenario("Base Budget 2026", scenario_id=BASE_ID)
scenario_repo.activate(BASE_ID)

store = load_store(db, BASE_ID, settings)
repo = SqlBudgetRepository(db)


def income(company, concept, month, plan_units=0.0, plan_value=0.0, real_units=0.0, real_value=0.0):
    return BudgetEntry(
        company=company,
        category=CATEGORY_TYPE_INCOME,
        concept=concept,
        month=month,
        year=store.year,
        version_id=BASE_ID,
        plan_units=plan_units,
        plan_value=plan_value,
        real_units=real_units,
        real_value=real_value,
    )


entries = [
    # Group Sales (USD): 10 consulting days at 1,500 for Q1
    income("Group Sales", "Consulting Services", 1, 10, 15000, 9, 14500),
    income("Group Sales", "Consulting Services", 2, 10, 15000),
    income("Group Sales", "Consulting Services", 3, 10, 15000),
    # Group Tech (ARS): 50 SaaS licenses at 100,000
    income("Group Tech", "SaaS Licenses", 1, 50, 5000000, 52, 5200000),
    income("Group Tech", "SaaS Licenses", 2, 50, 5000000),
    income("Group Tech", "SaaS Licenses", 3, 50, 5000000),
]
batch = EntryBatch(tuple(entries))
repo.save_batch(store.apply_batch(batch))

edit_rate = EditRateUseCase(store, repo)
for month in MONTHS:
    edit_rate.execute(RealCompany("Group Tech"), month, 1000 + month * 20, MEASURE_PLAN)
    edit_rate.execute(RealCompany("Group Consulting"), month, 18, MEASURE_PLAN)
edit_rate.execute(RealCompany("Group Tech"), 1, 1050, MEASURE_REAL)
edit_rate.execute(RealCompany("Group Consulting"), 1, 17.5, MEASURE_REAL)

db.commit()
print(f"Base scenario: {len(store)} entries")

# ═══════════════════════════════════════════════════════════════
# Phase 3: Optimistic scenario starts as a copy of the base
# ═══════════════════════════════════════════════════════════════
optimistic = scenario_repo.clone_scenario(BASE_ID, "Optimistic Scenario", "Copy of the base budget")
db.commit()
print(f"Scenario: {optimistic.name} ({optimistic.id})")

db.close()
print("Done")
