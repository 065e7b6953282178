"""
Tests for budget use cases (edit cell, edit rate, projection, maintenance)
"""
import pytest

from groupbudget.application.budget import (
    ApplyProjectionUseCase, BudgetRepository, ConfigRepository, EditCellUseCase, EditRateUseCase,
    RemoveCompanyDataUseCase, RemoveConceptDataUseCase, RenameCompanyUseCase, RenameConceptUseCase,
)
from groupbudget.domain.category import CATEGORY_TYPE_INCOME
from groupbudget.domain.company import ConsolidatedView, RealCompany
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.domain.taxonomy import default_config


class RecordingRepository(BudgetRepository):
    """In-memory persistence collaborator that records every call."""

    def __init__(self):
        self.calls = []

    def load_scenario(self, version_id):
        return [], []

    def save_entry(self, entry):
        self.calls.append(("save_entry", entry))

    def save_rate(self, rate):
        self.calls.append(("save_rate", rate))

    def save_batch(self, entries):
        self.calls.append(("save_batch", entries))

    def delete_company_data(self, company):
        self.calls.append(("delete_company_data", company))
        return 0

    def delete_concept_data(self, category, concept):
        self.calls.append(("delete_concept_data", category, concept))
        return 0

    def rename_company_data(self, old_name, new_name):
        self.calls.append(("rename_company_data", old_name, new_name))
        return 0

    def rename_concept_data(self, category, old_name, new_name):
        self.calls.append(("rename_concept_data", category, old_name, new_name))
        return 0


@pytest.fixture
def repo():
    return RecordingRepository()


SALES = RealCompany("Group Sales")


class TestEditCell:
    def test_edit_updates_store_and_persists(self, store, repo):
        uc = EditCellUseCase(store, repo)
        uc.execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "Q", 10, "plan")
        entry = uc.execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", "1500", "plan")

        assert (entry.plan_units, entry.plan_value) == (10, 15000)
        assert store.get_entry("Group Sales", CATEGORY_TYPE_INCOME, "Consulting Services", 1) == entry
        assert [c[0] for c in repo.calls] == ["save_entry", "save_entry"]
        assert repo.calls[-1][1] == entry

    def test_consolidated_edit_is_noop(self, store, repo):
        EditCellUseCase(store, repo).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 100, "plan")
        before = store.entries()

        result = EditCellUseCase(store, repo).execute(
            ConsolidatedView(), CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 999, "plan",
        )

        assert result is None
        assert store.entries() == before
        assert len(repo.calls) == 1

    def test_unassigned_concept_rejected(self, store, repo):
        store.config.assignments[(CATEGORY_TYPE_INCOME, "SaaS Licenses")] = {"Group Tech"}
        with pytest.raises(BudgetValidationError):
            EditCellUseCase(store, repo).execute(SALES, CATEGORY_TYPE_INCOME, "SaaS Licenses", 1, "Q", 1, "plan")
        assert repo.calls == []

    def test_unknown_company_rejected(self, store):
        with pytest.raises(BudgetValidationError):
            EditCellUseCase(store).execute(RealCompany("Ghost"), CATEGORY_TYPE_INCOME, "SaaS Licenses", 1, "Q", 1, "plan")

    def test_unknown_concept_rejected(self, store):
        with pytest.raises(BudgetValidationError):
            EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Lottery", 1, "Q", 1, "plan")

    def test_bad_month_rejected(self, store):
        with pytest.raises(BudgetValidationError):
            EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "SaaS Licenses", 13, "Q", 1, "plan")


class TestEditRate:
    def test_set_rate(self, store, repo):
        rate = EditRateUseCase(store, repo).execute(RealCompany("Group Tech"), 2, "1040", "real")
        assert rate.real_rate == 1040
        assert rate.plan_rate == 0
        assert store.get_rate("Group Tech", 2) == rate
        assert repo.calls == [("save_rate", rate)]

    def test_consolidated_rate_edit_is_noop(self, store, repo):
        assert EditRateUseCase(store, repo).execute(ConsolidatedView(), 2, 1040, "plan") is None
        assert store.rates() == []
        assert repo.calls == []


class TestApplyProjection:
    def test_applies_batch_once(self, store, repo):
        EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 1500, "plan")
        EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "Q", 10, "plan")

        batch = ApplyProjectionUseCase(store, repo).execute(
            SALES, CATEGORY_TYPE_INCOME, "Consulting Services", "Q", "replicate", "plan",
        )

        assert len(batch) == 11
        assert len(store) == 12
        assert len(repo.calls) == 1
        assert repo.calls[0][0] == "save_batch"
        assert store.get_entry("Group Sales", CATEGORY_TYPE_INCOME, "Consulting Services", 12).plan_value == 15000

    def test_consolidated_projection_is_noop(self, store, repo):
        batch = ApplyProjectionUseCase(store, repo).execute(
            ConsolidatedView(), CATEGORY_TYPE_INCOME, "Consulting Services", "Q", "replicate", "plan",
        )
        assert len(batch) == 0
        assert len(store) == 0
        assert repo.calls == []


class TestMaintenance:
    def test_remove_and_rename(self, store, repo):
        EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 10, "plan")
        EditCellUseCase(store).execute(RealCompany("Group Tech"), CATEGORY_TYPE_INCOME, "SaaS Licenses", 1, "P", 10, "plan")

        assert RenameConceptUseCase(store, repo).execute(CATEGORY_TYPE_INCOME, "Consulting Services", "Advisory") == 1
        assert RenameCompanyUseCase(store, repo).execute("Group Tech", " Group Technology ") == 1
        assert RemoveConceptDataUseCase(store, repo).execute(CATEGORY_TYPE_INCOME, "Advisory") == 1
        assert RemoveCompanyDataUseCase(store, repo).execute("Group Technology") == 1
        assert len(store) == 0
        assert [c[0] for c in repo.calls] == [
            "rename_concept_data", "rename_company_data", "delete_concept_data", "delete_company_data",
        ]

    def test_rename_to_same_name_is_noop(self, store, repo):
        assert RenameCompanyUseCase(store, repo).execute("Group Sales", "Group Sales") == 0
        assert repo.calls == []

    def test_rename_to_blank_rejected(self, store):
        with pytest.raises(BudgetValidationError):
            RenameConceptUseCase(store).execute(CATEGORY_TYPE_INCOME, "SaaS Licenses", "   ")

    def test_rename_company_onto_existing_company_rejected(self, store, repo):
        EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 15000, "plan")
        EditCellUseCase(store).execute(RealCompany("Group Tech"), CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 7, "plan")

        with pytest.raises(BudgetValidationError, match="already exists"):
            RenameCompanyUseCase(store, repo).execute("Group Tech", "Group Sales")

        assert store.get_entry("Group Sales", CATEGORY_TYPE_INCOME, "Consulting Services", 1).plan_value == 15000
        assert store.get_entry("Group Tech", CATEGORY_TYPE_INCOME, "Consulting Services", 1).plan_value == 7
        assert repo.calls == []

    def test_rename_concept_onto_existing_concept_rejected(self, store, repo):
        EditCellUseCase(store).execute(SALES, CATEGORY_TYPE_INCOME, "Consulting Services", 1, "P", 15000, "plan")

        with pytest.raises(BudgetValidationError, match="already exists"):
            RenameConceptUseCase(store, repo).execute(CATEGORY_TYPE_INCOME, "SaaS Licenses", "Consulting Services")

        assert store.get_entry("Group Sales", CATEGORY_TYPE_INCOME, "Consulting Services", 1).plan_value == 15000
        assert repo.calls == []

    def test_rename_unknown_company_rejected(self, store, repo):
        with pytest.raises(BudgetValidationError, match="Unknown company"):
            RenameCompanyUseCase(store, repo).execute("Group Retail", "Group Stores")


class RecordingConfigRepository(ConfigRepository):
    """Configuration collaborator over the default group that records every call."""

    def __init__(self, calls):
        self.calls = calls

    def load_config(self):
        return default_config()

    def add_company(self, company):
        self.calls.append(("add_company", company.name))

    def update_company_currency(self, name, currency):
        self.calls.append(("update_company_currency", name, currency))

    def rename_company(self, old_name, new_name):
        self.calls.append(("rename_company", old_name, new_name))

    def delete_company(self, name):
        self.calls.append(("delete_company", name))

    def add_concept(self, category, name):
        self.calls.append(("add_concept", category, name))

    def rename_concept(self, category, old_name, new_name):
        self.calls.append(("rename_concept", category, old_name, new_name))

    def delete_concept(self, category, name):
        self.calls.append(("delete_concept", category, name))

    def assign_concept(self, company, category, concept):
        self.calls.append(("assign_concept", company, category, concept))

    def unassign_concept(self, company, category, concept):
        self.calls.append(("unassign_concept", company, category, concept))


class TestMaintenanceWithConfig:
    def test_rename_company_updates_config_then_data(self, repo):
        config_repo = RecordingConfigRepository(repo.calls)
        RenameCompanyUseCase(None, repo, config_repo).execute("Group Tech", "Group Technology")

        assert repo.calls == [
            ("rename_company", "Group Tech", "Group Technology"),
            ("rename_company_data", "Group Tech", "Group Technology"),
        ]

    def test_rename_company_collision_checked_against_config(self, repo):
        config_repo = RecordingConfigRepository(repo.calls)
        with pytest.raises(BudgetValidationError, match="already exists"):
            RenameCompanyUseCase(None, repo, config_repo).execute("Group Tech", "Group Consulting")
        assert repo.calls == []

    def test_rename_concept_collision_checked_against_config(self, repo):
        config_repo = RecordingConfigRepository(repo.calls)
        with pytest.raises(BudgetValidationError, match="already exists"):
            RenameConceptUseCase(None, repo, config_repo).execute(
                CATEGORY_TYPE_INCOME, "SaaS Licenses", "Consulting Services",
            )
        assert repo.calls == []

    def test_remove_company_deletes_config_and_data(self, repo):
        config_repo = RecordingConfigRepository(repo.calls)
        RemoveCompanyDataUseCase(None, repo, config_repo).execute("Group Tech")
        assert repo.calls == [("delete_company", "Group Tech"), ("delete_company_data", "Group Tech")]

    def test_remove_concept_deletes_config_and_data(self, repo):
        config_repo = RecordingConfigRepository(repo.calls)
        RemoveConceptDataUseCase(None, repo, config_repo).execute(CATEGORY_TYPE_INCOME, "SaaS Licenses")
        assert repo.calls == [
            ("delete_concept", CATEGORY_TYPE_INCOME, "SaaS Licenses"),
            ("delete_concept_data", CATEGORY_TYPE_INCOME, "SaaS Licenses"),
        ]
