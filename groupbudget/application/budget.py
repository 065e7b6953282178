"""
Budget use cases.

Each use case applies an engine rule to the scenario's EntryStore and forwards
the resulting records to the persistence collaborator, so the store and the
backing database see the same whole records.

Edits routed to the consolidated view are rejected as no-ops (None / empty
batch) and leave every stored record unchanged.

Company and concept maintenance also goes through the configuration
collaborator, so a rename or removal and its data cascade share one session.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from groupbudget.application.entry_store import EntryBatch, EntryStore
from groupbudget.application.projection import ProjectionEngine
from groupbudget.application.pxq import reconcile
from groupbudget.domain.budget_entry import BudgetEntry, check_month, validate_measure
from groupbudget.domain.category import validate_category_type
from groupbudget.domain.company import CompanyDetail, CompanyRef, ConsolidatedView
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.domain.exchange_rate import ExchangeRate
from groupbudget.domain.taxonomy import BudgetConfig
from groupbudget.utils.validation import parse_amount


logger = logging.getLogger(__name__)


class BudgetRepository(ABC):
    """
    Persistence collaborator for entries and rates.

    Identity is the business key (company, category, concept, month, year,
    version); implementations must not rely on storage ids surviving a reload.
    """

    @abstractmethod
    def load_scenario(self, version_id: str) -> Tuple[List[BudgetEntry], List[ExchangeRate]]:
        pass

    @abstractmethod
    def save_entry(self, entry: BudgetEntry) -> None:
        pass

    @abstractmethod
    def save_rate(self, rate: ExchangeRate) -> None:
        pass

    @abstractmethod
    def save_batch(self, entries: List[BudgetEntry]) -> None:
        pass

    @abstractmethod
    def delete_company_data(self, company: str) -> int:
        pass

    @abstractmethod
    def delete_concept_data(self, category: str, concept: str) -> int:
        pass

    @abstractmethod
    def rename_company_data(self, old_name: str, new_name: str) -> int:
        pass

    @abstractmethod
    def rename_concept_data(self, category: str, old_name: str, new_name: str) -> int:
        pass


class ConfigRepository(ABC):
    """Configuration collaborator: companies, concept taxonomy, assignments."""

    @abstractmethod
    def load_config(self) -> BudgetConfig:
        pass

    @abstractmethod
    def add_company(self, company: CompanyDetail) -> None:
        pass

    @abstractmethod
    def update_company_currency(self, name: str, currency: str) -> None:
        pass

    @abstractmethod
    def rename_company(self, old_name: str, new_name: str) -> None:
        pass

    @abstractmethod
    def delete_company(self, name: str) -> None:
        pass

    @abstractmethod
    def add_concept(self, category: str, name: str) -> None:
        pass

    @abstractmethod
    def rename_concept(self, category: str, old_name: str, new_name: str) -> None:
        pass

    @abstractmethod
    def delete_concept(self, category: str, name: str) -> None:
        pass

    @abstractmethod
    def assign_concept(self, company: str, category: str, concept: str) -> None:
        pass

    @abstractmethod
    def unassign_concept(self, company: str, category: str, concept: str) -> None:
        pass


def _check_target(store: EntryStore, company: str, category: str, concept: str) -> None:
    validate_category_type(category)
    config = store.config
    if config.company(company) is None:
        raise BudgetValidationError(f"Unknown company: {company!r}")
    if not config.has_concept(category, concept):
        raise BudgetValidationError(f"Unknown concept: {category}/{concept}")
    if not config.is_assigned(company, category, concept):
        raise BudgetValidationError(f"Concept {concept!r} is not assigned to {company}")


class EditCellUseCase:
    """Edit Quantity or Unit Price of one cell and keep the PxQ triple consistent."""

    def __init__(self, store: EntryStore, repository: BudgetRepository | None = None):
        self.store = store
        self.repository = repository

    def execute(
        self,
        company_ref: CompanyRef,
        category: str,
        concept: str,
        month: int,
        field: str,
        value,
        measure: str,
    ) -> BudgetEntry | None:
        if isinstance(company_ref, ConsolidatedView):
            logger.warning("Edit of consolidated %s/%s month %s rejected", category, concept, month)
            return None

        check_month(month)
        _check_target(self.store, company_ref.name, category, concept)

        current = self.store.get_entry(company_ref.name, category, concept, month)
        updated = reconcile(current, field, value, measure)
        stored = self.store.upsert(updated)
        if self.repository is not None:
            self.repository.save_entry(stored)
        return stored


class EditRateUseCase:
    """Set the plan or real exchange rate of one company and month."""

    def __init__(self, store: EntryStore, repository: BudgetRepository | None = None):
        self.store = store
        self.repository = repository

    def execute(self, company_ref: CompanyRef, month: int, value, measure: str) -> ExchangeRate | None:
        if isinstance(company_ref, ConsolidatedView):
            logger.warning("Rate edit on the consolidated view rejected (month %s)", month)
            return None

        check_month(month)
        validate_measure(measure)
        if self.store.config.company(company_ref.name) is None:
            raise BudgetValidationError(f"Unknown company: {company_ref.name!r}")

        current = self.store.get_rate(company_ref.name, month)
        stored = self.store.upsert(current.with_rate(measure, parse_amount(value)))
        if self.repository is not None:
            self.repository.save_rate(stored)
        return stored


class ApplyProjectionUseCase:
    """Project February..December from January and apply the batch in one call."""

    def __init__(self, store: EntryStore, repository: BudgetRepository | None = None):
        self.store = store
        self.repository = repository
        self.engine = ProjectionEngine()

    def execute(
        self,
        company_ref: CompanyRef,
        category: str,
        concept: str,
        target: str,
        method: str,
        measure: str,
        growth_rate=0.0,
    ) -> EntryBatch:
        if not isinstance(company_ref, ConsolidatedView):
            _check_target(self.store, company_ref.name, category, concept)

        batch = self.engine.project(
            self.store, company_ref, category, concept, target, method, measure, growth_rate,
        )
        if not batch:
            return batch

        stored = EntryBatch(tuple(self.store.apply_batch(batch)))
        if self.repository is not None:
            self.repository.save_batch(list(stored))
        return stored



class _GroupMaintenance:
    """
    Base of the company / concept maintenance use cases.

    A configuration change and its cascade to budget data run together:
    the configuration collaborator is updated, then every scenario's entries
    and rates through the persistence collaborator, then the loaded store
    (when one is given). Callers commit once afterwards.
    """

    def __init__(
        self,
        store: EntryStore | None = None,
        repository: BudgetRepository | None = None,
        config_repository: ConfigRepository | None = None,
    ):
        self.store = store
        self.repository = repository
        self.config_repository = config_repository

    def _config(self) -> BudgetConfig | None:
        if self.config_repository is not None:
            return self.config_repository.load_config()
        if self.store is not None:
            return self.store.config
        return None


class RemoveCompanyDataUseCase(_GroupMaintenance):
    """Delete a company together with its entries and rates."""

    def execute(self, company: str) -> int:
        removed = 0
        if self.config_repository is not None:
            self.config_repository.delete_company(company)
        if self.repository is not None:
            removed = self.repository.delete_company_data(company)
        if self.store is not None:
            removed = self.store.remove_company(company)
        return removed


class RemoveConceptDataUseCase(_GroupMaintenance):
    """Delete a concept together with its entries."""

    def execute(self, category: str, concept: str) -> int:
        validate_category_type(category)
        removed = 0
        if self.config_repository is not None:
            self.config_repository.delete_concept(category, concept)
        if self.repository is not None:
            removed = self.repository.delete_concept_data(category, concept)
        if self.store is not None:
            removed = self.store.remove_concept(category, concept)
        return removed


class RenameCompanyUseCase(_GroupMaintenance):

    def execute(self, old_name: str, new_name: str) -> int:
        new_name = new_name.strip()
        if not new_name:
            raise BudgetValidationError("Company name is required")
        if new_name == old_name:
            return 0

        config = self._config()
        if config is not None:
            if config.company(old_name) is None:
                raise BudgetValidationError(f"Unknown company: {old_name!r}")
            if config.company(new_name) is not None:
                raise BudgetValidationError(f"Company {new_name!r} already exists")

        moved = 0
        if self.store is not None:
            moved = self.store.rename_company(old_name, new_name)
        if self.config_repository is not None:
            self.config_repository.rename_company(old_name, new_name)
        if self.repository is not None:
            count = self.repository.rename_company_data(old_name, new_name)
            moved = moved if self.store is not None else count
        logger.info("Renamed company %s -> %s (%d records)", old_name, new_name, moved)
        return moved


class RenameConceptUseCase(_GroupMaintenance):

    def execute(self, category: str, old_name: str, new_name: str) -> int:
        validate_category_type(category)
        new_name = new_name.strip()
        if not new_name:
            raise BudgetValidationError("Concept name is required")
        if new_name == old_name:
            return 0

        config = self._config()
        if config is not None:
            if not config.has_concept(category, old_name):
                raise BudgetValidationError(f"Unknown concept: {category}/{old_name}")
            if config.has_concept(category, new_name):
                raise BudgetValidationError(f"Concept {category}/{new_name} already exists")

        moved = 0
        if self.store is not None:
            moved = self.store.rename_concept(category, old_name, new_name)
        if self.config_repository is not None:
            self.config_repository.rename_concept(category, old_name, new_name)
        if self.repository is not None:
            count = self.repository.rename_concept_data(category, old_name, new_name)
            moved = moved if self.store is not None else count
        logger.info("Renamed concept %s/%s -> %s (%d entries)", category, old_name, new_name, moved)
        return moved
