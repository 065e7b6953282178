"""
SQLAlchemy-backed collaborators of the budget engine.

- SqlBudgetRepository: entries and rates of a scenario (persistence collaborator)
- SqlConfigRepository: companies, concept taxonomy, assignments (configuration collaborator)
- SqlScenarioRepository: create / clone / list scenarios (scenario management collaborator)

Rows are matched by business key, never by the engine-side id.
"""
import logging
import uuid
from typing import List, Tuple

from sqlalchemy.orm import Session

from groupbudget.application.budget import BudgetRepository, ConfigRepository
from groupbudget.application.entry_store import EntryStore
from groupbudget.config import Settings, get_settings
from groupbudget.domain.budget_entry import BudgetEntry
from groupbudget.domain.category import CATEGORY_TYPES, validate_category_type
from groupbudget.domain.company import CompanyDetail
from groupbudget.domain.errors import BudgetValidationError, ScenarioNotFoundError
from groupbudget.domain.exchange_rate import ExchangeRate
from groupbudget.domain.scenario import Scenario
from groupbudget.domain.taxonomy import BudgetConfig
from groupbudget.infrastructure.db.models import (
    BudgetEntryModel, BudgetVersionModel, CompanyModel, ConceptAssignmentModel,
    ConceptModel, ExchangeRateModel,
)
from groupbudget.utils.validation import validate_currency_code


logger = logging.getLogger(__name__)


def _to_entry(row: BudgetEntryModel) -> BudgetEntry:
    return BudgetEntry(
        company=row.company_name,
        category=row.category_type,
        concept=row.concept,
        month=row.month,
        year=row.year,
        version_id=row.version_id,
        plan_units=row.plan_units,
        plan_value=row.plan_value,
        real_units=row.real_units,
        real_value=row.real_value,
        id=str(row.id),
    )


def _to_rate(row: ExchangeRateModel) -> ExchangeRate:
    return ExchangeRate(
        company=row.company_name,
        month=row.month,
        year=row.year,
        version_id=row.version_id,
        plan_rate=row.plan_rate,
        real_rate=row.real_rate,
        id=str(row.id),
    )


def _to_scenario(row: BudgetVersionModel) -> Scenario:
    return Scenario(
        id=row.id,
        name=row.name,
        description=row.description,
        is_active=row.is_active,
        created_at=row.created_at,
    )


class SqlBudgetRepository(BudgetRepository):

    def __init__(self, db: Session):
        self.db = db

    def load_scenario(self, version_id: str) -> Tuple[List[BudgetEntry], List[ExchangeRate]]:
        """
        Load every entry and rate of a scenario

        Raises:
            ScenarioNotFoundError: if the version does not exist
        """
        if self.db.get(BudgetVersionModel, version_id) is None:
            raise ScenarioNotFoundError(f"Scenario {version_id!r} not found")

        entry_rows = (
            self.db.query(BudgetEntryModel)
            .filter(BudgetEntryModel.version_id == version_id)
            .order_by(BudgetEntryModel.id.asc())
            .all()
        )
        rate_rows = (
            self.db.query(ExchangeRateModel)
            .filter(ExchangeRateModel.version_id == version_id)
            .order_by(ExchangeRateModel.id.asc())
            .all()
        )
        return [_to_entry(r) for r in entry_rows], [_to_rate(r) for r in rate_rows]

    def _find_entry_row(self, entry: BudgetEntry) -> BudgetEntryModel | None:
        return self.db.query(BudgetEntryModel).filter(
            BudgetEntryModel.version_id == entry.version_id,
            BudgetEntryModel.company_name == entry.company,
            BudgetEntryModel.category_type == entry.category,
            BudgetEntryModel.concept == entry.concept,
            BudgetEntryModel.month == entry.month,
            BudgetEntryModel.year == entry.year,
        ).first()

    def _upsert_entry(self, entry: BudgetEntry) -> None:
        row = self._find_entry_row(entry)
        if row is None:
            row = BudgetEntryModel(
                version_id=entry.version_id,
                company_name=entry.company,
                category_type=entry.category,
                concept=entry.concept,
                month=entry.month,
                year=entry.year,
            )
            self.db.add(row)
        row.plan_units = entry.plan_units
        row.plan_value = entry.plan_value
        row.real_units = entry.real_units
        row.real_value = entry.real_value

    def save_entry(self, entry: BudgetEntry) -> None:
        self._upsert_entry(entry)
        self.db.flush()

    def save_batch(self, entries: List[BudgetEntry]) -> None:
        # one flush for the whole batch; keys inside a batch are unique
        for entry in entries:
            self._upsert_entry(entry)
        self.db.flush()
        logger.info("Saved batch of %d entries", len(entries))

    def save_rate(self, rate: ExchangeRate) -> None:
        row = self.db.query(ExchangeRateModel).filter(
            ExchangeRateModel.version_id == rate.version_id,
            ExchangeRateModel.company_name == rate.company,
            ExchangeRateModel.month == rate.month,
            ExchangeRateModel.year == rate.year,
        ).first()
        if row is None:
            row = ExchangeRateModel(
                version_id=rate.version_id,
                company_name=rate.company,
                month=rate.month,
                year=rate.year,
            )
            self.db.add(row)
        row.plan_rate = rate.plan_rate
        row.real_rate = rate.real_rate
        self.db.flush()

    def delete_company_data(self, company: str) -> int:
        entries = (
            self.db.query(BudgetEntryModel)
            .filter(BudgetEntryModel.company_name == company)
            .delete(synchronize_session=False)
        )
        rates = (
            self.db.query(ExchangeRateModel)
            .filter(ExchangeRateModel.company_name == company)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return entries + rates

    def delete_concept_data(self, category: str, concept: str) -> int:
        count = (
            self.db.query(BudgetEntryModel)
            .filter(
                BudgetEntryModel.category_type == category,
                BudgetEntryModel.concept == concept,
            )
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count

    def rename_company_data(self, old_name: str, new_name: str) -> int:
        taken = (
            self.db.query(BudgetEntryModel).filter(BudgetEntryModel.company_name == new_name).first()
            or self.db.query(ExchangeRateModel).filter(ExchangeRateModel.company_name == new_name).first()
        )
        if taken is not None:
            raise BudgetValidationError(f"Company {new_name!r} already has budget data")
        entries = (
            self.db.query(BudgetEntryModel)
            .filter(BudgetEntryModel.company_name == old_name)
            .update({BudgetEntryModel.company_name: new_name}, synchronize_session=False)
        )
        rates = (
            self.db.query(ExchangeRateModel)
            .filter(ExchangeRateModel.company_name == old_name)
            .update({ExchangeRateModel.company_name: new_name}, synchronize_session=False)
        )
        self.db.flush()
        return entries + rates

    def rename_concept_data(self, category: str, old_name: str, new_name: str) -> int:
        taken = self.db.query(BudgetEntryModel).filter(
            BudgetEntryModel.category_type == category,
            BudgetEntryModel.concept == new_name,
        ).first()
        if taken is not None:
            raise BudgetValidationError(f"Concept {category}/{new_name} already has budget data")
        count = (
            self.db.query(BudgetEntryModel)
            .filter(
                BudgetEntryModel.category_type == category,
                BudgetEntryModel.concept == old_name,
            )
            .update({BudgetEntryModel.concept: new_name}, synchronize_session=False)
        )
        self.db.flush()
        return count


class SqlConfigRepository(ConfigRepository):
    """Companies, concept taxonomy and the company x concept assignment relation."""

    def __init__(self, db: Session):
        self.db = db

    def load_config(self) -> BudgetConfig:
        companies = [
            CompanyDetail(id=c.id, name=c.name, currency=c.currency)
            for c in self.db.query(CompanyModel).order_by(CompanyModel.position, CompanyModel.name).all()
        ]

        categories = {t: [] for t in CATEGORY_TYPES}
        restricted = []
        concepts = self.db.query(ConceptModel).order_by(ConceptModel.position, ConceptModel.id).all()
        for c in concepts:
            categories.setdefault(c.category_type, []).append(c.name)
            if c.is_restricted:
                restricted.append((c.category_type, c.name))

        assignments = {key: set() for key in restricted}
        if restricted:
            for a in self.db.query(ConceptAssignmentModel).all():
                key = (a.category_type, a.concept_name)
                if key in assignments:
                    assignments[key].add(a.company_name)

        return BudgetConfig(companies=companies, categories=categories, assignments=assignments)

    def add_company(self, company: CompanyDetail) -> None:
        if self.db.query(CompanyModel).filter(CompanyModel.name == company.name).first():
            raise BudgetValidationError(f"Company {company.name!r} already exists")
        position = self.db.query(CompanyModel).count()
        self.db.add(CompanyModel(id=company.id, name=company.name, currency=company.currency, position=position))
        self.db.flush()

    def update_company_currency(self, name: str, currency: str) -> None:
        """Change the reporting currency of a company; stored amounts stay in their figures."""
        row = self._require_company(name)
        try:
            row.currency = validate_currency_code(currency.strip().upper())
        except ValueError as exc:
            raise BudgetValidationError(str(exc)) from exc
        self.db.flush()

    def rename_company(self, old_name: str, new_name: str) -> None:
        new_name = new_name.strip()
        row = self._require_company(old_name)
        if self.db.query(CompanyModel).filter(CompanyModel.name == new_name).first() is not None:
            raise BudgetValidationError(f"Company {new_name!r} already exists")
        row.name = new_name
        (
            self.db.query(ConceptAssignmentModel)
            .filter(ConceptAssignmentModel.company_name == old_name)
            .update({ConceptAssignmentModel.company_name: new_name}, synchronize_session=False)
        )
        self.db.flush()

    def delete_company(self, name: str) -> None:
        self._require_company(name)
        self.db.query(CompanyModel).filter(CompanyModel.name == name).delete(synchronize_session=False)
        (
            self.db.query(ConceptAssignmentModel)
            .filter(ConceptAssignmentModel.company_name == name)
            .delete(synchronize_session=False)
        )
        self.db.flush()

    def add_concept(self, category: str, name: str) -> None:
        validate_category_type(category)
        name = name.strip()
        if not name:
            raise BudgetValidationError("Concept name is required")
        if self._concept_row(category, name) is not None:
            raise BudgetValidationError(f"Concept {category}/{name} already exists")
        position = self.db.query(ConceptModel).filter(ConceptModel.category_type == category).count()
        self.db.add(ConceptModel(category_type=category, name=name, position=position))
        self.db.flush()

    def rename_concept(self, category: str, old_name: str, new_name: str) -> None:
        new_name = new_name.strip()
        row = self._require_concept(category, old_name)
        if self._concept_row(category, new_name) is not None:
            raise BudgetValidationError(f"Concept {category}/{new_name} already exists")
        row.name = new_name
        (
            self.db.query(ConceptAssignmentModel)
            .filter(
                ConceptAssignmentModel.category_type == category,
                ConceptAssignmentModel.concept_name == old_name,
            )
            .update({ConceptAssignmentModel.concept_name: new_name}, synchronize_session=False)
        )
        self.db.flush()

    def delete_concept(self, category: str, name: str) -> None:
        self._require_concept(category, name)
        self.db.query(ConceptModel).filter(
            ConceptModel.category_type == category,
            ConceptModel.name == name,
        ).delete(synchronize_session=False)
        self.db.query(ConceptAssignmentModel).filter(
            ConceptAssignmentModel.category_type == category,
            ConceptAssignmentModel.concept_name == name,
        ).delete(synchronize_session=False)
        self.db.flush()

    def assign_concept(self, company: str, category: str, concept: str) -> None:
        self._require_company(company)
        row = self._require_concept(category, concept)
        if not row.is_restricted:
            return  # already available to everyone
        self._add_assignment(company, category, concept)
        self.db.flush()

    def unassign_concept(self, company: str, category: str, concept: str) -> None:
        """Hide a concept from one company; an unrestricted concept becomes restricted to the others."""
        self._require_company(company)
        row = self._require_concept(category, concept)
        if not row.is_restricted:
            row.is_restricted = True
            for c in self.db.query(CompanyModel).all():
                if c.name != company:
                    self._add_assignment(c.name, category, concept)
        else:
            self.db.query(ConceptAssignmentModel).filter(
                ConceptAssignmentModel.company_name == company,
                ConceptAssignmentModel.category_type == category,
                ConceptAssignmentModel.concept_name == concept,
            ).delete(synchronize_session=False)
        self.db.flush()

    def _add_assignment(self, company: str, category: str, concept: str) -> None:
        exists = self.db.get(ConceptAssignmentModel, (company, category, concept))
        if exists is None:
            self.db.add(ConceptAssignmentModel(company_name=company, category_type=category, concept_name=concept))

    def _require_company(self, name: str) -> CompanyModel:
        row = self.db.query(CompanyModel).filter(CompanyModel.name == name).first()
        if row is None:
            raise BudgetValidationError(f"Unknown company: {name!r}")
        return row

    def _concept_row(self, category: str, name: str) -> ConceptModel | None:
        return self.db.query(ConceptModel).filter(
            ConceptModel.category_type == category,
            ConceptModel.name == name,
        ).first()

    def _require_concept(self, category: str, name: str) -> ConceptModel:
        row = self._concept_row(category, name)
        if row is None:
            raise BudgetValidationError(f"Unknown concept: {category}/{name}")
        return row


class SqlScenarioRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_scenarios(self) -> List[Scenario]:
        rows = self.db.query(BudgetVersionModel).order_by(BudgetVersionModel.created_at.asc()).all()
        return [_to_scenario(r) for r in rows]

    def get_scenario(self, scenario_id: str) -> Scenario:
        row = self.db.get(BudgetVersionModel, scenario_id)
        if row is None:
            raise ScenarioNotFoundError(f"Scenario {scenario_id!r} not found")
        return _to_scenario(row)

    def create_scenario(self, name: str, description: str = "", scenario_id: str | None = None) -> Scenario:
        name = name.strip()
        if not name:
            raise BudgetValidationError("Scenario name is required")
        scenario_id = scenario_id or uuid.uuid4().hex[:12]
        if self.db.get(BudgetVersionModel, scenario_id) is not None:
            raise BudgetValidationError(f"Scenario {scenario_id!r} already exists")

        row = BudgetVersionModel(id=scenario_id, name=name, description=description, is_active=False)
        self.db.add(row)
        self.db.flush()
        self.db.refresh(row)
        return _to_scenario(row)

    def clone_scenario(self, source_id: str, name: str, description: str = "") -> Scenario:
        """Copy every entry and rate of source_id under a new scenario id."""
        self.get_scenario(source_id)
        scenario = self.create_scenario(name, description)

        entries = self.db.query(BudgetEntryModel).filter(BudgetEntryModel.version_id == source_id).all()
        for e in entries:
            self.db.add(BudgetEntryModel(
                version_id=scenario.id,
                company_name=e.company_name,
                category_type=e.category_type,
                concept=e.concept,
                month=e.month,
                year=e.year,
                plan_units=e.plan_units,
                plan_value=e.plan_value,
                real_units=e.real_units,
                real_value=e.real_value,
            ))
        rates = self.db.query(ExchangeRateModel).filter(ExchangeRateModel.version_id == source_id).all()
        for r in rates:
            self.db.add(ExchangeRateModel(
                version_id=scenario.id,
                company_name=r.company_name,
                month=r.month,
                year=r.year,
                plan_rate=r.plan_rate,
                real_rate=r.real_rate,
            ))
        self.db.flush()
        logger.info(
            "Cloned scenario %s -> %s (%d entries, %d rates)",
            source_id, scenario.id, len(entries), len(rates),
        )
        return scenario

    def activate(self, scenario_id: str) -> Scenario:
        self.get_scenario(scenario_id)
        for row in self.db.query(BudgetVersionModel).all():
            row.is_active = row.id == scenario_id
        self.db.flush()
        return self.get_scenario(scenario_id)


def load_store(db: Session, version_id: str, settings: Settings | None = None) -> EntryStore:
    """
    Build the EntryStore of one scenario from the configuration and persistence collaborators

    Raises:
        ScenarioNotFoundError: if the scenario does not exist
    """
    settings = settings or get_settings()
    config = SqlConfigRepository(db).load_config()
    entries, rates = SqlBudgetRepository(db).load_scenario(version_id)
    year = settings.BUDGET_YEAR
    return EntryStore(
        version_id=version_id,
        config=config,
        year=year,
        reporting_currency=settings.REPORTING_CURRENCY,
        entries=[e for e in entries if e.year == year],
        rates=[r for r in rates if r.year == year],
    )
