"""
Consolidation engine: the virtual group company.

For one (category, concept, month) the consolidated entry is

    plan_value = sum(convert(company.plan_value, plan_rate))
    real_value = sum(convert(company.real_value, real_rate))
    plan_units = sum(company.plan_units)      # units are not currency-denominated
    real_units = sum(company.real_units)

over every real company the concept is assigned to. The result is computed on
demand from one snapshot, never stored, and cannot be edited. Its unit price is
an average (total / units), not a sum of prices.
"""
import logging
from dataclasses import dataclass
from typing import List, Tuple

from groupbudget.application.currency import CurrencyConverter
from groupbudget.application.entry_store import EntryStore
from groupbudget.domain.budget_entry import MEASURE_PLAN, MEASURE_REAL, MONTHS, PxQFigures, check_month
from groupbudget.domain.category import validate_category_type
from groupbudget.domain.company import CONSOLIDATED_NAME
from groupbudget.domain.taxonomy import BudgetConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsolidatedEntry(PxQFigures):
    category: str
    concept: str
    month: int
    year: int
    version_id: str
    plan_units: float = 0.0
    plan_value: float = 0.0  # reporting currency
    real_units: float = 0.0
    real_value: float = 0.0  # reporting currency
    contributors: Tuple[str, ...] = ()
    missing_rates: Tuple[Tuple[str, str], ...] = ()  # (company, measure) that used the fallback rate

    @property
    def company(self) -> str:
        return CONSOLIDATED_NAME

    @property
    def read_only(self) -> bool:
        return True


class ConsolidationEngine:

    def __init__(self, config: BudgetConfig, reporting_currency: str = "USD"):
        self.config = config
        self.reporting_currency = reporting_currency

    def _source(self, store_or_snapshot):
        # a live store is frozen first so the whole pass reads one state
        if isinstance(store_or_snapshot, EntryStore):
            return store_or_snapshot.snapshot()
        return store_or_snapshot

    def consolidate(self, store_or_snapshot, category: str, concept: str, month: int) -> ConsolidatedEntry:
        validate_category_type(category)
        check_month(month)
        snapshot = self._source(store_or_snapshot)
        return self._consolidate_cell(snapshot, CurrencyConverter(snapshot, self.config, self.reporting_currency),
                                      category, concept, month)

    def consolidate_row(self, store_or_snapshot, category: str, concept: str) -> List[ConsolidatedEntry]:
        """Twelve consolidated months of one concept, all read from the same snapshot."""
        validate_category_type(category)
        snapshot = self._source(store_or_snapshot)
        converter = CurrencyConverter(snapshot, self.config, self.reporting_currency)
        return [self._consolidate_cell(snapshot, converter, category, concept, m) for m in MONTHS]

    def _consolidate_cell(self, snapshot, converter: CurrencyConverter,
                          category: str, concept: str, month: int) -> ConsolidatedEntry:
        plan_units = plan_value = real_units = real_value = 0.0
        contributors = []
        missing = []

        for company in self.config.contributing_companies(category, concept):
            entry = snapshot.get_entry(company, category, concept, month)
            plan = converter.convert_detailed(entry.plan_value, company, month, MEASURE_PLAN)
            real = converter.convert_detailed(entry.real_value, company, month, MEASURE_REAL)

            plan_value += plan.amount
            real_value += real.amount
            plan_units += entry.plan_units
            real_units += entry.real_units
            contributors.append(company)
            # a fallback only matters when there is an amount to distort
            if plan.fallback and entry.plan_value != 0:
                missing.append((company, MEASURE_PLAN))
            if real.fallback and entry.real_value != 0:
                missing.append((company, MEASURE_REAL))

        if missing:
            logger.warning(
                "Consolidated %s/%s month %d uses fallback rates for %s",
                category, concept, month, missing,
            )

        return ConsolidatedEntry(
            category=category,
            concept=concept,
            month=month,
            year=snapshot.year,
            version_id=snapshot.version_id,
            plan_units=plan_units,
            plan_value=plan_value,
            real_units=real_units,
            real_value=real_value,
            contributors=tuple(contributors),
            missing_rates=tuple(missing),
        )
