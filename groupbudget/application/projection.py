"""
Projection engine: fill February..December from January.

For month i (2..12) the projected value of the target variable is

    replicate:  base
    compound:   base * (1 + r/100) ** (i - 1)

always from the fixed January base, never from the previously stored month.
The value is folded into each month with the PxQ rule:

    Q target: units = v, total = v * month's unit price
              (January's unit price when the month has no units yet)
    P target: same as a unit price edit (units forced to 1 on an empty month)

The 11 results come back as one EntryBatch for the store and persistence.
"""
import logging

from groupbudget.application.entry_store import EntryBatch
from groupbudget.application.pxq import fold_unit_price, validate_edit_field
from groupbudget.domain.budget_entry import FIELD_QUANTITY, MONTHS, validate_measure
from groupbudget.domain.category import validate_category_type
from groupbudget.domain.company import CompanyRef, ConsolidatedView
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.utils.validation import parse_amount


logger = logging.getLogger(__name__)

METHOD_REPLICATE = "replicate"
METHOD_COMPOUND = "compound"
PROJECTION_METHODS = (METHOD_REPLICATE, METHOD_COMPOUND)

BASE_MONTH = 1


def projected_value(base: float, method: str, growth_rate: float, month: int) -> float:
    if method == METHOD_REPLICATE:
        return base
    return base * (1 + growth_rate / 100) ** (month - BASE_MONTH)


class ProjectionEngine:

    def project(
        self,
        source,
        company_ref: CompanyRef,
        category: str,
        concept: str,
        target: str,
        method: str,
        measure: str,
        growth_rate=0.0,
    ) -> EntryBatch:
        """
        Compute the February..December updates for one company and concept.

        Args:
            source: EntryStore or StoreSnapshot providing get_entry()
            company_ref: RealCompany; the consolidated view yields an empty batch
            category, concept: concept key
            target: "Q" or "P"
            method: "replicate" or "compound"
            measure: "plan" or "real"
            growth_rate: monthly growth in percent (compound only), coerced like cell input

        Returns:
            EntryBatch with 11 entries, months 2..12 in order
        """
        validate_edit_field(target)
        validate_measure(measure)
        validate_category_type(category)
        if method not in PROJECTION_METHODS:
            raise BudgetValidationError(f"Unknown projection method: {method!r}")

        if isinstance(company_ref, ConsolidatedView):
            logger.warning("Projection on the consolidated view rejected for %s/%s", category, concept)
            return EntryBatch()

        if hasattr(source, "snapshot"):
            source = source.snapshot()

        rate = parse_amount(growth_rate)
        company = company_ref.name
        january = source.get_entry(company, category, concept, BASE_MONTH)
        base_price = january.unit_price(measure)
        base = january.units(measure) if target == FIELD_QUANTITY else base_price

        updated = []
        for month in MONTHS[1:]:
            entry = source.get_entry(company, category, concept, month)
            value = projected_value(base, method, rate, month)
            units = entry.units(measure)

            if target == FIELD_QUANTITY:
                price = entry.unit_price(measure) if units != 0 else base_price
                new_units, new_total = value, value * price
            else:
                new_units, new_total = fold_unit_price(units, value)

            updated.append(entry.with_measure(measure, new_units, new_total))

        logger.info(
            "Projected %s %s/%s %s (%s, r=%s) for %d months",
            company, category, concept, target, method, rate, len(updated),
        )
        return EntryBatch(tuple(updated))
