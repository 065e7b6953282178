"""
Budget entry record

One entry is the cell group for (company, category type, concept, month, year,
version). It stores units and totals for both measures; the unit price is always
derived from them and never stored:

    unit_price = total / units   if units != 0
               = 0               otherwise
"""
from dataclasses import dataclass, replace

from groupbudget.domain.category import validate_category_type
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.utils.validation import validate_month


MEASURE_PLAN = "plan"
MEASURE_REAL = "real"
MEASURES = (MEASURE_PLAN, MEASURE_REAL)

FIELD_QUANTITY = "Q"
FIELD_UNIT_PRICE = "P"
EDIT_FIELDS = (FIELD_QUANTITY, FIELD_UNIT_PRICE)

MONTHS = tuple(range(1, 13))
MONTH_NAMES = {
    1: "January", 2: "February", 3: "March", 4: "April", 5: "May", 6: "June",
    7: "July", 8: "August", 9: "September", 10: "October", 11: "November", 12: "December",
}


def validate_measure(measure: str) -> str:
    if measure not in MEASURES:
        raise BudgetValidationError(f"Unknown measure: {measure!r}")
    return measure


def check_month(month: int) -> int:
    try:
        return validate_month(month)
    except ValueError as exc:
        raise BudgetValidationError(str(exc)) from exc


def derive_unit_price(total: float, units: float) -> float:
    if units == 0:
        return 0.0
    return total / units


class PxQFigures:
    """Accessors shared by stored and consolidated entries."""

    def units(self, measure: str) -> float:
        validate_measure(measure)
        return self.plan_units if measure == MEASURE_PLAN else self.real_units

    def total(self, measure: str) -> float:
        validate_measure(measure)
        return self.plan_value if measure == MEASURE_PLAN else self.real_value

    def unit_price(self, measure: str) -> float:
        return derive_unit_price(self.total(measure), self.units(measure))


@dataclass(frozen=True)
class BudgetEntry(PxQFigures):
    company: str
    category: str
    concept: str
    month: int  # 1..12
    year: int
    version_id: str
    plan_units: float = 0.0
    plan_value: float = 0.0  # planned total, company-local currency
    real_units: float = 0.0
    real_value: float = 0.0  # actual total, company-local currency
    id: str | None = None  # storage id, not part of identity

    def __post_init__(self):
        validate_category_type(self.category)
        check_month(self.month)

    @property
    def key(self) -> tuple:
        return (self.company, self.category, self.concept, self.month, self.year, self.version_id)

    def with_measure(self, measure: str, units: float, total: float) -> "BudgetEntry":
        """Copy with units and total of one measure replaced; the other measure is untouched."""
        validate_measure(measure)
        if measure == MEASURE_PLAN:
            return replace(self, plan_units=float(units), plan_value=float(total))
        return replace(self, real_units=float(units), real_value=float(total))

    def same_values(self, other: "BudgetEntry") -> bool:
        return (
            self.plan_units == other.plan_units
            and self.plan_value == other.plan_value
            and self.real_units == other.real_units
            and self.real_value == other.real_value
        )
