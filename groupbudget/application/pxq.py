"""
PxQ reconciliation: keep Quantity, derived Unit Price and Total consistent
across one edit of one measure.

    Q edit:  units = v,                 total = v * current_unit_price
    P edit:  units == 0 and v != 0  ->  units = 1, total = v
             otherwise              ->  total = units * v

Units and total are always written together; the unit price is never stored.
Values are not rounded here (rounding belongs to display formatting).
"""
from groupbudget.domain.budget_entry import (
    BudgetEntry, FIELD_QUANTITY, FIELD_UNIT_PRICE, EDIT_FIELDS, validate_measure,
)
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.utils.validation import parse_amount


def validate_edit_field(field: str) -> str:
    if field not in EDIT_FIELDS:
        raise BudgetValidationError(f"Unknown edit field: {field!r}")
    return field


def fold_quantity(units: float, total: float, new_units: float) -> tuple[float, float]:
    price = total / units if units != 0 else 0.0
    return new_units, new_units * price


def fold_unit_price(units: float, new_price: float) -> tuple[float, float]:
    if units == 0 and new_price != 0:
        # a price implies at least one unit
        return 1.0, new_price
    return units, units * new_price


def reconcile(entry: BudgetEntry, field: str, raw_value, measure: str) -> BudgetEntry:
    """
    Apply a Q or P edit to one measure of an entry.

    Args:
        entry: current entry (stored or lazily defaulted)
        field: "Q" or "P"
        raw_value: user input; non-numeric or empty input counts as 0
        measure: "plan" or "real"

    Returns:
        Updated copy of the entry; the other measure is untouched.
    """
    validate_edit_field(field)
    validate_measure(measure)
    value = parse_amount(raw_value)

    units = entry.units(measure)
    total = entry.total(measure)

    if field == FIELD_QUANTITY:
        new_units, new_total = fold_quantity(units, total, value)
    else:
        new_units, new_total = fold_unit_price(units, value)

    return entry.with_measure(measure, new_units, new_total)
