"""
Company records and the company reference variant

A grid, an edit or a projection always targets a CompanyRef:
- RealCompany(name): a stored company, editable
- ConsolidatedView(): the virtual group roll-up, read-only and never stored

The "CONSOLIDATED" string only exists at the HTTP boundary (parse_company_ref).
"""
from dataclasses import dataclass

from groupbudget.domain.errors import BudgetValidationError
from groupbudget.utils.validation import validate_currency_code


CONSOLIDATED_KEY = "CONSOLIDATED"
CONSOLIDATED_NAME = "Group (Consolidated)"


@dataclass(frozen=True)
class CompanyDetail:
    id: str
    name: str  # business key joining entries and rates
    currency: str  # USD, ARS, MXN ...

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise BudgetValidationError("Company name is required")
        try:
            validate_currency_code(self.currency)
        except ValueError as exc:
            raise BudgetValidationError(str(exc)) from exc


@dataclass(frozen=True)
class RealCompany:
    name: str

    @property
    def read_only(self) -> bool:
        return False

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class ConsolidatedView:

    @property
    def read_only(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return CONSOLIDATED_NAME


CompanyRef = RealCompany | ConsolidatedView


def parse_company_ref(value: str) -> CompanyRef:
    """Map a request parameter onto the company variant."""
    if value is None or not value.strip():
        raise BudgetValidationError("Company is required")
    if value.strip().upper() == CONSOLIDATED_KEY:
        return ConsolidatedView()
    return RealCompany(value.strip())


DEFAULT_COMPANIES = [
    CompanyDetail(id="group-sales", name="Group Sales", currency="USD"),
    CompanyDetail(id="group-tech", name="Group Tech", currency="ARS"),
    CompanyDetail(id="group-consulting", name="Group Consulting", currency="MXN"),
]
