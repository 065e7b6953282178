"""
Category types and the default concept taxonomy

Every budget line (concept) belongs to exactly one of three category types.
Income is the only revenue type; both cost types reduce the net result.
"""
from groupbudget.domain.errors import BudgetValidationError


CATEGORY_TYPE_INCOME = "Income"
CATEGORY_TYPE_DIRECT_COSTS = "Direct Costs"
CATEGORY_TYPE_INDIRECT_COSTS = "Indirect Costs"

# Display order of the grid sections
CATEGORY_TYPES = [
    CATEGORY_TYPE_INCOME,
    CATEGORY_TYPE_DIRECT_COSTS,
    CATEGORY_TYPE_INDIRECT_COSTS,
]

DEFAULT_CATEGORIES = {
    CATEGORY_TYPE_INCOME: [
        "Consulting Services",
        "Implementation Services",
        "SaaS Licenses",
    ],
    CATEGORY_TYPE_DIRECT_COSTS: [
        "Freelancers",
        "Cloud Hosting",
        "Third-party Licenses",
    ],
    CATEGORY_TYPE_INDIRECT_COSTS: [
        "Sales",
        "Operations",
        "Marketing",
        "Human Resources",
        "Office",
    ],
}


def validate_category_type(category: str) -> str:
    if category not in CATEGORY_TYPES:
        raise BudgetValidationError(f"Unknown category type: {category!r}")
    return category


def is_income(category: str) -> bool:
    return category == CATEGORY_TYPE_INCOME
