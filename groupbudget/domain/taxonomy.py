"""
Budget configuration: companies, concept taxonomy and concept assignments

Supplied by the configuration collaborator and treated as read-only input for
the duration of a computation.

Assignment rule: a concept absent from `assignments` is available to every
company. Once a concept is restricted (present in `assignments`), only the
listed companies see it in their grid and totals; an empty set means nobody.
Consolidation follows the same rule per company, so a concept
unassigned from one company still contributes through the others.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from groupbudget.domain.category import CATEGORY_TYPES, DEFAULT_CATEGORIES, validate_category_type
from groupbudget.domain.company import CompanyDetail, CompanyRef, ConsolidatedView, DEFAULT_COMPANIES


@dataclass
class BudgetConfig:
    companies: List[CompanyDetail] = field(default_factory=list)
    categories: Dict[str, List[str]] = field(default_factory=dict)
    assignments: Dict[Tuple[str, str], Set[str]] = field(default_factory=dict)

    def __post_init__(self):
        for category in self.categories:
            validate_category_type(category)
        for category, _concept in self.assignments:
            validate_category_type(category)

    def company(self, name: str) -> CompanyDetail | None:
        for c in self.companies:
            if c.name == name:
                return c
        return None

    def currency_of(self, name: str) -> str | None:
        c = self.company(name)
        return c.currency if c else None

    def company_names(self) -> List[str]:
        return [c.name for c in self.companies]

    def has_concept(self, category: str, concept: str) -> bool:
        return concept in self.categories.get(category, [])

    def is_assigned(self, company: str, category: str, concept: str) -> bool:
        assigned = self.assignments.get((category, concept))
        if assigned is None:
            return True
        return company in assigned

    def concepts_for(self, company_ref: CompanyRef, category: str) -> List[str]:
        """Ordered concepts visible in a company's grid (all of them for the consolidated view)."""
        concepts = self.categories.get(category, [])
        if isinstance(company_ref, ConsolidatedView):
            return list(concepts)
        return [c for c in concepts if self.is_assigned(company_ref.name, category, c)]

    def contributing_companies(self, category: str, concept: str) -> List[str]:
        return [c.name for c in self.companies if self.is_assigned(c.name, category, concept)]


def default_config() -> BudgetConfig:
    return BudgetConfig(
        companies=list(DEFAULT_COMPANIES),
        categories={t: list(DEFAULT_CATEGORIES[t]) for t in CATEGORY_TYPES},
    )
