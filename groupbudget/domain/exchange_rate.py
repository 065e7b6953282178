"""
Exchange rate record

Rates are expressed as units of company-local currency per 1 unit of the
reporting currency (e.g. 1050 ARS per USD). A rate of 0 (or below) means
"no rate available", never a literal zero exchange rate.
"""
from dataclasses import dataclass, replace

from groupbudget.domain.budget_entry import MEASURE_PLAN, check_month, validate_measure


@dataclass(frozen=True)
class ExchangeRate:
    company: str
    month: int  # 1..12
    year: int
    version_id: str
    plan_rate: float = 0.0
    real_rate: float = 0.0
    id: str | None = None

    def __post_init__(self):
        check_month(self.month)

    @property
    def key(self) -> tuple:
        return (self.company, self.month, self.year, self.version_id)

    def rate(self, measure: str) -> float:
        validate_measure(measure)
        return self.plan_rate if measure == MEASURE_PLAN else self.real_rate

    def is_available(self, measure: str) -> bool:
        return self.rate(measure) > 0

    def with_rate(self, measure: str, value: float) -> "ExchangeRate":
        validate_measure(measure)
        if measure == MEASURE_PLAN:
            return replace(self, plan_rate=float(value))
        return replace(self, real_rate=float(value))
