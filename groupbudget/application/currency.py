"""
Currency conversion into the reporting currency.

    reporting_amount = local_amount / rate      (rate = local units per 1 reporting unit)

A missing or non-positive rate is a degraded condition, not an error: the
amount passes through unconverted (rate 1) and the fallback is logged and
flagged on the result, because it silently distorts consolidated totals.
"""
import logging
from dataclasses import dataclass

from groupbudget.domain.budget_entry import validate_measure
from groupbudget.domain.taxonomy import BudgetConfig
from groupbudget.utils.validation import parse_amount


logger = logging.getLogger(__name__)

FALLBACK_RATE = 1.0


@dataclass(frozen=True)
class Conversion:
    amount: float
    rate: float
    fallback: bool = False  # True when no usable rate was found


class CurrencyConverter:
    """
    Convert company-local amounts using the rates of a store or snapshot.

    Args:
        rates_source: anything with get_rate(company, month) (EntryStore, StoreSnapshot)
        config: company list with currency codes
        reporting_currency: target currency code (default USD)
    """

    def __init__(self, rates_source, config: BudgetConfig, reporting_currency: str = "USD"):
        self.rates_source = rates_source
        self.config = config
        self.reporting_currency = reporting_currency

    def needs_conversion(self, company: str) -> bool:
        currency = self.config.currency_of(company)
        if currency is None:
            logger.warning(
                "Company %s has no configured currency, treating amounts as %s",
                company, self.reporting_currency,
            )
            return False
        return currency != self.reporting_currency

    def convert_detailed(self, amount, company: str, month: int, measure: str) -> Conversion:
        validate_measure(measure)
        value = parse_amount(amount)
        if not self.needs_conversion(company):
            return Conversion(amount=value, rate=1.0)

        rate = self.rates_source.get_rate(company, month).rate(measure)
        if rate > 0:
            return Conversion(amount=value / rate, rate=rate)

        if value != 0:
            logger.warning(
                "No %s exchange rate for %s month %d, using fallback rate %s",
                measure, company, month, FALLBACK_RATE,
            )
        return Conversion(amount=value / FALLBACK_RATE, rate=FALLBACK_RATE, fallback=True)

    def convert(self, amount, company: str, month: int, measure: str) -> float:
        return self.convert_detailed(amount, company, month, measure).amount
