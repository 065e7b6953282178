"""
Budget read views: the monthly PxQ grid and the plan-vs-real dashboard.

Both views are built from one StoreSnapshot. For a real company the grid shows
local-currency values of the concepts assigned to it; for the consolidated view
every concept is shown with values converted into the reporting currency and
the grid is flagged read-only.
"""
from typing import Any, Dict, List

from groupbudget.application.consolidation import ConsolidationEngine
from groupbudget.application.currency import CurrencyConverter
from groupbudget.domain.budget_entry import (
    MEASURE_PLAN, MEASURE_REAL, MONTHS, MONTH_NAMES, validate_measure,
)
from groupbudget.domain.category import CATEGORY_TYPES, is_income
from groupbudget.domain.company import CompanyRef, ConsolidatedView
from groupbudget.domain.taxonomy import BudgetConfig


def _cell(figures, measure: str) -> Dict[str, Any]:
    return {
        "month": figures.month,
        "units": figures.units(measure),
        "unit_price": figures.unit_price(measure),
        "total": figures.total(measure),
    }


def build_budget_grid(
    snapshot,
    config: BudgetConfig,
    company_ref: CompanyRef,
    measure: str = MEASURE_PLAN,
    reporting_currency: str = "USD",
) -> Dict[str, Any]:
    """
    Build the 12-month grid for one company (or the consolidated view).

    Returns:
        {
            "company", "currency", "measure", "read_only",
            "sections": [{"category", "rows": [{"concept", "cells", "total_units", "total"}],
                          "monthly_totals", "total"}],
            "rates": [{"month", "rate", "available"}] | None,
            "missing_rates": [(company, measure, month)],
        }
    """
    validate_measure(measure)
    consolidated = isinstance(company_ref, ConsolidatedView)
    engine = ConsolidationEngine(config, reporting_currency) if consolidated else None
    missing_rates = []

    if consolidated:
        currency = reporting_currency
    else:
        currency = config.currency_of(company_ref.name) or reporting_currency

    sections = []
    for category in CATEGORY_TYPES:
        rows = []
        monthly_totals = [0.0] * len(MONTHS)
        for concept in config.concepts_for(company_ref, category):
            if consolidated:
                figures = engine.consolidate_row(snapshot, category, concept)
                for f in figures:
                    missing_rates.extend((c, m, f.month) for c, m in f.missing_rates if m == measure)
            else:
                figures = [snapshot.get_entry(company_ref.name, category, concept, m) for m in MONTHS]

            cells = [_cell(f, measure) for f in figures]
            for i, cell in enumerate(cells):
                monthly_totals[i] += cell["total"]
            rows.append({
                "concept": concept,
                "cells": cells,
                "total_units": sum(c["units"] for c in cells),
                "total": sum(c["total"] for c in cells),
            })
        sections.append({
            "category": category,
            "rows": rows,
            "monthly_totals": monthly_totals,
            "total": sum(monthly_totals),
        })

    rates = None
    if not consolidated and currency != reporting_currency:
        rates = []
        for m in MONTHS:
            rate = snapshot.get_rate(company_ref.name, m)
            rates.append({"month": m, "rate": rate.rate(measure), "available": rate.is_available(measure)})

    return {
        "company": company_ref.display_name,
        "currency": currency,
        "measure": measure,
        "read_only": company_ref.read_only,
        "sections": sections,
        "rates": rates,
        "missing_rates": missing_rates,
    }


def _zero_month(month: int) -> Dict[str, Any]:
    return {
        "month": month,
        "name": MONTH_NAMES[month],
        "income_plan": 0.0,
        "income_real": 0.0,
        "expense_plan": 0.0,
        "expense_real": 0.0,
    }


def build_dashboard(
    snapshot,
    config: BudgetConfig,
    company_ref: CompanyRef,
    reporting_currency: str = "USD",
    in_reporting_currency: bool = True,
) -> Dict[str, Any]:
    """
    Monthly income vs. costs for plan and real, plus accumulated KPIs.

    The consolidated view always reports in the reporting currency.
    Compliance = income_real / income_plan * 100 (0 when nothing is planned).
    """
    consolidated = isinstance(company_ref, ConsolidatedView)
    convert = consolidated or in_reporting_currency
    converter = CurrencyConverter(snapshot, config, reporting_currency)

    if consolidated:
        companies = set(config.company_names())
        currency = reporting_currency
    else:
        companies = {company_ref.name}
        currency = reporting_currency if convert else (config.currency_of(company_ref.name) or reporting_currency)

    months: List[Dict[str, Any]] = [_zero_month(m) for m in MONTHS]
    missing_rates = set()

    for entry in snapshot.entries():
        if entry.company not in companies:
            continue
        if not config.has_concept(entry.category, entry.concept):
            continue
        if not config.is_assigned(entry.company, entry.category, entry.concept):
            continue

        plan_value, real_value = entry.plan_value, entry.real_value
        if convert:
            plan = converter.convert_detailed(plan_value, entry.company, entry.month, MEASURE_PLAN)
            real = converter.convert_detailed(real_value, entry.company, entry.month, MEASURE_REAL)
            plan_value, real_value = plan.amount, real.amount
            if plan.fallback and entry.plan_value != 0:
                missing_rates.add((entry.company, MEASURE_PLAN, entry.month))
            if real.fallback and entry.real_value != 0:
                missing_rates.add((entry.company, MEASURE_REAL, entry.month))

        row = months[entry.month - 1]
        if is_income(entry.category):
            row["income_plan"] += plan_value
            row["income_real"] += real_value
        else:
            row["expense_plan"] += plan_value
            row["expense_real"] += real_value

    totals = {"income_plan": 0.0, "income_real": 0.0, "expense_plan": 0.0, "expense_real": 0.0}
    for row in months:
        row["net_plan"] = row["income_plan"] - row["expense_plan"]
        row["net_real"] = row["income_real"] - row["expense_real"]
        for k in totals:
            totals[k] += row[k]
    totals["net_plan"] = totals["income_plan"] - totals["expense_plan"]
    totals["net_real"] = totals["income_real"] - totals["expense_real"]

    compliance = totals["income_real"] / totals["income_plan"] * 100 if totals["income_plan"] > 0 else 0.0

    return {
        "company": company_ref.display_name,
        "currency": currency,
        "months": months,
        "totals": totals,
        "compliance": compliance,
        "missing_rates": sorted(missing_rates),
    }
