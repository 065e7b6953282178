"""
Budget API endpoints: grid, cell and rate edits, projections, consolidation, dashboard
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from groupbudget.api.deps import get_db, get_store
from groupbudget.application.budget import ApplyProjectionUseCase, EditCellUseCase, EditRateUseCase
from groupbudget.application.budget_grid import build_budget_grid, build_dashboard
from groupbudget.application.consolidation import ConsolidationEngine
from groupbudget.domain.company import RealCompany, parse_company_ref
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.infrastructure.repository import SqlBudgetRepository
from groupbudget.utils.money import format_compact, format_money


router = APIRouter(prefix="/api/v1/budget", tags=["budget"])


# === Request/Response models ===

class CellEditRequest(BaseModel):
    company: str
    category: str
    concept: str
    month: int
    field: str  # Q or P
    value: float | str | None = None  # raw cell input, non-numeric counts as 0
    measure: str = "plan"


class RateEditRequest(BaseModel):
    company: str
    month: int
    value: float | str | None = None
    measure: str = "plan"


class ProjectionRequest(BaseModel):
    company: str
    category: str
    concept: str
    target: str  # Q or P
    method: str  # replicate or compound
    measure: str = "plan"
    growth_rate: float | str | None = 0.0  # percent per month


class EntryResponse(BaseModel):
    company: str
    category: str
    concept: str
    month: int
    measure: str
    units: float
    unit_price: float
    total: float


class CellEditResponse(BaseModel):
    applied: bool
    entry: EntryResponse | None = None


class RateResponse(BaseModel):
    company: str
    month: int
    plan_rate: float
    real_rate: float


class RateEditResponse(BaseModel):
    applied: bool
    rate: RateResponse | None = None


class ProjectionResponse(BaseModel):
    applied: bool
    entries: list[EntryResponse]


class ConsolidatedResponse(BaseModel):
    category: str
    concept: str
    month: int
    plan_units: float
    plan_value: float
    plan_unit_price: float
    real_units: float
    real_value: float
    real_unit_price: float
    contributors: list[str]
    missing_rates: list[list[str]]
    read_only: bool


# === Helpers ===

def _entry_response(entry, measure: str) -> EntryResponse:
    return EntryResponse(
        company=entry.company,
        category=entry.category,
        concept=entry.concept,
        month=entry.month,
        measure=measure,
        units=entry.units(measure),
        unit_price=entry.unit_price(measure),
        total=entry.total(measure),
    )


def _company_ref(store, value: str):
    """Parse the company parameter and make sure a real company exists in the group"""
    company_ref = parse_company_ref(value)
    if isinstance(company_ref, RealCompany) and store.config.company(company_ref.name) is None:
        raise BudgetValidationError(f"Unknown company: {company_ref.name!r}")
    return company_ref


def _bad_request(exc: BudgetValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(exc))


# === Endpoints ===

@router.get("/{version_id}/grid")
def get_grid(
    version_id: str,
    company: str,
    measure: str = "plan",
    db: Session = Depends(get_db),
):
    """Monthly PxQ grid for a company, or the read-only consolidated grid"""
    store = get_store(db, version_id)
    try:
        company_ref = _company_ref(store, company)
        return build_budget_grid(store.snapshot(), store.config, company_ref, measure, store.reporting_currency)
    except BudgetValidationError as exc:
        raise _bad_request(exc)


@router.put("/{version_id}/cells", response_model=CellEditResponse)
def edit_cell(version_id: str, req: CellEditRequest, db: Session = Depends(get_db)):
    """Edit Quantity or Unit Price of one cell"""
    store = get_store(db, version_id)
    try:
        company_ref = _company_ref(store, req.company)
        entry = EditCellUseCase(store, SqlBudgetRepository(db)).execute(
            company_ref, req.category, req.concept, req.month, req.field, req.value, req.measure,
        )
    except BudgetValidationError as exc:
        db.rollback()
        raise _bad_request(exc)

    if entry is None:
        return CellEditResponse(applied=False)
    db.commit()
    return CellEditResponse(applied=True, entry=_entry_response(entry, req.measure))


@router.put("/{version_id}/rates", response_model=RateEditResponse)
def edit_rate(version_id: str, req: RateEditRequest, db: Session = Depends(get_db)):
    """Set the plan or real exchange rate of a company for one month"""
    store = get_store(db, version_id)
    try:
        company_ref = _company_ref(store, req.company)
        rate = EditRateUseCase(store, SqlBudgetRepository(db)).execute(
            company_ref, req.month, req.value, req.measure,
        )
    except BudgetValidationError as exc:
        db.rollback()
        raise _bad_request(exc)

    if rate is None:
        return RateEditResponse(applied=False)
    db.commit()
    return RateEditResponse(
        applied=True,
        rate=RateResponse(company=rate.company, month=rate.month, plan_rate=rate.plan_rate, real_rate=rate.real_rate),
    )


@router.post("/{version_id}/projections", response_model=ProjectionResponse)
def apply_projection(version_id: str, req: ProjectionRequest, db: Session = Depends(get_db)):
    """Fill February..December from January (replicate or compound growth)"""
    store = get_store(db, version_id)
    try:
        company_ref = _company_ref(store, req.company)
        batch = ApplyProjectionUseCase(store, SqlBudgetRepository(db)).execute(
            company_ref, req.category, req.concept, req.target, req.method, req.measure, req.growth_rate,
        )
    except BudgetValidationError as exc:
        db.rollback()
        raise _bad_request(exc)

    if not batch:
        return ProjectionResponse(applied=False, entries=[])
    db.commit()
    return ProjectionResponse(applied=True, entries=[_entry_response(e, req.measure) for e in batch])


@router.get("/{version_id}/consolidated", response_model=ConsolidatedResponse)
def get_consolidated(
    version_id: str,
    category: str,
    concept: str,
    month: int,
    db: Session = Depends(get_db),
):
    """Group roll-up of one concept and month in the reporting currency"""
    store = get_store(db, version_id)
    try:
        cell = ConsolidationEngine(store.config, store.reporting_currency).consolidate(
            store, category, concept, month,
        )
    except BudgetValidationError as exc:
        raise _bad_request(exc)

    return ConsolidatedResponse(
        category=cell.category,
        concept=cell.concept,
        month=cell.month,
        plan_units=cell.plan_units,
        plan_value=cell.plan_value,
        plan_unit_price=cell.unit_price("plan"),
        real_units=cell.real_units,
        real_value=cell.real_value,
        real_unit_price=cell.unit_price("real"),
        contributors=list(cell.contributors),
        missing_rates=[list(m) for m in cell.missing_rates],
        read_only=cell.read_only,
    )


@router.get("/{version_id}/dashboard")
def get_dashboard(
    version_id: str,
    company: str,
    currency: str = "reporting",  # reporting | local
    db: Session = Depends(get_db),
):
    """Plan vs real income, costs and net result per month with KPI labels"""
    if currency not in ("reporting", "local"):
        raise HTTPException(status_code=400, detail="currency must be 'reporting' or 'local'")

    store = get_store(db, version_id)
    try:
        company_ref = _company_ref(store, company)
        view = build_dashboard(
            store.snapshot(), store.config, company_ref,
            reporting_currency=store.reporting_currency,
            in_reporting_currency=currency == "reporting",
        )
    except BudgetValidationError as exc:
        raise _bad_request(exc)

    totals = view["totals"]
    view["labels"] = {
        "income_real": format_compact(totals["income_real"]),
        "expense_real": format_compact(totals["expense_real"]),
        "net_real": format_compact(totals["net_real"]),
        "net_plan": format_money(totals["net_plan"], view["currency"]),
        "compliance": f"{view['compliance']:.1f}%",
    }
    return view
