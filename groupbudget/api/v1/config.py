"""
Group configuration API endpoints: companies, concepts, assignments

Renames and removals cascade to the entries and rates of every scenario in
the same session, committed once.
"""
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from groupbudget.api.deps import get_db
from groupbudget.application.budget import (
    RemoveCompanyDataUseCase, RemoveConceptDataUseCase, RenameCompanyUseCase, RenameConceptUseCase,
)
from groupbudget.domain.category import CATEGORY_TYPES, validate_category_type
from groupbudget.domain.company import CompanyDetail
from groupbudget.domain.errors import BudgetValidationError
from groupbudget.infrastructure.repository import SqlBudgetRepository, SqlConfigRepository


router = APIRouter(prefix="/api/v1/config", tags=["config"])


# === Request/Response models ===

class CreateCompanyRequest(BaseModel):
    name: str
    currency: str  # USD, ARS, MXN

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()


class UpdateCompanyRequest(BaseModel):
    name: str | None = None  # new name
    currency: str | None = None


class CreateConceptRequest(BaseModel):
    category: str  # Income, Direct Costs, Indirect Costs
    name: str


class RenameConceptRequest(BaseModel):
    name: str


class CompanyResponse(BaseModel):
    id: str
    name: str
    currency: str


class AssignmentResponse(BaseModel):
    category: str
    concept: str
    companies: list[str]


class ConfigResponse(BaseModel):
    companies: list[CompanyResponse]
    categories: dict[str, list[str]]
    assignments: list[AssignmentResponse]  # restricted concepts only


class RemovedResponse(BaseModel):
    removed: int


# === Helpers ===

def _config_response(db: Session) -> ConfigResponse:
    config = SqlConfigRepository(db).load_config()
    return ConfigResponse(
        companies=[CompanyResponse(id=c.id, name=c.name, currency=c.currency) for c in config.companies],
        categories={t: list(config.categories.get(t, [])) for t in CATEGORY_TYPES},
        assignments=[
            AssignmentResponse(category=category, concept=concept, companies=sorted(companies))
            for (category, concept), companies in sorted(config.assignments.items())
        ],
    )


def _maintenance(use_case_cls, db: Session):
    return use_case_cls(None, SqlBudgetRepository(db), SqlConfigRepository(db))


def _fail(db: Session, exc: BudgetValidationError) -> HTTPException:
    db.rollback()
    return HTTPException(status_code=400, detail=str(exc))


# === Endpoints ===

@router.get("/", response_model=ConfigResponse)
def get_config(db: Session = Depends(get_db)):
    return _config_response(db)


@router.post("/companies", response_model=ConfigResponse, status_code=201)
def create_company(req: CreateCompanyRequest, db: Session = Depends(get_db)):
    """Add a company to the group"""
    try:
        company = CompanyDetail(id=uuid.uuid4().hex[:12], name=req.name, currency=req.currency)
        SqlConfigRepository(db).add_company(company)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)


@router.patch("/companies/{name}", response_model=ConfigResponse)
def update_company(name: str, req: UpdateCompanyRequest, db: Session = Depends(get_db)):
    """Change a company's currency and/or rename it together with its entries and rates"""
    try:
        if req.currency is not None:
            SqlConfigRepository(db).update_company_currency(name, req.currency)
        if req.name is not None:
            _maintenance(RenameCompanyUseCase, db).execute(name, req.name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)


@router.delete("/companies/{name}", response_model=RemovedResponse)
def delete_company(name: str, db: Session = Depends(get_db)):
    """Remove a company with every entry and rate it has in any scenario"""
    try:
        removed = _maintenance(RemoveCompanyDataUseCase, db).execute(name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return RemovedResponse(removed=removed)


@router.post("/concepts", response_model=ConfigResponse, status_code=201)
def create_concept(req: CreateConceptRequest, db: Session = Depends(get_db)):
    try:
        SqlConfigRepository(db).add_concept(req.category, req.name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)


@router.patch("/concepts/{category}/{name}", response_model=ConfigResponse)
def rename_concept(category: str, name: str, req: RenameConceptRequest, db: Session = Depends(get_db)):
    """Rename a concept together with its entries"""
    try:
        _maintenance(RenameConceptUseCase, db).execute(category, name, req.name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)


@router.delete("/concepts/{category}/{name}", response_model=RemovedResponse)
def delete_concept(category: str, name: str, db: Session = Depends(get_db)):
    try:
        removed = _maintenance(RemoveConceptDataUseCase, db).execute(category, name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return RemovedResponse(removed=removed)


@router.put("/concepts/{category}/{name}/companies/{company}", response_model=ConfigResponse)
def assign_concept(category: str, name: str, company: str, db: Session = Depends(get_db)):
    """Make a concept visible to a company"""
    try:
        validate_category_type(category)
        SqlConfigRepository(db).assign_concept(company, category, name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)


@router.delete("/concepts/{category}/{name}/companies/{company}", response_model=ConfigResponse)
def unassign_concept(category: str, name: str, company: str, db: Session = Depends(get_db)):
    """Hide a concept from a company (its data stays, it no longer counts for that company)"""
    try:
        validate_category_type(category)
        SqlConfigRepository(db).unassign_concept(company, category, name)
    except BudgetValidationError as exc:
        raise _fail(db, exc)
    db.commit()
    return _config_response(db)
