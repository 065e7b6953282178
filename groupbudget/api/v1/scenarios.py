"""
Scenario API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from groupbudget.api.deps import get_db
from groupbudget.domain.errors import BudgetValidationError, ScenarioNotFoundError
from groupbudget.infrastructure.repository import SqlScenarioRepository


router = APIRouter(prefix="/api/v1/scenarios", tags=["scenarios"])


# === Request/Response models ===

class CreateScenarioRequest(BaseModel):
    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Scenario name is required")
        return v


class ScenarioResponse(BaseModel):
    id: str
    name: str
    description: str
    is_active: bool
    created_at: datetime | None = None


def _response(scenario) -> ScenarioResponse:
    return ScenarioResponse(
        id=scenario.id,
        name=scenario.name,
        description=scenario.description,
        is_active=scenario.is_active,
        created_at=scenario.created_at,
    )


# === Endpoints ===

@router.get("/", response_model=list[ScenarioResponse])
def list_scenarios(db: Session = Depends(get_db)):
    return [_response(s) for s in SqlScenarioRepository(db).list_scenarios()]


@router.post("/", response_model=ScenarioResponse, status_code=201)
def create_scenario(req: CreateScenarioRequest, db: Session = Depends(get_db)):
    """Create an empty scenario"""
    try:
        scenario = SqlScenarioRepository(db).create_scenario(req.name, req.description)
    except BudgetValidationError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    return _response(scenario)


@router.post("/{scenario_id}/clone", response_model=ScenarioResponse, status_code=201)
def clone_scenario(scenario_id: str, req: CreateScenarioRequest, db: Session = Depends(get_db)):
    """Copy every entry and rate of a scenario into a new one"""
    try:
        scenario = SqlScenarioRepository(db).clone_scenario(scenario_id, req.name, req.description)
    except ScenarioNotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(exc))
    except BudgetValidationError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc))
    db.commit()
    return _response(scenario)


@router.post("/{scenario_id}/activate", response_model=ScenarioResponse)
def activate_scenario(scenario_id: str, db: Session = Depends(get_db)):
    try:
        scenario = SqlScenarioRepository(db).activate(scenario_id)
    except ScenarioNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return _response(scenario)
