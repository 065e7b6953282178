"""
FastAPI dependencies (DB session, scenario store)
"""
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from groupbudget.application.entry_store import EntryStore
from groupbudget.config import get_settings
from groupbudget.domain.errors import ScenarioNotFoundError
from groupbudget.infrastructure.db.session import get_db as _get_db
from groupbudget.infrastructure.repository import load_store


# Re-export get_db for routers
get_db = _get_db


def get_store(db: Session, version_id: str) -> EntryStore:
    """
    Load the EntryStore of a scenario for one request

    Raises:
        HTTPException(404): if the scenario does not exist
    """
    try:
        return load_store(db, version_id, get_settings())
    except ScenarioNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
