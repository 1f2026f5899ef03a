"""FastAPI providers that build request-scoped services from injected config."""

from fastapi import Depends
from sqlalchemy.orm import Session

from subtrack.config import Settings, get_settings
from subtrack.database import get_db
from subtrack.services.identity import IdentityService
from subtrack.services.lifecycle import LifecycleController
from subtrack.services.queries import QueryService


def get_identity_service(db: Session = Depends(get_db),
                         settings: Settings = Depends(get_settings)) -> IdentityService:
    return IdentityService(db, settings)


def get_lifecycle(db: Session = Depends(get_db),
                  settings: Settings = Depends(get_settings)) -> LifecycleController:
    return LifecycleController(db, settings)


def get_queries(db: Session = Depends(get_db)) -> QueryService:
    return QueryService(db)
