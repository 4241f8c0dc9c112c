from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.services.order_service import get_active_tables

router = APIRouter()


@router.get("/active")
def active_tables(session: Session = Depends(get_session)):
    return {"tables": sorted(get_active_tables(session))}
