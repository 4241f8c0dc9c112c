from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.schemas.backup_schemas import RestoreResult, Snapshot
from app.services.backup_service import export_snapshot, restore_snapshot

router = APIRouter()


@router.get("/export", response_model=Snapshot)
def export_backup(session: Session = Depends(get_session)):
    return export_snapshot(session)


@router.post("/restore", response_model=RestoreResult)
def restore_backup(snapshot: Snapshot, session: Session = Depends(get_session)):
    return restore_snapshot(session=session, snapshot=snapshot)
