"""Admin — payment transaction log."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.models.transaction import Transaction
from app.schemas.transaction import TransactionOut

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionOut])
def list_transactions(
    session_id: Optional[int] = None,
    kind: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    q = db.query(Transaction)
    if session_id is not None:
        q = q.filter(Transaction.session_id == session_id)
    if kind:
        q = q.filter(Transaction.kind == kind)
    if status:
        q = q.filter(Transaction.status == status)
    return q.order_by(Transaction.created_at.desc()).limit(min(limit, 200)).all()
