"""
Parking sessions — checkout, payment confirmation, status, extension, early termination.
Domain errors raised by session_service are turned into HTTP responses in app.main.
"""

from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.session import (
    CheckoutOut, CostBreakdownOut, ExtendRequest, ExtensionOptionsOut, ExtensionOut,
    RefundQuoteOut, RestrictionWarningOut, SessionCreate, SessionOut, TerminationOut,
    TerminationSummaryOut,
)
from app.services import session_service
from app.services.cost_calculator import format_currency
from app.services.payment_client import PaymentProcessor, get_payment_processor
from app.services.session_repository import SessionRepository
from app.utils.identity import get_user_id

router = APIRouter()


def get_repository(db: Session = Depends(get_db)) -> SessionRepository:
    return SessionRepository(db)


@router.post("/sessions", response_model=CheckoutOut, summary="Start checkout (PENDING session)")
def create_session(body: SessionCreate, user_id: str = Depends(get_user_id),
                   repo: SessionRepository = Depends(get_repository)):
    result = session_service.start_session(repo, user_id, body.vehicle_id, body.zone_id, body.duration_hours)
    return CheckoutOut(
        session=SessionOut.model_validate(result.session),
        cost=CostBreakdownOut.model_validate(result.cost),
        warnings=[RestrictionWarningOut.model_validate(w) for w in result.warnings],
    )


@router.get("/sessions", response_model=list[SessionOut], summary="My sessions")
def list_sessions(status: Optional[str] = None, zone_id: Optional[int] = None, limit: int = 50, page: int = 1,
                  user_id: str = Depends(get_user_id), repo: SessionRepository = Depends(get_repository)):
    return session_service.list_sessions(repo, user_id, status=status, zone_id=zone_id,
                                         limit=min(limit, 100), page=page)


@router.get("/sessions/{session_id}", response_model=SessionOut)
def get_session(session_id: int, user_id: str = Depends(get_user_id),
                repo: SessionRepository = Depends(get_repository)):
    """Always reflects expiry: a session past its end is reported EXPIRED."""
    return session_service.load_session(repo, session_id, user_id)


@router.post("/sessions/{session_id}/pay", response_model=SessionOut, summary="Confirm payment → ACTIVE")
async def pay_session(session_id: int, user_id: str = Depends(get_user_id),
                      repo: SessionRepository = Depends(get_repository),
                      payments: PaymentProcessor = Depends(get_payment_processor)):
    return await session_service.confirm_payment(repo, payments, session_id, user_id)


@router.get("/sessions/{session_id}/extension-options", response_model=ExtensionOptionsOut)
def extension_options(session_id: int, user_id: str = Depends(get_user_id),
                      repo: SessionRepository = Depends(get_repository)):
    options = session_service.get_extension_options(repo, session_id, user_id)
    return ExtensionOptionsOut(
        session_id=options["session_id"],
        max_additional_hours=options["max_additional_hours"],
        options=[{"hours": o["hours"], "cost": CostBreakdownOut.model_validate(o["cost"])}
                 for o in options["options"]],
    )


@router.post("/sessions/{session_id}/extend", response_model=ExtensionOut)
async def extend_session(session_id: int, body: ExtendRequest, user_id: str = Depends(get_user_id),
                         repo: SessionRepository = Depends(get_repository),
                         payments: PaymentProcessor = Depends(get_payment_processor)):
    result = await session_service.extend_session(repo, payments, session_id, body.additional_hours, user_id)
    return ExtensionOut(
        session=SessionOut.model_validate(result.session),
        additional_hours=result.plan.additional_hours,
        new_scheduled_end_time=result.plan.new_scheduled_end_time,
        cost=CostBreakdownOut.model_validate(result.plan.cost),
        transaction_id=result.transaction.processor_transaction_id,
    )


@router.get("/sessions/{session_id}/refund-quote", response_model=RefundQuoteOut,
            summary="Refund owed if the session were ended now")
def refund_quote(session_id: int, user_id: str = Depends(get_user_id),
                 repo: SessionRepository = Depends(get_repository)):
    return RefundQuoteOut.model_validate(session_service.preview_termination(repo, session_id, user_id))


@router.post("/sessions/{session_id}/terminate", response_model=TerminationOut, summary="End a session early")
async def terminate_session(session_id: int, user_id: str = Depends(get_user_id),
                            repo: SessionRepository = Depends(get_repository),
                            payments: PaymentProcessor = Depends(get_payment_processor)):
    result = await session_service.terminate_session(repo, payments, session_id, user_id)
    refund = result.summary.refund_amount
    return TerminationOut(
        session=SessionOut.model_validate(result.session),
        summary=TerminationSummaryOut.model_validate(result.summary),
        refund_status=result.refund_status,
        message=(f"Session terminated. Refund of {format_currency(refund)} will be processed."
                 if refund > 0 else "Session terminated successfully."),
    )
