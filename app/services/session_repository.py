# app/services/session_repository.py
"""
Persistence for parking sessions and their transactions.
The session service only talks to the database through this class, so
tests can hand it a MagicMock instead of a real SQLAlchemy session.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.parking_session import ParkingSession
from app.models.transaction import Transaction
from app.models.vehicle import Vehicle
from app.models.zone import ParkingZone
from app.services.session_lifecycle import OPEN_STATUSES, RUNNING_STATUSES


class SessionRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── Sessions ──────────────────────────────────────────────────────────
    def load(self, session_id: int) -> Optional[ParkingSession]:
        return self.db.query(ParkingSession).filter(ParkingSession.id == session_id).first()

    def save(self, session: ParkingSession) -> ParkingSession:
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def find_open_for_vehicle(self, vehicle_id: int) -> Optional[ParkingSession]:
        """Most recent PENDING / ACTIVE / EXTENDED session of a vehicle."""
        return (
            self.db.query(ParkingSession)
            .filter(ParkingSession.vehicle_id == vehicle_id,
                    ParkingSession.status.in_(OPEN_STATUSES))
            .order_by(ParkingSession.created_at.desc())
            .first()
        )

    def list_for_user(self, user_id: str, status: Optional[str] = None, zone_id: Optional[int] = None,
                      limit: int = 50, page: int = 1) -> list[ParkingSession]:
        q = self.db.query(ParkingSession).filter(ParkingSession.user_id == user_id)
        if status:
            q = q.filter(ParkingSession.status == status)
        if zone_id:
            q = q.filter(ParkingSession.zone_id == zone_id)
        return (q.order_by(ParkingSession.created_at.desc())
                .offset((max(page, 1) - 1) * limit).limit(limit).all())

    def list_overdue(self, now: datetime) -> list[ParkingSession]:
        """Paid sessions whose scheduled end has already passed."""
        return (
            self.db.query(ParkingSession)
            .filter(ParkingSession.status.in_(RUNNING_STATUSES),
                    ParkingSession.scheduled_end_time <= now)
            .all()
        )

    def list_abandoned_checkouts(self, created_before: datetime, now: datetime) -> list[ParkingSession]:
        """PENDING sessions created before the cutoff or already past their scheduled end."""
        return (
            self.db.query(ParkingSession)
            .filter(ParkingSession.status == "PENDING",
                    or_(ParkingSession.created_at <= created_before,
                        ParkingSession.scheduled_end_time <= now))
            .all()
        )

    def list_running_ending_before(self, cutoff: datetime) -> list[ParkingSession]:
        return (
            self.db.query(ParkingSession)
            .filter(ParkingSession.status.in_(RUNNING_STATUSES),
                    ParkingSession.scheduled_end_time <= cutoff)
            .all()
        )

    # ── Zones / vehicles ──────────────────────────────────────────────────
    def get_zone(self, zone_id: int) -> Optional[ParkingZone]:
        return self.db.query(ParkingZone).filter(ParkingZone.id == zone_id).first()

    def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        return self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    # ── Transactions ──────────────────────────────────────────────────────
    def add_transaction(self, transaction: Transaction) -> Transaction:
        self.db.add(transaction)
        return transaction

    def find_charges(self, session_id: int) -> list[Transaction]:
        """Completed charges of a session, newest first (refunds are split across them)."""
        return (
            self.db.query(Transaction)
            .filter(Transaction.session_id == session_id,
                    Transaction.kind == "CHARGE",
                    Transaction.status == "COMPLETED",
                    Transaction.processor_transaction_id.isnot(None))
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .all()
        )
