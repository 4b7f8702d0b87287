# app/models/transaction.py
"""
Payment transactions table.
One CHARGE row per purchase or extension, one REFUND row (negative amount)
per early-termination refund. processor_transaction_id is the id returned
by the payment collaborator.
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, ForeignKey
from app.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("parking_sessions.id"), nullable=False, index=True)
    user_id = Column(String(100), nullable=False)
    kind = Column(String(20), nullable=False)            # CHARGE | REFUND
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, index=True)  # PENDING | COMPLETED | FAILED | REFUNDED
    processor_transaction_id = Column(String(100))
    failure_reason = Column(Text)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Transaction {self.id} {self.kind} {self.amount} {self.status}>"
