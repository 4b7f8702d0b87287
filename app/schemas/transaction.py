from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
from typing import Optional


class TransactionOut(BaseModel):
    id: int
    session_id: int
    user_id: str
    kind: str                 # CHARGE | REFUND
    amount: Decimal           # negative for refunds
    status: str
    processor_transaction_id: Optional[str]
    failure_reason: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
