from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class CostBreakdownOut(BaseModel):
    base_cost: Decimal
    tax_amount: Decimal
    processing_fee: Decimal
    total_cost: Decimal
    tax_rate: Decimal
    processing_fee_rate: Decimal

    class Config:
        from_attributes = True


class CostQuoteRequest(BaseModel):
    zone_id: int
    duration_hours: Decimal = Field(gt=0)


class SessionCreate(BaseModel):
    vehicle_id: int
    zone_id: int
    duration_hours: Decimal = Field(gt=0)


class SessionOut(BaseModel):
    id: int
    user_id: str
    vehicle_id: int
    zone_id: int
    rate_per_hour: Decimal
    duration_hours: Decimal
    start_time: datetime
    scheduled_end_time: datetime
    end_time: Optional[datetime]
    actual_duration_hours: Optional[Decimal]
    base_cost: Decimal
    tax_amount: Decimal
    processing_fee: Decimal
    total_cost: Decimal
    refund_amount: Optional[Decimal]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class RestrictionWarningOut(BaseModel):
    type: str
    message: str
    warning_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class CheckoutOut(BaseModel):
    session: SessionOut
    cost: CostBreakdownOut
    warnings: list[RestrictionWarningOut] = []


class ExtendRequest(BaseModel):
    additional_hours: Decimal


class ExtensionOptionOut(BaseModel):
    hours: Decimal
    cost: CostBreakdownOut


class ExtensionOptionsOut(BaseModel):
    session_id: int
    max_additional_hours: Decimal
    options: list[ExtensionOptionOut]


class ExtensionOut(BaseModel):
    session: SessionOut
    additional_hours: Decimal
    new_scheduled_end_time: datetime
    cost: CostBreakdownOut
    transaction_id: Optional[str]


class RefundQuoteOut(BaseModel):
    session_id: int
    time_used_hours: Decimal
    chargeable_hours: Decimal
    refund_amount: Decimal

    class Config:
        from_attributes = True


class TerminationSummaryOut(BaseModel):
    original_duration_hours: Decimal
    actual_time_used_hours: Decimal
    chargeable_hours: Decimal
    original_cost: Decimal
    final_cost: Decimal
    refund_amount: Decimal
    time_saved_hours: Decimal

    class Config:
        from_attributes = True


class TerminationOut(BaseModel):
    session: SessionOut
    summary: TerminationSummaryOut
    refund_status: Optional[str]          # COMPLETED | FAILED | None when nothing to refund
    message: str


class ValidateSessionRequest(BaseModel):
    license_plate: str
    state: str
    zone_number: str
