# app/models/alert.py
"""
Alerts table — expiry warnings, expired sessions and failed refunds.
Written by alert_service; read by the alerts router and the admin dashboard.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_type = Column(String(50), nullable=False, index=True)
    session_id = Column(Integer, index=True)
    zone_id = Column(Integer)
    warning_minutes = Column(Integer)        # set on expiry_warning alerts
    description = Column(Text)
    is_resolved = Column(Integer, default=0, nullable=False)
    triggered_at = Column(DateTime, nullable=False, index=True)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Alert {self.id} type={self.alert_type} session={self.session_id}>"
