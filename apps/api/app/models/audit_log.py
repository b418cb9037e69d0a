from sqlalchemy import Column, Date, DateTime, String
from sqlalchemy.sql import func

from app.core.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(String, primary_key=True)

    # no FK: entries must outlive the candidate they describe
    event_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)

    admin_id = Column(String, nullable=False)
    admin_name = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)

    # snapshot of the candidate at confirmation time
    event_date = Column(Date, nullable=False)
    event_time_slot = Column(String, nullable=False)
    instructor_id = Column(String, nullable=False)
    instructor_name = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
