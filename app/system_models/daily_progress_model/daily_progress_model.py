# app/system_models/daily_progress_model/daily_progress_model.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow

PROGRESS_TEXT_FIELDS = (
    "progress_summary",
    "key_events",
    "current_supports",
    "pending_issues",
    "next_plan",
)


class DailyProgress(Base):
    __tablename__ = "daily_progress"

    id = Column(Integer, primary_key=True)
    patient_id = Column(String(32), ForeignKey("patients.id"), nullable=False, index=True)
    care_day = Column(Integer, nullable=False)

    progress_summary = Column(Text, nullable=False)
    key_events = Column(Text, nullable=False)
    current_supports = Column(Text, nullable=False)
    pending_issues = Column(Text, nullable=False)
    next_plan = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("patient_id", "care_day", name="uq_progress_patient_care_day"),
        CheckConstraint("care_day >= 1", name="check_progress_care_day_positive"),
    )

    patient = relationship("Patient", back_populates="daily_progress")
