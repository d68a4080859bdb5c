# app/system_models/isbar_model/isbar_model.py
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow

ISBAR_TEXT_FIELDS = (
    "identification",
    "situation",
    "background",
    "assessment",
    "recommendation",
    "labs_summary",
    "imaging_summary",
)

RISK_FLAG_FIELDS = (
    "flag_hemodynamic_instability",
    "flag_respiratory_concern",
    "flag_neurologic_change",
    "flag_sepsis_concern",
    "flag_low_urine_output",
    "flag_uncontrolled_pain",
)


class IsbarEntry(Base):
    """One care day's ISBAR note. Append-only: there is no update path."""

    __tablename__ = "isbar_entries"

    id = Column(Integer, primary_key=True)
    patient_id = Column(String(32), ForeignKey("patients.id"), nullable=False, index=True)
    care_day = Column(Integer, nullable=False)

    identification = Column(Text, nullable=False)
    situation = Column(Text, nullable=False)
    background = Column(Text, nullable=False)
    assessment = Column(Text, nullable=False)
    recommendation = Column(Text, nullable=False)
    labs_summary = Column(Text, nullable=False)
    imaging_summary = Column(Text, nullable=False)

    flag_hemodynamic_instability = Column(Boolean, nullable=False, default=False)
    flag_respiratory_concern = Column(Boolean, nullable=False, default=False)
    flag_neurologic_change = Column(Boolean, nullable=False, default=False)
    flag_sepsis_concern = Column(Boolean, nullable=False, default=False)
    flag_low_urine_output = Column(Boolean, nullable=False, default=False)
    flag_uncontrolled_pain = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        UniqueConstraint("patient_id", "care_day", name="uq_isbar_patient_care_day"),
        CheckConstraint("care_day >= 1", name="check_isbar_care_day_positive"),
    )

    patient = relationship("Patient", back_populates="isbar_entries")
    suggestions = relationship("Suggestion", back_populates="isbar")
