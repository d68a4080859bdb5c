# app/system_models/patient_model/patient_model.py
from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow
from app.system_models.options import PatientDisposition, PatientStatus, Unit, sql_in

class Patient(Base):
    __tablename__ = "patients"

    # Internal random ID (PT-XXXXXXXX), never a hospital identifier
    id = Column(String(32), primary_key=True, index=True)

    unit = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False, default=PatientStatus.STABLE.value)
    disposition = Column(String(16), nullable=False, default=PatientDisposition.ACTIVE.value)

    latest_care_day = Column(Integer, nullable=False, default=0)

    discharge_summary_text = Column(Text, nullable=True)
    discharge_summary_version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(f"unit IN ({sql_in(Unit)})", name="check_unit_values"),
        CheckConstraint(f"status IN ({sql_in(PatientStatus)})", name="check_status_values"),
        CheckConstraint(f"disposition IN ({sql_in(PatientDisposition)})", name="check_disposition_values"),
        CheckConstraint("latest_care_day >= 0", name="check_latest_care_day_non_negative"),
        CheckConstraint("discharge_summary_version >= 0", name="check_summary_version_non_negative"),
    )

    isbar_entries = relationship(
        "IsbarEntry", back_populates="patient", order_by="IsbarEntry.care_day"
    )
    daily_progress = relationship(
        "DailyProgress", back_populates="patient", order_by="DailyProgress.care_day"
    )
    suggestions = relationship("Suggestion", back_populates="patient")

    @property
    def is_active(self) -> bool:
        return self.disposition == PatientDisposition.ACTIVE.value

    def __repr__(self):
        return f"<Patient {self.id}: {self.unit} {self.status}/{self.disposition} D{self.latest_care_day}>"
