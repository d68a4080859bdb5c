# app/system_models/suggestion_model/suggestion_model.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow
from app.system_models.options import SuggestionCategory, SuggestionStatus, sql_in

class Suggestion(Base):
    __tablename__ = "suggestions"

    id = Column(Integer, primary_key=True)
    patient_id = Column(String(32), ForeignKey("patients.id"), nullable=False, index=True)
    isbar_id = Column(Integer, ForeignKey("isbar_entries.id"), nullable=False)
    care_day = Column(Integer, nullable=False)

    category = Column(String(32), nullable=False)
    content = Column(Text, nullable=False)
    rationale = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=SuggestionStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(f"category IN ({sql_in(SuggestionCategory)})", name="check_category_values"),
        CheckConstraint(f"status IN ({sql_in(SuggestionStatus)})", name="check_suggestion_status_values"),
    )

    patient = relationship("Patient", back_populates="suggestions")
    isbar = relationship("IsbarEntry", back_populates="suggestions")
