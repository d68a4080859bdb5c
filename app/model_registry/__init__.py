

# Register all models here

# Case models
from app.system_models.patient_model.patient_model import Patient
from app.system_models.isbar_model.isbar_model import IsbarEntry
from app.system_models.daily_progress_model.daily_progress_model import DailyProgress
from app.system_models.suggestion_model.suggestion_model import Suggestion
