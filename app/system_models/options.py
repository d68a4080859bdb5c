# app/system_models/options.py
from enum import Enum

class Unit(str, Enum):
    BHUBANESWAR = "BHUBANESWAR"
    BERHAMPUR = "BERHAMPUR"

class PatientStatus(str, Enum):
    STABLE = "STABLE"
    WATCH = "WATCH"
    CRITICAL = "CRITICAL"

class PatientDisposition(str, Enum):
    ACTIVE = "ACTIVE"
    DISCHARGED = "DISCHARGED"
    SHIFT_OUT = "SHIFT_OUT"
    DAMA = "DAMA"
    DEATH = "DEATH"

class SuggestionCategory(str, Enum):
    INVESTIGATION = "INVESTIGATION"
    IMAGING = "IMAGING"
    CONSULTATION = "CONSULTATION"
    DIFFERENTIAL = "DIFFERENTIAL"

class SuggestionStatus(str, Enum):
    PENDING = "PENDING"
    ADDRESSED = "ADDRESSED"


def sql_in(enum_cls) -> str:
    """Render enum values for a CHECK constraint, e.g. "'A', 'B'"."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
