# app/suggestion_engine/rules.py

"""
Conservative Suggestion Rule Engine
Deterministic keyword/flag triggers over one ISBAR note (no AI involved)

Each trigger fires on `explicit flag OR keyword present`. Flags and keywords
reinforce each other, neither overrides the other. Rules run in table order and
output order follows that order, not clinical priority.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from app.system_models.options import SuggestionCategory

logger = logging.getLogger(__name__)

NOTE_TEXT_FIELDS = (
    "identification",
    "situation",
    "background",
    "assessment",
    "recommendation",
    "labs_summary",
    "imaging_summary",
)


@dataclass(frozen=True)
class SuggestionDraft:
    category: SuggestionCategory
    content: str
    rationale: str


@dataclass(frozen=True)
class TriggerRule:
    name: str
    flag: Optional[str]
    keywords: Tuple[str, ...]
    templates: Tuple[SuggestionDraft, ...]
    # None scans every ISBAR field, otherwise only the named field
    field: Optional[str] = None

    def matches(self, note, haystack: str) -> bool:
        if self.flag and bool(getattr(note, self.flag, False)):
            return True
        text = haystack if self.field is None else (getattr(note, self.field, "") or "").lower()
        return any(keyword in text for keyword in self.keywords)


_I = SuggestionCategory.INVESTIGATION
_IMG = SuggestionCategory.IMAGING
_C = SuggestionCategory.CONSULTATION
_D = SuggestionCategory.DIFFERENTIAL


TRIGGER_RULES: Tuple[TriggerRule, ...] = (
    TriggerRule(
        name="sepsis",
        flag="flag_sepsis_concern",
        keywords=("sepsis", "fever", "rigor", "source unclear", "hypotension", "tachycardia"),
        templates=(
            SuggestionDraft(
                _I,
                "Consider targeted sepsis work-up: CBC trend, lactate trend, and blood cultures before antimicrobial changes.",
                "Sepsis concern flagged or clinical pattern suggests possible evolving infection.",
            ),
            SuggestionDraft(
                _C,
                "If trajectory remains unclear after initial optimization, consider early Infectious Disease input.",
                "Conservative escalation can reduce delay when source control or antimicrobial strategy is uncertain.",
            ),
            SuggestionDraft(
                _D,
                "Recheck non-infectious mimics of sepsis (drug reaction, PE, pancreatitis, adrenal crisis) if response is poor.",
                "Persistent instability despite treatment may represent an alternate primary diagnosis.",
            ),
        ),
    ),
    TriggerRule(
        name="respiratory",
        flag="flag_respiratory_concern",
        keywords=("hypoxia", "desaturation", "dyspnea", "tachypnea", "respiratory distress"),
        templates=(
            SuggestionDraft(
                _I,
                "Consider ABG/VBG and repeat respiratory trend markers to assess current gas-exchange burden.",
                "Respiratory concern flagged or gas-exchange symptoms documented.",
            ),
            SuggestionDraft(
                _IMG,
                "Consider portable chest radiograph if respiratory status changed since previous round.",
                "Chest imaging can reveal interval edema, consolidation, or effusion.",
            ),
            SuggestionDraft(
                _D,
                "If hypoxia is sudden or disproportionate, keep pulmonary embolism and silent aspiration in the differential.",
                "These are commonly missed in ICU deterioration when signs are non-specific.",
            ),
        ),
    ),
    TriggerRule(
        name="hemodynamic",
        flag="flag_hemodynamic_instability",
        keywords=("shock", "hypotension", "pressor", "poor perfusion", "cold peripheries"),
        templates=(
            SuggestionDraft(
                _I,
                "Consider focused hemodynamic reassessment with ECG, lactate trend, and bedside perfusion markers.",
                "Instability signs suggest need to distinguish distributive, cardiogenic, and hypovolemic contributors.",
            ),
            SuggestionDraft(
                _C,
                "If instability persists, consider senior critical care review for structured shock reassessment.",
                "Escalation helps avoid anchoring on a single etiology.",
            ),
        ),
    ),
    TriggerRule(
        name="neurologic",
        flag="flag_neurologic_change",
        keywords=("altered sensorium", "confusion", "focal deficit", "seizure", "gcs drop"),
        templates=(
            SuggestionDraft(
                _I,
                "Consider reversible-cause screen: glucose, electrolytes, acid-base status, and medication review.",
                "Neurologic change is often multifactorial and reversible contributors are common.",
            ),
            SuggestionDraft(
                _IMG,
                "If focal signs or persistent unexplained decline are present, consider neuroimaging discussion.",
                "Conservative imaging escalation is appropriate when deficits are new or unexplained.",
            ),
            SuggestionDraft(
                _C,
                "Consider Neurology discussion if neurologic trajectory remains uncertain after basic correction.",
                "Expert review supports differential narrowing in persistent encephalopathy.",
            ),
        ),
    ),
    TriggerRule(
        name="renal",
        flag="flag_low_urine_output",
        keywords=("oliguria", "anuria", "rising creatinine", "aki", "fluid overload"),
        templates=(
            SuggestionDraft(
                _I,
                "Consider renal reassessment: repeat renal panel, urine microscopy, and fluid balance reconciliation.",
                "Low output may reflect pre-renal, intrinsic, or post-renal pathology.",
            ),
            SuggestionDraft(
                _IMG,
                "If obstruction remains possible, consider point-of-care bladder/renal imaging.",
                "Simple imaging can quickly detect reversible post-renal causes.",
            ),
            SuggestionDraft(
                _C,
                "If renal function continues to worsen, consider early Nephrology input.",
                "Early consultation can guide fluid, diuretic, and RRT planning.",
            ),
        ),
    ),
    TriggerRule(
        name="pain",
        flag="flag_uncontrolled_pain",
        keywords=("pain out of proportion", "persistent severe pain", "new chest pain", "abdominal pain"),
        templates=(
            SuggestionDraft(
                _D,
                "For uncontrolled pain, revisit high-risk causes (ischemia, occult bleed, compartment processes) before attributing to baseline illness.",
                "Pain out of proportion can be an early warning sign of time-sensitive pathology.",
            ),
            SuggestionDraft(
                _I,
                "Consider trend-based targeted labs guided by pain location and severity changes.",
                "Objective trends can support early detection of evolving complications.",
            ),
        ),
    ),
    TriggerRule(
        name="labs_trend",
        flag=None,
        keywords=("drop", "fall", "worse", "rising"),
        field="labs_summary",
        templates=(
            SuggestionDraft(
                _D,
                "If laboratory trends are worsening, ensure medication effects and iatrogenic contributors are reviewed.",
                "A conservative medication/device review can surface reversible causes.",
            ),
        ),
    ),
)

DEFAULT_SUGGESTION = SuggestionDraft(
    _I,
    "No high-risk trigger detected from current ISBAR. Continue close trend monitoring and reassess next care day.",
    "Default conservative recommendation when no escalation signal is identified.",
)


def build_haystack(note) -> str:
    return " ".join(getattr(note, name, "") or "" for name in NOTE_TEXT_FIELDS).lower()


def fired_rules(note, rules: Sequence[TriggerRule] = TRIGGER_RULES) -> List[str]:
    """Names of the trigger rules that fire for this note, in table order."""
    haystack = build_haystack(note)
    return [rule.name for rule in rules if rule.matches(note, haystack)]


def propose(note, rules: Sequence[TriggerRule] = TRIGGER_RULES) -> List[SuggestionDraft]:
    """
    Derive the suggestion drafts for one ISBAR note.

    Args:
        note: any object exposing the seven ISBAR text fields and six risk flags
            (IsbarEntryCreate, IsbarEntry, ...)
        rules: trigger table, evaluated in order

    Returns:
        Drafts unique on (category, content). Never empty: falls back to the
        default monitoring suggestion.
    """
    haystack = build_haystack(note)
    drafts: List[SuggestionDraft] = []
    seen = set()

    for rule in rules:
        if not rule.matches(note, haystack):
            continue
        for template in rule.templates:
            key = (template.category, template.content)
            if key in seen:
                continue
            seen.add(key)
            drafts.append(template)

    if not drafts:
        drafts.append(DEFAULT_SUGGESTION)

    logger.debug(f"Suggestion engine produced {len(drafts)} draft(s)")
    return drafts
