# app/deid/guard.py

"""
De-identification Guard - Pattern-based text screen
This is a DETERMINISTIC filter (no AI involved)

One pattern table serves two roles:
- BLOCK: reject a whole submission before anything is persisted
- REDACT: scrub LLM output after generation, replacing matches with a marker

The block side deliberately over-matches (any 6+ digit number is rejected).
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_REDACTION_MARKER = "[redacted]"


class GuardMode(str, Enum):
    BLOCK = "block"
    REDACT = "redact"


@dataclass(frozen=True)
class DeidPattern:
    reason: str
    regex: re.Pattern
    modes: FrozenSet[GuardMode]


BOTH = frozenset({GuardMode.BLOCK, GuardMode.REDACT})
BLOCK_ONLY = frozenset({GuardMode.BLOCK})
REDACT_ONLY = frozenset({GuardMode.REDACT})

_MONTH_PREFIX = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)"

DEID_PATTERNS: List[DeidPattern] = [
    DeidPattern(
        reason="identifier keyword",
        regex=re.compile(
            r"\b(?:mrn|medical\s*record\s*number|uhid|aadhaar|date\s*of\s*birth|dob)\b",
            re.IGNORECASE,
        ),
        modes=BOTH,
    ),
    DeidPattern(
        reason="name keyword",
        regex=re.compile(r"\bname\b", re.IGNORECASE),
        modes=REDACT_ONLY,
    ),
    DeidPattern(
        reason="exact date format",
        regex=re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b"),
        modes=BOTH,
    ),
    DeidPattern(
        reason="exact ISO date",
        regex=re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
        modes=BOTH,
    ),
    DeidPattern(
        reason="month-based exact date",
        regex=re.compile(
            r"\b" + _MONTH_PREFIX + r"[a-z]*\s+\d{1,2}(?:,\s*\d{2,4}|\s+\d{2,4})?\b",
            re.IGNORECASE,
        ),
        modes=BOTH,
    ),
    DeidPattern(
        reason="long numeric sequence (possible identifier)",
        regex=re.compile(r"\b\d{6,}\b"),
        modes=BLOCK_ONLY,
    ),
    DeidPattern(
        reason="very long numeric sequence",
        regex=re.compile(r"\b\d{8,}\b"),
        modes=REDACT_ONLY,
    ),
]


def patterns_for(mode: GuardMode) -> List[DeidPattern]:
    return [pattern for pattern in DEID_PATTERNS if mode in pattern.modes]


@dataclass
class DeidResult:
    blocked: bool
    reasons: List[str] = field(default_factory=list)


def scan(texts: Iterable[str]) -> DeidResult:
    """
    Screen a batch of free-text fields.

    Every non-empty field is tested against every BLOCK pattern; one hit in
    any field blocks the entire batch. Reasons are de-duplicated and kept in
    first-seen order.
    """
    reasons: List[str] = []
    block_patterns = patterns_for(GuardMode.BLOCK)

    for value in texts:
        text = (value or "").strip()
        if not text:
            continue

        for pattern in block_patterns:
            if pattern.reason not in reasons and pattern.regex.search(text):
                reasons.append(pattern.reason)

    if reasons:
        logger.warning(f"⚠️  De-identification guard blocked submission: {reasons}")

    return DeidResult(blocked=bool(reasons), reasons=reasons)


def redact(text: str, marker: Optional[str] = None) -> str:
    """Replace every REDACT-pattern match with the redaction marker."""
    marker = marker or DEFAULT_REDACTION_MARKER
    clean = (text or "").strip()

    for pattern in patterns_for(GuardMode.REDACT):
        clean = pattern.regex.sub(lambda _match: marker, clean)

    return clean
